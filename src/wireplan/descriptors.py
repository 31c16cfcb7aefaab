from __future__ import annotations

import builtins
import inspect
import logging
import sys
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from inspect import Parameter
from typing import Any, Protocol, TypeVar, get_args, get_type_hints

from wireplan.exceptions import ComponentConstructionError, IllegalComponentError, WireplanError
from wireplan.introspection import ComponentIntrospector, MarkerIntrospector, is_runtime_class
from wireplan.roles import Role

logger = logging.getLogger(__name__)

_IMPLICIT_FIRST_PARAMETER_NAMES = {"self", "cls"}
_VARIADIC_KINDS = (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)
_DEFAULT_INTROSPECTOR = MarkerIntrospector()
_UNRESOLVED = object()


class ResolutionContext(Protocol):
    """The part of ``Context`` a descriptor needs to construct its component."""

    def get(self, role: Any) -> Any: ...

    def __contains__(self, role: object) -> bool: ...


@dataclass(frozen=True, slots=True)
class InjectionParameter:
    """A constructor or method parameter and the role it is resolved from."""

    name: str
    kind: Any
    role: Role


@dataclass(frozen=True, slots=True)
class InjectionConstructor:
    """The single entry point used to instantiate a component."""

    name: str
    """``__init__`` or the name of a classmethod alternative constructor."""
    parameters: tuple[InjectionParameter, ...]

    @property
    def is_alternative(self) -> bool:
        return self.name != "__init__"


@dataclass(frozen=True, slots=True)
class InjectionField:
    """A class attribute assigned after construction."""

    owner: type[Any]
    name: str
    role: Role


@dataclass(frozen=True, slots=True)
class InjectionMethod:
    """An ``@inject`` method invoked after field injection."""

    owner: type[Any]
    name: str
    function: Callable[..., Any]
    parameters: tuple[InjectionParameter, ...]


class ComponentDescriptor:
    """Introspect one concrete class once and construct wired instances of it.

    The plan is computed eagerly so every shape problem surfaces as
    ``IllegalComponentError`` at bind time. Construction order is fixed:
    constructor, then fields (ancestors first), then ``@inject`` methods
    (ancestors first, overrides invoked once).
    """

    def __init__(
        self,
        component: type[Any],
        *,
        introspector: ComponentIntrospector = _DEFAULT_INTROSPECTOR,
    ) -> None:
        if not is_runtime_class(component):
            raise IllegalComponentError(component, "component must be a class")
        if introspector.is_abstract(component):
            raise IllegalComponentError(
                component,
                "abstract classes and protocols cannot be constructed",
            )

        self._component = component
        self._introspector = introspector
        self._constructor = self._find_constructor()
        self._fields = self._find_fields()
        self._methods = self._find_methods()
        self._dependencies = (
            *(parameter.role for parameter in self._constructor.parameters),
            *(field.role for field in self._fields),
            *(parameter.role for method in self._methods for parameter in method.parameters),
        )

    @property
    def component(self) -> type[Any]:
        return self._component

    @property
    def constructor(self) -> InjectionConstructor:
        return self._constructor

    @property
    def fields(self) -> tuple[InjectionField, ...]:
        return self._fields

    @property
    def methods(self) -> tuple[InjectionMethod, ...]:
        return self._methods

    @property
    def dependencies(self) -> tuple[Role, ...]:
        """Constructor roles, then field roles, then method roles, in plan order."""
        return self._dependencies

    def get_dependencies(self) -> tuple[Role, ...]:
        return self._dependencies

    def get(self, context: ResolutionContext) -> Any:
        """Construct a fully wired instance, resolving every role through context."""
        constructor = self._constructor
        args, kwargs = self._resolve_arguments(context, constructor.parameters)
        if constructor.is_alternative:
            factory = getattr(self._component, constructor.name)
        else:
            factory = self._component
        instance = self._invoke(constructor.name, factory, args, kwargs)

        for field in self._fields:
            value = self._resolve_role(context, field.role)
            self._invoke(field.name, setattr, (instance, field.name, value), {})

        for method in self._methods:
            args, kwargs = self._resolve_arguments(context, method.parameters)
            self._invoke(method.name, method.function, (instance, *args), kwargs)

        return instance

    def _resolve_arguments(
        self,
        context: ResolutionContext,
        parameters: tuple[InjectionParameter, ...],
    ) -> tuple[tuple[Any, ...], dict[str, Any]]:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for parameter in parameters:
            value = self._resolve_role(context, parameter.role)
            if parameter.kind is Parameter.KEYWORD_ONLY:
                kwargs[parameter.name] = value
            else:
                args.append(value)
        return tuple(args), kwargs

    def _resolve_role(self, context: ResolutionContext, role: Role) -> Any:
        if role not in context:
            detail = f"required role {role!r} resolved to nothing"
            raise ComponentConstructionError(self._component, detail)
        return context.get(role)

    def _invoke(
        self,
        step: str,
        target: Callable[..., Any],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Any:
        try:
            return target(*args, **kwargs)
        except WireplanError:
            raise
        except Exception as error:
            detail = f"'{step}' raised {type(error).__name__}: {error}"
            raise ComponentConstructionError(self._component, detail) from error

    def _find_constructor(self) -> InjectionConstructor:
        candidates: list[tuple[str, Callable[..., Any]]] = []
        for _, name, member in self._iter_effective_members():
            if isinstance(member, staticmethod):
                if self._introspector.is_injection_point(member):
                    raise IllegalComponentError(
                        self._component,
                        f"static method '{name}' cannot be an injection point",
                    )
                continue
            if not self._introspector.is_injection_point(member):
                continue
            if isinstance(member, classmethod):
                candidates.append((name, getattr(self._component, name)))
            elif name == "__init__":
                candidates.append((name, member))

        if len(candidates) > 1:
            names = ", ".join(name for name, _ in candidates)
            raise IllegalComponentError(
                self._component,
                f"more than one @inject constructor ({names})",
            )
        if candidates:
            name, function = candidates[0]
            return InjectionConstructor(
                name=name,
                parameters=self._parameters_of(function, skip_first_parameter=name == "__init__"),
            )

        if self._introspector.no_argument_constructor(self._component) is None:
            raise IllegalComponentError(
                self._component,
                "no @inject constructor and no no-argument __init__",
            )
        return InjectionConstructor(name="__init__", parameters=())

    def _find_fields(self) -> tuple[InjectionField, ...]:
        seen: set[str] = set()
        fields_by_owner: list[list[InjectionField]] = []
        for owner in self._hierarchy():
            owned: list[InjectionField] = []
            for name, raw_annotation in inspect.get_annotations(owner).items():
                if name in seen:
                    continue
                seen.add(name)
                annotation = self._field_annotation(owner, name, raw_annotation)
                if annotation is _UNRESOLVED or not self._introspector.is_injected_field(annotation):
                    continue
                if self._introspector.is_immutable_field(annotation):
                    raise IllegalComponentError(
                        self._component,
                        f"injected field '{owner.__qualname__}.{name}' is Final",
                    )
                role = Role.of(self._introspector.field_role_annotation(annotation))
                owned.append(InjectionField(owner=owner, name=name, role=role))
            fields_by_owner.append(owned)

        return tuple(field for owned in reversed(fields_by_owner) for field in owned)

    def _field_annotation(self, owner: type[Any], name: str, raw_annotation: Any) -> Any:
        """Resolve one class annotation in its owner's namespace.

        Annotations that cannot be resolved are only an error when they still
        read as an injected field with the unknown names stood in by ``Any``.
        Other attributes (for example ones typed with ``TYPE_CHECKING``-only
        imports) are not part of the wiring plan and are skipped.
        """
        try:
            return _resolve_class_annotation(owner, name, raw_annotation)
        except (AttributeError, NameError, TypeError) as error:
            placeholder = _placeholder_annotation(owner, raw_annotation)
            if placeholder is not _UNRESOLVED and self._introspector.is_injected_field(placeholder):
                raise IllegalComponentError(
                    self._component,
                    f"injected field '{owner.__qualname__}.{name}' cannot be resolved: {error}",
                ) from error
            logger.debug(
                "Skipping attribute '%s.%s' of %r: annotation cannot be resolved (%s)",
                owner.__qualname__,
                name,
                self._component,
                error,
            )
            return _UNRESOLVED

    def _find_methods(self) -> tuple[InjectionMethod, ...]:
        seen: set[tuple[str, tuple[Role, ...]]] = set()
        methods_by_owner: list[list[InjectionMethod]] = []
        for owner in self._hierarchy():
            owned: list[InjectionMethod] = []
            for name, member in vars(owner).items():
                if name == "__init__" or not inspect.isfunction(member):
                    continue
                signature = (name, tuple(parameter.role for parameter in self._loose_parameters_of(member)))
                if signature in seen:
                    continue
                seen.add(signature)
                if not self._introspector.is_injection_point(member):
                    continue
                if getattr(member, "__type_params__", ()):
                    raise self._generic_method_error(owner, name)
                parameters = self._parameters_of(member, skip_first_parameter=True)
                if any(_contains_type_var(parameter.role.type) for parameter in parameters):
                    raise self._generic_method_error(owner, name)
                owned.append(
                    InjectionMethod(owner=owner, name=name, function=member, parameters=parameters),
                )
            methods_by_owner.append(owned)

        return tuple(method for owned in reversed(methods_by_owner) for method in owned)

    def _generic_method_error(self, owner: type[Any], name: str) -> IllegalComponentError:
        return IllegalComponentError(
            self._component,
            f"@inject method '{owner.__qualname__}.{name}' declares type parameters",
        )

    def _parameters_of(
        self,
        function: Callable[..., Any],
        *,
        skip_first_parameter: bool,
    ) -> tuple[InjectionParameter, ...]:
        member_name = getattr(function, "__qualname__", repr(function))
        try:
            hints = get_type_hints(getattr(function, "__func__", function), include_extras=True)
        except (AttributeError, NameError, TypeError) as error:
            raise IllegalComponentError(
                self._component,
                f"annotations of '{member_name}' cannot be resolved: {error}",
            ) from error

        parameters: list[InjectionParameter] = []
        for parameter in _signature_parameters(function, skip_first_parameter=skip_first_parameter):
            if parameter.kind in _VARIADIC_KINDS:
                raise IllegalComponentError(
                    self._component,
                    f"variadic parameter '{parameter.name}' of '{member_name}' cannot be injected",
                )
            if parameter.name not in hints:
                raise IllegalComponentError(
                    self._component,
                    f"parameter '{parameter.name}' of '{member_name}' has no type annotation",
                )
            parameters.append(
                InjectionParameter(
                    name=parameter.name,
                    kind=parameter.kind,
                    role=Role.of(hints[parameter.name]),
                ),
            )
        return tuple(parameters)

    def _loose_parameters_of(self, function: Callable[..., Any]) -> tuple[InjectionParameter, ...]:
        # Only used to match overrides, so unresolvable annotations stay raw.
        try:
            hints = get_type_hints(function, include_extras=True)
        except (AttributeError, NameError, TypeError):
            hints = {}
        return tuple(
            InjectionParameter(
                name=parameter.name,
                kind=parameter.kind,
                role=Role.of(hints.get(parameter.name, parameter.annotation)),
            )
            for parameter in _signature_parameters(function, skip_first_parameter=True)
        )

    def _hierarchy(self) -> tuple[type[Any], ...]:
        """Return the component and its ancestors, most specific first, without ``object``."""
        return tuple(klass for klass in self._component.__mro__ if klass is not object)

    def _iter_effective_members(self) -> Iterator[tuple[type[Any], str, Any]]:
        seen: set[str] = set()
        for owner in self._hierarchy():
            for name, member in vars(owner).items():
                if name in seen:
                    continue
                seen.add(name)
                yield owner, name, member

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._component.__qualname__})"


def _signature_parameters(
    function: Callable[..., Any],
    *,
    skip_first_parameter: bool,
) -> tuple[Parameter, ...]:
    parameters = tuple(inspect.signature(function).parameters.values())
    if skip_first_parameter and parameters and parameters[0].name in _IMPLICIT_FIRST_PARAMETER_NAMES:
        return parameters[1:]
    return parameters


class _PlaceholderNamespace(dict[str, Any]):
    """Evaluation namespace where every unknown name stands in as ``Any``."""

    def __missing__(self, key: str) -> Any:
        return Any


def _resolve_class_annotation(owner: type[Any], name: str, annotation: Any) -> Any:
    # get_type_hints on a one-annotation holder keeps its Final/ClassVar rules and
    # still resolves against the owner's module and class namespace.
    holder = type(
        owner.__name__,
        (),
        {"__module__": owner.__module__, "__annotations__": {name: annotation}},
    )
    return get_type_hints(holder, localns=dict(vars(owner)), include_extras=True)[name]


def _placeholder_annotation(owner: type[Any], annotation: Any) -> Any:
    if not isinstance(annotation, str):
        return annotation
    namespace = _PlaceholderNamespace(vars(builtins))
    namespace.update(getattr(sys.modules.get(owner.__module__), "__dict__", {}))
    namespace.update(vars(owner))
    try:
        return eval(annotation, {}, namespace)  # noqa: S307
    except Exception:  # noqa: BLE001
        return _UNRESOLVED


def _contains_type_var(annotation: Any) -> bool:
    if isinstance(annotation, TypeVar):
        return True
    return any(_contains_type_var(argument) for argument in get_args(annotation))
