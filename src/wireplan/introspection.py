from __future__ import annotations

import inspect
import types
from collections.abc import Callable
from typing import Any, Final, Protocol, TypeGuard, get_args, get_origin

from wireplan.markers import is_injected_annotation, is_injection_point, strip_injected_annotation


class ComponentIntrospector(Protocol):
    """Answer the marker questions the component descriptor asks about a class.

    This is the only seam that knows how injection points are tagged.
    Replace it to drive wiring from another metadata source, such as a
    registry populated by a code generator.
    """

    def is_abstract(self, component: type[Any]) -> bool:
        """Return True when component is an abstract class or an interface."""
        ...

    def is_injection_point(self, member: Any) -> bool:
        """Return True when a constructor or method participates in wiring."""
        ...

    def is_injected_field(self, annotation: Any) -> bool:
        """Return True when a class attribute annotation participates in wiring."""
        ...

    def is_immutable_field(self, annotation: Any) -> bool:
        """Return True when the annotated attribute must not be reassigned."""
        ...

    def field_role_annotation(self, annotation: Any) -> Any:
        """Return the annotation stripped of field-level markers and qualifiers."""
        ...

    def no_argument_constructor(self, component: type[Any]) -> Callable[..., Any] | None:
        """Return ``__init__`` when it and any custom ``__new__`` need no arguments, else None."""
        ...


class MarkerIntrospector:
    """Default introspector driven by ``@inject``, ``Injected[T]`` and ``Final``."""

    def is_abstract(self, component: type[Any]) -> bool:
        return inspect.isabstract(component) or bool(getattr(component, "_is_protocol", False))

    def is_injection_point(self, member: Any) -> bool:
        return is_injection_point(member)

    def is_injected_field(self, annotation: Any) -> bool:
        return is_injected_annotation(_strip_final(annotation))

    def is_immutable_field(self, annotation: Any) -> bool:
        if _is_final(annotation):
            return True
        return is_injected_annotation(annotation) and _is_final(get_args(annotation)[0])

    def field_role_annotation(self, annotation: Any) -> Any:
        return _strip_final(strip_injected_annotation(_strip_final(annotation)))

    def no_argument_constructor(self, component: type[Any]) -> Callable[..., Any] | None:
        # A Python-level __new__ receives the same arguments as __init__.
        new = component.__new__
        if inspect.isfunction(new) and not _accepts_no_arguments(new):
            return None
        init = component.__init__
        if init is object.__init__:
            return init
        if not _accepts_no_arguments(init):
            return None
        return init


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class and not a parameterized alias."""
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def _is_final(annotation: Any) -> bool:
    return annotation is Final or get_origin(annotation) is Final


def _strip_final(annotation: Any) -> Any:
    if get_origin(annotation) is Final:
        return get_args(annotation)[0]
    return annotation


def _accepts_no_arguments(function: Callable[..., Any]) -> bool:
    """Return True when function can be called with only its implicit first argument."""
    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        return False
    parameters = list(signature.parameters.values())[1:]
    return not any(_is_required(parameter) for parameter in parameters)


def _is_required(parameter: inspect.Parameter) -> bool:
    if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
        return False
    return parameter.default is inspect.Parameter.empty


__all__ = ["ComponentIntrospector", "MarkerIntrospector", "is_runtime_class"]
