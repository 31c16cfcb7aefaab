from __future__ import annotations

import logging
from typing import Any

from typing_extensions import Self

from wireplan.bindings import BindingRegistry, InstanceBinding, TypeBinding
from wireplan.context import Context
from wireplan.descriptors import ComponentDescriptor
from wireplan.introspection import ComponentIntrospector, MarkerIntrospector, is_runtime_class
from wireplan.roles import Role
from wireplan.validators import DependencyGraphValidator

logger = logging.getLogger(__name__)


class ContainerBuilder:
    """Accumulate bindings and finalize them into a validated ``Context``.

    Binding a class introspects it immediately, so illegal shapes fail at the
    ``bind_type`` call and are never recorded. ``get_context`` validates the
    whole graph (missing bindings, cycles) before any object is constructed.

    Binding the same role twice keeps only the last binding. This is a
    deliberate policy, not an oversight.

    Examples:
        .. code-block:: python

            builder = ContainerBuilder()
            builder.bind_instance(Settings, Settings(dsn="sqlite://"))
            builder.bind_type(Repository, SqlRepository)

            context = builder.get_context()
            repository = context.get(Repository)

    """

    def __init__(self, *, introspector: ComponentIntrospector | None = None) -> None:
        """Initialize an empty builder.

        Args:
            introspector: Strategy that answers marker questions about bound
                classes. Defaults to ``MarkerIntrospector`` (``@inject``,
                ``Injected[T]``, ``Final``).

        """
        self._introspector = introspector if introspector is not None else MarkerIntrospector()
        self._registry = BindingRegistry()

    def bind_instance(self, role: Any, instance: Any) -> Self:
        """Bind a role to an already constructed value returned as-is."""
        self._registry.add(InstanceBinding(role=_binding_role(role), instance=instance))
        return self

    def bind_type(self, role: Any, implementation: type[Any]) -> Self:
        """Bind a role to a concrete class constructed on every lookup.

        Raises:
            IllegalComponentError: If ``implementation`` cannot yield an
                injection plan. The registry is left unchanged.

        """
        binding_role = _binding_role(role)
        descriptor = ComponentDescriptor(implementation, introspector=self._introspector)
        self._registry.add(TypeBinding(role=binding_role, descriptor=descriptor))
        return self

    def bind(self, role: Any, target: Any) -> Self:
        """Bind a class with ``bind_type`` and any other value with ``bind_instance``."""
        if is_runtime_class(target):
            return self.bind_type(role, target)
        return self.bind_instance(role, target)

    def bind_self(self, implementation: type[Any]) -> Self:
        """Bind a concrete class to itself."""
        return self.bind_type(implementation, implementation)

    def get_context(self) -> Context:
        """Validate all bindings and return a read-only context over them.

        Raises:
            DependencyNotFoundError: If a dependency (or the role wrapped by a
                ``Provider[X]`` dependency) is not bound.
            CyclicDependencyError: If a direct dependency chain revisits a role.

        """
        bindings = self._registry.snapshot()
        DependencyGraphValidator(bindings).validate()
        logger.info("Context built: binding_count=%d", len(bindings))
        return Context(bindings)

    def __contains__(self, role: object) -> bool:
        return Role.of(role) in self._registry

    def __len__(self) -> int:
        return len(self._registry)


def _binding_role(role: Any) -> Role:
    binding_role = Role.of(role)
    if binding_role.is_deferred:
        msg = f"Cannot bind a deferred role {role!r}; bind the wrapped role instead."
        raise TypeError(msg)
    return binding_role
