from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, TypeAlias

from wireplan.descriptors import ComponentDescriptor, ResolutionContext
from wireplan.roles import Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class InstanceBinding:
    """A role bound to an already constructed value, returned as-is."""

    role: Role
    instance: Any

    @property
    def dependencies(self) -> tuple[Role, ...]:
        return ()

    def get(self, context: ResolutionContext) -> Any:
        return self.instance


@dataclass(frozen=True, slots=True)
class TypeBinding:
    """A role bound to a concrete class, reconstructed on every lookup."""

    role: Role
    descriptor: ComponentDescriptor

    @property
    def dependencies(self) -> tuple[Role, ...]:
        return self.descriptor.dependencies

    def get(self, context: ResolutionContext) -> Any:
        return self.descriptor.get(context)


Binding: TypeAlias = InstanceBinding | TypeBinding
"""A registered mapping from a role to a fixed value or a constructible class."""


class BindingRegistry:
    """Holds all bindings of one container build, keyed by direct role.

    Binding a role again replaces the previous binding silently (last write
    wins) and keeps the role at its first registration position, so graph
    validation visits roles in a stable order.
    """

    def __init__(self) -> None:
        self._bindings: dict[Role, Binding] = {}

    def add(self, binding: Binding) -> None:
        """Record a binding, replacing any previous binding for the same role."""
        if binding.role.is_deferred:
            msg = f"Bindings are keyed by direct roles, got {binding.role!r}."
            raise ValueError(msg)
        previous = self._bindings.get(binding.role)
        self._bindings[binding.role] = binding
        if previous is not None:
            logger.debug("Binding for %r replaced by %s", binding.role, type(binding).__name__)
        else:
            logger.debug("Binding for %r recorded as %s", binding.role, type(binding).__name__)

    def find(self, role: Role) -> Binding | None:
        """Get the binding for a direct role, if it exists."""
        return self._bindings.get(role)

    def roles(self) -> list[Role]:
        """Get all bound roles in registration order."""
        return list(self._bindings)

    def snapshot(self) -> Mapping[Role, Binding]:
        """Return a read-only copy that later registrations do not affect."""
        return MappingProxyType(dict(self._bindings))

    def __contains__(self, role: object) -> bool:
        return role in self._bindings

    def __iter__(self) -> Iterator[Role]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)
