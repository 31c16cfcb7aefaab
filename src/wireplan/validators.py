from __future__ import annotations

from collections.abc import Mapping

from wireplan.bindings import Binding
from wireplan.exceptions import CyclicDependencyError, DependencyNotFoundError
from wireplan.roles import Role


class DependencyGraphValidator:
    """Prove every binding is resolvable before any construction happens.

    Roles are walked depth-first in registration order with the current
    visiting chain kept as a path. A reported cycle starts at the first
    role that is revisited, so roles that merely lead into it are left out. A ``Provider[X]`` dependency only requires
    ``X`` to be bound: it is dereferenced after construction, so it is never
    part of the acyclic path.
    """

    def __init__(self, bindings: Mapping[Role, Binding]) -> None:
        self._bindings = bindings
        self._verified: set[Role] = set()

    def validate(self) -> None:
        """Raise ``DependencyNotFoundError`` or ``CyclicDependencyError`` on the first problem."""
        for role in self._bindings:
            self._check_dependencies(role, [role])

    def _check_dependencies(self, component: Role, visiting: list[Role]) -> None:
        if component in self._verified:
            return

        for dependency in self._bindings[component].dependencies:
            if dependency.is_deferred:
                self._check_bound(component, Role.direct(dependency.type))
                continue

            self._check_bound(component, dependency)
            if dependency in visiting:
                cycle = visiting[visiting.index(dependency) :]
                raise CyclicDependencyError(role.type for role in (*cycle, dependency))
            visiting.append(dependency)
            self._check_dependencies(dependency, visiting)
            visiting.pop()

        self._verified.add(component)

    def _check_bound(self, component: Role, dependency: Role) -> None:
        if dependency not in self._bindings:
            raise DependencyNotFoundError(component.type, dependency.type)
