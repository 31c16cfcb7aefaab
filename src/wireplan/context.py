from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar, overload

from wireplan.bindings import Binding
from wireplan.exceptions import DependencyNotRegisteredError
from wireplan.roles import Role

T = TypeVar("T")


class DeferredHandle:
    """A zero-argument callable that resolves a role each time it is called.

    Injected for ``Provider[X]`` dependencies. Nothing is cached: every call
    constructs type-bound roles again.
    """

    __slots__ = ("_context", "_role")

    def __init__(self, context: Context, role: Role) -> None:
        self._context = context
        self._role = role

    @property
    def role(self) -> Role:
        return self._role

    def __call__(self) -> Any:
        return self._context.resolve(self._role)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._role!r})"


class Context:
    """Resolve roles against a validated, read-only set of bindings.

    Contexts are produced by ``ContainerBuilder.get_context``. They hold no
    state besides the bindings snapshot, never cache resolved values, and can
    be shared between threads.

    Examples:
        .. code-block:: python

            context = builder.get_context()
            service = context.get(Service)
            lazy_service = context.get(Provider[Service])

    """

    __slots__ = ("_bindings",)

    def __init__(self, bindings: Mapping[Role, Binding]) -> None:
        self._bindings = bindings

    @overload
    def get(self, role: type[T]) -> T | None: ...

    @overload
    def get(self, role: Any) -> Any: ...

    def get(self, role: Any) -> Any:
        """Resolve a role, returning None when it is not bound.

        ``Provider[X]`` (or ``Role.deferred(X)``) resolves to a
        ``DeferredHandle`` when ``X`` is bound. Construction failures raise
        ``ComponentConstructionError``.

        Args:
            role: A type, any other hashable binding key, a ``Provider[X]``
                annotation, or a ``Role``.

        """
        normalized = Role.of(role)
        binding = self._bindings.get(Role.direct(normalized.type))
        if binding is None:
            return None
        if normalized.is_deferred:
            return DeferredHandle(self, Role.direct(normalized.type))
        return binding.get(self)

    @overload
    def resolve(self, role: type[T]) -> T: ...

    @overload
    def resolve(self, role: Any) -> Any: ...

    def resolve(self, role: Any) -> Any:
        """Resolve a role, raising ``DependencyNotRegisteredError`` when it is not bound."""
        if role not in self:
            raise DependencyNotRegisteredError(Role.of(role).type)
        return self.get(role)

    def roles(self) -> list[Role]:
        """Get all bound roles in registration order."""
        return list(self._bindings)

    def __contains__(self, role: object) -> bool:
        return Role.direct(Role.of(role).type) in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(binding_count={len(self._bindings)})"
