from __future__ import annotations

from collections.abc import Iterable
from typing import Any


def _describe(key: Any) -> str:
    return getattr(key, "__qualname__", None) or repr(key)


class WireplanError(Exception):
    """Represent a base class for all wireplan-specific failures.

    Catch this type when you want to handle any container error path without
    matching each concrete exception class individually.
    """


class IllegalComponentError(WireplanError):
    """Signal that a class cannot yield a valid injection plan.

    Raised by ``ContainerBuilder.bind_type`` (and ``bind``/``bind_self``) at
    bind time, never during resolution. Typical triggers are abstract classes
    or protocols, more than one ``@inject`` constructor, no ``@inject``
    constructor and no no-argument ``__init__``, a ``Final`` injected field,
    or an ``@inject`` method with its own type parameters.

    The offending binding is not recorded.
    """

    def __init__(self, component: Any, reason: str) -> None:
        self.component = component
        self.reason = reason
        super().__init__(f"Illegal component '{_describe(component)}': {reason}")


class DependencyNotFoundError(WireplanError):
    """Signal that a bound role depends on a role that has no binding.

    Raised by ``ContainerBuilder.get_context``. For a ``Provider[X]``
    dependency, ``dependency`` is the wrapped ``X``.

    Typical fix is binding the missing dependency before finalizing.
    """

    def __init__(self, component: Any, dependency: Any) -> None:
        self.component = component
        self.dependency = dependency
        super().__init__(
            f"Dependency '{_describe(dependency)}' required by "
            f"'{_describe(component)}' is not bound.",
        )


class CyclicDependencyError(WireplanError):
    """Signal a direct dependency chain that revisits a role on its own path.

    Raised by ``ContainerBuilder.get_context``. ``path`` is the visiting chain
    ending with the revisited role, ``components`` is the set of roles on it.

    Typical fix is replacing one edge of the cycle with a ``Provider[X]``
    dependency, which is dereferenced after construction.
    """

    def __init__(self, path: Iterable[Any]) -> None:
        self.path = tuple(path)
        self.components = frozenset(self.path)
        chain = " -> ".join(_describe(component) for component in self.path)
        super().__init__(f"Cyclic dependency detected: {chain}.")


class ComponentConstructionError(WireplanError):
    """Signal that building a component failed at resolution time.

    Wraps exceptions raised by user constructors, field assignment, or
    ``@inject`` methods; the original exception is available as
    ``__cause__``. Container errors raised by nested constructions propagate
    unchanged.
    """

    def __init__(self, component: Any, detail: str) -> None:
        self.component = component
        super().__init__(f"Failed to construct '{_describe(component)}': {detail}")


class DependencyNotRegisteredError(WireplanError):
    """Signal that ``Context.resolve`` was asked for a role without a binding.

    ``Context.get`` returns ``None`` for the same situation instead.
    """

    def __init__(self, role: Any) -> None:
        self.role = role
        super().__init__(f"Role '{_describe(role)}' is not bound.")
