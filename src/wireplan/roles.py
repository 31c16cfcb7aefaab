from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from wireplan.markers import (
    is_injected_annotation,
    is_provider_annotation,
    strip_injected_annotation,
    strip_provider_annotation,
)


class RoleKind(str, Enum):
    """Defines how a dependency on a role is satisfied."""

    DIRECT = "direct"
    """The role value is constructed before the dependent."""

    DEFERRED = "deferred"
    """A zero-argument handle is injected; the role is constructed when the handle is called."""


@dataclass(frozen=True, slots=True)
class Role:
    """An abstraction a dependency is requested by.

    Roles are compared by the ``(kind, type)`` pair, so ``Role.direct(Db)`` and
    ``Role.deferred(Db)`` are distinct keys that share the same binding.
    """

    kind: RoleKind
    type: Any

    def __post_init__(self) -> None:
        if isinstance(self.type, Role):
            msg = f"Role type cannot itself be a role, got {self.type!r}."
            raise TypeError(msg)

    @classmethod
    def direct(cls, key: Any) -> Role:
        return cls(kind=RoleKind.DIRECT, type=key)

    @classmethod
    def deferred(cls, key: Any) -> Role:
        return cls(kind=RoleKind.DEFERRED, type=key)

    @classmethod
    def of(cls, annotation: Any) -> Role:
        """Build a role from a user annotation.

        ``Provider[X]`` maps to a deferred role of ``X``, ``Injected[X]`` is
        stripped to ``X`` and any other key becomes a direct role. Passing a
        role returns it unchanged.
        """
        if isinstance(annotation, Role):
            return annotation
        if is_provider_annotation(annotation):
            return cls.deferred(strip_provider_annotation(annotation))
        if is_injected_annotation(annotation):
            return cls.direct(strip_injected_annotation(annotation))
        return cls.direct(annotation)

    @property
    def is_deferred(self) -> bool:
        return self.kind is RoleKind.DEFERRED

    def __repr__(self) -> str:
        name = getattr(self.type, "__qualname__", None) or repr(self.type)
        if self.is_deferred:
            return f"Role.deferred({name})"
        return f"Role.direct({name})"
