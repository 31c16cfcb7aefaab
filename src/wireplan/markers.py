from collections.abc import Callable
from typing import TYPE_CHECKING, Annotated, Any, NamedTuple, TypeVar, Union, get_args, get_origin

from typing_extensions import Self

T = TypeVar("T")
F = TypeVar("F")
INJECT_MARKER_ATTRIBUTE = "__wireplan_inject__"
_ANNOTATED_MARKER_MIN_ARGS = 2


class InjectedMarker:
    """A marker used to indicate a class attribute should be injected by the container."""

    def __eq__(self, other: object) -> bool:
        return isinstance(other, InjectedMarker)

    def __hash__(self) -> int:
        return hash(InjectedMarker)

    def __repr__(self) -> str:
        return "InjectedMarker()"


class ProviderMarker(NamedTuple):
    """Marker for deferred, context-bound provider callables."""

    dependency_key: Any


def inject(member: F) -> F:
    """Mark a constructor or method as an injection point.

    Apply it to ``__init__``, to a classmethod alternative constructor (above
    or below ``@classmethod``), or to an instance method that the container
    calls after construction. Every parameter of a marked member is a
    dependency role.

    Examples:
        .. code-block:: python

            class Service:
                @inject
                def __init__(self, repository: Repository) -> None:
                    self.repository = repository

                @inject
                def install(self, clock: Clock) -> None:
                    self.clock = clock

    """
    setattr(getattr(member, "__func__", member), INJECT_MARKER_ATTRIBUTE, True)
    return member


def is_injection_point(member: Any) -> bool:
    """Return True when member (function, classmethod or staticmethod) carries ``@inject``."""
    return getattr(getattr(member, "__func__", member), INJECT_MARKER_ATTRIBUTE, False) is True


if TYPE_CHECKING:
    Injected = Union[T, T]  # noqa: UP007,PYI016
    """Mark a class attribute for field injection.

    At runtime ``Injected[T]`` becomes ``Annotated[T, InjectedMarker()]``.
    """

    Provider = Callable[[], T]
    """Mark a dependency as a deferred, context-bound provider callable.

    At runtime ``Provider[T]`` becomes ``Annotated[T, ProviderMarker(T)]`` and
    resolves to ``Callable[[], T]`` bound to the resolving context.
    """

else:

    class Injected:
        """Mark a class attribute for field injection.

        At runtime ``Injected[T]`` resolves to ``Annotated[T, InjectedMarker()]``.

        Examples:
            .. code-block:: python

                class Service:
                    repository: Injected[Repository]

        """

        def __new__(cls, *_args: object, **_kwargs: object) -> Self:
            """Prevent instantiation; use Injected[T] instead."""
            msg = "Injected cannot be instantiated; use Injected[T] as an annotation."
            raise TypeError(msg)

        def __class_getitem__(cls, item: T) -> Annotated[T, InjectedMarker]:
            if get_origin(item) is Annotated:
                args = get_args(item)
                inner = args[0]
                metadata = args[1:]
                return _build_annotated((inner, *metadata, InjectedMarker()))
            return _build_annotated((item, InjectedMarker()))

    class Provider:
        """Mark a dependency for deferred construction.

        Examples:
            .. code-block:: python

                class Session:
                    @inject
                    def __init__(self, users: Provider[UserService]) -> None:
                        self._users = users

        """

        def __new__(cls, *_args: object, **_kwargs: object) -> Self:
            """Prevent instantiation; use Provider[T] instead."""
            msg = "Provider cannot be instantiated; use Provider[T] as an annotation."
            raise TypeError(msg)

        def __class_getitem__(cls, item: T) -> Annotated[T, ProviderMarker]:
            return _build_annotated((item, ProviderMarker(dependency_key=item)))


def is_injected_annotation(annotation: Any) -> bool:
    """Return True when annotation is Annotated[..., InjectedMarker()]."""
    if get_origin(annotation) is not Annotated:
        return False
    annotation_args = get_args(annotation)
    if len(annotation_args) < _ANNOTATED_MARKER_MIN_ARGS:
        return False
    metadata = annotation_args[1:]
    return any(isinstance(item, InjectedMarker) for item in metadata)


def strip_injected_annotation(annotation: Any) -> Any:
    """Strip the Injected marker while preserving other Annotated metadata."""
    if not is_injected_annotation(annotation):
        return annotation

    annotation_args = get_args(annotation)
    parameter_type = annotation_args[0]
    metadata = annotation_args[1:]
    filtered_metadata = tuple(item for item in metadata if not isinstance(item, InjectedMarker))
    if not filtered_metadata:
        return parameter_type
    return _build_annotated((parameter_type, *filtered_metadata))


def is_provider_annotation(annotation: Any) -> bool:
    """Return True when annotation is Annotated[..., ProviderMarker(...)]."""
    return _extract_provider_marker(annotation) is not None


def strip_provider_annotation(annotation: Any) -> Any:
    """Return the inner dependency key for Provider annotations."""
    marker = _extract_provider_marker(annotation)
    if marker is None:
        return annotation
    return marker.dependency_key


def _extract_provider_marker(annotation: Any) -> ProviderMarker | None:
    if get_origin(annotation) is not Annotated:
        return None
    annotation_args = get_args(annotation)
    if len(annotation_args) < _ANNOTATED_MARKER_MIN_ARGS:
        return None
    metadata = annotation_args[1:]
    return next(
        (item for item in metadata if isinstance(item, ProviderMarker)),
        None,
    )


def _build_annotated(params: tuple[object, ...]) -> Any:
    """Return Annotated[...] with a pre-built params tuple (Py 3.10+ compatible)."""
    try:
        return Annotated.__class_getitem__(params)  # type: ignore[attr-defined]
    except AttributeError:
        return Annotated.__getitem__(params)  # type: ignore[attr-defined]
