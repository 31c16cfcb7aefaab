"""Errors: shapes fail at bind time, graphs fail at finalize time.

``IllegalComponentError`` is raised by ``bind_type`` and leaves the builder
unchanged. ``DependencyNotFoundError`` and ``CyclicDependencyError`` are
raised by ``get_context`` before anything is constructed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from wireplan import (
    ContainerBuilder,
    DependencyNotFoundError,
    IllegalComponentError,
    inject,
)


class Notifier(ABC):
    @abstractmethod
    def send(self, message: str) -> None: ...


class Mailer:
    @inject
    def __init__(self, host: str) -> None:
        self.host = host


def main() -> None:
    builder = ContainerBuilder()
    try:
        builder.bind_self(Notifier)
    except IllegalComponentError as error:
        print(error)  # => Illegal component 'Notifier': abstract classes and protocols cannot be constructed
    print(f"bound={Notifier in builder}")  # => bound=False

    builder.bind_self(Mailer)
    try:
        builder.get_context()
    except DependencyNotFoundError as error:
        print(error)  # => Dependency 'str' required by 'Mailer' is not bound.

    context = builder.bind_instance(str, "smtp.local").get_context()
    print(f"host={context.resolve(Mailer).host}")  # => host=smtp.local


if __name__ == "__main__":
    main()
