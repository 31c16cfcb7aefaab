"""Quickstart: bind roles, finalize once, resolve many times.

Bind an interface to an implementation, finalize the bindings into a
validated context, and resolve the top-level service. Every lookup builds a
fresh object graph; bound instances are shared as-is.
"""

from __future__ import annotations

from typing import Protocol

from wireplan import ContainerBuilder, inject


class Settings:
    def __init__(self, host: str) -> None:
        self.host = host


class UserRepository(Protocol):
    def find(self, user_id: int) -> str: ...


class SqlUserRepository:
    @inject
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def find(self, user_id: int) -> str:
        return f"user-{user_id}@{self.settings.host}"


class UserService:
    @inject
    def __init__(self, repository: UserRepository) -> None:
        self.repository = repository


def main() -> None:
    settings = Settings(host="localhost")
    context = (
        ContainerBuilder()
        .bind_instance(Settings, settings)
        .bind_type(UserRepository, SqlUserRepository)
        .bind_self(UserService)
        .get_context()
    )

    service = context.resolve(UserService)
    print(service.repository.find(7))  # => user-7@localhost

    chain = f"{type(service).__name__}>{type(service.repository).__name__}"
    print(f"chain={chain}")  # => chain=UserService>SqlUserRepository

    other = context.resolve(UserService)
    print(f"same_service={other is service}")  # => same_service=False
    print(f"same_settings={other.repository.settings is settings}")  # => same_settings=True


if __name__ == "__main__":
    main()
