"""Deferred providers: break cycles with ``Provider[T]``.

A direct cycle fails validation. Declaring one side as ``Provider[T]``
injects a zero-argument handle instead; the handle resolves the role when it
is called, after construction, and builds a new instance on every call.
"""

from __future__ import annotations

from wireplan import ContainerBuilder, CyclicDependencyError, Provider, inject


class Session:
    @inject
    def __init__(self, users: Provider[UserService]) -> None:
        self._users = users

    def current_user(self) -> str:
        return self._users().name()


class UserService:
    @inject
    def __init__(self, session: Session) -> None:
        self.session = session

    def name(self) -> str:
        return "alice"


class EagerSession:
    @inject
    def __init__(self, users: EagerUserService) -> None:
        self.users = users


class EagerUserService:
    @inject
    def __init__(self, session: EagerSession) -> None:
        self.session = session


def main() -> None:
    eager = ContainerBuilder().bind_self(EagerSession).bind_self(EagerUserService)
    try:
        eager.get_context()
    except CyclicDependencyError as error:
        print(type(error).__name__)  # => CyclicDependencyError

    context = ContainerBuilder().bind_self(Session).bind_self(UserService).get_context()
    session = context.resolve(Session)
    print(f"user={session.current_user()}")  # => user=alice

    handle = context.resolve(Provider[UserService])
    print(f"fresh={handle() is not handle()}")  # => fresh=True


if __name__ == "__main__":
    main()
