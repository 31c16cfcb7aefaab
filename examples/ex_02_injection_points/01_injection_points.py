"""Injection points: constructor, fields and methods.

A component is constructed through its ``@inject`` constructor, then its
``Injected[T]`` fields are assigned (base classes first), then its ``@inject``
methods are called (base classes first). An override without ``@inject``
switches the base method off; an override with ``@inject`` runs once.
"""

from __future__ import annotations

from wireplan import ContainerBuilder, Injected, inject


class Clock:
    def now(self) -> str:
        return "12:00"


class Logger:
    pass


class BaseJob:
    clock: Injected[Clock]

    def __init__(self) -> None:
        self.steps: list[str] = []

    @inject
    def install(self) -> None:
        self.steps.append(f"base install at {self.clock.now()}")

    @inject
    def warm_up(self) -> None:
        self.steps.append("base warm up")


class ReportJob(BaseJob):
    logger: Injected[Logger]

    @inject
    def install(self) -> None:
        self.steps.append("report install")

    def warm_up(self) -> None:
        self.steps.append("never called by the container")

    @inject
    def attach(self, logger: Logger) -> None:
        self.steps.append(f"attach same logger={logger is self.logger}")


def main() -> None:
    logger = Logger()
    context = (
        ContainerBuilder()
        .bind_self(Clock)
        .bind_instance(Logger, logger)
        .bind_self(ReportJob)
        .get_context()
    )

    job = context.resolve(ReportJob)
    print(f"clock={job.clock.now()}")  # => clock=12:00
    print(" | ".join(job.steps))  # => report install | attach same logger=True


if __name__ == "__main__":
    main()
