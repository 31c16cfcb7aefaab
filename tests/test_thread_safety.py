"""Tests for concurrent resolution through a shared Context."""

import threading
from concurrent.futures import ThreadPoolExecutor

from wireplan.builder import ContainerBuilder
from wireplan.markers import Injected, inject


class Settings:
    pass


class Repository:
    @inject
    def __init__(self, settings: Settings) -> None:
        self.settings = settings


class Service:
    repository: Injected[Repository]


class TestConcurrentResolution:
    def test_concurrent_resolution_builds_independent_graphs(self) -> None:
        settings = Settings()
        context = (
            ContainerBuilder()
            .bind_instance(Settings, settings)
            .bind_self(Repository)
            .bind_self(Service)
            .get_context()
        )

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lambda _: context.get(Service), range(64)))

        assert len({id(service) for service in results}) == 64
        assert len({id(service.repository) for service in results}) == 64
        assert all(service.repository.settings is settings for service in results)

    def test_concurrent_resolution_has_no_errors(self) -> None:
        context = ContainerBuilder().bind_self(Settings).bind_self(Repository).get_context()
        errors: list[Exception] = []
        results: list[Repository] = []

        def resolve_repository() -> None:
            try:
                results.append(context.resolve(Repository))
            except Exception as e:  # noqa: BLE001
                errors.append(e)

        threads = [threading.Thread(target=resolve_repository) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        assert len(results) == 10
