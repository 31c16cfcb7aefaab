"""Tests for the exception hierarchy and messages."""

import pytest

from wireplan.exceptions import (
    ComponentConstructionError,
    CyclicDependencyError,
    DependencyNotFoundError,
    DependencyNotRegisteredError,
    IllegalComponentError,
    WireplanError,
)


class Service:
    pass


class Repository:
    pass


@pytest.mark.parametrize(
    "error",
    [
        IllegalComponentError(Service, "reason"),
        DependencyNotFoundError(Service, Repository),
        CyclicDependencyError([Service, Repository, Service]),
        ComponentConstructionError(Service, "detail"),
        DependencyNotRegisteredError(Service),
    ],
)
def test_all_errors_derive_from_base(error: WireplanError) -> None:
    assert isinstance(error, WireplanError)


class TestIllegalComponentError:
    def test_message_names_component_and_reason(self) -> None:
        error = IllegalComponentError(Service, "more than one @inject constructor")

        assert error.component is Service
        assert error.reason == "more than one @inject constructor"
        assert str(error) == "Illegal component 'Service': more than one @inject constructor"

    def test_message_falls_back_to_repr(self) -> None:
        error = IllegalComponentError(42, "component must be a class")

        assert "'42'" in str(error)


class TestDependencyNotFoundError:
    def test_message_names_both_roles(self) -> None:
        error = DependencyNotFoundError(Service, Repository)

        assert error.component is Service
        assert error.dependency is Repository
        assert str(error) == "Dependency 'Repository' required by 'Service' is not bound."


class TestCyclicDependencyError:
    def test_keeps_path_and_components(self) -> None:
        error = CyclicDependencyError(iter([Service, Repository, Service]))

        assert error.path == (Service, Repository, Service)
        assert error.components == frozenset({Service, Repository})
        assert str(error) == "Cyclic dependency detected: Service -> Repository -> Service."


class TestDependencyNotRegisteredError:
    def test_message_names_role(self) -> None:
        error = DependencyNotRegisteredError(Service)

        assert error.role is Service
        assert "'Service' is not bound" in str(error)
