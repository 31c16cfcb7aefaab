"""Shared pytest fixtures for wireplan tests."""

import pytest

from wireplan.builder import ContainerBuilder


@pytest.fixture()
def builder() -> ContainerBuilder:
    """Empty builder with the default marker introspector."""
    return ContainerBuilder()
