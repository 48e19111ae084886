"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from cellar.runtime import InMemoryEnvironment, RuntimeSelector, SelectionContext
from tests.fixtures.runtimes import ExcludedNames, StaticRequirements, make_requirement


@pytest.fixture
def prefix(tmp_path) -> Path:
    """Installation prefix of the formula under test."""
    return tmp_path / "Cellar" / "formula" / "1.0"


@pytest.fixture
def env() -> InMemoryEnvironment:
    """An environment detached from the test process."""
    return InMemoryEnvironment(
        {
            "PATH": "/usr/bin:/bin",
            "HOME": "/home/builder",
            "CMAKE_INCLUDE_PATH": "/usr/local/include",
        }
    )


@pytest.fixture
def source() -> StaticRequirements:
    """Requirement source declaring Python 2.7 and Python 3.6."""
    return StaticRequirements([make_requirement("3.6.15"), make_requirement("2.7.18")])


@pytest.fixture
def build() -> ExcludedNames:
    return ExcludedNames()


@pytest.fixture
def selector(source, prefix, build, env) -> RuntimeSelector:
    return RuntimeSelector(source, prefix=prefix, build=build, env=env, context=SelectionContext())
