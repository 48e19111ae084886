"""Unit tests for environment stores."""

import os

import pytest

from cellar.runtime import (
    EnvironmentSnapshot,
    InMemoryEnvironment,
    ProcessEnvironment,
    append_path,
    prepend_path,
)


class TestPathHelpers:
    """Test append_path/prepend_path."""

    def test_append_to_unset(self):
        env = InMemoryEnvironment()
        append_path(env, "PYTHONPATH", "/a")
        assert env.get("PYTHONPATH") == "/a"

    def test_append_to_empty(self):
        env = InMemoryEnvironment({"PYTHONPATH": ""})
        append_path(env, "PYTHONPATH", "/a")
        assert env.get("PYTHONPATH") == "/a"

    def test_append_keeps_order(self):
        env = InMemoryEnvironment({"PYTHONPATH": "/a"})
        append_path(env, "PYTHONPATH", "/b")
        append_path(env, "PYTHONPATH", "/c")
        assert env.get("PYTHONPATH").split(os.pathsep) == ["/a", "/b", "/c"]

    def test_prepend_to_unset(self):
        env = InMemoryEnvironment()
        prepend_path(env, "PATH", "/opt/bin")
        assert env.get("PATH") == "/opt/bin"

    def test_prepend_puts_first(self):
        env = InMemoryEnvironment({"PATH": "/usr/bin"})
        prepend_path(env, "PATH", "/opt/bin")
        assert env.get("PATH").split(os.pathsep) == ["/opt/bin", "/usr/bin"]


class TestSnapshots:
    """Test snapshot/restore."""

    def test_snapshot_is_a_copy(self):
        env = InMemoryEnvironment({"A": "1"})
        snapshot = env.snapshot()

        env.set("A", "2")

        assert snapshot.get("A") == "1"
        assert len(snapshot) == 1

    def test_snapshot_is_immutable(self):
        snapshot = EnvironmentSnapshot({"A": "1"})
        with pytest.raises(TypeError):
            snapshot.variables["A"] = "2"

    def test_restore_removes_added_and_resets_changed(self):
        env = InMemoryEnvironment({"A": "1", "B": "2"})
        snapshot = env.snapshot()

        env.set("A", "changed")
        env.set("C", "added")
        env.restore(snapshot)

        assert env.as_dict() == {"A": "1", "B": "2"}

    def test_snapshot_equality(self):
        assert EnvironmentSnapshot({"A": "1"}) == EnvironmentSnapshot({"A": "1"})
        assert EnvironmentSnapshot({"A": "1"}) != EnvironmentSnapshot({"A": "2"})

    def test_process_environment_round_trip(self, monkeypatch):
        monkeypatch.setenv("CELLAR_TEST_VAR", "before")
        env = ProcessEnvironment()
        snapshot = env.snapshot()

        env.set("CELLAR_TEST_VAR", "after")
        env.set("CELLAR_TEST_ADDED", "yes")
        assert os.environ["CELLAR_TEST_VAR"] == "after"

        env.restore(snapshot)

        assert os.environ["CELLAR_TEST_VAR"] == "before"
        assert "CELLAR_TEST_ADDED" not in os.environ
