"""Environment variable stores used by scoped runs.

A scoped run mutates the environment that build steps (and the processes
they spawn) see, then puts it back exactly as it found it. The store is
injected so tests and dry runs can use :class:`InMemoryEnvironment` instead of
the real process environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, MutableMapping, Optional, Protocol, Union

PathLike = Union[str, Path]


@dataclass(frozen=True, eq=False)
class EnvironmentSnapshot:
    """Immutable copy of every environment variable at one point in time."""

    variables: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "variables", MappingProxyType(dict(self.variables)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EnvironmentSnapshot):
            return NotImplemented
        return dict(self.variables) == dict(other.variables)

    def __contains__(self, key: object) -> bool:
        return key in self.variables

    def __len__(self) -> int:
        return len(self.variables)

    def get(self, key: str) -> Optional[str]:
        return self.variables.get(key)

    def as_dict(self) -> Dict[str, str]:
        return dict(self.variables)


class EnvironmentStore(Protocol):
    """Interface of an environment that can be mutated and restored."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def snapshot(self) -> EnvironmentSnapshot: ...

    def restore(self, snapshot: EnvironmentSnapshot) -> None: ...


class _MappingEnvironment:
    """Store backed by a mutable string mapping."""

    def __init__(self, mapping: MutableMapping[str, str]):
        self._mapping = mapping

    def get(self, key: str) -> Optional[str]:
        return self._mapping.get(key)

    def set(self, key: str, value: str) -> None:
        self._mapping[key] = str(value)

    def snapshot(self) -> EnvironmentSnapshot:
        return EnvironmentSnapshot(dict(self._mapping))

    def restore(self, snapshot: EnvironmentSnapshot) -> None:
        """Replace the whole environment with ``snapshot``.

        Variables that did not exist when the snapshot was taken are removed.
        """
        self._mapping.clear()
        self._mapping.update(snapshot.variables)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._mapping)


class ProcessEnvironment(_MappingEnvironment):
    """The real process environment (``os.environ``)."""

    def __init__(self) -> None:
        super().__init__(os.environ)

    def __repr__(self) -> str:
        return f"<ProcessEnvironment ({len(self._mapping)} variables)>"


class InMemoryEnvironment(_MappingEnvironment):
    """Dict-backed environment, detached from the running process."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        super().__init__(dict(initial or {}))

    def __repr__(self) -> str:
        return f"<InMemoryEnvironment {self.as_dict()!r}>"


def append_path(store: EnvironmentStore, key: str, path: PathLike) -> None:
    """Append ``path`` to the ``os.pathsep`` separated variable ``key``."""
    current = store.get(key)
    if current:
        store.set(key, f"{current}{os.pathsep}{path}")
    else:
        store.set(key, str(path))


def prepend_path(store: EnvironmentStore, key: str, path: PathLike) -> None:
    """Prepend ``path`` to the ``os.pathsep`` separated variable ``key``."""
    current = store.get(key)
    if current:
        store.set(key, f"{path}{os.pathsep}{current}")
    else:
        store.set(key, str(path))
