"""Data types for runtime selection."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterable, Optional, Union

import semver

DEFAULT_ALLOWED_MAJOR_VERSIONS: FrozenSet[int] = frozenset({2, 3})


def parse_version(value: Union[str, semver.Version, None]) -> semver.Version:
    """Parse a runtime version such as ``"2.7"`` or ``"3.11.4"``.

    Interpreters rarely report a full semver triple, so missing minor and
    patch components default to zero. ``None`` parses as ``0.0.0``.
    """
    if isinstance(value, semver.Version):
        return value
    if not value:
        return semver.Version(0)
    return semver.Version.parse(str(value).strip(), optional_minor_and_patch=True)


@dataclass(frozen=True)
class RuntimeRequirement:
    """A declared dependency on a language runtime.

    Attributes:
        binary: Path to the runtime executable
        version: Runtime version (compared by major, minor, patch)
        name: Requirement name, as used by build options (e.g., "python3")
        satisfied: Whether the runtime is actually available
        optional: Requirement was declared optional
        recommended: Requirement was declared recommended
        from_system_install: Runtime ships with the operating system
        include_dir: Directory holding the runtime's C headers
        pkg_config_path: Directory with the runtime's .pc files (if any)
        language: Language the runtime belongs to
    """

    binary: Path
    version: semver.Version
    name: str
    satisfied: bool = True
    optional: bool = False
    recommended: bool = False
    from_system_install: bool = False
    include_dir: Optional[Path] = None
    pkg_config_path: Optional[Path] = None
    language: str = "python"

    def __post_init__(self) -> None:
        object.__setattr__(self, "binary", Path(self.binary))
        object.__setattr__(self, "version", parse_version(self.version))
        if self.include_dir is not None:
            object.__setattr__(self, "include_dir", Path(self.include_dir))
        if self.pkg_config_path is not None:
            object.__setattr__(self, "pkg_config_path", Path(self.pkg_config_path))

    @property
    def xy(self) -> str:
        """Major and minor version, e.g. ``"2.7"``."""
        return f"{self.version.major}.{self.version.minor}"

    def __repr__(self) -> str:
        status = "" if self.satisfied else " (unsatisfied)"
        return f"<RuntimeRequirement {self.name} v{self.version} @ {self.binary}{status}>"


@dataclass(frozen=True)
class ScopedRuntime:
    """A selected runtime, annotated with the paths a build installs into."""

    requirement: RuntimeRequirement
    site_packages_dir: Path
    private_site_packages_dir: Path

    @property
    def binary(self) -> Path:
        return self.requirement.binary

    @property
    def version(self) -> semver.Version:
        return self.requirement.version

    @property
    def name(self) -> str:
        return self.requirement.name

    @property
    def xy(self) -> str:
        return self.requirement.xy

    @property
    def include_dir(self) -> Optional[Path]:
        return self.requirement.include_dir

    @property
    def pkg_config_path(self) -> Optional[Path]:
        return self.requirement.pkg_config_path

    @property
    def from_system_install(self) -> bool:
        return self.requirement.from_system_install

    def __repr__(self) -> str:
        return f"<ScopedRuntime {self.name} v{self.version} @ {self.binary}>"


@dataclass(frozen=True)
class SelectionOptions:
    """Options that restrict which runtimes are eligible."""

    allowed_major_versions: FrozenSet[int] = field(
        default_factory=lambda: DEFAULT_ALLOWED_MAJOR_VERSIONS
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "allowed_major_versions", frozenset(self.allowed_major_versions)
        )

    @classmethod
    def only(cls, *majors: int) -> "SelectionOptions":
        """Options allowing just the given major versions."""
        return cls(allowed_major_versions=frozenset(majors))

    def allows(self, version: semver.Version) -> bool:
        return version.major in self.allowed_major_versions

    @classmethod
    def from_iterable(cls, majors: Optional[Iterable[int]]) -> "SelectionOptions":
        if majors is None:
            return cls()
        return cls(allowed_major_versions=frozenset(int(m) for m in majors))
