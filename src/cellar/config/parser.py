"""Configuration file parser for Cellar formulae."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Fallback for Python 3.10

from ..runtime.errors import ConfigurationError
from ..runtime.resolver import RuntimeResolver
from ..runtime.specs import RUNTIME_SPECS
from ..runtime.types import (
    DEFAULT_ALLOWED_MAJOR_VERSIONS,
    RuntimeRequirement,
    SelectionOptions,
)

CONFIG_FILE_NAME = ".cellar.toml"


@dataclass
class RequirementConfig:
    """A runtime requirement declared by the formula."""

    name: str = "python"
    binary: Optional[str] = None  # Defaults to `name` looked up on PATH
    optional: bool = False
    recommended: bool = False


@dataclass
class FormulaConfig:
    """Formula-level configuration."""

    name: Optional[str] = None
    prefix: str = "${PROJECT_ROOT}/build/prefix"
    language: str = "python"


@dataclass
class SelectionConfig:
    """Which runtimes are eligible."""

    allowed_major_versions: List[int] = field(
        default_factory=lambda: sorted(DEFAULT_ALLOWED_MAJOR_VERSIONS)
    )


@dataclass
class BuildOptions:
    """Options the user built the formula with."""

    without: List[str] = field(default_factory=list)

    def is_excluded(self, name: str) -> bool:
        """Whether an optional/recommended requirement was opted out of."""
        return name in self.without


@dataclass
class CellarConfig:
    """Complete Cellar configuration."""

    formula: FormulaConfig = field(default_factory=FormulaConfig)
    selection: SelectionConfig = field(default_factory=SelectionConfig)
    build: BuildOptions = field(default_factory=BuildOptions)
    requirements: List[RequirementConfig] = field(default_factory=list)

    # Project root for resolving paths
    project_root: Path = field(default_factory=Path.cwd)

    def resolve_path(self, path_template: str) -> str:
        """Resolve template variables in paths.

        Supports:
            ${PROJECT_ROOT} - absolute path to project root
            ~ - the user's home directory
        """
        result = path_template.replace("${PROJECT_ROOT}", str(self.project_root))
        return str(Path(result).expanduser())

    @property
    def prefix(self) -> Path:
        return Path(self.resolve_path(self.formula.prefix))

    def selection_options(self) -> SelectionOptions:
        return SelectionOptions.from_iterable(self.selection.allowed_major_versions)


class FormulaRequirements:
    """Requirement source backed by the requirements declared in config."""

    def __init__(self, config: CellarConfig, resolver: Optional[RuntimeResolver] = None):
        self.config = config
        self.resolver = resolver or RuntimeResolver(config.formula.language)

    def list_runtime_requirements(self) -> List[RuntimeRequirement]:
        """Probe every declared requirement, in declaration order."""
        requirements = []
        for req in self.config.requirements:
            binary = self.config.resolve_path(req.binary) if req.binary else req.name
            requirements.append(
                self.resolver.resolve_requirement(
                    binary,
                    name=req.name,
                    optional=req.optional,
                    recommended=req.recommended,
                )
            )
        return requirements


def find_config_file(project_path: Path) -> Optional[Path]:
    """Find .cellar.toml in project root.

    Args:
        project_path: Root path of the project

    Returns:
        Path to .cellar.toml if found, None otherwise
    """
    config_file = project_path / CONFIG_FILE_NAME
    if config_file.exists():
        return config_file
    return None


def load_config(project_path: Path) -> CellarConfig:
    """Load configuration from .cellar.toml or use defaults.

    Args:
        project_path: Root path of the project

    Returns:
        CellarConfig with loaded or default configuration

    Raises:
        ConfigurationError: If .cellar.toml exists but cannot be parsed, or
            holds values of the wrong shape
    """
    config = CellarConfig(project_root=project_path)

    config_file = find_config_file(project_path)
    if not config_file:
        return config

    try:
        with open(config_file, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"cannot read configuration: {e}", config_file) from e

    formula_data = _table(data, "formula", config_file)
    config.formula.name = _optional_str(formula_data, "name", "formula", config_file)
    config.formula.prefix = (
        _optional_str(formula_data, "prefix", "formula", config_file) or config.formula.prefix
    )
    language = _optional_str(formula_data, "language", "formula", config_file) or "python"
    if language not in RUNTIME_SPECS:
        supported = ", ".join(RUNTIME_SPECS.keys())
        raise ConfigurationError(
            f"formula.language '{language}' is not supported "
            f"(supported languages: {supported})",
            config_file,
        )
    config.formula.language = language

    selection_data = _table(data, "selection", config_file)
    majors = selection_data.get("allowed_major_versions")
    if majors is not None:
        if not isinstance(majors, list) or not all(
            isinstance(m, int) and not isinstance(m, bool) for m in majors
        ):
            raise ConfigurationError(
                "selection.allowed_major_versions must be a list of integers",
                config_file,
            )
        config.selection.allowed_major_versions = majors

    build_data = _table(data, "build", config_file)
    without = build_data.get("without", [])
    if not isinstance(without, list) or not all(isinstance(n, str) for n in without):
        raise ConfigurationError("build.without must be a list of strings", config_file)
    config.build.without = list(without)

    entries = data.get("requirements", [])
    if not isinstance(entries, list):
        raise ConfigurationError("requirements must be an array of tables", config_file)
    for entry in entries:
        config.requirements.append(_parse_requirement(entry, config_file))

    return config


def _table(data: Dict[str, Any], key: str, config_file: Path) -> Dict[str, Any]:
    """Return the ``[key]`` table, or an empty one if the section is absent."""
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ConfigurationError(f"[{key}] must be a table", config_file)
    return value


def _optional_str(
    table: Dict[str, Any], key: str, section: str, config_file: Path
) -> Optional[str]:
    value = table.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigurationError(f"{section}.{key} must be a string", config_file)
    return value


def _parse_requirement(entry: Dict[str, Any], config_file: Path) -> RequirementConfig:
    if not isinstance(entry, dict) or "name" not in entry:
        raise ConfigurationError("every [[requirements]] entry needs a name", config_file)

    name = _optional_str(entry, "name", "requirements", config_file)
    binary = _optional_str(entry, "binary", "requirements", config_file)
    flags = {key: entry.get(key, False) for key in ("optional", "recommended")}
    for key, value in flags.items():
        if not isinstance(value, bool):
            raise ConfigurationError(f"requirements.{key} must be true or false", config_file)

    return RequirementConfig(name=name, binary=binary, **flags)
