"""Configuration management for Cellar."""

from .parser import (
    BuildOptions,
    CellarConfig,
    FormulaRequirements,
    find_config_file,
    load_config,
)

__all__ = [
    "CellarConfig",
    "BuildOptions",
    "FormulaRequirements",
    "load_config",
    "find_config_file",
]
