"""Error types raised by runtime selection."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class CellarError(Exception):
    """Base class for all Cellar errors."""


class ConfigurationError(CellarError):
    """Raised when a formula's runtime configuration is unusable."""

    def __init__(self, message: str, config_file: Optional[Path] = None):
        self.config_file = config_file
        if config_file is not None:
            message = f"{config_file}: {message}"
        super().__init__(message)


class NoRuntimeRequirementsError(ConfigurationError):
    """Raised when runtime selection is used without any declared requirement."""

    def __init__(self, language: str = "python"):
        self.language = language
        super().__init__(
            f"If you use {language} in the formula, you have to declare a "
            f"{language} requirement.\n\n"
            f"Add one to .cellar.toml:\n"
            f"  [[requirements]]\n"
            f"  name = \"{language}\""
        )
