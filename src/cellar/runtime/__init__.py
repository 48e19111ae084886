"""Runtime selection and scoped build environments."""

from .environment import (
    EnvironmentSnapshot,
    EnvironmentStore,
    InMemoryEnvironment,
    ProcessEnvironment,
    append_path,
    prepend_path,
)
from .errors import CellarError, ConfigurationError, NoRuntimeRequirementsError
from .resolver import RuntimeResolver
from .selector import (
    BuildConfiguration,
    RequirementSource,
    RuntimeSelector,
    SelectionContext,
)
from .specs import RUNTIME_SPECS
from .types import RuntimeRequirement, ScopedRuntime, SelectionOptions

__all__ = [
    "RuntimeSelector",
    "SelectionContext",
    "RequirementSource",
    "BuildConfiguration",
    "RuntimeResolver",
    "RuntimeRequirement",
    "ScopedRuntime",
    "SelectionOptions",
    "RUNTIME_SPECS",
    # Environment
    "EnvironmentSnapshot",
    "EnvironmentStore",
    "InMemoryEnvironment",
    "ProcessEnvironment",
    "append_path",
    "prepend_path",
    # Errors
    "CellarError",
    "ConfigurationError",
    "NoRuntimeRequirementsError",
]
