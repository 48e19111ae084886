"""Declarative runtime specifications for supported languages.

This is DATA, not code. To support a new language, add its spec here.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True)
class ProbeCommand:
    """Command that makes a runtime describe itself.

    The command must print a single JSON object with the keys
    ``version``, ``include_dir`` and ``pkg_config_path`` to stdout.
    """
    args: List[str]
    timeout: float = 5.0


@dataclass(frozen=True)
class EnvironmentVariables:
    """Names of the environment variables a scoped run mutates."""
    module_search_path: str
    binary: str
    include_path: str = "CMAKE_INCLUDE_PATH"
    pkg_config_path: str = "PKG_CONFIG_PATH"
    executable_path: str = "PATH"


@dataclass(frozen=True)
class SitePackagesLayout:
    """Install locations relative to the formula prefix.

    ``{xy}`` is replaced with the runtime's ``major.minor`` version.
    """
    public: str
    private: str


@dataclass(frozen=True)
class RuntimeSpec:
    """Complete runtime specification for a language."""
    display_name: str
    env: EnvironmentVariables
    site_packages: SitePackagesLayout
    system_commands: List[str]
    system_prefixes: List[str]
    probe: ProbeCommand


_PYTHON_PROBE = (
    "import json, sys, sysconfig; "
    "print(json.dumps({"
    "'version': '%d.%d.%d' % sys.version_info[:3], "
    "'include_dir': sysconfig.get_paths().get('include'), "
    "'pkg_config_path': sysconfig.get_config_var('LIBPC')"
    "}))"
)


RUNTIME_SPECS: Dict[str, RuntimeSpec] = {
    "python": RuntimeSpec(
        display_name="Python",
        env=EnvironmentVariables(
            module_search_path="PYTHONPATH",
            binary="PYTHON",
        ),
        site_packages=SitePackagesLayout(
            public="lib/python{xy}/site-packages",
            private="libexec/lib/python{xy}/site-packages",
        ),
        system_commands=["python3", "python2", "python"],  # Try in order
        # Interpreters shipped with the OS are never put first on PATH
        system_prefixes=["/usr/bin", "/System/Library/Frameworks"],
        probe=ProbeCommand(args=["-c", _PYTHON_PROBE]),
    ),
}


def get_runtime_spec(language: Optional[str]) -> RuntimeSpec:
    """Get runtime spec for a language.

    Args:
        language: Language name

    Returns:
        Runtime specification

    Raises:
        ValueError: If language not supported
    """
    if language not in RUNTIME_SPECS:
        supported = ", ".join(RUNTIME_SPECS.keys())
        raise ValueError(
            f"Language '{language}' not supported. "
            f"Supported languages: {supported}"
        )

    return RUNTIME_SPECS[language]
