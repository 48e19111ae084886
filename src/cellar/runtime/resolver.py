"""Resolve runtime binaries into runtime requirements."""

import json
import logging
import shutil
import subprocess
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .specs import RuntimeSpec, get_runtime_spec
from .types import RuntimeRequirement, parse_version

logger = logging.getLogger(__name__)


class RuntimeResolver:
    """Turns interpreter binaries into RuntimeRequirements.

    Works for any language defined in RUNTIME_SPECS. The runtime is asked to
    describe itself (version, header dir, pkg-config dir) with the probe
    command from its spec.
    """

    def __init__(self, language: str = "python"):
        """Initialize resolver.

        Args:
            language: Language whose runtimes are resolved
        """
        self.language = language
        self.spec: RuntimeSpec = get_runtime_spec(language)

    def resolve_requirement(
        self,
        binary: Union[str, Path],
        name: Optional[str] = None,
        optional: bool = False,
        recommended: bool = False,
    ) -> RuntimeRequirement:
        """Resolve a requirement for one runtime binary.

        A binary that cannot be found or probed yields an unsatisfied
        requirement rather than an error, so selection can skip it.

        Args:
            binary: Absolute path, or command name looked up on PATH
            name: Requirement name (defaults to the binary's file name)
            optional: Requirement was declared optional
            recommended: Requirement was declared recommended

        Returns:
            RuntimeRequirement describing the runtime
        """
        name = name or Path(binary).name
        path = self._locate(binary)

        info = self._probe(path) if path is not None else None
        if info is None:
            return RuntimeRequirement(
                binary=path or Path(binary),
                version=parse_version(None),
                name=name,
                satisfied=False,
                optional=optional,
                recommended=recommended,
                language=self.language,
            )

        pkg_config = info.get("pkg_config_path")
        if pkg_config and not Path(pkg_config).is_dir():
            pkg_config = None

        return RuntimeRequirement(
            binary=path,
            version=parse_version(info.get("version")),
            name=name,
            satisfied=True,
            optional=optional,
            recommended=recommended,
            from_system_install=self.is_system_install(path),
            include_dir=info.get("include_dir"),
            pkg_config_path=pkg_config,
            language=self.language,
        )

    def discover(self, commands: Optional[Iterable[str]] = None) -> List[RuntimeRequirement]:
        """Resolve every system command found on PATH.

        Args:
            commands: Commands to try (defaults to the language's system commands)

        Returns:
            Requirements for the commands that exist, in the order tried
        """
        requirements = []
        for cmd in commands or self.spec.system_commands:
            if shutil.which(cmd) is None:
                continue
            requirements.append(self.resolve_requirement(cmd, name=cmd))
        return requirements

    def is_system_install(self, binary: Path) -> bool:
        """Whether ``binary`` is a runtime shipped with the operating system."""
        binary_str = str(binary)
        return any(
            binary_str == prefix or binary_str.startswith(prefix.rstrip("/") + "/")
            for prefix in self.spec.system_prefixes
        )

    def _locate(self, binary: Union[str, Path]) -> Optional[Path]:
        candidate = Path(binary).expanduser()
        if candidate.is_absolute() or len(candidate.parts) > 1:
            return candidate if candidate.exists() else None

        found = shutil.which(str(binary))
        return Path(found) if found else None

    def _probe(self, executable: Path) -> Optional[Dict[str, Any]]:
        """Ask the runtime to describe itself."""
        probe = self.spec.probe

        try:
            result = subprocess.run(
                [str(executable)] + probe.args,
                capture_output=True,
                text=True,
                timeout=probe.timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"Probing {executable} failed: {e}")
            return None

        if result.returncode != 0:
            logger.debug(
                f"Probing {executable} exited with {result.returncode}: "
                f"{result.stderr.strip()}"
            )
            return None

        try:
            info = json.loads(result.stdout.strip().splitlines()[-1])
        except (IndexError, ValueError) as e:
            logger.debug(f"Unreadable probe output from {executable}: {e}")
            return None

        if not isinstance(info, dict) or not info.get("version"):
            return None
        return info
