"""Runtime selection and scoped build-step execution.

A formula may declare several runtimes of one language (say Python 2.7 and
Python 3.11). :class:`RuntimeSelector` picks the eligible ones and runs a
build step once per runtime, each time with the environment pointing at that
runtime, so one formula can build bindings for every declared interpreter
without duplicating its install logic.

Runtimes are processed in ascending version order. Having the newest runtime
last allows steps such as ``2to3 --write .`` that rewrite the sources in
place for the later runtimes only.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Protocol, Sequence, TypeVar

from .environment import EnvironmentStore, ProcessEnvironment, append_path, prepend_path
from .errors import NoRuntimeRequirementsError
from .specs import RuntimeSpec, get_runtime_spec
from .types import RuntimeRequirement, ScopedRuntime, SelectionOptions

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequirementSource(Protocol):
    """Provides the runtime requirements a formula declared."""

    def list_runtime_requirements(self) -> Sequence[RuntimeRequirement]: ...


class BuildConfiguration(Protocol):
    """Build options chosen by the user (e.g. ``--without-python3``)."""

    def is_excluded(self, name: str) -> bool: ...


class _NothingExcluded:
    def is_excluded(self, name: str) -> bool:
        return False


@dataclass
class SelectionContext:
    """Tracks the runtime whose scope is currently open.

    Share one context between every selector in a call chain so a build step
    that selects again sees the runtime it is already running under.
    """

    active: Optional[ScopedRuntime] = None

    @property
    def is_active(self) -> bool:
        return self.active is not None


class RuntimeSelector:
    """Selects declared runtimes and runs build steps scoped to each one.

    Args:
        source: Where the declared runtime requirements come from
        prefix: Installation prefix of the formula being built
        build: Build configuration deciding which optional runtimes are skipped
        env: Environment to mutate during scoped runs (process env by default)
        context: Selection context shared by re-entrant calls
        language: Key into RUNTIME_SPECS
    """

    def __init__(
        self,
        source: RequirementSource,
        prefix: Path,
        build: Optional[BuildConfiguration] = None,
        env: Optional[EnvironmentStore] = None,
        context: Optional[SelectionContext] = None,
        language: str = "python",
    ):
        self.source = source
        self.prefix = Path(prefix)
        self.build = build or _NothingExcluded()
        self.env = env if env is not None else ProcessEnvironment()
        self.context = context if context is not None else SelectionContext()
        self.language = language
        self.spec: RuntimeSpec = get_runtime_spec(language)

    def select(self, options: Optional[SelectionOptions] = None) -> Optional[ScopedRuntime]:
        """Return the preferred eligible runtime without opening a scope.

        Inside a build step this returns the runtime the step runs under, or
        None if that runtime's major version is not allowed by ``options``.
        Outside a scope it returns the lowest eligible version.

        Raises:
            ConfigurationError: If no runtime requirement is declared at all
        """
        options = options or SelectionOptions()

        if self.context.is_active:
            return self._active_if_allowed(options)

        candidates = self._eligible(options)
        if not candidates:
            return None
        return self._scoped(candidates[0])

    def run(
        self,
        step: Callable[[], T],
        options: Optional[SelectionOptions] = None,
    ) -> Optional[List[T]]:
        """Run ``step`` once per eligible runtime, each in its own scope.

        Returns:
            The step's results in runtime order, or None if no runtime is
            eligible (so callers can fall back to an else-branch).

        Raises:
            ConfigurationError: If no runtime requirement is declared at all
            Exception: Whatever ``step`` raises, after the scope is cleaned up
        """
        options = options or SelectionOptions()

        if self.context.is_active:
            # Already inside a scope: reuse it instead of selecting again.
            if self._active_if_allowed(options) is None:
                return None
            return [step()]

        candidates = self._eligible(options)
        if not candidates:
            return None

        results: List[T] = []
        for requirement in candidates:
            runtime = self._scoped(requirement)
            with self.scope(runtime):
                results.append(step())
        return results

    @contextmanager
    def scope(self, runtime: ScopedRuntime) -> Iterator[ScopedRuntime]:
        """Point the environment at ``runtime`` for the duration of the block.

        The environment is restored and the previously active runtime put
        back on every exit path, including exceptions raised inside the block.
        """
        logger.debug(f"{self.spec.display_name} block ({runtime.binary})...")
        snapshot = self.env.snapshot()
        previous = self.context.active
        try:
            self._prepare(runtime)
            self.context.active = runtime
            yield runtime
        finally:
            self.context.active = previous
            self.env.restore(snapshot)
            self._remove_if_empty(runtime.private_site_packages_dir)

    def _active_if_allowed(self, options: SelectionOptions) -> Optional[ScopedRuntime]:
        active = self.context.active
        if active is not None and options.allows(active.version):
            return active
        return None

    def _eligible(self, options: SelectionOptions) -> List[RuntimeRequirement]:
        """Filter and sort the declared requirements."""
        requirements = list(self.source.list_runtime_requirements())
        if not requirements:
            raise NoRuntimeRequirementsError(self.language)

        selected: List[RuntimeRequirement] = []
        for req in requirements:
            # Several requirements may point at the same interpreter
            if any(kept.binary == req.binary for kept in selected):
                logger.debug(f"Skipping {req!r}: duplicate binary")
                continue
            if not req.satisfied:
                logger.debug(f"Skipping {req!r}: not satisfied")
                continue
            if not options.allows(req.version):
                logger.debug(f"Skipping {req!r}: major version not allowed")
                continue
            if (req.optional or req.recommended) and self.build.is_excluded(req.name):
                logger.debug(f"Skipping {req!r}: excluded by build options")
                continue
            selected.append(req)

        return sorted(selected, key=lambda r: r.version)

    def _scoped(self, requirement: RuntimeRequirement) -> ScopedRuntime:
        layout = self.spec.site_packages
        return ScopedRuntime(
            requirement=requirement,
            site_packages_dir=self.prefix / layout.public.format(xy=requirement.xy),
            private_site_packages_dir=self.prefix / layout.private.format(xy=requirement.xy),
        )

    def _prepare(self, runtime: ScopedRuntime) -> None:
        names = self.spec.env

        # Installing into the prefix needs the dirs to exist and be importable
        runtime.site_packages_dir.mkdir(parents=True, exist_ok=True)
        append_path(self.env, names.module_search_path, runtime.site_packages_dir)
        runtime.private_site_packages_dir.mkdir(parents=True, exist_ok=True)
        append_path(self.env, names.module_search_path, runtime.private_site_packages_dir)
        logger.debug(
            f"{names.module_search_path}={self.env.get(names.module_search_path)}"
        )

        self.env.set(names.binary, str(runtime.binary))
        if runtime.include_dir is not None:
            prepend_path(self.env, names.include_path, runtime.include_dir)
        if runtime.pkg_config_path is not None:
            prepend_path(self.env, names.pkg_config_path, runtime.pkg_config_path)
        if not runtime.from_system_install:
            prepend_path(self.env, names.executable_path, runtime.binary.parent)

    @staticmethod
    def _remove_if_empty(directory: Path) -> None:
        # Runs while a build step's error may be propagating; never replace it
        try:
            if directory.is_dir() and not any(directory.iterdir()):
                directory.rmdir()
        except OSError as e:
            logger.warning(f"Could not remove unused {directory}: {e}")

