"""Command line entry point for Cellar.

Runs a build command once per eligible runtime declared in ``.cellar.toml``,
with the environment scoped to that runtime:

    cellar -- python setup.py install --prefix="$PREFIX"

Without a command, prints the runtime that would be selected first.
"""

from __future__ import annotations

import argparse
import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

from .config import FormulaRequirements, load_config
from .runtime import (
    ConfigurationError,
    RuntimeSelector,
    SelectionOptions,
)

EXIT_NO_RUNTIME = 1
EXIT_CONFIGURATION = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cellar",
        description="Run a build command once per declared language runtime",
    )
    parser.add_argument(
        "--project",
        type=Path,
        default=Path(os.environ.get("CELLAR_PROJECT_PATH", os.getcwd())),
        help="Formula project directory holding .cellar.toml (default: cwd)",
    )
    parser.add_argument(
        "--prefix",
        type=Path,
        help="Installation prefix (default: formula.prefix from .cellar.toml)",
    )
    parser.add_argument(
        "--allow-major",
        type=int,
        action="append",
        dest="allowed_major_versions",
        metavar="N",
        help="Allowed major version; repeat for several (default: from config)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("command", nargs=argparse.REMAINDER, help="Build command to run")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="cellar: %(message)s",
    )

    command = list(args.command)
    if command and command[0] == "--":
        command = command[1:]

    try:
        config = load_config(args.project.resolve())
        selector = RuntimeSelector(
            FormulaRequirements(config),
            prefix=args.prefix or config.prefix,
            build=config.build,
            language=config.formula.language,
        )
        if args.allowed_major_versions:
            options = SelectionOptions.from_iterable(args.allowed_major_versions)
        else:
            options = config.selection_options()

        if not command:
            return _show(selector, options)
        return _run(selector, options, command)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIGURATION


def _show(selector: RuntimeSelector, options: SelectionOptions) -> int:
    runtime = selector.select(options)
    if runtime is None:
        print("No eligible runtime", file=sys.stderr)
        return EXIT_NO_RUNTIME

    print(f"binary: {runtime.binary}")
    print(f"version: {runtime.version}")
    print(f"site-packages: {runtime.site_packages_dir}")
    print(f"private site-packages: {runtime.private_site_packages_dir}")
    return 0


def _run(selector: RuntimeSelector, options: SelectionOptions, command: List[str]) -> int:
    def step() -> int:
        active = selector.select(options)
        print(f"==> {' '.join(command)} ({active.binary if active else '?'})", file=sys.stderr)
        return subprocess.run(command, check=True).returncode

    try:
        results = selector.run(step, options)
    except subprocess.CalledProcessError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.returncode
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 127

    if results is None:
        print("No eligible runtime", file=sys.stderr)
        return EXIT_NO_RUNTIME
    return 0


if __name__ == "__main__":
    sys.exit(main())
