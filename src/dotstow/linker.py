# dotstow - GNU Stow driver for dotfiles repositories
# Copyright (C) 2025 The dotstow authors
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Invocation of the external stow program.

All filesystem mutation happens inside stow. The orchestrator only talks
to a Linker, so tests can substitute a recording fake.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from typing import Protocol

from dotstow.types import MissingDependencyError
from dotstow.util import debug

# Exit status used when the stow program could not be started at all
EXEC_FAILURE_STATUS = 127


class Linker(Protocol):
    def invoke(
        self,
        source_dir: str,
        package: str,
        target: str,
        restow: bool = True,
        dry_run: bool = False,
    ) -> int: ...


def build_stow_args(
    executable: str,
    source_dir: str,
    package: str,
    target: str,
    restow: bool = True,
    dry_run: bool = False,
) -> list[str]:
    """Build the stow command line for one package.

    Stow does not accept slashes in package names, so the package's
    containing directory is always passed with -d.
    """
    args = [executable, "-d", source_dir, "-t", target]
    if restow:
        args.append("--restow")
    if dry_run:
        args.append("-n")
    args.append(package)
    return args


def require_stow(executable: str = "stow") -> str:
    """Resolve the stow executable, raising MissingDependencyError if absent."""
    if os.sep in executable:
        found = executable if os.access(executable, os.X_OK) else None
    else:
        found = shutil.which(executable)

    if not found or os.path.isdir(found):
        raise MissingDependencyError(
            f"{executable} is required but not installed. "
            "Please install it and retry."
        )
    debug(3, f"Using stow at {found}")
    return found


class StowLinker:
    """Runs stow as a blocking subprocess, sharing our stdout and stderr."""

    def __init__(self, executable: str = "stow"):
        self.executable = executable

    def invoke(
        self,
        source_dir: str,
        package: str,
        target: str,
        restow: bool = True,
        dry_run: bool = False,
    ) -> int:
        args = build_stow_args(
            self.executable, source_dir, package, target, restow, dry_run
        )
        debug(1, "Running: " + " ".join(args))
        try:
            return subprocess.run(args, check=False).returncode
        except OSError as e:
            print(f"Cannot run {self.executable}: {e}", file=sys.stderr)
            return EXEC_FAILURE_STATUS
