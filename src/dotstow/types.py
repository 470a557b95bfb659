# dotstow - GNU Stow driver for dotfiles repositories
# Copyright (C) 2025 The dotstow authors
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Type definitions for dotstow.

This module contains the enums, dataclasses and exceptions shared by
discovery, the stow orchestrator and the command-line interface.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Mode(Enum):
    """Which set of packages a run operates on."""

    BASE = "base"
    HOST = "host"


class Outcome(Enum):
    """Per-package result of a stow invocation."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


# =============================================================================
# Exceptions
# =============================================================================


class DotstowError(Exception):
    """
    Base class for errors that abort a dotstow run.

    Attributes:
        message: Human-readable description printed to the user
        errno: Process exit status to use when the error reaches main()
    """

    def __init__(self, message: str, errno: int = 1):
        super().__init__(message)
        self.message = message
        self.errno = errno


class MissingDependencyError(DotstowError):
    """The stow executable could not be found."""


class HostNotFoundError(DotstowError):
    """There is no hosts/<hostname> directory for the requested host."""

    def __init__(self, hostname: str, host_dir: str):
        super().__init__(f"Host package directory not found: {host_dir}")
        self.hostname = hostname
        self.host_dir = host_dir


class EmptyDiscoveryError(DotstowError):
    """Discovery found no packages to stow."""


class AllPackagesFailedError(DotstowError):
    """Every attempted package failed to stow."""

    def __init__(self, failed: list[str]):
        super().__init__("all packages failed to stow")
        self.failed = failed


class DotstowCLIError(DotstowError):
    """Misuse of the command line or of an rc file. Printed verbatim."""


# =============================================================================
# Data structures
# =============================================================================


@dataclass(frozen=True)
class Package:
    """
    A directory whose contents are symlinked into the target directory.

    Attributes:
        name: Directory basename, passed to stow as the package identifier
        location: Directory containing the package (the stow directory)
        contains_files: True if the tree holds at least one regular file
    """

    name: str
    location: str
    contains_files: bool = True

    @property
    def path(self) -> str:
        return os.path.join(self.location, self.name)


@dataclass(frozen=True)
class OperationResult:
    """Outcome of linking a single package."""

    package: Package
    outcome: Outcome
    status: int = 0

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCEEDED


@dataclass
class RunReport:
    """
    Ordered results of one orchestrator run.

    The run as a whole fails only when every attempted package failed.
    """

    mode: Mode
    results: list[OperationResult] = field(default_factory=list)

    @property
    def attempted(self) -> list[Package]:
        return [r.package for r in self.results]

    @property
    def succeeded(self) -> list[Package]:
        return [r.package for r in self.results if r.ok]

    @property
    def failed(self) -> list[Package]:
        return [r.package for r in self.results if not r.ok]

    @property
    def all_failed(self) -> bool:
        return bool(self.results) and len(self.failed) == len(self.results)

    def check(self) -> None:
        """Raise AllPackagesFailedError if no package could be stowed."""
        if self.all_failed:
            raise AllPackagesFailedError([p.name for p in self.failed])

    def __bool__(self) -> bool:
        return not self.all_failed


@dataclass(frozen=True)
class DotstowConfig:
    """
    Options for a dotstow run.

    Attributes:
        dir: The dotfiles repository root
        target: The directory where symlinks are created (home by default)
        dry_run: Ask stow to simulate instead of touching the filesystem
        verbose: Verbosity level (0-3)
        stow: Name or path of the stow executable
        hosts_dir: Name of the directory holding per-host package sets
    """

    dir: str = "."
    target: Optional[str] = None
    dry_run: bool = False
    verbose: int = 0
    stow: str = "stow"
    hosts_dir: str = "hosts"
