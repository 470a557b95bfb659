# dotstow - GNU Stow driver for dotfiles repositories
# Copyright (C) 2025 The dotstow authors
# SPDX-License-Identifier: GPL-3.0-or-later

"""
dotstow - restow a dotfiles repository with GNU Stow

A dotfiles repository keeps portable packages at its root and
machine-specific packages under ``hosts/<hostname>/``. dotstow finds them
and runs ``stow --restow`` once per package, so a conflict in one package
does not stop the rest from being linked.

Basic usage::

    from dotstow import stow_base, stow_host

    # Link every base package into $HOME
    report = stow_base(dir="/home/me/dotfiles")
    if report.failed:
        print("Not stowed:", [p.name for p in report.failed])

    # Link the packages of this machine (hosts/<hostname>)
    stow_host(dir="/home/me/dotfiles")

    # Preview another machine's packages without touching the filesystem
    stow_host("nexus-unbound", dir="/home/me/dotfiles", dry_run=True)

Discovery on its own::

    from dotstow import discover_base, discover_host

    for package in discover_host("/home/me/dotfiles", "nexus-unbound"):
        print(package.name, package.location)
"""

from dotstow.discover import discover_base, discover_host
from dotstow.linker import StowLinker, require_stow
from dotstow.stow import stow_base, stow_host, run
from dotstow.types import (
    Mode,
    Outcome,
    Package,
    OperationResult,
    RunReport,
    DotstowConfig,
    DotstowError,
    DotstowCLIError,
    MissingDependencyError,
    HostNotFoundError,
    EmptyDiscoveryError,
    AllPackagesFailedError,
)
from dotstow.util import VERSION as __version__

# CLI entry point
from dotstow.cli import main

__all__ = [
    "discover_base",
    "discover_host",
    "StowLinker",
    "require_stow",
    "stow_base",
    "stow_host",
    "run",
    "Mode",
    "Outcome",
    "Package",
    "OperationResult",
    "RunReport",
    "DotstowConfig",
    "DotstowError",
    "DotstowCLIError",
    "MissingDependencyError",
    "HostNotFoundError",
    "EmptyDiscoveryError",
    "AllPackagesFailedError",
    "__version__",
    "main",
]
