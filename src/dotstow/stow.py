# dotstow - GNU Stow driver for dotfiles repositories
# Copyright (C) 2025 The dotstow authors
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Stow orchestration - restow every discovered package into the target.

This module provides the public API for stowing base and host packages.
Each package gets its own stow invocation so that one conflicting package
does not prevent the others from being linked.
"""

from __future__ import annotations

import dataclasses
from typing import Optional, Sequence

from dotstow.discover import discover_base, discover_host
from dotstow.linker import Linker, StowLinker, require_stow
from dotstow.types import (
    DotstowConfig,
    EmptyDiscoveryError,
    Mode,
    OperationResult,
    Outcome,
    Package,
    RunReport,
)
from dotstow.util import (
    current_hostname,
    debug,
    home_directory,
    info,
    set_debug_level,
    warn,
)


# =============================================================================
# Public API
# =============================================================================


def stow_base(
    config: DotstowConfig | None = None,
    linker: Linker | None = None,
    **kwargs,
) -> RunReport:
    """Restow all base packages of the repository.

    Args:
        config: Optional DotstowConfig for configuration
        linker: Stow invoker; the stow program from config by default
        **kwargs: Override config fields (dir, target, dry_run, etc.)

    Returns:
        RunReport with one OperationResult per package

    Raises:
        MissingDependencyError, EmptyDiscoveryError, AllPackagesFailedError
    """
    cfg = _make_config(config, **kwargs)
    set_debug_level(cfg.verbose)
    linker = _make_linker(cfg, linker)

    packages = discover_base(cfg.dir, cfg.hosts_dir)
    if not packages:
        raise EmptyDiscoveryError("No stow packages found.")

    info(f"Stowing base packages: {_names(packages)}")
    return _finish(run(Mode.BASE, packages, cfg, linker))


def stow_host(
    hostname: str | None = None,
    config: DotstowConfig | None = None,
    linker: Linker | None = None,
    **kwargs,
) -> RunReport:
    """Restow the packages of one host, the current machine by default.

    Args:
        hostname: Name of the directory under hosts/ to use
        config: Optional DotstowConfig for configuration
        linker: Stow invoker; the stow program from config by default
        **kwargs: Override config fields (dir, target, dry_run, etc.)

    Returns:
        RunReport with one OperationResult per package

    Raises:
        MissingDependencyError, HostNotFoundError, EmptyDiscoveryError,
        AllPackagesFailedError
    """
    cfg = _make_config(config, **kwargs)
    set_debug_level(cfg.verbose)
    linker = _make_linker(cfg, linker)
    hostname = hostname or current_hostname()

    packages = discover_host(cfg.dir, hostname, cfg.hosts_dir)
    if not packages:
        raise EmptyDiscoveryError(f"No valid host packages found for: {hostname}")

    info(f"Stowing host packages for '{hostname}': {_names(packages)}")
    return _finish(run(Mode.HOST, packages, cfg, linker))


def run(
    mode: Mode,
    packages: Sequence[Package],
    config: DotstowConfig,
    linker: Linker,
) -> RunReport:
    """Restow packages one at a time and collect the results.

    A package is stowed from the directory that contains it: the
    repository root for base packages, hosts/<hostname> for host
    packages. A failing package is reported and recorded; the remaining
    packages are still attempted.
    """
    target = config.target or home_directory()
    debug(3, f"Stowing {mode.value} packages into {target}")
    report = RunReport(mode=mode)

    if config.dry_run:
        info("Dry run: stow will not modify the filesystem.")

    for package in packages:
        info(f"  {package.name}")
        status = linker.invoke(
            package.location,
            package.name,
            target,
            restow=True,
            dry_run=config.dry_run,
        )
        if status == 0:
            outcome = Outcome.SUCCEEDED
        else:
            outcome = Outcome.FAILED
            warn(f"stow exited with status {status} for {package.path}")
        report.results.append(OperationResult(package, outcome, status))

    return report


# =============================================================================
# Helpers
# =============================================================================


def _finish(report: RunReport) -> RunReport:
    """Escalate if nothing could be stowed, otherwise print the summary."""
    report.check()
    if report.failed:
        warn(f"failed to stow: {_names(report.failed)}")
    else:
        info("Done.")
    return report


def _make_config(config: DotstowConfig | None, **kwargs) -> DotstowConfig:
    if config is None:
        return DotstowConfig(**kwargs)
    elif kwargs:
        return dataclasses.replace(config, **kwargs)
    else:
        return config


def _make_linker(config: DotstowConfig, linker: Optional[Linker]) -> Linker:
    if linker is not None:
        return linker
    return StowLinker(require_stow(config.stow))


def _names(packages: Sequence[Package]) -> str:
    return " ".join(p.name for p in packages)
