# dotstow - GNU Stow driver for dotfiles repositories
# Copyright (C) 2025 The dotstow authors
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Package discovery.

A dotfiles repository holds base packages as immediate subdirectories of
its root and machine-specific packages under ``hosts/<hostname>/``::

    dotfiles/
        .git/
        scripts/
        shell/            base package "shell"
        git/              base package "git"
        hosts/
            laptop/
                hypr/     host package "hypr" for host "laptop"

Discovery only lists directories; it never looks inside them except to
check that a host package has something to link.
"""

from __future__ import annotations

import os

from dotstow.types import DotstowError, HostNotFoundError, Package
from dotstow.util import debug

SCRIPTS_DIR = "scripts"
VCS_PREFIX = ".git"


def discover_base(repo_root: str, hosts_dir: str = "hosts") -> list[Package]:
    """Return the base packages at the root of the repository.

    Every immediate subdirectory is a package except version-control
    metadata (anything named ``.git*``), the scripts directory and the
    hosts root. The result is sorted by name and may be empty.
    """
    packages = []
    for name in _child_dirs(repo_root):
        if _is_reserved(name, hosts_dir):
            debug(2, f"Skipping reserved directory {name}")
            continue
        packages.append(Package(name=name, location=repo_root))
    return packages


def discover_host(
    repo_root: str, hostname: str, hosts_dir: str = "hosts"
) -> list[Package]:
    """Return the packages under ``<hosts_dir>/<hostname>``.

    Raises HostNotFoundError if the host has no directory, or if hostname
    would point anywhere but directly under the hosts root. Packages whose
    tree contains no regular file are dropped, so an empty skeleton of
    directories is never handed to stow.
    """
    _check_hostname(hostname, hosts_dir)
    host_dir = host_directory(repo_root, hostname, hosts_dir)
    if not os.path.isdir(host_dir):
        raise HostNotFoundError(hostname, os.path.join(hosts_dir, hostname))

    packages = []
    for name in _child_dirs(host_dir):
        path = os.path.join(host_dir, name)
        if not contains_files(path):
            debug(2, f"Skipping {hosts_dir}/{hostname}/{name}: no files to link")
            continue
        packages.append(Package(name=name, location=host_dir))
    return packages


def host_directory(repo_root: str, hostname: str, hosts_dir: str = "hosts") -> str:
    return os.path.join(repo_root, hosts_dir, hostname)


def _check_hostname(hostname: str, hosts_dir: str) -> None:
    """A hostname must name a single directory directly under the hosts root."""
    if (
        not hostname
        or hostname in (os.curdir, os.pardir)
        or os.sep in hostname
        or (os.altsep and os.altsep in hostname)
    ):
        raise HostNotFoundError(hostname, os.path.join(hosts_dir, hostname))


def contains_files(path: str) -> bool:
    """Return True if the tree under path holds at least one regular file.

    Symlinks are neither counted nor followed.
    """
    try:
        entries = list(os.scandir(path))
    except OSError as e:
        debug(2, f"Cannot read directory {path} ({e})")
        return False

    subdirs = []
    for entry in entries:
        if entry.is_file(follow_symlinks=False):
            return True
        if entry.is_dir(follow_symlinks=False):
            subdirs.append(entry.path)

    return any(contains_files(subdir) for subdir in subdirs)


def _is_reserved(name: str, hosts_dir: str) -> bool:
    return name.startswith(VCS_PREFIX) or name in (SCRIPTS_DIR, hosts_dir)


def _child_dirs(path: str) -> list[str]:
    """Names of the real (non-symlink) subdirectories of path, sorted."""
    try:
        with os.scandir(path) as it:
            return sorted(
                entry.name for entry in it if entry.is_dir(follow_symlinks=False)
            )
    except OSError as e:
        raise DotstowError(f'Cannot read directory "{path}" ({e})') from e
