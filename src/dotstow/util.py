# dotstow - GNU Stow driver for dotfiles repositories
# Copyright (C) 2025 The dotstow authors
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Utility functions for dotstow.

This module contains general-purpose helpers used throughout dotstow:
verbosity-controlled diagnostics, user-facing output and lookups of the
current host and home directory.
"""

from __future__ import annotations

import os
import pwd
import socket
import sys

VERSION = "0.3.0"
PROGRAM_NAME = "dotstow"

# Debug level is module-level state, set once from --verbose
_debug_level = 0


def set_debug_level(level: int) -> None:
    """Set verbosity level for debug()."""
    global _debug_level
    _debug_level = level


def debug(level: int, msg: str) -> None:
    """
    Log to STDERR based on debug_level setting.

    Verbosity rules:
        0: errors and warnings only
        >= 1: print each stow command before running it
        >= 2: print discovery decisions (excluded and empty packages)
        >= 3: print resolved configuration and rc files read
    """
    if _debug_level >= level:
        print(msg, file=sys.stderr)


def info(msg: str) -> None:
    """Print progress for the user."""
    print(msg, flush=True)


def warn(msg: str) -> None:
    print(f"Warning: {msg}", file=sys.stderr, flush=True)


def current_hostname() -> str:
    """Return the short network name of this machine, like hostname(1)."""
    return socket.gethostname()


def get_homedir_from_passwd(username: str | None = None) -> str | None:
    try:
        if username is not None:
            return pwd.getpwnam(username).pw_dir
        return pwd.getpwuid(os.getuid()).pw_dir
    except KeyError:
        return None


def home_directory() -> str:
    """Return the invoking user's home directory."""
    home = (
        os.environ.get("HOME")
        or os.environ.get("LOGDIR")
        or get_homedir_from_passwd()
    )
    if not home:
        # pwd lookups can fail inside minimal containers
        return os.path.expanduser("~")
    return home
