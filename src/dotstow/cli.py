# dotstow - GNU Stow driver for dotfiles repositories
# Copyright (C) 2025 The dotstow authors
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Command-line interface for dotstow.

This module contains the CLI functions including argument parsing,
.dotstowrc handling, and the main entry point.
"""

from __future__ import annotations

import os
import re
import shlex
import sys
from typing import Sequence

from dotstow.linker import StowLinker, require_stow
from dotstow.stow import stow_base, stow_host
from dotstow.types import DotstowError, DotstowCLIError, DotstowConfig
from dotstow.util import (
    VERSION,
    PROGRAM_NAME,
    debug,
    home_directory,
    set_debug_level,
)

RC_FILE = ".dotstowrc"
MAX_VERBOSITY = 3


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point for the dotstow command."""
    try:
        _main(sys.argv[1:] if argv is None else list(argv))
    except DotstowCLIError as e:
        print(e.message, file=sys.stderr)
        sys.exit(e.errno)
    except DotstowError as e:
        print(f"{PROGRAM_NAME}: ERROR: {e.message}", file=sys.stderr)
        sys.exit(e.errno)


def _main(args: list[str]) -> None:
    """Main implementation (can raise DotstowError)."""
    command, hostname, options = process_options(args)

    # Stow must be present before paths are validated or anything discovered
    linker = StowLinker(require_stow(options["stow"]))
    sanitize_path_options(options)

    config = DotstowConfig(
        dir=options["dir"],
        target=options["target"],
        dry_run=options.get("dry_run", False),
        verbose=options.get("verbose", 0),
        stow=options["stow"],
    )
    debug(3, f"repo root is {config.dir}")
    debug(3, f"target is {config.target}")

    match command:
        case "base":
            stow_base(config, linker)
        case "host":
            stow_host(hostname, config, linker)


def process_options(args: Sequence[str]) -> tuple[str, str | None, dict]:
    """Parse and merge command line and .dotstowrc options.

    Paths are left unvalidated; see sanitize_path_options().

    Returns: (command, hostname, options)
    """
    command, hostname, cli_options = parse_cli_options(args)
    set_debug_level(cli_options.get("verbose", 0))
    rc_options = get_config_file_options()

    # Command line options win over .dotstowrc
    options = dict(rc_options)
    options.update(cli_options)
    options.setdefault("stow", os.environ.get("STOW") or "stow")

    set_debug_level(options.get("verbose", 0))
    return (command, hostname, options)


def parse_cli_options(args: Sequence[str]) -> tuple[str, str | None, dict]:
    """Parse the command line.

    The first argument is the command; options and, for ``host``, an
    optional hostname follow it.

    Returns: (command, hostname, options)
    """
    if not args:
        show_usage_and_exit(exit_code=1)

    command = args[0]
    match command:
        case "help" | "--help" | "-h":
            show_usage_and_exit()
        case "-V" | "--version":
            show_version_and_exit()
        case "base" | "host":
            pass
        case _:
            show_usage_and_exit(f"Error: unknown command '{command}'")

    options: dict = {}
    positionals = parse_option_args(args[1:], options, f"{command} command")

    hostname = None
    if command == "host" and positionals:
        hostname = positionals.pop(0)
    if positionals:
        raise DotstowCLIError(f"Error: unexpected argument '{positionals[0]}'")

    return (command, hostname, options)


def parse_option_args(args: Sequence[str], options: dict, context: str) -> list[str]:
    """Parse option arguments into options, returning the positional ones.

    context names the command (or rc file) for error messages.
    """
    positionals: list[str] = []

    i = 0
    while i < len(args):
        arg = args[i]

        # Options with values
        if arg in ("-t", "--target", "-d", "--dir", "--stow"):
            if i + 1 >= len(args):
                raise DotstowCLIError(f"Error: option '{arg}' requires an argument")
            i += 1
            options[_value_option_key(arg)] = args[i]
        elif arg.startswith(("--target=", "--dir=", "--stow=")):
            name, value = arg[2:].split("=", 1)
            options[name] = value

        # Verbose option with optional value
        elif arg in ("-v", "--verbose"):
            options["verbose"] = min(options.get("verbose", 0) + 1, MAX_VERBOSITY)
        elif arg.startswith("--verbose="):
            try:
                options["verbose"] = min(int(arg[10:]), MAX_VERBOSITY)
            except ValueError:
                raise DotstowCLIError(
                    f"Error: invalid verbosity '{arg[10:]}' for {context}"
                )

        elif arg in ("-n", "--dry-run"):
            options["dry_run"] = True

        elif arg in ("-h", "--help"):
            show_usage_and_exit()
        elif arg in ("-V", "--version"):
            show_version_and_exit()

        elif arg.startswith("--") or arg == "-":
            raise DotstowCLIError(f"Error: unknown option '{arg}' for {context}")
        elif arg.startswith("-"):
            # Bundled short options: -nv is parsed as -n -v
            _parse_bundled_options(arg, options, context)
        else:
            positionals.append(arg)

        i += 1

    return positionals


def _value_option_key(arg: str) -> str:
    match arg:
        case "-t" | "--target":
            return "target"
        case "-d" | "--dir":
            return "dir"
        case _:
            return "stow"


def _parse_bundled_options(arg: str, options: dict, context: str) -> None:
    """Parse bundled short options like -nv or -nt/some/dir."""
    chars = arg[1:]
    for i, char in enumerate(chars):
        rest = chars[i + 1:]
        match char:
            case "n":
                options["dry_run"] = True
            case "v":
                options["verbose"] = min(options.get("verbose", 0) + 1, MAX_VERBOSITY)
            case "h":
                show_usage_and_exit()
            case "V":
                show_version_and_exit()
            case "d" | "t" if rest:
                options["dir" if char == "d" else "target"] = rest
                return
            case "d" | "t":
                raise DotstowCLIError(f"Error: option '-{char}' requires an argument")
            case _:
                raise DotstowCLIError(f"Error: unknown option '{arg}' for {context}")


def sanitize_path_options(options: dict) -> None:
    """Validate --dir and --target, defaulting them to $DOTSTOW_DIR (or the
    current directory) and the home directory."""
    repo = options.get("dir") or os.environ.get("DOTSTOW_DIR") or os.getcwd()
    options["dir"] = _require_dir(repo, "--dir")
    target = options.get("target")
    options["target"] = _require_dir(target, "--target") if target else home_directory()


def _require_dir(path: str, option: str) -> str:
    if not os.path.isdir(path):
        raise DotstowCLIError(
            f"{PROGRAM_NAME}: {option} value '{path}' is not a valid directory"
        )
    return os.path.abspath(path)


def rc_file_paths() -> list[str]:
    """~/.dotstowrc, then ./.dotstowrc; later files override earlier ones."""
    paths: list[str] = []
    for path in (os.path.join(home_directory(), RC_FILE), RC_FILE):
        if os.path.realpath(path) not in map(os.path.realpath, paths):
            paths.append(path)
    return paths


def get_config_file_options() -> dict:
    """Collect option defaults from the .dotstowrc files."""
    tokens: list[str] = []
    for file_path in rc_file_paths():
        try:
            with open(file_path) as f:
                debug(3, f"Loading defaults from {file_path}")
                for line in f:
                    try:
                        tokens += shlex.split(line, comments=True)
                    except ValueError:
                        tokens += line.split()
        except (FileNotFoundError, PermissionError):
            continue
        except IsADirectoryError:
            raise DotstowCLIError(f"Could not open {file_path} for reading")

    rc_options: dict = {}
    stray = parse_option_args(tokens, rc_options, RC_FILE)
    if stray:
        raise DotstowCLIError(f"Error: unexpected argument '{stray[0]}' in {RC_FILE}")

    for key in ("dir", "target"):
        if key in rc_options:
            rc_options[key] = expand_filepath(rc_options[key], f"--{key} option")
    return rc_options


_ENV_REFERENCE = re.compile(r"(?<!\\)\$(?:\{([^}]+)\}|(\w+))")


def expand_filepath(path: str, source: str) -> str:
    """Expand $VAR, ${VAR}, ~ and ~user in a path read from an rc file.

    \\$ and a leading \\~ are kept literally.
    """

    def lookup(match):
        name = match.group(1) or match.group(2)
        if name not in os.environ:
            raise DotstowCLIError(
                f"{source} references undefined environment variable ${name}; aborting!"
            )
        return os.environ[name]

    path = _ENV_REFERENCE.sub(lookup, path).replace("\\$", "$")
    if path.startswith("\\~"):
        return path[1:]
    if path == "~" or path.startswith("~/"):
        return home_directory() + path[1:]
    return os.path.expanduser(path)


def show_usage_and_exit(msg: str | None = None, exit_code: int | None = None) -> None:
    """Print program usage message and exit.

    Usage goes to stdout when asked for, to stderr on misuse.
    """
    if exit_code is None:
        exit_code = 1 if msg else 0
    out = sys.stdout if exit_code == 0 else sys.stderr

    if msg:
        print(msg, file=sys.stderr)

    print(f"""Usage: {PROGRAM_NAME} <command> [options]

Commands:
  base                  Stow all base packages
  host [hostname]       Stow host-specific packages (default: current hostname)
  help                  Show this help message

Options:
  -n, --dry-run         Show what would be stowed without making changes
  -t DIR, --target=DIR  Set target to DIR (default is your home directory)
  -d DIR, --dir=DIR     Set the dotfiles repository to DIR
                        (default is $DOTSTOW_DIR, else the current directory)
  --stow=PROGRAM        Use PROGRAM as the stow executable (default: stow)
  -v, --verbose[=N]     Increase verbosity (levels are from 0 to {MAX_VERBOSITY})
  -V, --version         Show {PROGRAM_NAME} version number

Options are also read from ~/{RC_FILE} and ./{RC_FILE}.

Examples:
  {PROGRAM_NAME} base
  {PROGRAM_NAME} base -n
  {PROGRAM_NAME} host
  {PROGRAM_NAME} host nexus-unbound""", file=out)

    sys.exit(exit_code)


def show_version_and_exit() -> None:
    """Print version and exit."""
    print(f"{PROGRAM_NAME} version {VERSION}")
    sys.exit(0)


if __name__ == "__main__":
    main()
