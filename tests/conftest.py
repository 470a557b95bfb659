"""
Pytest configuration for dotstow tests.

Unit tests drive the orchestrator through a recording linker. CLI tests
run a fake stow shell script so that no real symlinks are created.
Integration tests use the real GNU Stow and are skipped without it.
"""

from __future__ import annotations

import os
import shutil
import stat

import pytest

from dotstow.util import set_debug_level

STOW = shutil.which("stow")

requires_stow = pytest.mark.skipif(STOW is None, reason="GNU Stow not found")

FAKE_STOW_SCRIPT = """\
#!/bin/sh
echo "$*" >> "$FAKE_STOW_LOG"
for last; do :; done
case " $FAKE_STOW_FAIL " in
  *" $last "*) echo "conflict in $last" >&2; exit 1 ;;
esac
exit 0
"""


class RepoTestEnv:
    """A dotfiles repository and a target directory under tmpdir."""

    def __init__(self, tmpdir):
        self.tmpdir = str(tmpdir)
        self.repo_dir = os.path.join(self.tmpdir, "dotfiles")
        self.target_dir = os.path.join(self.tmpdir, "home")
        os.makedirs(self.repo_dir)
        os.makedirs(self.target_dir)

    def create_package(self, name, files, host=None):
        """
        Create a package in the repository, under hosts/<host> if given.

        files: dict mapping relative paths to content (or None for directories)
        """
        if host is None:
            pkg_dir = os.path.join(self.repo_dir, name)
        else:
            pkg_dir = os.path.join(self.repo_dir, "hosts", host, name)
        os.makedirs(pkg_dir, exist_ok=True)

        for path, content in files.items():
            full_path = os.path.join(pkg_dir, path)
            if content is None:
                os.makedirs(full_path, exist_ok=True)
            else:
                os.makedirs(os.path.dirname(full_path), exist_ok=True)
                with open(full_path, "w") as f:
                    f.write(content)
        return pkg_dir

    def create_dir(self, path):
        """Create a directory relative to the repository root."""
        full_path = os.path.join(self.repo_dir, path)
        os.makedirs(full_path, exist_ok=True)
        return full_path

    def create_target_file(self, path, content):
        """Create a plain file in the target directory."""
        full_path = os.path.join(self.target_dir, path)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "w") as f:
            f.write(content)

    def get_target_state(self):
        """
        Get a snapshot of the target directory.

        Returns a dict mapping relative paths to ('dir',), ('file', content)
        or ('link', destination).
        """
        state = {}
        for root, dirs, files in os.walk(self.target_dir, followlinks=False):
            for name in dirs + files:
                full_path = os.path.join(root, name)
                path = os.path.relpath(full_path, self.target_dir)
                if os.path.islink(full_path):
                    state[path] = ("link", os.readlink(full_path))
                elif os.path.isdir(full_path):
                    state[path] = ("dir",)
                else:
                    with open(full_path) as fh:
                        state[path] = ("file", fh.read())
        return state


class RecordingLinker:
    """Linker that records each invocation instead of running stow.

    statuses maps package names to the exit status to return (default 0).
    """

    def __init__(self, statuses=None):
        self.statuses = dict(statuses or {})
        self.calls = []

    def invoke(self, source_dir, package, target, restow=True, dry_run=False):
        self.calls.append(
            dict(
                source_dir=source_dir,
                package=package,
                target=target,
                restow=restow,
                dry_run=dry_run,
            )
        )
        return self.statuses.get(package, 0)

    @property
    def packages(self):
        return [call["package"] for call in self.calls]


@pytest.fixture(autouse=True)
def reset_debug_level():
    yield
    set_debug_level(0)


@pytest.fixture
def repo_env(tmp_path, monkeypatch):
    """Fresh repository with HOME pointing at an empty target directory."""
    env = RepoTestEnv(tmp_path)
    monkeypatch.setenv("HOME", env.target_dir)
    monkeypatch.delenv("DOTSTOW_DIR", raising=False)
    monkeypatch.delenv("STOW", raising=False)
    monkeypatch.chdir(env.repo_dir)
    return env


@pytest.fixture
def fake_stow(tmp_path, monkeypatch):
    """Install a fake stow script and return the path of its call log.

    Packages listed in $FAKE_STOW_FAIL exit with status 1.
    """
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "stow"
    script.write_text(FAKE_STOW_SCRIPT)
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    log = tmp_path / "stow.log"
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    monkeypatch.setenv("FAKE_STOW_LOG", str(log))
    monkeypatch.setenv("FAKE_STOW_FAIL", "")
    return log


def read_calls(log):
    """Return the argument lines the fake stow was called with."""
    if not log.exists():
        return []
    return log.read_text().splitlines()
