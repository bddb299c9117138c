"""
Shared fixtures for pkgsnap tests.

FakeGitClient stands in for git so the commit coordination logic can be
tested without a binary. Tests marked with ``requires_git`` run against
the real one and are skipped when it is missing.
"""

import os
import shutil
from pathlib import Path

import pytest

from pkgsnap.hooks import PackageHost, batched, tracked
from pkgsnap.domain.mutation import Operation
from pkgsnap.exit_codes import GitCommandError
from pkgsnap.services.recorder import MENU_BATCH_LABEL, UPGRADE_BATCH_LABEL


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


class FakeGitClient:
    """
    In-memory VersionControlClient.

    The working tree is dirty after ``init`` (the ignore file is new) and
    after ``touch``; a commit makes it clean again. ``fail_init`` and
    ``fail_commit`` make those commands raise like a failing git would.
    """

    def __init__(self, available=True, fail_init=False, fail_commit=False):
        self.available = available
        self.fail_init = fail_init
        self.fail_commit = fail_commit
        self.repos = set()
        self.dirty = False
        self.staged = False
        self.commits = []
        self.identity = None
        self.calls = []

    def touch(self):
        """Simulate the host changing a package file."""
        self.dirty = True

    @property
    def messages(self):
        return [message for _, message in self.commits]

    def version(self):
        self.calls.append('version')
        return "git version 2.43.0" if self.available else None

    def is_repo(self, path):
        return str(path) in self.repos

    def init(self, path):
        self.calls.append('init')
        if self.fail_init:
            raise GitCommandError(["git", "init"], 128, "fatal: cannot mkdir .git")
        self.repos.add(str(path))
        self.dirty = True

    def set_identity(self, path, name, email):
        self.identity = (name, email)

    def pending_changes(self, path):
        return ['?? .gitignore'] if self.dirty else []

    def is_dirty(self, path):
        return bool(self.pending_changes(path))

    def stage_all(self, path):
        self.staged = True

    def commit(self, path, message):
        assert self.staged, "commit without stage_all"
        if self.fail_commit:
            raise GitCommandError(["git", "commit", "-q", "-m", message], 1, "error: unable to write new index file")
        self.commits.append((str(path), message))
        self.dirty = False
        self.staged = False

    def log(self, path, limit=20):
        return []


class FakePackageManager(PackageHost):
    """A package manager that keeps installed package names in a set."""

    def __init__(self, git=None):
        super().__init__()
        self.git = git
        self.installed = set()
        self.outdated = []

    def _changed(self):
        if self.git is not None:
            self.git.touch()

    @tracked(Operation.INSTALL)
    def install(self, name):
        self.installed.add(name)
        self._changed()

    @tracked(Operation.DELETE)
    def delete(self, name):
        if name not in self.installed:
            raise KeyError(name)
        self.installed.discard(name)
        self._changed()

    @tracked(Operation.UPGRADE)
    def upgrade(self, name):
        self._changed()

    @batched(UPGRADE_BATCH_LABEL)
    def upgrade_all(self):
        for name in self.outdated:
            self.upgrade(name)
        return list(self.outdated)

    @batched(MENU_BATCH_LABEL)
    def menu_execute(self, installs=(), deletes=()):
        for name in installs:
            self.install(name)
        for name in deletes:
            self.delete(name)


@pytest.fixture
def fake_git():
    return FakeGitClient()


@pytest.fixture
def package_dir(tmp_path):
    return tmp_path / "packages"


@pytest.fixture
def config(package_dir):
    return {
        "general": {
            "package_directory": str(package_dir),
            "auto_commit": True,
        },
        "logging": {"level": "INFO"},
    }


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Point HOME at a temp directory and clear PKGSNAP_* overrides."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    for key in list(os.environ):
        if key.startswith("PKGSNAP_"):
            monkeypatch.delenv(key)
    return home_dir


def git_messages(path: Path):
    """Commit subjects of a real repository, oldest first."""
    import subprocess
    result = subprocess.run(
        ["git", "log", "--reverse", "--format=%s"],
        cwd=path, capture_output=True, text=True
    )
    if result.returncode != 0:
        return []
    return [line for line in result.stdout.splitlines() if line]
