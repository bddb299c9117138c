"""
Snapshot repository service for pkgsnap.

Owns the git working directory that mirrors the package directory:
creates it on first use and commits only when something changed.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..infra.git_client import GitClient, GitCommit, VersionControlClient

logger = logging.getLogger(__name__)

AUTHOR_NAME = "pkgsnap"
AUTHOR_EMAIL = "pkgsnap@localhost"
INITIAL_COMMIT_MESSAGE = "Initial commit: existing packages"

# Byte-compiled files, editor backups, downloaded archive indexes, keyring
IGNORE_PATTERNS = ("*.elc", "*~", "archives/", "gnupg/")


@dataclass
class RepositoryStatus:
    """Current state of the snapshot repository."""
    path: str
    initialized: bool = False
    dirty: bool = False
    pending: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'initialized': self.initialized,
            'dirty': self.dirty,
            'pending': self.pending,
        }


class SnapshotRepository:
    """
    A package directory tracked by git.

    Example:
        repo = SnapshotRepository("~/.pkgsnap/packages")
        repo.commit_if_dirty("Install: foo")
    """

    def __init__(
        self,
        root: Union[str, Path],
        git_client: Optional[VersionControlClient] = None
    ):
        """
        Initialize SnapshotRepository.

        Args:
            root: Package directory to track
            git_client: Version control client (creates GitClient if None)
        """
        self.root = Path(root).expanduser()
        self.git = git_client or GitClient()

    @property
    def ignore_file(self) -> Path:
        return self.root / ".gitignore"

    def ensure_repository(self) -> bool:
        """
        Initialize the repository if it does not exist yet.

        Packages already present in the directory are captured in an
        initial commit. Calling this on an initialized directory does
        nothing.

        Returns:
            True if the repository was created by this call
        """
        if self.git.is_repo(self.root):
            return False

        had_entries = self.root.is_dir() and any(self.root.iterdir())

        logger.info(f"Initializing package snapshots in {self.root}")
        self.root.mkdir(parents=True, exist_ok=True)
        self.git.init(self.root)
        self.git.set_identity(self.root, AUTHOR_NAME, AUTHOR_EMAIL)
        self.ignore_file.write_text("\n".join(IGNORE_PATTERNS) + "\n")

        if had_entries:
            self.git.stage_all(self.root)
            self.git.commit(self.root, INITIAL_COMMIT_MESSAGE)
            logger.info(INITIAL_COMMIT_MESSAGE)

        return True

    def commit_if_dirty(self, message: str) -> bool:
        """
        Stage everything and commit, but only if there are pending changes.

        Args:
            message: Commit message, used verbatim

        Returns:
            True if a commit was made
        """
        self.ensure_repository()

        if not self.git.is_dirty(self.root):
            logger.debug(f"Nothing to commit for '{message}'")
            return False

        self.git.stage_all(self.root)
        self.git.commit(self.root, message)
        logger.info(f"Committed: {message}")
        return True

    def status(self) -> RepositoryStatus:
        """Report whether the repository exists and what is pending."""
        result = RepositoryStatus(path=str(self.root))
        if not self.git.is_repo(self.root):
            return result

        pending = self.git.pending_changes(self.root)
        return RepositoryStatus(
            path=str(self.root),
            initialized=True,
            dirty=bool(pending),
            pending=len(pending)
        )

    def history(self, limit: int = 20) -> List[GitCommit]:
        """Recent snapshots, newest first."""
        if not self.git.is_repo(self.root):
            return []
        return self.git.log(self.root, limit=limit)
