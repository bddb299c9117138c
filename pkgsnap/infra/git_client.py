"""
Git client infrastructure for pkgsnap.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to replace with a fake for testing
- Consistent in error handling
- Isolated from the commit coordination logic
"""

import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple, Union
import logging

from ..exit_codes import GitCommandError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class GitCommit:
    """A snapshot commit with metadata."""
    hash: str
    date: datetime
    author: str
    message: str

    def to_dict(self):
        return {
            'hash': self.hash,
            'date': self.date.isoformat(),
            'author': self.author,
            'message': self.message,
        }


class VersionControlClient(Protocol):
    """The operations the snapshot repository needs from version control."""

    def version(self) -> Optional[str]: ...

    def is_repo(self, path: PathLike) -> bool: ...

    def init(self, path: PathLike) -> None: ...

    def set_identity(self, path: PathLike, name: str, email: str) -> None: ...

    def pending_changes(self, path: PathLike) -> List[str]: ...

    def is_dirty(self, path: PathLike) -> bool: ...

    def stage_all(self, path: PathLike) -> None: ...

    def commit(self, path: PathLike, message: str) -> None: ...

    def log(self, path: PathLike, limit: int = 20) -> List[GitCommit]: ...


class GitClient:
    """
    Abstraction over git commands.

    Query methods (``version``, ``log``) return empty results when git
    fails. Methods that change the repository raise GitCommandError.

    Example:
        client = GitClient()
        if client.is_dirty("/path/to/packages"):
            client.stage_all("/path/to/packages")
            client.commit("/path/to/packages", "Install: foo")
    """

    def __init__(self, timeout: Optional[int] = None, executable: str = "git"):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (default: wait indefinitely)
            executable: git binary to run
        """
        self.timeout = timeout
        self.executable = executable

    def _run(
        self,
        args: Sequence[str],
        cwd: Optional[PathLike] = None,
        check: bool = False,
    ) -> Tuple[Optional[str], int]:
        """
        Run a git command.

        Args:
            args: Arguments after the git executable
            cwd: Working directory
            check: Raise GitCommandError on failure instead of returning it

        Returns:
            Tuple of (stdout, returncode)
        """
        cmd = [self.executable] + list(args)
        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd is not None else None,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            if check:
                raise GitCommandError(cmd, stderr=str(e)) from e
            logger.debug(f"Git command could not run: {' '.join(cmd)} - {e}")
            return None, -1

        if check and result.returncode != 0:
            logger.error(f"Git command failed: {' '.join(cmd)} - {result.stderr.strip()}")
            raise GitCommandError(cmd, result.returncode, result.stderr)

        return result.stdout, result.returncode

    def version(self) -> Optional[str]:
        """Return the output of ``git --version``, or None if git is unavailable."""
        output, code = self._run(["--version"])
        if code == 0 and output:
            return output.strip()
        return None

    def is_available(self) -> bool:
        return self.version() is not None

    def is_repo(self, path: PathLike) -> bool:
        """Check if path is the root of a git repository."""
        return (Path(path) / ".git").exists()

    def init(self, path: PathLike) -> None:
        self._run(["init"], cwd=path, check=True)

    def set_identity(self, path: PathLike, name: str, email: str) -> None:
        """Set the repository-local author name and email."""
        self._run(["config", "user.name", name], cwd=path, check=True)
        self._run(["config", "user.email", email], cwd=path, check=True)

    def pending_changes(self, path: PathLike) -> List[str]:
        """
        List untracked, modified and staged entries.

        Returns:
            One ``git status --porcelain`` line per pending entry
        """
        output, _ = self._run(["status", "--porcelain"], cwd=path, check=True)
        if not output:
            return []
        return [line for line in output.splitlines() if line.strip()]

    def is_dirty(self, path: PathLike) -> bool:
        return bool(self.pending_changes(path))

    def stage_all(self, path: PathLike) -> None:
        self._run(["add", "-A"], cwd=path, check=True)

    def commit(self, path: PathLike, message: str) -> None:
        self._run(["commit", "-q", "-m", message], cwd=path, check=True)

    def log(self, path: PathLike, limit: int = 20) -> List[GitCommit]:
        """
        Get snapshot history, newest first.

        Args:
            path: Path to git repository
            limit: Maximum commits to return

        Returns:
            List of GitCommit objects (empty if there are no commits yet)
        """
        output, code = self._run(
            ["log", "--format=%H|%aI|%an|%s", "-n", str(limit)],
            cwd=path
        )
        if code != 0 or not output:
            return []

        commits = []
        for line in output.strip().split('\n'):
            if not line or '|' not in line:
                continue

            parts = line.split('|', 3)
            if len(parts) < 4:
                continue

            try:
                date = datetime.fromisoformat(parts[1].strip().replace('Z', '+00:00'))
                if date.tzinfo:
                    date = date.replace(tzinfo=None)
            except (ValueError, AttributeError):
                date = datetime.now()

            commits.append(GitCommit(
                hash=parts[0].strip(),
                date=date,
                author=parts[2].strip(),
                message=parts[3].strip()
            ))

        return commits
