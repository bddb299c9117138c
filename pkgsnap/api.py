"""
High-level Python API for pkgsnap.

Example:
    import pkgsnap

    host = MyPackageManager()          # a pkgsnap.PackageHost
    snap = pkgsnap.Snapshotter()       # uses config defaults
    snap.enable(host)

    host.install("foo")                # commit "Install: foo"
    host.upgrade_all()                 # commit "Package upgrade: a, b"

    snap.commit("Pin foo to 1.2")      # manual snapshot
    snap.disable(host)
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union
import logging

from .config import load_config
from .domain.mutation import Operation
from .exit_codes import ToolUnavailableError
from .hooks import PackageHost
from .infra.git_client import GitClient, GitCommit, VersionControlClient
from .services.recorder import ChangeRecorder
from .services.repository import RepositoryStatus, SnapshotRepository

logger = logging.getLogger(__name__)


class Snapshotter:
    """
    Snapshots a package directory whenever a host changes it.

    Subscribes to a PackageHost's hooks and forwards each notification
    to a ChangeRecorder, unless ``auto_commit`` is turned off.
    """

    def __init__(
        self,
        directory: Optional[Union[str, Path]] = None,
        config: Optional[Dict[str, Any]] = None,
        git_client: Optional[VersionControlClient] = None,
        auto_commit: Optional[bool] = None
    ):
        """
        Initialize Snapshotter.

        Args:
            directory: Package directory (overrides config)
            config: Full config dict (loads from file if None)
            git_client: Version control client (creates GitClient if None)
            auto_commit: Commit on every mutation (overrides config)
        """
        self._config = config if config is not None else load_config()
        general = self._config.get('general', {})

        self.directory = Path(
            directory or general.get('package_directory', '~/.pkgsnap/packages')
        ).expanduser().resolve()
        self.auto_commit = (
            general.get('auto_commit', True) if auto_commit is None else auto_commit
        )

        self.git = git_client or GitClient()
        self.repository = SnapshotRepository(self.directory, git_client=self.git)
        self.recorder = ChangeRecorder(self.repository)
        self._hosts: List[PackageHost] = []

    @property
    def config(self) -> Dict[str, Any]:
        return self._config

    @property
    def enabled(self) -> bool:
        return bool(self._hosts)

    # =========================================================================
    # ENTRY POINTS
    # =========================================================================

    def check_tool(self) -> str:
        """
        Make sure git can be run.

        Returns:
            The git version string

        Raises:
            ToolUnavailableError: If git is not installed
        """
        version = self.git.version()
        if version is None:
            logger.error("git is not available; package snapshots stay disabled")
            raise ToolUnavailableError()
        return version

    def enable(self, host: Optional[PackageHost] = None) -> List[str]:
        """
        Start snapshotting.

        Verifies git before touching anything, then creates and
        initializes the package directory and subscribes to the host.

        Args:
            host: Package manager to follow (None only prepares the repository)

        Returns:
            Names of the host entry points now being followed
        """
        version = self.check_tool()
        logger.debug(f"Using {version}")

        self.directory.mkdir(parents=True, exist_ok=True)
        self.repository.ensure_repository()

        if host is None:
            return []

        host.hooks.subscribe(self)
        if host not in self._hosts:
            self._hosts.append(host)
        operations = host.intercepted_operations()
        logger.debug(f"Following {', '.join(operations)}")
        return operations

    def disable(self, host: Optional[PackageHost] = None) -> None:
        """Stop following a host, or every host if None. Safe to repeat."""
        hosts = [host] if host is not None else list(self._hosts)
        for h in hosts:
            h.hooks.unsubscribe(self)
            if h in self._hosts:
                self._hosts.remove(h)

    def commit(self, message: str) -> bool:
        """Snapshot pending changes now, with a caller-supplied message."""
        return self.recorder.commit(message)

    def record(self, operation: Union[Operation, str], subjects: Union[str, Iterable[str]]) -> Optional[bool]:
        """Record a mutation directly, for hosts that cannot use hooks."""
        if not self.auto_commit:
            logger.debug("auto_commit is off; ignoring mutation")
            return None
        return self.recorder.record_mutation(operation, subjects)

    def status(self) -> RepositoryStatus:
        return self.repository.status()

    def history(self, limit: int = 20) -> List[GitCommit]:
        return self.repository.history(limit=limit)

    # =========================================================================
    # HOOK LISTENER
    # =========================================================================

    def on_batch_start(self, label: str) -> None:
        if self.auto_commit:
            self.recorder.begin_batch(label)

    def on_batch_end(self, label: str) -> None:
        if self.auto_commit:
            self.recorder.end_batch()

    def on_mutation(self, operation: Operation, subjects: Tuple[str, ...]) -> None:
        self.record(operation, subjects)
