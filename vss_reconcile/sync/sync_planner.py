"""Synchronization planning and workspace materialization."""

import sys
from contextlib import closing
from datetime import datetime
from pathlib import Path, PurePosixPath

import structlog

from vss_reconcile.changelog.codec import write_change_log
from vss_reconcile.models.config import RepositoryConfig, SyncConfig
from vss_reconcile.models.history import (
    ChangeAction,
    ChangeRecord,
    HistoryEntry,
    HistoryQuery,
    SyncState,
)
from vss_reconcile.repository.client import FetchOptions, RepositoryClient, RepositoryError
from vss_reconcile.sync.history_walker import HistoryWalker
from vss_reconcile.sync.models import FullRefresh, SyncPlan, SyncReport, TargetedDelete
from vss_reconcile.sync.timestamp_tracker import BuildHistoryProvider
from vss_reconcile.utils.config_loader import (
    ConfigurationError,
    UnsupportedPlatformError,
    validate_repository,
)
from vss_reconcile.workspace.local_workspace import LocalWorkspace, Workspace

log = structlog.stdlib.get_logger()

# Lower bound used when no synchronization has happened yet
EPOCH = datetime(1970, 1, 1)

# Actions whose workspace copy must be removed before fetching again
_DELETION_ACTIONS = frozenset({ChangeAction.DELETED, ChangeAction.RECOVERED})


class SyncPlanner:
    """Decides how to bring a workspace up to date and carries it out."""

    def __init__(
        self,
        client: RepositoryClient,
        repository: RepositoryConfig,
        sync_config: SyncConfig | None = None,
        workspace: Workspace | None = None,
        build_history: BuildHistoryProvider | None = None,
        walker: HistoryWalker | None = None,
        platform: str | None = None,
    ):
        """
        Initialize sync planner.

        Args:
            client: Repository client used for history and content
            repository: Location, credentials and tracked roots
            sync_config: Planning settings (defaults if None)
            workspace: Workspace filesystem (local disk if None)
            build_history: Provider of the last sync time; without one every
                cycle is treated as the first
            walker: History walker (built from client and repository if None)
            platform: Host platform identifier (sys.platform if None)
        """
        self._client = client
        self._repository = repository
        self._sync_config = sync_config or SyncConfig()
        self._workspace: Workspace = workspace or LocalWorkspace()
        self._build_history = build_history
        self._walker = walker or HistoryWalker(client, repository)
        self._platform = platform or sys.platform

        log.info(
            "sync_planner_initialized",
            location=repository.location,
            roots=repository.roots,
            incremental=self._sync_config.incremental,
            max_entries=self._sync_config.max_entries,
        )

    def check_preconditions(self) -> None:
        """
        Fail fast before any repository access.

        Raises:
            UnsupportedPlatformError: If the host platform cannot run the client
            ConfigurationError: If the repository location is missing or wrong, or two
                roots would be fetched into the same workspace directory
        """
        if self._platform not in self._sync_config.supported_platforms:
            log.error(
                "unsupported_platform",
                platform=self._platform,
                supported_platforms=self._sync_config.supported_platforms,
            )
            raise UnsupportedPlatformError(
                f"Synchronization is not supported on platform '{self._platform}'. "
                f"Supported platforms: {self._sync_config.supported_platforms}"
            )
        validate_repository(self._repository)
        self._check_root_directories()

    def plan(self, last_sync_time: datetime | None) -> tuple[SyncPlan, list[ChangeRecord]]:
        """
        Collect changes since the last sync and choose a plan.

        Args:
            last_sync_time: Time of the previous successful sync, or None

        Returns:
            The plan and the change records to report, newest first

        Raises:
            ConfigurationError: If preconditions do not hold
            RepositoryError: If history cannot be read
        """
        self.check_preconditions()

        max_entries = self._sync_config.max_entries

        if last_sync_time is None:
            entries = self._walk(EPOCH, max_entries)
            return self._select(FullRefresh(), entries, reason="no_prior_sync")

        entries = self._walk(last_sync_time, max_entries)

        if not self._sync_config.incremental:
            return self._select(FullRefresh(), entries, reason="incremental_disabled")

        if len(entries) >= max_entries:
            return self._select(FullRefresh(), entries, reason="too_many_changes")

        deletions = tuple(
            self._workspace_relative(entry)
            for entry in entries
            if entry.record.action in _DELETION_ACTIONS
        )
        return self._select(TargetedDelete(relative_paths=deletions), entries, reason="incremental")

    def materialize(self, plan: SyncPlan, workspace_root: str | Path) -> tuple[int, list[str]]:
        """
        Clean the workspace according to the plan, then fetch current content.

        Targeted deletes that fail are logged and skipped; the fetch that
        follows reconciles the content anyway.

        Args:
            plan: Plan returned by plan()
            workspace_root: Workspace directory

        Returns:
            Tuple of (paths_deleted, cleanup_failures)

        Raises:
            ConfigurationError: If two roots share a workspace directory
            RepositoryError: If content cannot be fetched
        """
        root = Path(workspace_root)
        self._check_root_directories()
        self._workspace.ensure_directory(root)

        deleted = 0
        failures: list[str] = []

        if isinstance(plan, FullRefresh):
            self._workspace.clear(root)
        else:
            for relative_path in plan.relative_paths:
                try:
                    if self._workspace.delete_recursive(root, relative_path):
                        deleted += 1
                except (OSError, ValueError) as e:
                    failures.append(relative_path)
                    log.warning(
                        "workspace_cleanup_failed",
                        path=relative_path,
                        error=str(e),
                    )
            log.info(
                "targeted_delete_completed",
                requested=len(plan.relative_paths),
                deleted=deleted,
                failed=len(failures),
            )

        self._fetch(root)
        return deleted, failures

    def synchronize(
        self,
        workspace_root: str | Path | None = None,
        changelog_path: str | Path | None = None,
    ) -> SyncReport:
        """
        Run one reconciliation cycle.

        This method:
        1. Checks the platform and repository configuration
        2. Walks history since the last successful sync
        3. Cleans and refetches the workspace
        4. Writes the change log and records the sync time

        Args:
            workspace_root: Workspace directory (SyncConfig.workspace if None)
            changelog_path: Change log file (SyncConfig.changelog_file if None)

        Returns:
            SyncReport describing the cycle

        Raises:
            ConfigurationError: If preconditions do not hold
            RepositoryError: If history or content cannot be read
        """
        start_time = datetime.now()
        workspace_root = Path(workspace_root or self._sync_config.workspace)
        changelog_path = Path(changelog_path or self._sync_config.changelog_file)
        location = self._repository.location

        log.info("synchronize_started", location=location, workspace=str(workspace_root))

        last_sync_time = self._last_sync_time()
        plan, records = self.plan(last_sync_time)
        deleted, failures = self.materialize(plan, workspace_root)
        write_change_log(changelog_path, records)

        if self._build_history is not None:
            self._build_history.record_sync(
                SyncState(
                    repository=location,
                    last_sync_timestamp=start_time,
                    record_count=len(records),
                )
            )

        end_time = datetime.now()
        duration = (end_time - start_time).total_seconds()

        report = SyncReport(
            repository=location,
            plan=plan,
            records=records,
            paths_deleted=deleted,
            cleanup_failures=failures,
            start_time=start_time,
            end_time=end_time,
            duration_seconds=duration,
        )

        log.info(
            "synchronize_completed",
            location=location,
            plan=plan.kind,
            records=report.total_changes,
            paths_deleted=deleted,
            cleanup_failures=len(failures),
            duration_seconds=duration,
        )
        return report

    def poll_changes(self) -> bool:
        """
        Report whether anything changed since the last sync.

        Only a single history entry is requested.

        Returns:
            True if there is no prior sync or at least one change exists

        Raises:
            ConfigurationError: If preconditions do not hold
            RepositoryError: If history cannot be read
        """
        self.check_preconditions()

        last_sync_time = self._last_sync_time()
        if last_sync_time is None:
            log.info("poll_no_prior_sync")
            return True

        changed = bool(self._walk(last_sync_time, 1))
        log.info("poll_completed", since=last_sync_time, changes=changed)
        return changed

    def _last_sync_time(self) -> datetime | None:
        if self._build_history is None:
            return None
        return self._build_history.last_sync_time(self._repository.location)

    def _walk(self, since: datetime, max_entries: int) -> list[HistoryEntry]:
        query = HistoryQuery(
            roots=tuple(self._repository.roots),
            recursive=self._repository.recursive,
            since=since,
            max_entries=max_entries,
        )
        return self._walker.walk_entries(query)

    def _select(
        self, plan: SyncPlan, entries: list[HistoryEntry], reason: str
    ) -> tuple[SyncPlan, list[ChangeRecord]]:
        log.info("plan_selected", plan=plan.kind, reason=reason, records=len(entries))
        return plan, [entry.record for entry in entries]

    def _root_directory(self, root_spec: str) -> str:
        """Workspace subdirectory of a root; empty when a single root is tracked."""
        if len(self._repository.roots) == 1:
            return ""
        name = PurePosixPath(root_spec.rstrip("/")).name
        return name.lstrip("$")

    def _check_root_directories(self) -> None:
        if len(self._repository.roots) < 2:
            return
        # Workspace paths are compared case-insensitively, as on Windows
        claimed: dict[str, str] = {}
        for root in self._repository.roots:
            directory = self._root_directory(root)
            if not directory:
                log.error("root_directory_missing", root=root)
                raise ConfigurationError(
                    f"Root '{root}' has no name to use as a workspace directory"
                )
            other = claimed.setdefault(directory.lower(), root)
            if other != root:
                log.error("root_directory_conflict", roots=[other, root], directory=directory)
                raise ConfigurationError(
                    f"Roots '{other}' and '{root}' would both be fetched into "
                    f"workspace directory '{directory}'"
                )

    def _workspace_relative(self, entry: HistoryEntry) -> str:
        subdirectory = self._root_directory(entry.root.spec)
        if not subdirectory:
            return entry.relative_path
        return f"/{subdirectory}{entry.relative_path}"

    def _fetch(self, workspace_root: Path) -> None:
        options = FetchOptions(
            writable=self._repository.writable,
            force_overwrite=True,
            recursive=self._repository.recursive,
        )
        location = self._repository.location

        try:
            session = self._client.open(
                location,
                self._repository.user,
                self._repository.password.get_secret_value(),
            )
            with closing(session):
                for root_path in self._repository.roots:
                    item = session.resolve_item(root_path)
                    destination = workspace_root / self._root_directory(item.spec)
                    self._workspace.ensure_directory(destination)
                    session.fetch_content(item, destination, options)
                    log.info("root_fetched", root=item.spec, destination=str(destination))
        except RepositoryError as e:
            log.error("fetch_failed", location=location, error=str(e))
            raise
        except Exception as e:
            log.error(
                "fetch_failed",
                location=location,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(f"Failed to fetch content: {e}") from e
