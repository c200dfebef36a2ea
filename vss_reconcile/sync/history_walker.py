"""Bounded walk over the version history of tracked roots."""

import heapq
from collections import Counter
from contextlib import ExitStack, closing
from datetime import datetime
from typing import Iterable, Iterator

import structlog

from vss_reconcile.models.config import RepositoryConfig
from vss_reconcile.models.history import (
    FOLDER_LEVEL_ACTIONS,
    ChangeAction,
    ChangeRecord,
    HistoryEntry,
    HistoryQuery,
    ItemRef,
    VersionEvent,
)
from vss_reconcile.repository.client import (
    RepositoryClient,
    RepositoryError,
    RepositorySession,
    release,
)
from vss_reconcile.sync.folder_resolver import FolderDiffResolver

log = structlog.stdlib.get_logger()


class HistoryWalker:
    """Collects change records for a set of roots, newest first."""

    def __init__(
        self,
        client: RepositoryClient,
        repository: RepositoryConfig,
        resolver: FolderDiffResolver | None = None,
    ):
        """
        Initialize history walker.

        Args:
            client: Repository client used to open sessions
            repository: Location and credentials of the repository
            resolver: Folder diff resolver (a default one is created if None)
        """
        self._client = client
        self._repository = repository
        self._resolver = resolver or FolderDiffResolver()

    def walk(self, query: HistoryQuery) -> list[ChangeRecord]:
        """
        Collect change records matching the query.

        Args:
            query: Roots, time bound and global entry cap

        Returns:
            Records newest first across all roots

        Raises:
            RepositoryError: If the repository cannot be opened or enumerated
        """
        return [entry.record for entry in self.walk_entries(query)]

    def walk_entries(self, query: HistoryQuery) -> list[HistoryEntry]:
        """
        Collect change records tagged with the root that produced them.

        Each root's newest-first history is cut at the first event older
        than query.since; the per-root streams are then merged by timestamp
        (ties keep root order) and the merged stream stops once
        query.max_entries records are collected.

        Raises:
            RepositoryError: If the repository cannot be opened or enumerated
        """
        log.info(
            "walk_started",
            roots=list(query.roots),
            since=query.since,
            max_entries=query.max_entries,
            recursive=query.recursive,
        )

        entries: list[HistoryEntry] = []
        try:
            session = self._client.open(
                self._repository.location,
                self._repository.user,
                self._repository.password.get_secret_value(),
            )
            with closing(session), ExitStack() as stack:
                streams = []
                for root_path in query.roots:
                    root = session.resolve_item(root_path)
                    versions = session.enumerate_versions(root, query.recursive)
                    stack.callback(release, versions)
                    streams.append(self._root_stream(root, versions, query.since))

                merged = heapq.merge(*streams, key=lambda item: item[1].timestamp, reverse=True)
                while len(entries) < query.max_entries:
                    item = next(merged, None)
                    if item is None:
                        break
                    root, event = item
                    entries.append(HistoryEntry(root=root, record=self._to_record(session, event)))
                else:
                    log.info("walk_cap_reached", max_entries=query.max_entries)
        except RepositoryError as e:
            log.error("walk_failed", location=self._repository.location, error=str(e))
            raise
        except Exception as e:
            log.error(
                "walk_failed",
                location=self._repository.location,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(f"Failed to read history: {e}") from e

        log.info(
            "walk_completed",
            record_count=len(entries),
            per_root=dict(Counter(entry.root.spec for entry in entries)),
        )
        return entries

    @staticmethod
    def _root_stream(
        root: ItemRef, versions: Iterable[VersionEvent], since: datetime
    ) -> Iterator[tuple[ItemRef, VersionEvent]]:
        for event in versions:
            if event.timestamp < since:
                return
            yield root, event

    def _to_record(self, session: RepositorySession, event: VersionEvent) -> ChangeRecord:
        action = ChangeAction.parse(event.action)
        path = event.item_spec

        # Version 1 is the creation of the item itself, never a folder event
        if event.revision != 1 and action in FOLDER_LEVEL_ACTIONS:
            path = self._resolve_folder_event(session, event, action)

        return ChangeRecord(
            path=path,
            user=event.user,
            comment=event.comment,
            action=action,
            timestamp=event.timestamp,
            revision=event.revision,
        )

    def _resolve_folder_event(
        self, session: RepositorySession, event: VersionEvent, action: ChangeAction
    ) -> str:
        folder = ItemRef(spec=event.item_spec, is_folder=True)
        current = session.snapshot_children(folder, event.revision)
        previous = session.snapshot_children(folder, event.revision - 1)
        return self._resolver.resolve(event.item_spec, action, current, previous)
