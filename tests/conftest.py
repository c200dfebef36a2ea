"""Shared fixtures: an in-memory repository client and configuration helpers."""

from datetime import datetime
from pathlib import Path

import pytest

from vss_reconcile.models.config import RepositoryConfig, SyncConfig
from vss_reconcile.models.history import ItemRef, VersionEvent
from vss_reconcile.repository.client import FetchOptions, RepositoryError


class TrackingIterator:
    """Iterator over version events that records how far it was consumed and whether it was closed."""

    def __init__(self, events: list[VersionEvent], fail_after: int | None = None):
        self._events = list(events)
        self._fail_after = fail_after
        self.consumed = 0
        self.closed = False

    def __iter__(self):
        return self

    def __next__(self) -> VersionEvent:
        if self._fail_after is not None and self.consumed >= self._fail_after:
            raise RepositoryError("enumeration failed")
        if self.consumed >= len(self._events):
            raise StopIteration
        event = self._events[self.consumed]
        self.consumed += 1
        return event

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """Session over the fake repository's in-memory state."""

    def __init__(self, repository: "FakeRepositoryClient"):
        self._repository = repository
        self.closed = False

    def resolve_item(self, path: str) -> ItemRef:
        if path in self._repository.missing_items:
            raise RepositoryError(f"Item not found: {path}")
        return ItemRef(spec=path.rstrip("/") or path, is_folder=True)

    def enumerate_versions(self, item: ItemRef, recursive: bool) -> TrackingIterator:
        self._repository.enumerations.append((item.spec, recursive))
        iterator = TrackingIterator(
            self._repository.history.get(item.spec, []),
            fail_after=self._repository.fail_enumeration_after.get(item.spec),
        )
        self._repository.iterators.append(iterator)
        return iterator

    def snapshot_children(self, item: ItemRef, revision: int) -> set[str]:
        self._repository.snapshot_requests.append((item.spec, revision))
        return set(self._repository.snapshots.get((item.spec, revision), set()))

    def fetch_content(self, item: ItemRef, destination: Path, options: FetchOptions) -> None:
        self._repository.fetches.append((item.spec, Path(destination), options))
        for relative_path, content in self._repository.content.get(item.spec, {}).items():
            target = Path(destination) / relative_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")

    def close(self) -> None:
        self.closed = True


class FakeRepositoryClient:
    """In-memory repository client.

    history maps a root spec to its version events, newest first; snapshots
    maps (folder spec, revision) to the child specs at that revision.
    """

    def __init__(self):
        self.history: dict[str, list[VersionEvent]] = {}
        self.snapshots: dict[tuple[str, int], set[str]] = {}
        self.content: dict[str, dict[str, str]] = {}
        self.missing_items: set[str] = set()
        self.fail_on_open = False
        self.fail_enumeration_after: dict[str, int] = {}

        self.sessions: list[FakeSession] = []
        self.iterators: list[TrackingIterator] = []
        self.enumerations: list[tuple[str, bool]] = []
        self.snapshot_requests: list[tuple[str, int]] = []
        self.fetches: list[tuple[str, Path, FetchOptions]] = []
        self.open_calls: list[tuple[str, str, str]] = []

    def open(self, location: str, user: str, password: str) -> FakeSession:
        self.open_calls.append((location, user, password))
        if self.fail_on_open:
            raise RepositoryError(f"Cannot open database at {location}")
        session = FakeSession(self)
        self.sessions.append(session)
        return session

    def add_event(
        self,
        root: str,
        item_spec: str,
        action: str,
        timestamp: datetime,
        revision: int,
        user: str = "jo",
        comment: str = "",
    ) -> VersionEvent:
        """Append an event to a root's history; callers add events newest first."""
        event = VersionEvent(
            item_spec=item_spec,
            user=user,
            comment=comment,
            action=action,
            timestamp=timestamp,
            revision=revision,
        )
        self.history.setdefault(root, []).append(event)
        return event


@pytest.fixture
def fake_client() -> FakeRepositoryClient:
    return FakeRepositoryClient()


@pytest.fixture
def srcsafe_ini(tmp_path: Path) -> Path:
    ini = tmp_path / "vss" / "srcsafe.ini"
    ini.parent.mkdir()
    ini.write_text("Data_Path = data\n", encoding="utf-8")
    return ini


@pytest.fixture
def repository_config(srcsafe_ini: Path) -> RepositoryConfig:
    return RepositoryConfig(
        location=str(srcsafe_ini),
        user="builder",
        password="secret",
        roots=["$/proj"],
    )


@pytest.fixture
def sync_config(tmp_path: Path) -> SyncConfig:
    return SyncConfig(
        max_entries=100,
        incremental=True,
        supported_platforms=["win32", "test-platform"],
        workspace=str(tmp_path / "workspace"),
        state_file=str(tmp_path / "state.json"),
        changelog_file=str(tmp_path / "changelog.xml"),
    )
