"""Interfaces of the external repository client.

The engine never talks to a SourceSafe database directly. A driver supplies
an object satisfying RepositoryClient; every session it opens is closed by
the caller on all exit paths.
"""

from pathlib import Path
from typing import Iterator, Protocol

from pydantic import BaseModel, ConfigDict, Field

from vss_reconcile.models.history import ItemRef, VersionEvent


class RepositoryError(Exception):
    """Raised when the repository cannot be opened, enumerated, or fetched from."""

    pass


class FetchOptions(BaseModel):
    """Flags passed to the client when fetching content into the workspace."""

    model_config = ConfigDict(frozen=True)

    writable: bool = Field(default=False, description="Leave fetched files writable")
    force_overwrite: bool = Field(default=True, description="Replace existing local files")
    recursive: bool = Field(default=True, description="Fetch sub projects too")


class RepositorySession(Protocol):
    """An open database handle."""

    def resolve_item(self, path: str) -> ItemRef:
        """Resolve a project or file path such as $/proj to an item."""
        ...

    def enumerate_versions(self, item: ItemRef, recursive: bool) -> Iterator[VersionEvent]:
        """Yield the version history of an item, newest first."""
        ...

    def snapshot_children(self, item: ItemRef, revision: int) -> set[str]:
        """Return the specs of the direct children of a folder at a revision."""
        ...

    def fetch_content(self, item: ItemRef, destination: Path, options: FetchOptions) -> None:
        """Write the current content of an item below the destination directory."""
        ...

    def close(self) -> None:
        """Release the handle and any per-item resources."""
        ...


class RepositoryClient(Protocol):
    """Factory for repository sessions."""

    def open(self, location: str, user: str, password: str) -> RepositorySession:
        """Open the database at location, raising RepositoryError on failure."""
        ...


def release(resource: object) -> None:
    """Close an iterator or handle if it supports closing."""
    close = getattr(resource, "close", None)
    if callable(close):
        close()
