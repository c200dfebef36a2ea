"""Pydantic models for repository history events and change records."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChangeAction(str, Enum):
    """Actions reported by the repository history feed.

    Labels outside this set are kept verbatim as plain strings.
    """

    ADDED = "Added"
    DELETED = "Deleted"
    DESTROYED = "Destroyed"
    RECOVERED = "Recovered"
    EDITED = "Edited"

    @classmethod
    def parse(cls, label: str) -> "ChangeAction | str":
        """Map a raw label to a known action, or return it unchanged."""
        label = label.strip()
        try:
            return cls(label)
        except ValueError:
            return label


# Actions that the repository reports against the parent folder
FOLDER_LEVEL_ACTIONS: frozenset[ChangeAction] = frozenset(
    {ChangeAction.ADDED, ChangeAction.DELETED, ChangeAction.DESTROYED, ChangeAction.RECOVERED}
)


def action_label(action: "ChangeAction | str") -> str:
    """Return the textual label of an action."""
    if isinstance(action, ChangeAction):
        return action.value
    return action


class ChangeRecord(BaseModel):
    """One history event, immutable once constructed."""

    path: str = Field(default=..., min_length=1, description="Repository item specifier")
    user: str = Field(default="", description="Actor identity")
    comment: str = Field(default="", description="Free text check-in comment")
    action: ChangeAction | str = Field(default=..., description="Repository action label")
    timestamp: datetime = Field(default=..., description="Repository local time of the event")
    revision: int = Field(default=..., ge=1, description="Item version number")

    @field_validator("action", mode="before")
    @classmethod
    def normalize_action(cls, v):
        """Known labels become ChangeAction members; others pass through."""
        if isinstance(v, str) and not isinstance(v, ChangeAction):
            return ChangeAction.parse(v)
        return v

    @property
    def action_label(self) -> str:
        return action_label(self.action)

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "path": "$/proj/file.txt",
                "user": "jo",
                "comment": "fix <bug>",
                "action": "Added",
                "timestamp": "2020-02-01T10:00:00",
                "revision": 3,
            }
        },
    }


class VersionEvent(BaseModel):
    """A raw version entry as reported by the repository client."""

    model_config = ConfigDict(frozen=True)

    item_spec: str = Field(default=..., min_length=1, description="Reported item specifier")
    user: str = Field(default="", description="Actor identity")
    comment: str = Field(default="", description="Check-in comment")
    action: str = Field(default=..., description="Raw action label")
    timestamp: datetime = Field(default=..., description="Repository local time")
    revision: int = Field(default=..., ge=1, description="Item version number")


class ItemRef(BaseModel):
    """Reference to a resolved repository item."""

    model_config = ConfigDict(frozen=True)

    spec: str = Field(default=..., min_length=1, description="Fully qualified item specifier")
    is_folder: bool = Field(default=False, description="True when the item is a project folder")


class HistoryQuery(BaseModel):
    """Input to the history walker."""

    model_config = ConfigDict(frozen=True)

    roots: tuple[str, ...] = Field(default=..., min_length=1, description="Tracked root paths")
    recursive: bool = Field(default=True, description="Include history of sub items")
    since: datetime = Field(default=..., description="Oldest timestamp to include")
    max_entries: int = Field(default=100, ge=1, description="Global cap on returned records")


class HistoryEntry(BaseModel):
    """A change record tagged with the tracked root that produced it."""

    model_config = ConfigDict(frozen=True)

    root: ItemRef
    record: ChangeRecord

    @property
    def relative_path(self) -> str:
        """Record path with the root spec stripped."""
        return self.record.path[len(self.root.spec):]


class SyncState(BaseModel):
    """Tracks synchronization state for a repository."""

    repository: str = Field(default=..., description="Repository location the state belongs to")
    last_sync_timestamp: datetime = Field(default=..., description="Last successful sync timestamp")
    record_count: int = Field(default=0, ge=0, description="Change records seen in that sync")

    model_config = {
        "json_schema_extra": {
            "example": {
                "repository": "C:/vss/srcsafe.ini",
                "last_sync_timestamp": "2024-01-15T14:30:00",
                "record_count": 12,
            }
        }
    }
