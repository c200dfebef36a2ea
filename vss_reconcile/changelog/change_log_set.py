"""Read-side view over a persisted change log, used for reporting."""

from pathlib import Path
from typing import Iterator

from vss_reconcile.changelog.codec import read_change_log
from vss_reconcile.models.history import ChangeRecord

# Maximum characters of path and comment shown in a summary message
MAX_MESSAGE_CHARS = 40
ELLIPSIS = "..."


def _head(text: str, max_chars: int = MAX_MESSAGE_CHARS) -> str:
    """Leading characters of text, cut at the first newline."""
    for index, ch in enumerate(text):
        if index == max_chars or ch == "\n":
            return text[:index] + ELLIPSIS
    return text


def _tail(text: str, max_chars: int = MAX_MESSAGE_CHARS) -> str:
    """Trailing characters of text, cut at the last newline."""
    return _head(text[::-1], max_chars)[::-1]


class ChangeLogEntry:
    """A change record as presented in build reports."""

    def __init__(self, record: ChangeRecord):
        self.record = record

    @property
    def author(self) -> str:
        return self.record.user

    @property
    def affected_paths(self) -> list[str]:
        return [self.record.path]

    @property
    def message(self) -> str:
        """Short summary: the end of the path, then the start of the comment."""
        return f"{_tail(self.record.path)} - {_head(self.record.comment)}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChangeLogEntry):
            return NotImplemented
        return self.record == other.record

    def __repr__(self) -> str:
        return f"ChangeLogEntry({self.record.path!r}, {self.record.action_label!r})"


class ChangeLogSet:
    """Entries of one change log, in the order they were recorded."""

    def __init__(self, records: list[ChangeRecord]):
        self._entries = [ChangeLogEntry(record) for record in records]

    @classmethod
    def parse(cls, path: str | Path) -> "ChangeLogSet":
        """
        Load a change-log file.

        Raises:
            CodecError: If the file is missing or malformed
        """
        return cls(read_change_log(path))

    @property
    def is_empty(self) -> bool:
        return not self._entries

    @property
    def entries(self) -> list[ChangeLogEntry]:
        return list(self._entries)

    def __iter__(self) -> Iterator[ChangeLogEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
