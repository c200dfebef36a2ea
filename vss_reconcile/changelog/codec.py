"""Serialization of change records to the persisted change-log document.

Document layout::

    <history>
    	<entry>
    		<file>$/proj/a.txt</file>
    		<user>jo</user>
    		<comment>fix</comment>
    		<action>Added</action>
    		<date>01-02-2020 10:00:00</date>
    		<version>3</version>
    	</entry>
    </history>
"""

from datetime import datetime
from pathlib import Path
from typing import Iterable, Sequence
from xml.etree import ElementTree

import structlog

from vss_reconcile.models.history import ChangeAction, ChangeRecord, action_label

log = structlog.stdlib.get_logger()

ROOT_TAG = "history"
ENTRY_TAG = "entry"
FIELD_TAGS: tuple[str, ...] = ("file", "user", "comment", "action", "date", "version")
DATE_FORMAT = "%d-%m-%Y %H:%M:%S"

_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "'": "&apos;",
    '"': "&quot;",
}


class CodecError(Exception):
    """Raised when a change-log document cannot be decoded."""

    pass


def escape_for_xml(value: object) -> str:
    """Escape markup characters; None becomes an empty string."""
    if value is None:
        return ""
    return "".join(_ESCAPES.get(ch, ch) for ch in str(value))


def format_date(timestamp: datetime) -> str:
    # strftime does not zero-pad %Y below year 1000 on glibc
    return f"{timestamp:%d-%m}-{timestamp.year:04d} {timestamp:%H:%M:%S}"


def parse_date(text: str) -> datetime:
    return datetime.strptime(text, DATE_FORMAT)


def _field_values(record: ChangeRecord) -> tuple[str, ...]:
    return (
        record.path,
        record.user,
        record.comment,
        action_label(record.action),
        format_date(record.timestamp),
        str(record.revision),
    )


def encode(records: Iterable[ChangeRecord]) -> str:
    """
    Render change records as a change-log document.

    Args:
        records: Records in the order they should appear

    Returns:
        Document text, newline terminated
    """
    lines = [f"<{ROOT_TAG}>"]
    for record in records:
        lines.append(f"\t<{ENTRY_TAG}>")
        for tag, value in zip(FIELD_TAGS, _field_values(record)):
            lines.append(f"\t\t<{tag}>{escape_for_xml(value)}</{tag}>")
        lines.append(f"\t</{ENTRY_TAG}>")
    lines.append(f"</{ROOT_TAG}>")
    return "\n".join(lines) + "\n"


def decode(document: str) -> list[ChangeRecord]:
    """
    Parse a change-log document back into change records.

    Whitespace between elements is ignored; the text of each field element
    is taken exactly.

    Args:
        document: Document text produced by encode

    Returns:
        Records in document order

    Raises:
        CodecError: If the document is not a well-formed change log
    """
    try:
        root = ElementTree.fromstring(document)
    except ElementTree.ParseError as e:
        raise CodecError(f"Malformed change log: {e}") from e

    if root.tag != ROOT_TAG:
        raise CodecError(f"Expected <{ROOT_TAG}> root element, found <{root.tag}>")

    records: list[ChangeRecord] = []
    for index, entry in enumerate(root):
        if entry.tag != ENTRY_TAG:
            raise CodecError(f"Unexpected element <{entry.tag}> at position {index}")
        records.append(_decode_entry(entry, index))

    return records


def _decode_entry(entry: ElementTree.Element, index: int) -> ChangeRecord:
    fields = list(entry)
    tags = tuple(field.tag for field in fields)
    if tags != FIELD_TAGS:
        raise CodecError(
            f"Entry {index} has fields {list(tags)}, expected {list(FIELD_TAGS)}"
        )

    path, user, comment, action, date_text, version_text = (field.text or "" for field in fields)

    try:
        timestamp = parse_date(date_text)
    except ValueError as e:
        raise CodecError(f"Entry {index} has an invalid date {date_text!r}") from e

    try:
        revision = int(version_text)
    except ValueError as e:
        raise CodecError(f"Entry {index} has an invalid version {version_text!r}") from e

    try:
        return ChangeRecord(
            path=path,
            user=user,
            comment=comment,
            action=ChangeAction.parse(action),
            timestamp=timestamp,
            revision=revision,
        )
    except ValueError as e:
        raise CodecError(f"Entry {index} is not a valid change record: {e}") from e


def write_change_log(path: str | Path, records: Sequence[ChangeRecord]) -> None:
    """Persist records to the change-log file at path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(encode(records), encoding="utf-8", newline="\n")
    log.info("change_log_written", path=str(path), record_count=len(records))


def read_change_log(path: str | Path) -> list[ChangeRecord]:
    """
    Load records from a change-log file.

    Raises:
        CodecError: If the file cannot be read or decoded
    """
    path = Path(path)
    try:
        document = path.read_text(encoding="utf-8")
    except OSError as e:
        log.error("change_log_read_failed", path=str(path), error=str(e))
        raise CodecError(f"Failed to read change log {path}: {e}") from e

    records = decode(document)
    log.debug("change_log_read", path=str(path), record_count=len(records))
    return records
