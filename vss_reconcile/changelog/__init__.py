"""Change-log persistence and reporting."""

from vss_reconcile.changelog.change_log_set import ChangeLogEntry, ChangeLogSet
from vss_reconcile.changelog.codec import (
    CodecError,
    decode,
    encode,
    read_change_log,
    write_change_log,
)

__all__ = [
    "ChangeLogEntry",
    "ChangeLogSet",
    "CodecError",
    "decode",
    "encode",
    "read_change_log",
    "write_change_log",
]
