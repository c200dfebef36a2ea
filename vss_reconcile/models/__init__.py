"""Data models for the reconciliation engine."""

from vss_reconcile.models.config import (
    AppConfig,
    LoggingConfig,
    RepositoryConfig,
    SyncConfig,
)
from vss_reconcile.models.history import (
    FOLDER_LEVEL_ACTIONS,
    ChangeAction,
    ChangeRecord,
    HistoryEntry,
    HistoryQuery,
    ItemRef,
    SyncState,
    VersionEvent,
    action_label,
)

__all__ = [
    "ChangeAction",
    "ChangeRecord",
    "VersionEvent",
    "ItemRef",
    "HistoryQuery",
    "HistoryEntry",
    "SyncState",
    "FOLDER_LEVEL_ACTIONS",
    "action_label",
    "AppConfig",
    "RepositoryConfig",
    "SyncConfig",
    "LoggingConfig",
]
