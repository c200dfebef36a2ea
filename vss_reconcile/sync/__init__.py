"""Synchronization components for reconciling a workspace with repository history."""

from vss_reconcile.sync.folder_resolver import FolderDiffResolver
from vss_reconcile.sync.history_walker import HistoryWalker
from vss_reconcile.sync.models import FullRefresh, SyncPlan, SyncReport, TargetedDelete
from vss_reconcile.sync.sync_planner import EPOCH, SyncPlanner
from vss_reconcile.sync.timestamp_tracker import BuildHistoryProvider, TimestampTracker

__all__ = [
    "BuildHistoryProvider",
    "EPOCH",
    "FolderDiffResolver",
    "FullRefresh",
    "HistoryWalker",
    "SyncPlan",
    "SyncPlanner",
    "SyncReport",
    "TargetedDelete",
    "TimestampTracker",
]
