"""Local workspace materialization."""

from vss_reconcile.workspace.local_workspace import LocalWorkspace, Workspace

__all__ = ["LocalWorkspace", "Workspace"]
