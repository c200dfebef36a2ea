"""Change reconciliation engine for Visual SourceSafe workspaces."""

__version__ = "0.1.0"
