"""Repository client interfaces."""

from vss_reconcile.repository.client import (
    FetchOptions,
    RepositoryClient,
    RepositoryError,
    RepositorySession,
    release,
)

__all__ = [
    "FetchOptions",
    "RepositoryClient",
    "RepositoryError",
    "RepositorySession",
    "release",
]
