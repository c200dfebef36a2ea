"""Centralized provider module for the repository client, workspace and state tracker.

This module provides factory functions for the collaborators the sync
planner needs. The repository driver is not part of this package; it is
located through an import path in the configuration so that a site can
plug in whatever driver talks to its SourceSafe installation.

Default implementations:
- Workspace: LocalWorkspace (local disk)
- Build history: TimestampTracker (JSON state file)
"""

import importlib

import structlog

from vss_reconcile.models.config import AppConfig
from vss_reconcile.repository.client import RepositoryClient
from vss_reconcile.sync.sync_planner import SyncPlanner
from vss_reconcile.sync.timestamp_tracker import TimestampTracker
from vss_reconcile.utils.config_loader import ConfigurationError
from vss_reconcile.workspace.local_workspace import LocalWorkspace

log = structlog.stdlib.get_logger()


def get_repository_client(factory_path: str | None) -> RepositoryClient:
    """Build the repository client named by a ``module:callable`` import path.

    Example configuration:
        sync:
          client_factory: "mysite.vss_driver:create_client"

    Args:
        factory_path: Import path of a zero-argument callable returning a client

    Returns:
        RepositoryClient instance

    Raises:
        ConfigurationError: If the path is missing, malformed, or cannot be imported
    """
    if not factory_path or not factory_path.strip():
        error_msg = "sync.client_factory is not configured"
        log.error("get_repository_client_failed", error=error_msg)
        raise ConfigurationError(error_msg)

    module_name, sep, attribute = factory_path.partition(":")
    if not sep or not module_name or not attribute:
        error_msg = f"client_factory must look like 'module:callable', got '{factory_path}'"
        log.error("get_repository_client_failed", error=error_msg)
        raise ConfigurationError(error_msg)

    try:
        module = importlib.import_module(module_name)
        factory = getattr(module, attribute)
    except (ImportError, AttributeError) as e:
        log.error(
            "get_repository_client_failed",
            factory_path=factory_path,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise ConfigurationError(f"Cannot import client factory '{factory_path}': {e}") from e

    client = factory()
    log.info("repository_client_initialized", factory_path=factory_path)
    return client


def get_timestamp_tracker(state_file: str) -> TimestampTracker:
    """Get the build history provider backed by the given state file."""
    return TimestampTracker(state_file)


def get_sync_planner(config: AppConfig, client: RepositoryClient | None = None) -> SyncPlanner:
    """
    Assemble a SyncPlanner from application configuration.

    Args:
        config: Application configuration
        client: Repository client (built from sync.client_factory if None)

    Returns:
        SyncPlanner ready to synchronize or poll
    """
    if client is None:
        client = get_repository_client(config.sync.client_factory)

    return SyncPlanner(
        client=client,
        repository=config.repository,
        sync_config=config.sync,
        workspace=LocalWorkspace(),
        build_history=get_timestamp_tracker(config.sync.state_file),
    )
