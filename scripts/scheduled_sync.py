#!/usr/bin/env python3
"""
Scheduled synchronization script for SourceSafe workspaces.

This script runs one reconciliation cycle:
- Walks repository history since the last successful sync
- Cleans the workspace (fully or only the deleted paths) and refetches it
- Writes the change log for build reporting

With --poll it only reports whether anything changed since the last sync.

Usage:
    python scripts/scheduled_sync.py [--config CONFIG_PATH] [--poll]
"""

import argparse
import sys
from datetime import datetime

import structlog

from vss_reconcile.providers import get_sync_planner
from vss_reconcile.repository.client import RepositoryError
from vss_reconcile.utils.config_loader import ConfigLoader, ConfigurationError
from vss_reconcile.utils.logging_config import configure_from_config

log = structlog.stdlib.get_logger()


def perform_sync(config_path: str | None = None, poll_only: bool = False) -> dict:
    """
    Run a synchronization cycle or a poll.

    Args:
        config_path: Optional path to configuration file
        poll_only: If True, only check for changes

    Returns:
        Dictionary with sync statistics
    """
    start_time = datetime.now()

    try:
        config_loader = ConfigLoader()
        config = config_loader.load_config(config_path)
        configure_from_config(config.logging)
        config_loader.validate_config(config)

        planner = get_sync_planner(config)

        if poll_only:
            changed = planner.poll_changes()
            end_time = datetime.now()
            return {
                "success": True,
                "mode": "poll",
                "changes": changed,
                "start_time": start_time.isoformat(),
                "end_time": end_time.isoformat(),
                "duration_seconds": (end_time - start_time).total_seconds(),
            }

        report = planner.synchronize()

        stats = {
            "success": True,
            "mode": "sync",
            "repository": report.repository,
            "plan": report.plan.kind,
            "changes": report.total_changes,
            "paths_deleted": report.paths_deleted,
            "cleanup_failures": len(report.cleanup_failures),
            "changelog_file": config.sync.changelog_file,
            "start_time": report.start_time.isoformat(),
            "end_time": report.end_time.isoformat(),
            "duration_seconds": report.duration_seconds,
        }

        log.info("synchronization_succeeded", **stats)
        return stats

    except (ConfigurationError, RepositoryError, RuntimeError, OSError) as e:
        end_time = datetime.now()
        duration = (end_time - start_time).total_seconds()

        log.error(
            "synchronization_failed",
            error=str(e),
            error_type=type(e).__name__,
            duration_seconds=duration,
        )

        return {
            "success": False,
            "error": str(e),
            "start_time": start_time.isoformat(),
            "end_time": end_time.isoformat(),
            "duration_seconds": duration,
        }


def main():
    """Main entry point for scheduled sync script."""
    parser = argparse.ArgumentParser(
        description="Scheduled synchronization of a SourceSafe workspace"
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration file",
        default=None,
    )
    parser.add_argument(
        "--poll",
        action="store_true",
        help="Only check whether anything changed since the last sync",
    )

    args = parser.parse_args()

    stats = perform_sync(config_path=args.config, poll_only=args.poll)

    print("\n" + "=" * 60)
    print("SYNCHRONIZATION SUMMARY")
    print("=" * 60)

    if not stats.get("success"):
        print("Status: FAILED")
        print(f"Error: {stats.get('error', 'Unknown error')}")
    elif stats.get("mode") == "poll":
        print("Status: SUCCESS")
        print(f"Changes since last sync: {'yes' if stats.get('changes') else 'no'}")
    else:
        print("Status: SUCCESS")
        print(f"Plan: {stats.get('plan', 'unknown')}")
        print(f"Changes: {stats.get('changes', 0)}")
        print(f"Paths Deleted: {stats.get('paths_deleted', 0)}")
        print(f"Cleanup Failures: {stats.get('cleanup_failures', 0)}")
        print(f"Change Log: {stats.get('changelog_file', '')}")
    print(f"Duration: {stats.get('duration_seconds', 0):.2f} seconds")

    print("=" * 60)

    sys.exit(0 if stats.get("success") else 1)


if __name__ == "__main__":
    main()
