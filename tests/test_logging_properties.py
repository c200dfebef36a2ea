"""Property-based tests for logging configuration.

Log entries must carry a timestamp, a severity level, the event name and
any bound context so build logs can be searched after a failed cycle.
"""

import json
import logging
from datetime import datetime
from io import StringIO
from pathlib import Path

import structlog
from hypothesis import given, settings
from hypothesis import strategies as st

from vss_reconcile.models.config import LoggingConfig
from vss_reconcile.utils.logging_config import (
    configure_from_config,
    configure_logging,
    shared_processors,
)


def _configure_json_buffer() -> StringIO:
    """Route JSON-rendered structlog output into a fresh buffer."""
    log_buffer = StringIO()
    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG,
        stream=log_buffer,
        force=True,
    )
    structlog.configure(
        processors=[*shared_processors(), structlog.processors.JSONRenderer()],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
    return log_buffer


@given(
    log_level=st.sampled_from(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    error_message=st.text(min_size=1, max_size=200),
)
@settings(max_examples=100)
def test_log_entries_contain_required_fields(log_level: str, error_message: str) -> None:
    """Every entry has timestamp, level, event and the logged fields."""
    log_buffer = _configure_json_buffer()
    log = structlog.stdlib.get_logger("test_logger")

    getattr(log, log_level.lower())("walk_failed", error=error_message)

    log_entry = json.loads(log_buffer.getvalue().strip())

    datetime.fromisoformat(log_entry["timestamp"].replace("Z", "+00:00"))
    assert log_entry["level"].upper() == log_level
    assert log_entry["event"] == "walk_failed"
    assert log_entry["error"] == error_message
    assert log_entry["func_name"] == "test_log_entries_contain_required_fields"


@given(
    root=st.text(alphabet="abcdefghijklmnopqrstuvwxyz/", min_size=1, max_size=30),
    record_count=st.integers(min_value=0, max_value=1000),
)
@settings(max_examples=50)
def test_log_entries_preserve_context(root: str, record_count: int) -> None:
    log_buffer = _configure_json_buffer()
    log = structlog.stdlib.get_logger("test_logger")

    log.info("walk_completed", root=f"$/{root}", record_count=record_count)

    log_entry = json.loads(log_buffer.getvalue().strip())
    assert log_entry["root"] == f"$/{root}"
    assert log_entry["record_count"] == record_count


def test_configure_logging_writes_to_log_file(tmp_path: Path) -> None:
    log_file = tmp_path / "sync.log"

    configure_logging(log_level="DEBUG", json_logs=True, log_file=str(log_file))
    structlog.stdlib.get_logger("file_test").info("plan_selected", plan="full_refresh")
    for handler in logging.root.handlers:
        handler.flush()

    lines = [json.loads(line) for line in log_file.read_text().splitlines() if line.strip()]
    assert any(line.get("event") == "plan_selected" for line in lines)

    for handler in list(logging.root.handlers):
        if isinstance(handler, logging.FileHandler):
            logging.root.removeHandler(handler)
            handler.close()


def test_configure_from_config_applies_level() -> None:
    configure_from_config(LoggingConfig(log_level="warning", json_logs=False))

    assert logging.root.level == logging.WARNING


def test_unknown_level_falls_back_to_info() -> None:
    configure_logging(log_level="chatty")

    assert logging.root.level == logging.INFO
