"""Tests for the scheduled synchronization script."""

import sys
from pathlib import Path

import pytest

from scripts.scheduled_sync import perform_sync


def _write_config(tmp_path: Path, srcsafe_ini: Path, workspace: Path) -> str:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        f"""
repository:
  location: "{srcsafe_ini.as_posix()}"
  roots: ["$/proj"]

sync:
  supported_platforms: ["{sys.platform}"]
  workspace: "{workspace.as_posix()}"
  state_file: "{(tmp_path / 'state.json').as_posix()}"
  changelog_file: "{(tmp_path / 'changelog.xml').as_posix()}"
  client_factory: "tests.conftest:FakeRepositoryClient"

logging:
  log_level: WARNING
""",
        encoding="utf-8",
    )
    return str(config_path)


def test_sync_reports_success(tmp_path: Path, srcsafe_ini: Path) -> None:
    config_path = _write_config(tmp_path, srcsafe_ini, tmp_path / "ws")

    stats = perform_sync(config_path)

    assert stats["success"] is True
    assert stats["plan"] == "full_refresh"
    assert (tmp_path / "changelog.xml").exists()


def test_poll_without_prior_sync_reports_changes(tmp_path: Path, srcsafe_ini: Path) -> None:
    config_path = _write_config(tmp_path, srcsafe_ini, tmp_path / "ws")

    stats = perform_sync(config_path, poll_only=True)

    assert stats["success"] is True
    assert stats["changes"] is True


def test_workspace_filesystem_error_reports_failure(tmp_path: Path, srcsafe_ini: Path) -> None:
    # A regular file where the workspace directory should be
    blocked = tmp_path / "ws"
    blocked.write_text("not a directory", encoding="utf-8")
    config_path = _write_config(tmp_path, srcsafe_ini, blocked)

    stats = perform_sync(config_path)

    assert stats["success"] is False
    assert "error" in stats
    assert not (tmp_path / "changelog.xml").exists()


def test_configuration_error_reports_failure(tmp_path: Path) -> None:
    stats = perform_sync(str(tmp_path / "missing.yaml"))

    assert stats["success"] is False
    assert "not found" in stats["error"]


def test_main_exits_non_zero_on_failure(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    from scripts import scheduled_sync

    monkeypatch.setattr(
        sys, "argv", ["scheduled_sync.py", "--config", str(tmp_path / "missing.yaml")]
    )

    with pytest.raises(SystemExit) as exc_info:
        scheduled_sync.main()

    assert exc_info.value.code == 1
    assert "FAILED" in capsys.readouterr().out
