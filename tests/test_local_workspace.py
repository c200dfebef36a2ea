"""Tests for local workspace filesystem operations."""

from pathlib import Path

import pytest

from vss_reconcile.workspace.local_workspace import LocalWorkspace


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    root = tmp_path / "ws"
    (root / "src" / "lib").mkdir(parents=True)
    (root / "src" / "lib" / "util.c").write_text("util")
    (root / "README").write_text("readme")
    return root


def test_clear_keeps_root_directory(workspace_root: Path) -> None:
    LocalWorkspace().clear(workspace_root)

    assert workspace_root.is_dir()
    assert list(workspace_root.iterdir()) == []


def test_clear_missing_root_is_noop(tmp_path: Path) -> None:
    LocalWorkspace().clear(tmp_path / "absent")

    assert not (tmp_path / "absent").exists()


def test_delete_recursive_removes_directory_tree(workspace_root: Path) -> None:
    assert LocalWorkspace().delete_recursive(workspace_root, "/src") is True

    assert not (workspace_root / "src").exists()
    assert (workspace_root / "README").exists()


def test_delete_recursive_removes_file(workspace_root: Path) -> None:
    assert LocalWorkspace().delete_recursive(workspace_root, "README") is True

    assert not (workspace_root / "README").exists()


def test_delete_recursive_tolerates_absent_target(workspace_root: Path) -> None:
    assert LocalWorkspace().delete_recursive(workspace_root, "/missing/file.txt") is False


@pytest.mark.parametrize("relative_path", ["", "/", "../outside", "/src/../.."])
def test_delete_recursive_refuses_to_leave_workspace(
    workspace_root: Path, relative_path: str
) -> None:
    with pytest.raises(ValueError, match="outside the workspace"):
        LocalWorkspace().delete_recursive(workspace_root, relative_path)

    assert workspace_root.is_dir()


def test_ensure_directory_creates_parents(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b" / "c"

    LocalWorkspace().ensure_directory(target)
    LocalWorkspace().ensure_directory(target)

    assert target.is_dir()
