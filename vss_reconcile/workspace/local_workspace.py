"""Workspace filesystem operations on the local disk."""

import shutil
from pathlib import Path
from typing import Protocol

import structlog

log = structlog.stdlib.get_logger()


class Workspace(Protocol):
    """Filesystem primitives used to materialize a sync plan."""

    def clear(self, root: Path) -> None: ...

    def delete_recursive(self, root: Path, relative_path: str) -> bool: ...

    def ensure_directory(self, path: Path) -> None: ...


class LocalWorkspace:
    """Workspace backed by the local filesystem."""

    def clear(self, root: Path) -> None:
        """
        Delete the contents of root, keeping the directory itself.

        Args:
            root: Workspace directory

        Raises:
            OSError: If an entry cannot be removed
        """
        root = Path(root)
        if not root.exists():
            log.debug("workspace_missing_nothing_to_clear", root=str(root))
            return

        removed = 0
        for child in root.iterdir():
            _remove(child)
            removed += 1

        log.info("workspace_cleared", root=str(root), entries_removed=removed)

    def delete_recursive(self, root: Path, relative_path: str) -> bool:
        """
        Delete a file or directory below root.

        Args:
            root: Workspace directory
            relative_path: Path relative to root; a leading separator is ignored

        Returns:
            True if something was removed, False if the target was already absent

        Raises:
            ValueError: If relative_path escapes the workspace
            OSError: If the target exists but cannot be removed
        """
        root = Path(root)
        target = root / relative_path.lstrip("/\\")

        resolved_root = root.resolve()
        resolved_target = target.resolve()
        if resolved_target == resolved_root or resolved_root not in resolved_target.parents:
            raise ValueError(f"Refusing to delete outside the workspace: {relative_path}")

        if not target.exists() and not target.is_symlink():
            log.debug("delete_target_absent", path=str(target))
            return False

        _remove(target)
        log.debug("workspace_path_deleted", path=str(target))
        return True

    def ensure_directory(self, path: Path) -> None:
        """Create path and any missing parents."""
        Path(path).mkdir(parents=True, exist_ok=True)


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
