"""Resolution of folder-level history events to the child item they affected."""

from typing import AbstractSet

import structlog

from vss_reconcile.models.history import ChangeAction, action_label

log = structlog.stdlib.get_logger()

_APPEARING = frozenset({ChangeAction.ADDED, ChangeAction.RECOVERED})
_DISAPPEARING = frozenset({ChangeAction.DELETED, ChangeAction.DESTROYED})


class FolderDiffResolver:
    """Recovers the file behind a folder-granularity add or delete event.

    When a file is added to or deleted from a project, the history feed
    reports the project folder rather than the file. Comparing the folder's
    children at the event revision against the previous revision reveals
    the affected item.
    """

    def candidates(
        self,
        action: ChangeAction | str,
        current: AbstractSet[str],
        previous: AbstractSet[str],
    ) -> list[str]:
        """
        Children that explain the event, sorted lexicographically.

        Args:
            action: Event action
            current: Child specs at the event revision
            previous: Child specs at the revision before the event

        Returns:
            Sorted candidate specs; empty for actions that do not add or remove
        """
        if action in _APPEARING:
            changed = set(current) - set(previous)
        elif action in _DISAPPEARING:
            changed = set(previous) - set(current)
        else:
            return []
        return sorted(changed)

    def resolve(
        self,
        path: str,
        action: ChangeAction | str,
        current: AbstractSet[str],
        previous: AbstractSet[str],
    ) -> str:
        """
        Determine the item actually affected by a folder-level event.

        When several children changed under one event, the lexicographically
        smallest is reported so results are reproducible.

        Args:
            path: Path reported by the repository (the folder)
            action: Event action
            current: Child specs at the event revision
            previous: Child specs at the revision before the event

        Returns:
            The affected child spec, or path unchanged if no child differs
        """
        if action not in _APPEARING and action not in _DISAPPEARING:
            return path

        changed = self.candidates(action, current, previous)
        if not changed:
            log.warning(
                "resolution_ambiguous",
                path=path,
                action=action_label(action),
                reason="no child differs between revisions",
            )
            return path

        if len(changed) > 1:
            log.debug(
                "multiple_children_changed",
                path=path,
                action=action_label(action),
                candidates=changed,
                selected=changed[0],
            )

        return changed[0]
