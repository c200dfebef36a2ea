"""Data models for synchronization operations."""

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from vss_reconcile.models.history import ChangeRecord


class FullRefresh(BaseModel):
    """Wipe the workspace and fetch everything again."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["full_refresh"] = "full_refresh"


class TargetedDelete(BaseModel):
    """Remove only the listed workspace paths before fetching."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["targeted_delete"] = "targeted_delete"
    relative_paths: tuple[str, ...] = Field(
        default=(), description="Workspace paths to delete, relative to the tracked root"
    )


SyncPlan = Annotated[Union[FullRefresh, TargetedDelete], Field(discriminator="kind")]


class SyncReport(BaseModel):
    """Report of one reconciliation cycle."""

    repository: str = Field(..., description="Repository location that was synchronized")
    plan: SyncPlan = Field(..., description="Plan that was executed")
    records: list[ChangeRecord] = Field(
        default_factory=list, description="Change records written to the change log"
    )
    paths_deleted: int = Field(default=0, ge=0, description="Workspace paths removed")
    cleanup_failures: list[str] = Field(
        default_factory=list, description="Targeted deletes that could not be performed"
    )
    start_time: datetime = Field(..., description="Cycle start timestamp")
    end_time: datetime = Field(..., description="Cycle end timestamp")
    duration_seconds: float = Field(default=0.0, ge=0.0, description="Cycle duration in seconds")

    @property
    def total_changes(self) -> int:
        """Get total number of change records reported."""
        return len(self.records)

    @property
    def is_incremental(self) -> bool:
        """Check if only targeted paths were removed from the workspace."""
        return isinstance(self.plan, TargetedDelete)
