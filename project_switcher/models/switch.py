"""
Switch result and metrics models.

OperationMetrics describes one phase (capture, hide, restore, show);
SwitchResult aggregates a whole switch and is what the orchestrator hands back
to callers instead of raising.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SwitchState(str, Enum):
    """Orchestrator state machine."""

    IDLE = "idle"
    SWITCHING = "switching"
    FAILED = "failed"


class OperationMetrics(BaseModel):
    """Metrics for a single operation (capture/hide/restore/show).

    Attributes:
        operation_type: Type of operation
        start_time: Operation start timestamp
        end_time: Operation end timestamp
        duration_ms: Total duration in milliseconds
        tab_count: Number of tabs affected
        batches: Number of restore batches executed
        cache_hits: Cached document tokens reused
        cache_misses: Cached document tokens found dead and reopened
    """

    operation_type: str = Field(..., description="Operation type")
    start_time: datetime = Field(default_factory=datetime.now)
    end_time: datetime = Field(default_factory=datetime.now)
    duration_ms: float = Field(0.0, ge=0)
    tab_count: int = Field(0, ge=0)
    batches: int = Field(0, ge=0)
    cache_hits: int = Field(0, ge=0)
    cache_misses: int = Field(0, ge=0)

    @property
    def cache_hit_rate(self) -> float:
        """Calculate cache hit rate as percentage."""
        total = self.cache_hits + self.cache_misses
        if total == 0:
            return 0.0
        return (self.cache_hits / total) * 100

    def finish(self) -> "OperationMetrics":
        """Stamp end time and duration."""
        self.end_time = datetime.now()
        self.duration_ms = max(0.0, (self.end_time - self.start_time).total_seconds() * 1000)
        return self


class RestoreResult(BaseModel):
    """Outcome of a best-effort tab restore.

    Attributes:
        requested: Tabs in the snapshot or cache entry
        valid: Tabs that passed existence and boundary checks
        restored: Tabs actually opened
        source: "session", "cache" or "none"
    """

    requested: int = 0
    valid: int = 0
    restored: int = 0
    source: str = "none"
    metrics: Optional[OperationMetrics] = None

    @property
    def skipped(self) -> int:
        return self.requested - self.restored

    @property
    def success(self) -> bool:
        """Restored something, or there was nothing valid to restore."""
        return self.restored > 0 or self.valid == 0


class SwitchResult(BaseModel):
    """Comprehensive result of a project switch.

    Attributes:
        success: True when the switch committed
        project_from: Previously active project id
        project_to: Requested project id
        strategy: Strategy used for hide/show ("naive" or "optimized")
        failed_step: Step name where the switch failed
        error: Structured error dictionary on failure
    """

    success: bool
    project_from: Optional[str] = None
    project_to: Optional[str] = None
    strategy: Optional[str] = None
    failed_step: Optional[str] = None
    error: Optional[Dict[str, Any]] = None
    captured_tabs: int = 0
    hidden_tabs: int = 0
    restore: Optional[RestoreResult] = None
    phases: List[OperationMetrics] = Field(default_factory=list, description="Per-phase metrics")
    total_duration_ms: float = Field(0.0, ge=0)
    timestamp: datetime = Field(default_factory=datetime.now)

    @property
    def restored_tabs(self) -> int:
        return self.restore.restored if self.restore else 0

    def phase(self, operation_type: str) -> Optional[OperationMetrics]:
        for metrics in self.phases:
            if metrics.operation_type == operation_type:
                return metrics
        return None
