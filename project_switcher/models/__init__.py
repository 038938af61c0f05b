"""
Pydantic models for the project switcher.

- Project registry records (project.py)
- Session snapshots and tab records (session.py)
- Directory filter state (filter_state.py)
- Switch results and per-phase metrics (switch.py)
"""

from .project import Project, new_project_id
from .session import (
    Position,
    Selection,
    TabRecord,
    ExplorerHint,
    SessionSnapshot,
)
from .filter_state import FilterMode, FilterState
from .switch import (
    SwitchState,
    OperationMetrics,
    RestoreResult,
    SwitchResult,
)

__all__ = [
    "Project",
    "new_project_id",
    "Position",
    "Selection",
    "TabRecord",
    "ExplorerHint",
    "SessionSnapshot",
    "FilterMode",
    "FilterState",
    "SwitchState",
    "OperationMetrics",
    "RestoreResult",
    "SwitchResult",
]
