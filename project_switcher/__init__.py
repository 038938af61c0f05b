"""
Project switcher for a single editor window.

Manages a set of project directories under one parent workspace: a registry
with shortcut ordering, a file-browser filter that shows only the active
project, per-project tab sessions and a switch sequence with a naive and an
optimized (in-memory tab cache) strategy.
"""

__version__ = "1.0.0"

from .config import SwitcherConfig, StorageKeys, load_switcher_config
from .errors import ErrorCode, SwitcherError, EarlyReject
from .state import SwitcherContext
from .orchestrator import SwitchOrchestrator
from .auto_save import AutoSaveManager
from .models import Project, SessionSnapshot, TabRecord, SwitchResult, RestoreResult

__all__ = [
    "__version__",
    "SwitcherConfig",
    "StorageKeys",
    "load_switcher_config",
    "ErrorCode",
    "SwitcherError",
    "EarlyReject",
    "SwitcherContext",
    "SwitchOrchestrator",
    "AutoSaveManager",
    "Project",
    "SessionSnapshot",
    "TabRecord",
    "SwitchResult",
    "RestoreResult",
]
