"""
Services for the project switcher.

- Project registry (CRUD, enable/disable, ordering)
- Directory visibility filter
- Session store
- Tab capture / restore engines and the optimized tab cache
- Switch strategies
- Workspace mode detection
"""

from .project_registry import ProjectRegistry
from .directory_filter import DirectoryVisibilityFilter, compute_exclude_map
from .session_store import SessionStore
from .tab_capture import TabCaptureEngine, is_within_project, uri_within_project
from .tab_restore import TabRestoreEngine
from .tab_cache import OptimizedTabCache, CacheEntry
from .switch_strategy import (
    SwitchStrategy,
    NaiveStrategy,
    OptimizedStrategy,
    choose_strategy,
    build_strategies,
)
from .workspace_detection import (
    WorkspaceMode,
    detect_workspace_mode,
    list_project_directories,
)

__all__ = [
    "ProjectRegistry",
    "DirectoryVisibilityFilter",
    "compute_exclude_map",
    "SessionStore",
    "TabCaptureEngine",
    "is_within_project",
    "uri_within_project",
    "TabRestoreEngine",
    "OptimizedTabCache",
    "CacheEntry",
    "SwitchStrategy",
    "NaiveStrategy",
    "OptimizedStrategy",
    "choose_strategy",
    "build_strategies",
    "WorkspaceMode",
    "detect_workspace_mode",
    "list_project_directories",
]
