"""Switcher context.

One SwitcherContext is created by the orchestrator and handed to every
component constructor. It carries the host collaborators plus the small amount
of shared state that several components read. Each shared field has a single
writer: ``active_project_id`` and ``switcher_enabled`` belong to the
orchestrator.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .config import StorageKeys, SwitcherConfig
from .core.host import EditorHost, ExcludeSettings, FileSystem, KeyValueStorage

logger = logging.getLogger(__name__)


@dataclass
class SwitcherContext:
    """Collaborators and shared state for one editor window."""

    editor: EditorHost
    filesystem: FileSystem
    global_storage: KeyValueStorage
    workspace_storage: KeyValueStorage
    excludes: ExcludeSettings
    workspace_root: Optional[str] = None
    config: SwitcherConfig = field(default_factory=SwitcherConfig)

    active_project_id: Optional[str] = None
    switcher_enabled: bool = False

    @property
    def keys(self) -> StorageKeys:
        return self.config.storage_keys

    def set_active_project(self, project_id: Optional[str]) -> None:
        """Update the active project pointer (orchestrator only)."""
        old = self.active_project_id
        self.active_project_id = project_id
        logger.info(f"Active project changed: {old} → {project_id}")
