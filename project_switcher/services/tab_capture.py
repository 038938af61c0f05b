"""
Tab capture.

Collects the open tabs that belong to a project. Membership is decided on
resolved paths, component by component, so ``/ws/foo`` never claims files
under ``/ws/foobar``.
"""

import logging
from pathlib import Path
from typing import List, Optional

from ..core.host import OpenTab, uri_to_path
from ..models.project import Project
from ..models.session import ExplorerHint, SessionSnapshot, TabRecord
from ..state import SwitcherContext

logger = logging.getLogger(__name__)


def is_within_project(file_path: str, project_path: str) -> bool:
    """True if file_path resolves to project_path or a descendant of it."""
    try:
        resolved = Path(file_path).resolve()
        root = Path(project_path).resolve()
    except (OSError, RuntimeError) as e:
        logger.debug(f"Could not resolve {file_path} against {project_path}: {e}")
        return False
    return resolved == root or root in resolved.parents


def uri_within_project(uri: str, project_path: str) -> bool:
    """True for file:// URIs inside the project; other schemes never match."""
    path = uri_to_path(uri)
    return path is not None and is_within_project(path, project_path)


def tab_to_record(tab: OpenTab) -> TabRecord:
    return TabRecord(
        uri=tab.uri,
        is_active=tab.is_active,
        is_pinned=tab.is_pinned,
        view_column=max(1, tab.view_column),
        is_dirty=tab.is_dirty,
        tab_index=max(0, tab.tab_index),
        selection=tab.selection.model_copy() if tab.selection else None,
    )


class TabCaptureEngine:
    """Captures project-scoped tabs from the editor host."""

    def __init__(self, context: SwitcherContext):
        self.context = context

    def project_tabs(self, project: Project) -> List[OpenTab]:
        """Open tabs whose file lies inside the project directory."""
        return [
            tab for tab in self.context.editor.list_open_tabs()
            if uri_within_project(tab.uri, project.path)
        ]

    def capture(self, project: Project) -> List[TabRecord]:
        """Capture the project's open tabs as records, in strip order."""
        records = [tab_to_record(tab) for tab in self.project_tabs(project)]
        records.sort(key=TabRecord.sort_key)
        logger.debug(f"Found {len(records)} tabs for project: {project.name}")
        return records

    def active_uri(self, project: Project, records: List[TabRecord]) -> Optional[str]:
        """Active tab URI if it belongs to the project."""
        active = self.context.editor.active_tab_uri()
        if active and uri_within_project(active, project.path):
            return active
        for record in records:
            if record.is_active:
                return record.uri
        return None

    def snapshot(self, project: Project) -> SessionSnapshot:
        """Build a full session snapshot for the project."""
        records = self.capture(project)
        active = self.active_uri(project, records)
        return SessionSnapshot(
            project_id=project.id,
            tabs=records,
            active_tab_uri=active,
            explorer_hint=ExplorerHint(selected_file=active),
        )
