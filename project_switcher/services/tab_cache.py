"""
Optimized in-memory tab cache.

Hiding a project removes its tabs from the strip but keeps their records, plus
the host's document token for each one that is still resident, in a per-project
entry. Showing replays the entry: the previously-active tab first, then pinned
tabs, then the rest in batches. A token is only reused after a liveness check
against the host; a dead token falls back to a fresh open.

``hide`` and ``show`` are the only mutators of an entry while switching
(``forget`` exists for session clears and project deletion), so the active
project never has an entry.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from ..models.project import Project
from ..models.session import TabRecord
from ..models.switch import OperationMetrics, RestoreResult
from ..state import SwitcherContext
from .session_store import SessionStore
from .tab_capture import TabCaptureEngine, tab_to_record, uri_within_project
from .tab_restore import TabRestoreEngine, batched, pick_active

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Tabs hidden for one project."""

    records: List[TabRecord]
    active_uri: Optional[str] = None
    hidden_at: float = field(default_factory=time.time)


class OptimizedTabCache:
    """Hide/show cache keyed by project id."""

    def __init__(
        self,
        context: SwitcherContext,
        capture: TabCaptureEngine,
        restore: TabRestoreEngine,
        session_store: SessionStore,
    ):
        self.context = context
        self.capture = capture
        self.restore = restore
        self.session_store = session_store

        self._entries: Dict[str, CacheEntry] = {}
        self.visible_tabs: Set[str] = set()
        self._unsubscribe = None

    # =========================================================================
    # Host subscription
    # =========================================================================

    def attach(self) -> None:
        """Start mirroring the live tab strip into ``visible_tabs``."""
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self.context.editor.subscribe_tab_changes(self._on_tabs_changed)
        self._on_tabs_changed()
        logger.debug("Tab cache attached to tab change events")

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
            logger.debug("Tab cache detached from tab change events")

    def _on_tabs_changed(self) -> None:
        self.visible_tabs = {tab.uri for tab in self.context.editor.list_open_tabs()}

    # =========================================================================
    # Hide / show
    # =========================================================================

    async def hide(self, project: Project) -> int:
        """
        Remove the project's tabs from the strip and cache them.

        Args:
            project: Project being switched away from

        Returns:
            Number of tabs hidden
        """
        metrics = OperationMetrics(operation_type="hide")
        tabs = self.capture.project_tabs(project)

        if not tabs:
            self._entries.pop(project.id, None)
            logger.debug(f"No visible tabs to hide for project {project.name}")
            return 0

        records = sorted((tab_to_record(tab) for tab in tabs), key=TabRecord.sort_key)
        active_uri = self.capture.active_uri(project, records)

        for record in records:
            record.document_token = self.context.editor.document_token(record.uri)
        resident = sum(1 for record in records if record.document_token is not None)

        await self.context.editor.close_tabs([record.uri for record in records])

        self._entries[project.id] = CacheEntry(records=records, active_uri=active_uri)
        self.visible_tabs.difference_update(record.uri for record in records)

        metrics.tab_count = len(records)
        metrics.finish()
        logger.info(
            f"Hid {len(records)} tabs for project {project.name} "
            f"({resident} resident documents, {metrics.duration_ms:.1f}ms)"
        )
        return len(records)

    async def show(self, project: Project) -> RestoreResult:
        """
        Bring a project's tabs back.

        Replays the cache entry when one exists, otherwise falls back to the
        persisted session. The entry is dropped once replayed.

        Args:
            project: Project being switched to

        Returns:
            RestoreResult with source "cache", "session" or "none"
        """
        entry = self._entries.get(project.id)
        if entry is None:
            snapshot = self.session_store.get(project.id)
            if snapshot is None:
                logger.debug(f"No cached tabs or session for project {project.name}")
                return RestoreResult(source="none")
            return await self.restore.restore(snapshot, project)

        try:
            return await self._replay(entry, project)
        finally:
            self._entries.pop(project.id, None)

    async def _replay(self, entry: CacheEntry, project: Project) -> RestoreResult:
        metrics = OperationMetrics(operation_type="show")
        valid = await self.restore.validate(entry.records, project)

        active = pick_active(valid, entry.active_uri)
        pinned = [r for r in valid if r.is_pinned and r is not active]
        remainder = [r for r in valid if not r.is_pinned and r is not active]

        restored = 0
        if active and await self._open(active, metrics, set_active=True):
            restored += 1

        for record in pinned:
            if await self._open(record, metrics):
                restored += 1

        config = self.context.config
        batches = list(batched(remainder, config.cache_batch_size))
        for index, batch in enumerate(batches):
            for record in batch:
                if await self._open(record, metrics):
                    restored += 1
            metrics.batches += 1

            if index + 1 < len(batches):
                await asyncio.sleep(config.cache_batch_yield_ms / 1000)

        metrics.tab_count = restored
        metrics.finish()
        logger.info(
            f"Showed {restored}/{len(entry.records)} cached tabs for project {project.name} "
            f"(token hit rate {metrics.cache_hit_rate:.0f}%, {metrics.duration_ms:.1f}ms)"
        )
        return RestoreResult(
            requested=len(entry.records),
            valid=len(valid),
            restored=restored,
            source="cache",
            metrics=metrics,
        )

    async def _open(
        self,
        record: TabRecord,
        metrics: OperationMetrics,
        set_active: bool = False,
    ) -> bool:
        token = record.document_token
        if token is not None:
            if self.context.editor.is_document_live(token):
                metrics.cache_hits += 1
            else:
                logger.debug(f"Cached document for {record.uri} is gone, reopening")
                metrics.cache_misses += 1
                token = None

        view = await self.restore.open_tab(record, set_active=set_active, document_token=token)
        if view is None:
            return False
        self.visible_tabs.add(record.uri)
        return True

    # =========================================================================
    # Entry management
    # =========================================================================

    def has_entry(self, project_id: str) -> bool:
        return project_id in self._entries

    def cached_uris(self, project_id: str) -> List[str]:
        entry = self._entries.get(project_id)
        return [record.uri for record in entry.records] if entry else []

    def forget(self, project_id: str) -> bool:
        """Drop a project's entry (session cleared or project deleted)."""
        removed = self._entries.pop(project_id, None) is not None
        if removed:
            logger.debug(f"Forgot cached tabs for project {project_id}")
        return removed

    def clear_all(self) -> None:
        count = len(self._entries)
        self._entries.clear()
        logger.debug(f"Cleared {count} tab cache entries")

    def tab_count(self, project: Project) -> int:
        """Tabs a project would show: cached, else visible, else saved in its session."""
        entry = self._entries.get(project.id)
        if entry is not None:
            return len(entry.records)

        visible = sum(1 for uri in self.visible_tabs if uri_within_project(uri, project.path))
        if visible:
            return visible

        snapshot = self.session_store.get(project.id)
        return snapshot.tab_count if snapshot else 0
