"""
Tab restore.

Reopens a session snapshot:
1. Drop entries whose file is gone or that left the project boundary
2. Open the remaining non-active tabs in (view column, tab index) order
3. Open the active tab last, focused, so the strip does not flicker
4. Clamp each saved selection to the reopened document's bounds

Restoration is best-effort: a failed open is logged and skipped, never
aborting the rest. Large restores run in batches with a short yield between
them so the host can service other pending work.
"""

import asyncio
import logging
from typing import Iterator, List, Optional, Sequence, TypeVar

from ..core.host import DocumentView, uri_to_path
from ..errors import ErrorCode, TransientIOError
from ..logging_config import log_async_performance, log_switcher_error
from ..models.project import Project
from ..models.session import SessionSnapshot, TabRecord
from ..models.switch import OperationMetrics, RestoreResult
from ..state import SwitcherContext
from .tab_capture import is_within_project

logger = logging.getLogger(__name__)

T = TypeVar("T")


def batched(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most ``size`` items."""
    for start in range(0, len(items), size):
        yield items[start:start + size]


def pick_active(tabs: Sequence[TabRecord], active_uri: Optional[str]) -> Optional[TabRecord]:
    """Tab to focus last: the recorded active URI, else the flagged tab, else the first."""
    if not tabs:
        return None
    if active_uri:
        for record in tabs:
            if record.uri == active_uri:
                return record
    for record in tabs:
        if record.is_active:
            return record
    return tabs[0]


class TabRestoreEngine:
    """Reopens snapshots through the editor host."""

    def __init__(self, context: SwitcherContext):
        self.context = context

    async def validate(self, tabs: Sequence[TabRecord], project: Project) -> List[TabRecord]:
        """Keep entries that still exist on disk and sit inside the project."""
        valid: List[TabRecord] = []

        for record in tabs:
            path = uri_to_path(record.uri)
            if path is None:
                logger.debug(f"Skipping non-file tab: {record.uri}")
                continue

            if not is_within_project(path, project.path):
                logger.debug(f"Skipping file outside current project: {record.uri}")
                continue

            try:
                exists = await self.context.filesystem.exists(path)
            except OSError as e:
                log_switcher_error(
                    logger,
                    TransientIOError(record.uri, str(e), code=ErrorCode.FILE_STAT_FAILED),
                    level=logging.WARNING,
                )
                continue

            if not exists:
                logger.debug(f"File no longer exists, skipping: {record.uri}")
                continue

            valid.append(record)

        return valid

    async def open_tab(
        self,
        record: TabRecord,
        set_active: bool = False,
        document_token: Optional[int] = None,
    ) -> Optional[DocumentView]:
        """Open one tab and apply its clamped selection.

        Returns:
            The opened view, or None if the open failed (logged)
        """
        try:
            view = await self.context.editor.open_document(
                record.uri,
                view_column=record.view_column,
                preview=False,
                preserve_focus=not set_active,
                document_token=document_token,
            )

            if record.selection:
                selection = record.selection.clamped(view.line_lengths)
                await self.context.editor.apply_selection(view, selection, reveal=set_active)

            logger.debug(f"Opened tab: {record.uri}")
            return view

        except Exception as e:
            log_switcher_error(logger, TransientIOError(record.uri, str(e)), level=logging.WARNING)
            return None

    @log_async_performance
    async def restore(self, snapshot: SessionSnapshot, project: Project) -> RestoreResult:
        """
        Restore a snapshot for the project.

        Args:
            snapshot: Session snapshot to reopen
            project: Project whose boundary the tabs must respect

        Returns:
            RestoreResult with requested/valid/restored counts
        """
        metrics = OperationMetrics(operation_type="restore")
        valid = await self.validate(snapshot.tabs, project)

        if not valid:
            logger.debug(f"No valid tabs to restore for project {project.name}")
            return RestoreResult(
                requested=snapshot.tab_count, valid=0, restored=0,
                source="session", metrics=metrics.finish(),
            )

        ordered = sorted(valid, key=TabRecord.sort_key)
        active = pick_active(ordered, snapshot.active_tab_uri)
        background = [record for record in ordered if record is not active]

        config = self.context.config
        batch_size = len(background) or 1
        if len(valid) > config.large_restore_threshold:
            batch_size = config.restore_batch_size

        restored = 0
        batches = list(batched(background, batch_size))
        for index, batch in enumerate(batches):
            for record in batch:
                if await self.open_tab(record):
                    restored += 1
            metrics.batches += 1

            if index + 1 < len(batches):
                progress = round(restored / len(valid) * 100)
                logger.debug(f"Restoring tabs: {progress}%")
                await asyncio.sleep(config.restore_batch_yield_ms / 1000)

        if active and await self.open_tab(active, set_active=True):
            restored += 1

        metrics.tab_count = restored
        metrics.finish()

        logger.info(
            f"Restored session for project {project.name}: {restored}/{len(valid)} tabs "
            f"({snapshot.tab_count - len(valid)} dropped as missing or out of project)"
        )
        return RestoreResult(
            requested=snapshot.tab_count,
            valid=len(valid),
            restored=restored,
            source="session",
            metrics=metrics,
        )
