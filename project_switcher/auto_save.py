"""Auto-save manager for project sessions.

Three host events feed the same save entry point:
- tab focus change: immediate save, ignored while a switch is running
- document edit: debounced save, the timer restarts on every edit
- window blur: immediate save that also cancels a pending debounced save

A debounced save that comes due mid-switch is re-armed instead of capturing a
half-switched tab strip.
"""

import asyncio
import logging
from typing import Optional

from .orchestrator import SwitchOrchestrator

logger = logging.getLogger(__name__)


class AutoSaveManager:
    """Automatic session saving for the active project."""

    def __init__(self, orchestrator: SwitchOrchestrator, debounce_seconds: Optional[float] = None):
        """Initialize auto-save manager.

        Args:
            orchestrator: Orchestrator whose active project is saved
            debounce_seconds: Edit debounce delay (default: from config)
        """
        self.orchestrator = orchestrator
        if debounce_seconds is None:
            debounce_seconds = orchestrator.context.config.autosave_debounce_seconds
        self.debounce_seconds = debounce_seconds

        self._pending: Optional[asyncio.Task] = None
        self._saving = False
        self.save_count = 0

    @property
    def has_pending_save(self) -> bool:
        return self._pending is not None and not self._pending.done()

    async def on_focus_changed(self) -> bool:
        """Active tab changed.

        Returns:
            True if a session was saved
        """
        if self.orchestrator.autosave_suppressed:
            logger.debug("Focus change during project switch, autosave suppressed")
            return False
        return await self._save("focus")

    def on_document_edited(self) -> None:
        """Document content changed: (re)start the debounce timer."""
        if not self.orchestrator.context.active_project_id:
            return
        self._cancel_pending()
        self._pending = asyncio.get_running_loop().create_task(self._debounced_save())

    async def on_window_blur(self) -> bool:
        """Host window lost focus: save now, dropping any pending debounced save."""
        self._cancel_pending()
        if self.orchestrator.is_switching:
            return False
        return await self._save("blur")

    async def flush(self) -> bool:
        """Run a pending debounced save immediately."""
        if not self.has_pending_save:
            return False
        self._cancel_pending()
        return await self._save("flush")

    def dispose(self) -> None:
        self._cancel_pending()
        logger.debug(f"Auto-save disposed after {self.save_count} saves")

    async def _debounced_save(self) -> None:
        try:
            await asyncio.sleep(self.debounce_seconds)
            while self.orchestrator.is_switching:
                logger.debug("Debounced save due during project switch, re-arming")
                await asyncio.sleep(self.debounce_seconds)
        except asyncio.CancelledError:
            return

        self._pending = None
        await self._save("edit")

    async def _save(self, trigger: str) -> bool:
        if self._saving:
            logger.debug(f"Autosave ({trigger}) skipped, a save is already running")
            return False

        self._saving = True
        try:
            saved = await self.orchestrator.save_current_session(trigger=trigger)
        finally:
            self._saving = False

        if saved:
            self.save_count += 1
        return saved

    def _cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
