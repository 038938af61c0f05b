"""
Session store.

Keeps one SessionSnapshot per project id and persists the whole mapping under
a single global storage key. Every save rewrites the full mapping. Storage
failures are logged and reported through return values; losing a session is
an accepted degradation.

The store does not look at ``Project.session_enabled``; callers gate access.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import ValidationError

from ..errors import ErrorCode, PersistenceError
from ..logging_config import log_switcher_error
from ..models.session import SessionSnapshot
from ..state import SwitcherContext

logger = logging.getLogger(__name__)


class SessionStore:
    """Durable per-project tab snapshots."""

    def __init__(self, context: SwitcherContext):
        self.context = context
        self._sessions: Dict[str, SessionSnapshot] = {}

    def load(self) -> int:
        """Load the whole session mapping from storage.

        Returns:
            Number of sessions loaded
        """
        key = self.context.keys.sessions
        try:
            stored = self.context.global_storage.get(key) or {}
        except Exception as e:
            log_switcher_error(
                logger,
                PersistenceError(key, str(e), code=ErrorCode.STORAGE_READ_FAILED),
                operation="Load sessions",
            )
            stored = {}

        sessions: Dict[str, SessionSnapshot] = {}
        for project_id, data in stored.items():
            try:
                sessions[project_id] = SessionSnapshot(**data)
            except (ValidationError, TypeError) as e:
                logger.warning(f"Dropping invalid session for project {project_id}: {e}")

        self._sessions = sessions
        logger.debug(f"Loaded {len(sessions)} project sessions")
        return len(sessions)

    async def save(self, snapshot: SessionSnapshot) -> bool:
        """Upsert a snapshot and rewrite the persisted mapping.

        Returns:
            True if persisted, False if the storage write failed
        """
        self._sessions[snapshot.project_id] = snapshot
        saved = await self._write()
        if saved:
            logger.debug(
                f"Saved session for project {snapshot.project_id} with {snapshot.tab_count} tabs"
            )
        return saved

    def get(self, project_id: str) -> Optional[SessionSnapshot]:
        snapshot = self._sessions.get(project_id)
        return snapshot.model_copy(deep=True) if snapshot else None

    def has(self, project_id: str) -> bool:
        return project_id in self._sessions

    def project_ids(self) -> List[str]:
        return list(self._sessions.keys())

    def __len__(self) -> int:
        return len(self._sessions)

    async def clear(self, project_id: str) -> bool:
        """Remove one project's snapshot.

        Returns:
            True if a snapshot was removed
        """
        if project_id not in self._sessions:
            return False
        del self._sessions[project_id]
        await self._write()
        logger.info(f"Cleared session for project {project_id}")
        return True

    async def clear_all(self) -> int:
        """Remove every snapshot.

        Returns:
            Number of snapshots removed
        """
        count = len(self._sessions)
        self._sessions.clear()
        await self._write()
        logger.info(f"Cleared all {count} project sessions")
        return count

    def session_info(self, project_id: str) -> Dict:
        """Display summary: has_session, tab_count, last_saved."""
        snapshot = self._sessions.get(project_id)
        return {
            "has_session": snapshot is not None,
            "tab_count": snapshot.tab_count if snapshot else 0,
            "last_saved": datetime.fromtimestamp(snapshot.last_saved) if snapshot else None,
        }

    async def _write(self) -> bool:
        key = self.context.keys.sessions
        data = {pid: s.model_dump(mode="json") for pid, s in self._sessions.items()}
        try:
            await self.context.global_storage.set(key, data)
        except Exception as e:
            log_switcher_error(logger, PersistenceError(key, str(e)), operation="Save sessions")
            return False
        return True
