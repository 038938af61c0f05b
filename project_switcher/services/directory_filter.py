"""
Directory visibility filter.

Hides every project directory except the active one from the file browser by
writing exclude patterns into the workspace settings.

The exclude map is always rebuilt from the captured original patterns, never
patched incrementally, and restoration writes the captured original back
verbatim. Nothing is committed to the in-memory state until the settings write
has succeeded, so a failed enable leaves the filter in its previous mode.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

from ..errors import DirectoryReadError, ExcludeWriteError, PersistenceError
from ..logging_config import log_switcher_error
from ..models.filter_state import FilterMode, FilterState
from ..state import SwitcherContext
from .workspace_detection import list_project_directories

logger = logging.getLogger(__name__)


def compute_exclude_map(
    original: Dict[str, Any],
    subdirectories: Iterable[str],
    active_name: str,
) -> Dict[str, Any]:
    """Build the exclude map: original patterns plus every non-active subdirectory.

    A plain ``True`` entry in the original patterns that hides the active
    project's directory by name is dropped, so the active project is always
    visible. Conditional entries (``{"when": ...}``) are kept as they are.

    Args:
        original: Exclude patterns captured before filtering
        subdirectories: Candidate project directory names
        active_name: Basename of the active project directory

    Returns:
        New exclude mapping
    """
    patterns = dict(original)
    if patterns.get(active_name) is True:
        del patterns[active_name]
        logger.debug(f"Original excludes hid active project {active_name}, showing it while filtering")
    for name in subdirectories:
        if name != active_name:
            patterns[name] = True
    return patterns


class DirectoryVisibilityFilter:
    """Owns the original exclude patterns and the filtering mode."""

    def __init__(self, context: SwitcherContext):
        """
        Initialize the filter.

        Args:
            context: Shared switcher context (workspace root, excludes, storage)
        """
        self.context = context
        self._state = FilterState()

    @property
    def state(self) -> FilterState:
        return self._state.model_copy(deep=True)

    @property
    def mode(self) -> FilterMode:
        return self._state.mode

    def is_filtering(self) -> bool:
        return self._state.currently_filtering

    def load_state(self) -> FilterMode:
        """Restore filter bookkeeping from workspace storage.

        Returns:
            Mode after loading
        """
        storage = self.context.workspace_storage
        keys = self.context.keys

        original = storage.get(keys.original_excludes)
        if original is not None:
            self._state = FilterState(
                original_exclude_patterns=dict(original),
                currently_filtering=bool(storage.get(keys.filtering, False)),
                active_filtered_project_path=storage.get(keys.filtered_project),
            )
        else:
            self._state = FilterState()

        logger.debug(f"Loaded filter state: {self._state.mode.value}")
        return self._state.mode

    async def store_original(self) -> Dict[str, Any]:
        """Capture the pre-filtering exclude patterns (arm the filter).

        Already-armed filters keep their captured patterns. A previously
        persisted capture wins over the live settings, since the live settings
        may already contain filter output.

        Returns:
            The captured original patterns

        Raises:
            ExcludeWriteError: If the live exclude settings cannot be read
        """
        if self._state.is_armed:
            return dict(self._state.original_exclude_patterns)

        keys = self.context.keys
        stored = self.context.workspace_storage.get(keys.original_excludes)
        if stored is not None:
            original = dict(stored)
            logger.debug("Reusing persisted original exclude patterns")
        else:
            try:
                original = dict(self.context.excludes.get_excludes())
            except Exception as e:
                raise ExcludeWriteError(f"cannot read exclude settings: {e}") from e
            await self._persist(keys.original_excludes, original)
            logger.debug(f"Stored original exclude patterns ({len(original)} entries)")

        self._state = FilterState(original_exclude_patterns=original)
        return dict(original)

    async def list_project_directories(self) -> List[str]:
        """Visible immediate subdirectories of the workspace root.

        Raises:
            DirectoryReadError: If there is no workspace root or listing fails
        """
        root = self.context.workspace_root
        if not root:
            raise DirectoryReadError("<none>", "no workspace root is open")

        try:
            return await list_project_directories(
                self.context.filesystem, root, self.context.config.directory_denylist
            )
        except OSError as e:
            raise DirectoryReadError(root, str(e)) from e

    async def enable(self, active_project_path: str) -> Dict[str, Any]:
        """
        Show only the active project's directory.

        Re-entrant: each call recomputes the map from the original patterns.

        Args:
            active_project_path: Path of the project to keep visible

        Returns:
            The exclude mapping that was applied

        Raises:
            DirectoryReadError: If the workspace root cannot be listed
            ExcludeWriteError: If the settings write fails
        """
        original = await self.store_original()
        subdirectories = await self.list_project_directories()

        active_name = Path(active_project_path).name
        patterns = compute_exclude_map(original, subdirectories, active_name)

        try:
            await self.context.excludes.set_excludes(patterns)
        except Exception as e:
            raise ExcludeWriteError(str(e)) from e

        self._state.currently_filtering = True
        self._state.active_filtered_project_path = active_project_path

        keys = self.context.keys
        await self._persist(keys.filtering, True)
        await self._persist(keys.filtered_project, active_project_path)

        hidden = len(patterns) - len(original)
        logger.info(f"Applied project filtering, showing only: {active_name} ({hidden} directories hidden)")
        return patterns

    async def update(self, active_project_path: str) -> bool:
        """Re-target the filter only when it is currently filtering.

        Returns:
            True if the filter was re-applied
        """
        if not self._state.currently_filtering:
            return False
        await self.enable(active_project_path)
        return True

    async def disable(self) -> None:
        """
        Show all directories by writing the original patterns back verbatim.

        Raises:
            ExcludeWriteError: If the settings write fails
        """
        if not self._state.is_armed:
            logger.debug("Filter not armed, nothing to disable")
            return

        original = dict(self._state.original_exclude_patterns)
        try:
            await self.context.excludes.set_excludes(original)
        except Exception as e:
            raise ExcludeWriteError(str(e)) from e

        self._state.currently_filtering = False
        self._state.active_filtered_project_path = None

        keys = self.context.keys
        await self._persist(keys.filtering, False)
        await self._persist(keys.filtered_project, None)

        logger.info("Disabled project filtering, restored original excludes")

    async def teardown(self) -> None:
        """
        Restore the original patterns and forget them (back to unarmed).

        Raises:
            ExcludeWriteError: If the settings write fails
        """
        if not self._state.is_armed:
            return

        await self.disable()

        storage = self.context.workspace_storage
        keys = self.context.keys
        for key in (keys.original_excludes, keys.filtering, keys.filtered_project):
            try:
                await storage.delete(key)
            except Exception as e:
                log_switcher_error(logger, PersistenceError(key, str(e)), level=logging.WARNING)

        self._state = FilterState()
        logger.info("Filter torn down, original exclude configuration restored")

    async def restore_state(self) -> bool:
        """Re-apply a persisted filtering state at startup.

        Returns:
            True if filtering was re-applied
        """
        path = self._state.active_filtered_project_path
        if self._state.currently_filtering and path:
            await self.enable(path)
            return True
        return False

    def status(self) -> Dict:
        path = self._state.active_filtered_project_path
        return {
            "mode": self._state.mode.value,
            "is_filtering": self._state.currently_filtering,
            "active_project": Path(path).name if path else None,
        }

    async def _persist(self, key: str, value) -> None:
        try:
            if value is None:
                await self.context.workspace_storage.delete(key)
            else:
                await self.context.workspace_storage.set(key, value)
        except Exception as e:
            log_switcher_error(logger, PersistenceError(key, str(e)), level=logging.WARNING)
