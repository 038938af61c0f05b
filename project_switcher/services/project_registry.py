"""
ProjectRegistry for project CRUD, enable/disable and ordering.

Stored ``order`` values are unique among enabled projects and map to the 1-9
shortcut slots. The dynamic order (rank among enabled projects) is never
stored; it is recomputed from the stored orders on every lookup.
"""

import logging
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import ValidationError

from ..errors import (
    CapacityExceededError,
    DuplicatePathError,
    MinimumEnabledViolationError,
    PersistenceError,
    ProjectNotFoundError,
)
from ..logging_config import log_switcher_error
from ..models.project import Project
from ..state import SwitcherContext

logger = logging.getLogger(__name__)

Direction = Literal["up", "down"]


class ProjectRegistry:
    """Owns the project records of one switcher context."""

    def __init__(self, context: SwitcherContext):
        """
        Initialize ProjectRegistry.

        Args:
            context: Shared switcher context (storage, config, switcher flag)
        """
        self.context = context
        self._projects: List[Project] = []

    # =========================================================================
    # Persistence
    # =========================================================================

    def load(self) -> int:
        """Load projects from global storage.

        Invalid records are logged and skipped.

        Returns:
            Number of projects loaded
        """
        stored = self.context.global_storage.get(self.context.keys.projects) or []
        projects: List[Project] = []

        for record in stored:
            try:
                projects.append(Project(**record))
            except (ValidationError, TypeError) as e:
                logger.error(f"Skipping invalid project record {record!r}: {e}")

        self._projects = projects
        logger.debug(f"Loaded {len(projects)} projects")
        return len(projects)

    async def save(self) -> bool:
        """Persist the project list.

        Returns:
            True if written, False on storage failure (logged, not raised)
        """
        data = [p.model_dump(mode="json") for p in self._projects]
        try:
            await self.context.global_storage.set(self.context.keys.projects, data)
        except Exception as e:
            log_switcher_error(logger, PersistenceError(self.context.keys.projects, str(e)), operation="Save projects")
            return False

        logger.debug(f"Saved {len(self._projects)} projects")
        return True

    # =========================================================================
    # Queries
    # =========================================================================

    def list(self) -> List[Project]:
        """All projects in insertion order."""
        return list(self._projects)

    def get(self, project_id: str) -> Optional[Project]:
        for project in self._projects:
            if project.id == project_id:
                return project
        return None

    def require(self, project_id: str) -> Project:
        """Get project by id.

        Raises:
            ProjectNotFoundError: If project doesn't exist
        """
        project = self.get(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def find_by_path(self, path: str) -> Optional[Project]:
        """Find a project whose directory resolves to the same path."""
        normalized = Path(path).expanduser().resolve()
        for project in self._projects:
            if project.resolved_path == normalized:
                return project
        return None

    def enabled_projects(self) -> List[Project]:
        """Enabled projects sorted by stored order, ties in insertion order."""
        return sorted((p for p in self._projects if p.enabled), key=lambda p: p.order)

    def get_by_dynamic_order(self, n: int) -> Optional[Project]:
        """Nth enabled project (1-based) in stored order, None when out of range."""
        if n < 1:
            return None
        enabled = self.enabled_projects()
        if n > len(enabled):
            return None
        return enabled[n - 1]

    def dynamic_order_of(self, project_id: str) -> Optional[int]:
        """Rank of a project among enabled projects, None if disabled or unknown."""
        for rank, project in enumerate(self.enabled_projects(), start=1):
            if project.id == project_id:
                return rank
        return None

    def next_available_order(self) -> Optional[int]:
        """Lowest free slot 1-9 among enabled projects, None when all are taken."""
        used = {p.order for p in self._projects if p.enabled}
        for slot in range(1, self.context.config.max_enabled_projects + 1):
            if slot not in used:
                return slot
        return None

    # =========================================================================
    # Mutations
    # =========================================================================

    def add(self, path: str, name: Optional[str] = None, description: Optional[str] = None) -> Project:
        """
        Register a new enabled project.

        Args:
            path: Absolute project directory
            name: Display name (default: directory basename)
            description: Optional description

        Returns:
            Created Project instance

        Raises:
            DuplicatePathError: If a project already resolves to this path
            CapacityExceededError: If the enabled capacity is reached
        """
        existing = self.find_by_path(path)
        if existing:
            raise DuplicatePathError(path, existing.name)

        self._check_capacity()

        project = Project(
            name=name or Path(path).name,
            path=path,
            description=description,
            order=self._append_order(),
        )
        self._projects.append(project)

        logger.info(f"Added project: {project.name} at {project.path} with order {project.order}")
        return project

    def set_enabled(self, project_id: str, value: bool) -> Project:
        """
        Enable or disable a project.

        Re-enabling appends the project after the current last enabled project;
        a previously freed rank is never reused.

        Raises:
            ProjectNotFoundError: If project doesn't exist
            CapacityExceededError: If enabling exceeds capacity
            MinimumEnabledViolationError: If disabling leaves too few enabled
                projects while the switcher is active
        """
        project = self.require(project_id)
        if project.enabled == value:
            return project

        if value:
            self._check_capacity()
            project.order = self._append_order()
            project.enabled = True
            logger.info(f"Enabled project {project.name} with order {project.order}")
        else:
            remaining = len(self.enabled_projects()) - 1
            minimum = self.context.config.min_enabled_projects
            if self.context.switcher_enabled and remaining < minimum:
                raise MinimumEnabledViolationError(project_id, minimum)
            project.enabled = False
            logger.info(f"Disabled project {project.name}")

        return project

    def set_session_enabled(self, project_id: str, value: bool) -> Project:
        """Toggle session management for a project."""
        project = self.require(project_id)
        project.session_enabled = value
        logger.info(f"Session management {'enabled' if value else 'disabled'} for {project.name}")
        return project

    def move(self, project_id: str, direction: Direction) -> bool:
        """
        Swap stored order with the adjacent enabled project.

        Returns:
            True if moved, False at the sequence boundary or for disabled projects

        Raises:
            ProjectNotFoundError: If project doesn't exist
        """
        project = self.require(project_id)
        sequence = self.enabled_projects()

        if not project.enabled:
            logger.debug(f"Cannot move disabled project {project.name}")
            return False

        index = next(i for i, p in enumerate(sequence) if p.id == project_id)
        target_index = index - 1 if direction == "up" else index + 1

        if target_index < 0 or target_index >= len(sequence):
            logger.debug(f"Cannot move project {project.name} {direction} - already at boundary")
            return False

        target = sequence[target_index]
        project.order, target.order = target.order, project.order

        logger.info(f"Moved project {project.name} {direction}")
        return True

    def delete(self, project_id: str) -> Project:
        """
        Remove a project.

        Raises:
            ProjectNotFoundError: If project doesn't exist
        """
        project = self.require(project_id)
        self._projects.remove(project)
        logger.info(f"Deleted project: {project.name}")
        return project

    def replace_all(self, projects: List[Project]) -> None:
        """Replace the whole registry (switcher enable)."""
        self._projects = list(projects)

    def clear(self) -> None:
        self._projects = []

    # =========================================================================
    # Internal
    # =========================================================================

    def _check_capacity(self) -> None:
        limit = self.context.config.max_enabled_projects
        if len(self.enabled_projects()) >= limit:
            raise CapacityExceededError(limit)

    def _append_order(self) -> int:
        """Order for a project appended after the last enabled one."""
        enabled = self.enabled_projects()
        if not enabled:
            return 1

        next_order = max(p.order for p in enabled) + 1
        if next_order > self.context.config.max_enabled_projects:
            self._compact(enabled)
            next_order = len(enabled) + 1

        return next_order

    def _compact(self, enabled: List[Project]) -> None:
        """Renumber enabled projects 1..n keeping their relative order."""
        for slot, project in enumerate(enabled, start=1):
            project.order = slot
        logger.debug(f"Compacted orders of {len(enabled)} enabled projects")
