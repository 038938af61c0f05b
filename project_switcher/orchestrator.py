"""
Switch orchestrator.

Owns the switcher context and every component for one editor window, runs the
switch sequence and exposes the operations a host binds to commands and
shortcuts. Nothing raises across this boundary: failures are logged as one
structured record, surfaced to the user through the host and reported back
as return values.

Switch sequence:
1. Guard: target enabled
2. Guard: target directory exists
3. Capture and persist the old project's tabs (when sessions are enabled)
4. Point the directory filter at the new project
5. Hide (optimized) or close (naive) the old project's tabs
6. Show the new project's tabs (cache entry, else saved session)
7. Reveal the new project in the file browser
8. Commit the active pointer, last-used time and registry
"""

import logging
import time
from pathlib import Path
from typing import Dict, List, Optional

from .errors import (
    DirectoryReadError,
    DisabledProjectError,
    EarlyReject,
    ErrorCode,
    PathGoneError,
    PersistenceError,
    ProjectNotFoundError,
    SwitcherError,
    SwitcherUnavailableError,
    SwitchFailedError,
    SwitchInProgressError,
)
from .core.host import uri_to_path
from .logging_config import log_switcher_error, log_timing
from .models.project import Project
from .models.session import SessionSnapshot
from .models.switch import OperationMetrics, RestoreResult, SwitchResult, SwitchState
from .services.directory_filter import DirectoryVisibilityFilter
from .services.project_registry import Direction, ProjectRegistry
from .services.session_store import SessionStore
from .services.switch_strategy import build_strategies, choose_strategy
from .services.tab_cache import OptimizedTabCache
from .services.tab_capture import TabCaptureEngine, uri_within_project
from .services.tab_restore import TabRestoreEngine
from .services.workspace_detection import (
    WorkspaceMode,
    detect_workspace_mode,
    list_project_directories,
)
from .state import SwitcherContext

logger = logging.getLogger(__name__)


class SwitchOrchestrator:
    """Project switcher for one editor window."""

    def __init__(self, context: SwitcherContext):
        """
        Initialize the orchestrator and its components.

        Args:
            context: Host collaborators, storage scopes and configuration
        """
        self.context = context

        self.registry = ProjectRegistry(context)
        self.filter = DirectoryVisibilityFilter(context)
        self.sessions = SessionStore(context)
        self.capture = TabCaptureEngine(context)
        self.restore = TabRestoreEngine(context)
        self.cache = OptimizedTabCache(context, self.capture, self.restore, self.sessions)
        self.strategies = build_strategies(self.capture, self.cache)

        self.state = SwitchState.IDLE
        self.last_result: Optional[SwitchResult] = None
        self.workspace_mode = WorkspaceMode.NONE
        self._switch_target: Optional[str] = None

    # =========================================================================
    # State
    # =========================================================================

    @property
    def is_switching(self) -> bool:
        return self._switch_target is not None

    @property
    def autosave_suppressed(self) -> bool:
        """Focus-triggered saves are ignored while a switch is running."""
        return self.is_switching

    def active_project(self) -> Optional[Project]:
        if not self.context.active_project_id:
            return None
        return self.registry.get(self.context.active_project_id)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def initialize(self) -> WorkspaceMode:
        """
        Load persisted state and re-apply filtering.

        Returns:
            Detected workspace mode
        """
        storage = self.context.global_storage
        keys = self.context.keys

        self.registry.load()
        self.sessions.load()
        self.filter.load_state()

        self.context.switcher_enabled = bool(storage.get(keys.switcher_enabled, False))

        active_id = storage.get(keys.active_project)
        if active_id and self.registry.get(active_id):
            self.context.active_project_id = active_id
        elif active_id:
            logger.warning(f"Persisted active project {active_id} no longer exists")

        self.workspace_mode = await detect_workspace_mode(
            self.context.filesystem, self.context.workspace_root, self.context.config.directory_denylist
        )
        if self.context.switcher_enabled and self.workspace_mode != WorkspaceMode.PARENT:
            logger.warning(
                f"Project switcher enabled but workspace mode is {self.workspace_mode.value}"
            )

        self.cache.attach()

        try:
            restored = await self.filter.restore_state()
            active = self.active_project()
            if not restored and self.context.switcher_enabled and active:
                await self.filter.enable(active.path)
        except SwitcherError as e:
            self._report(e, operation="Restore filtering state")

        logger.info(
            f"Project switcher initialized: {len(self.registry.list())} projects, "
            f"{len(self.sessions)} sessions, mode={self.workspace_mode.value}, "
            f"enabled={self.context.switcher_enabled}"
        )
        return self.workspace_mode

    async def shutdown(self) -> None:
        """Save the current session, show every directory again and detach."""
        await self.save_current_session(trigger="shutdown")

        try:
            await self.filter.disable()
        except SwitcherError as e:
            self._report(e, operation="Restore original excludes")

        self.cache.detach()
        logger.info("Project switcher shut down")

    async def enable_switcher(self, selected_paths: Optional[List[str]] = None) -> bool:
        """
        Turn the switcher on for a parent-directory workspace.

        Replaces the registry with one project per selected subdirectory (at
        most the enabled capacity), activates the first one and filters to it.

        Args:
            selected_paths: Subdirectories to register (default: all visible ones)

        Returns:
            True if the switcher was enabled
        """
        context = self.context
        root = context.workspace_root

        self.workspace_mode = await detect_workspace_mode(
            context.filesystem, root, context.config.directory_denylist
        )
        if self.workspace_mode != WorkspaceMode.PARENT:
            self._report(SwitcherUnavailableError(
                "Project switcher requires a parent directory with 2+ project subdirectories"
            ))
            return False

        if selected_paths is None:
            try:
                names = await list_project_directories(
                    context.filesystem, root, context.config.directory_denylist
                )
            except OSError as e:
                self._report(DirectoryReadError(root, str(e)), operation="Enable project switcher")
                return False
            selected_paths = [str(Path(root) / name) for name in names]

        limit = context.config.max_enabled_projects
        if len(selected_paths) > limit:
            logger.warning(f"Only the first {limit} of {len(selected_paths)} directories become projects")
            selected_paths = selected_paths[:limit]

        if not selected_paths:
            self._report(SwitcherUnavailableError("No project directories selected"))
            return False

        logger.info(f"Enabling project switcher for {len(selected_paths)} subdirectories")

        projects = [
            Project(
                name=Path(path).name,
                path=path,
                order=slot,
                description=f"Project in {Path(path).name}",
            )
            for slot, path in enumerate(selected_paths, start=1)
        ]

        try:
            await self.filter.store_original()

            self.registry.replace_all(projects)
            await self.registry.save()
            await self.sessions.clear_all()
            self.cache.clear_all()

            context.switcher_enabled = True
            await self._persist_global(context.keys.switcher_enabled, True)

            first = projects[0]
            context.set_active_project(first.id)
            await self._persist_global(context.keys.active_project, first.id)

            await self.filter.enable(first.path)
        except SwitcherError as e:
            self._report(e, operation="Enable project switcher")
            return False

        logger.info(f"Project switcher enabled, active project: {first.name}")
        return True

    async def disable_switcher(self) -> bool:
        """
        Turn the switcher off: restore the original excludes exactly, then drop
        projects, sessions and cached tabs.

        Returns:
            True if the switcher was disabled
        """
        try:
            await self.filter.teardown()
        except SwitcherError as e:
            self._report(e, operation="Disable project switcher")
            return False

        self.registry.clear()
        await self.registry.save()
        await self.sessions.clear_all()
        self.cache.clear_all()

        self.context.switcher_enabled = False
        self.context.set_active_project(None)
        await self._persist_global(self.context.keys.switcher_enabled, False)
        await self._persist_global(self.context.keys.active_project, None)

        logger.info("Project switcher disabled")
        return True

    async def hard_reset(self) -> bool:
        """
        Close every tab, restore the original excludes and erase all persisted
        switcher state in both scopes.

        Returns:
            True if every step succeeded
        """
        logger.warning("Starting hard reset - all project switcher data will be deleted")
        ok = True

        try:
            await self.context.editor.close_all_tabs()
        except Exception as e:
            logger.error(f"Failed to close editors during hard reset: {e}")
            ok = False

        try:
            await self.filter.teardown()
        except SwitcherError as e:
            self._report(e, operation="Hard reset")
            ok = False

        keys = self.context.keys
        scopes = (
            (self.context.global_storage, (keys.projects, keys.sessions, keys.switcher_enabled, keys.active_project)),
            (self.context.workspace_storage, (keys.original_excludes, keys.filtering, keys.filtered_project)),
        )
        for storage, names in scopes:
            for key in names:
                try:
                    await storage.delete(key)
                except Exception as e:
                    log_switcher_error(logger, PersistenceError(key, str(e)), operation="Hard reset")
                    ok = False

        self.registry.load()
        self.sessions.load()
        self.filter.load_state()
        self.cache.clear_all()

        self.context.switcher_enabled = False
        self.context.set_active_project(None)
        self.state = SwitchState.IDLE

        if ok:
            logger.warning("Hard reset completed - all project switcher data cleared")
        return ok

    # =========================================================================
    # Switching
    # =========================================================================

    async def switch_to(self, project_id: str) -> SwitchResult:
        """
        Switch the window to another project.

        Args:
            project_id: Target project id

        Returns:
            SwitchResult; ``success`` is False on rejection or step failure
        """
        start = time.perf_counter()
        old_id = self.context.active_project_id

        # No await between the busy check and the claim
        if self._switch_target is not None:
            return self._reject(SwitchInProgressError(self._switch_target, project_id), old_id, project_id)
        self._switch_target = project_id

        try:
            project = await self._guard_switch(project_id)
        except EarlyReject as e:
            self._switch_target = None
            return self._reject(e, old_id, project_id)

        self.state = SwitchState.SWITCHING
        old = self.registry.get(old_id) if old_id else None
        result = SwitchResult(success=False, project_from=old_id, project_to=project_id)

        logger.info(f"Switching project: {old.name if old else None} → {project.name}")

        same_project = old is not None and old.id == project.id
        strategy = None

        step = "capture"
        try:
            if same_project:
                logger.info(f"Already on project {project.name}, re-applying filter and focus")
            else:
                if old is not None and old.session_enabled:
                    metrics = OperationMetrics(operation_type="capture")
                    with log_timing(f"Capture session for {old.name}", logger):
                        snapshot = self.capture.snapshot(old)
                        await self.sessions.save(snapshot)
                    result.captured_tabs = metrics.tab_count = snapshot.tab_count
                    result.phases.append(metrics.finish())

                current_tabs = len(self.capture.project_tabs(old)) if old else 0
                target_tabs = self.cache.tab_count(project)
                strategy = self.strategies[choose_strategy(current_tabs, target_tabs, self.context.config)]
                result.strategy = strategy.name
                logger.debug(
                    f"Using {strategy.name} strategy ({current_tabs} current + {target_tabs} target tabs)"
                )

            step = "filter"
            await self._apply_filter(project)

            if strategy is not None:
                step = "hide"
                if old is not None:
                    metrics = OperationMetrics(operation_type="hide")
                    result.hidden_tabs = metrics.tab_count = await strategy.hide(old)
                    result.phases.append(metrics.finish())

                step = "show"
                if project.session_enabled:
                    result.restore = await strategy.show(project)
                    if result.restore.metrics is not None:
                        result.phases.append(result.restore.metrics)
                else:
                    self.cache.forget(project.id)
                    logger.debug(f"Session management disabled for {project.name}, not restoring tabs")

            step = "focus"
            await self._focus_project(project)

            step = "commit"
            self.context.set_active_project(project.id)
            project.touch()
            await self.registry.save()
            await self._persist_global(self.context.keys.active_project, project.id)

            result.success = True
            self.state = SwitchState.IDLE

        except Exception as e:
            error = e if isinstance(e, SwitcherError) else SwitchFailedError(step, str(e), project_id)
            self._report(error, operation=f"Switch to {project.name}")

            if self.context.active_project_id != old_id:
                self.context.active_project_id = old_id
            self.state = SwitchState.FAILED
            result.failed_step = step
            result.error = error.to_dict()

        finally:
            self._switch_target = None

        result.total_duration_ms = (time.perf_counter() - start) * 1000
        self.last_result = result

        if result.success:
            logger.info(
                f"Switched to project {project.name} in {result.total_duration_ms:.1f}ms "
                f"(captured {result.captured_tabs}, hidden {result.hidden_tabs}, "
                f"restored {result.restored_tabs})"
            )
        return result

    async def switch_to_order(self, n: int) -> SwitchResult:
        """Switch to the nth enabled project (shortcut slot)."""
        project = self.registry.get_by_dynamic_order(n)
        if project is None:
            error = ProjectNotFoundError(f"#{n}")
            self._report(error, level=logging.WARNING, operation="Switch project")
            return SwitchResult(
                success=False,
                project_from=self.context.active_project_id,
                failed_step="guard",
                error=error.to_dict(),
            )
        return await self.switch_to(project.id)

    def _reject(self, error: EarlyReject, old_id: Optional[str], project_id: str) -> SwitchResult:
        self._report(error, level=logging.WARNING, operation="Switch project")
        return SwitchResult(
            success=False,
            project_from=old_id,
            project_to=project_id,
            failed_step="guard",
            error=error.to_dict(),
        )

    async def _guard_switch(self, project_id: str) -> Project:
        project = self.registry.require(project_id)
        if not project.enabled:
            raise DisabledProjectError(project.id, project.name)

        try:
            exists = await self.context.filesystem.is_dir(project.path)
        except OSError as e:
            logger.debug(f"Could not check {project.path}: {e}")
            exists = False
        if not exists:
            raise PathGoneError(project.id, project.path)

        return project

    async def _apply_filter(self, project: Project) -> None:
        if self.context.switcher_enabled:
            await self.filter.enable(project.path)
        else:
            await self.filter.update(project.path)

    async def _focus_project(self, project: Project) -> None:
        """Reveal the project directory, then its hinted file when inside the project."""
        editor = self.context.editor
        await editor.reveal_in_explorer(project.path)

        snapshot = self.sessions.get(project.id)
        hint = snapshot.explorer_hint.selected_file if snapshot and snapshot.explorer_hint else None
        if not hint or not uri_within_project(hint, project.path):
            return

        try:
            await editor.reveal_in_explorer(uri_to_path(hint))
        except Exception as e:
            logger.warning(f"Failed to reveal selected file {hint}: {e}")

    # =========================================================================
    # Sessions
    # =========================================================================

    async def save_current_session(self, trigger: str = "manual") -> bool:
        """
        Capture and persist the active project's tabs.

        Args:
            trigger: What asked for the save, for logging

        Returns:
            True if a snapshot was persisted
        """
        project = self.active_project()
        if project is None:
            logger.debug("No current project to save session for")
            return False
        return await self._save_session(project, trigger)

    async def save_session_for_project(self, project_id: str) -> bool:
        """Capture the currently open tabs that belong to a specific project."""
        project = self.registry.get(project_id)
        if project is None:
            logger.warning(f"Project not found: {project_id}")
            return False
        saved = await self._save_session(project, "manual")
        if saved:
            logger.info(f"Manually saved session for project {project.name}")
        return saved

    async def _save_session(self, project: Project, trigger: str) -> bool:
        if not project.session_enabled:
            logger.debug(f"Session management disabled for project {project.name}")
            return False

        try:
            snapshot = self.capture.snapshot(project)
        except Exception as e:
            log_switcher_error(
                logger,
                PersistenceError(self.context.keys.sessions, str(e), code=ErrorCode.STORAGE_READ_FAILED),
                operation=f"Capture session ({trigger})",
            )
            return False

        saved = await self.sessions.save(snapshot)
        if saved:
            logger.debug(f"Saved session for {project.name} ({trigger}): {snapshot.tab_count} tabs")
        return saved

    async def restore_session(self, project_id: str) -> RestoreResult:
        """Reopen a project's saved session without switching."""
        project = self.registry.get(project_id)
        if project is None or not project.session_enabled:
            return RestoreResult(source="none")

        snapshot: Optional[SessionSnapshot] = self.sessions.get(project_id)
        if snapshot is None:
            logger.debug(f"No session to restore for project: {project.name}")
            return RestoreResult(source="none")

        return await self.restore.restore(snapshot, project)

    def get_project_tab_count(self, project_id: str) -> int:
        project = self.registry.get(project_id)
        if project is None:
            return 0
        return self.cache.tab_count(project)

    async def clear_session(self, project_id: str) -> bool:
        """Forget a project's saved session and cached tabs."""
        self.cache.forget(project_id)
        return await self.sessions.clear(project_id)

    async def clear_all_sessions(self) -> int:
        self.cache.clear_all()
        return await self.sessions.clear_all()

    def get_session_info(self, project_id: str) -> Dict:
        return self.sessions.session_info(project_id)

    # =========================================================================
    # Registry operations
    # =========================================================================

    async def add_project(
        self,
        path: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Optional[Project]:
        """
        Register a project directory.

        Returns:
            The new project, or None if the request was rejected
        """
        try:
            if not await self.context.filesystem.is_dir(path):
                raise PathGoneError("<new>", path)
            project = self.registry.add(path, name=name, description=description)
        except EarlyReject as e:
            self._report(e, level=logging.WARNING, operation="Add project")
            return None

        await self.registry.save()
        return project

    async def set_project_enabled(self, project_id: str, value: bool) -> bool:
        try:
            self.registry.set_enabled(project_id, value)
        except EarlyReject as e:
            self._report(e, level=logging.WARNING, operation="Toggle project")
            return False

        await self.registry.save()
        return True

    async def set_session_enabled(self, project_id: str, value: bool) -> bool:
        try:
            self.registry.set_session_enabled(project_id, value)
        except EarlyReject as e:
            self._report(e, level=logging.WARNING, operation="Toggle session management")
            return False

        await self.registry.save()
        return True

    async def move_project(self, project_id: str, direction: Direction) -> bool:
        try:
            moved = self.registry.move(project_id, direction)
        except EarlyReject as e:
            self._report(e, level=logging.WARNING, operation="Move project")
            return False

        if moved:
            await self.registry.save()
        return moved

    async def delete_project(self, project_id: str) -> bool:
        """Remove a project together with its session and cached tabs."""
        try:
            project = self.registry.delete(project_id)
        except EarlyReject as e:
            self._report(e, level=logging.WARNING, operation="Delete project")
            return False

        await self.registry.save()
        await self.sessions.clear(project_id)
        self.cache.forget(project_id)

        if self.context.active_project_id == project.id:
            self.context.set_active_project(None)
            await self._persist_global(self.context.keys.active_project, None)
            logger.info("Cleared active project state (deleted project was active)")

        return True

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def status(self) -> Dict:
        active = self.active_project()
        return {
            "state": self.state.value,
            "switcher_enabled": self.context.switcher_enabled,
            "workspace_mode": self.workspace_mode.value,
            "active_project": active.name if active else None,
            "projects": len(self.registry.list()),
            "enabled_projects": len(self.registry.enabled_projects()),
            "sessions": len(self.sessions),
            "filter": self.filter.status(),
            "last_switch_ms": self.last_result.total_duration_ms if self.last_result else None,
        }

    # =========================================================================
    # Internal
    # =========================================================================

    def _report(
        self,
        error: SwitcherError,
        level: int = logging.ERROR,
        operation: Optional[str] = None,
    ) -> None:
        """Log one structured record and show the short message through the host."""
        log_switcher_error(logger, error, level=level, operation=operation)
        severity = "warning" if level < logging.ERROR else "error"
        try:
            self.context.editor.notify(severity, error.user_message)
        except Exception as e:
            logger.debug(f"Host notification failed: {e}")

    async def _persist_global(self, key: str, value) -> None:
        storage = self.context.global_storage
        try:
            if value is None:
                await storage.delete(key)
            else:
                await storage.set(key, value)
        except Exception as e:
            log_switcher_error(logger, PersistenceError(key, str(e)), level=logging.WARNING)
