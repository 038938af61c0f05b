"""
Unit tests for DirectoryVisibilityFilter.

Tests cover:
- Exclude map computation
- Idempotence: enable(A); enable(B); disable() restores the exact original
- Failure handling (listing and settings write) keeps the previous mode
- Persisted state, teardown and startup re-application
"""

from unittest.mock import MagicMock

import pytest

from project_switcher.core.exclude_settings import SettingsParseError
from project_switcher.errors import DirectoryReadError, ExcludeWriteError
from project_switcher.models.filter_state import FilterMode
from project_switcher.services.directory_filter import DirectoryVisibilityFilter, compute_exclude_map

ORIGINAL = {"**/.git": True, "**/__pycache__": True}


@pytest.fixture
def directory_filter(context):
    return DirectoryVisibilityFilter(context)


class TestComputeExcludeMap:
    """Test exclude map computation."""

    def test_hides_non_active_directories(self):
        patterns = compute_exclude_map(ORIGINAL, ["alpha", "beta", "gamma"], "beta")

        assert patterns == {**ORIGINAL, "alpha": True, "gamma": True}

    def test_does_not_mutate_original(self):
        original = dict(ORIGINAL)
        compute_exclude_map(original, ["alpha", "beta"], "alpha")

        assert original == ORIGINAL

    def test_active_project_hidden_by_original_is_shown(self):
        original = {**ORIGINAL, "alpha": True}

        patterns = compute_exclude_map(original, ["alpha", "beta", "gamma"], "alpha")

        assert patterns == {**ORIGINAL, "beta": True, "gamma": True}

    def test_conditional_entry_for_active_project_kept(self):
        original = {"alpha": {"when": "$(basename).ts"}}

        patterns = compute_exclude_map(original, ["alpha", "beta"], "alpha")

        assert patterns == {"alpha": {"when": "$(basename).ts"}, "beta": True}


class TestEnableDisable:
    """Test filter application and restoration."""

    @pytest.mark.asyncio
    async def test_enable_shows_only_active(self, directory_filter, excludes, workspace):
        """Test enable hides sibling projects but not dot or denylisted dirs."""
        patterns = await directory_filter.enable(str(workspace / "alpha"))

        assert patterns == {**ORIGINAL, "beta": True, "gamma": True}
        assert excludes.patterns == patterns
        assert ".git" not in patterns
        assert "node_modules" not in patterns
        assert directory_filter.mode == FilterMode.FILTERING

    @pytest.mark.asyncio
    async def test_enable_twice_then_disable_restores_original(self, directory_filter, excludes, workspace):
        """Test re-targeting rebuilds from the original and disable writes it back verbatim."""
        await directory_filter.enable(str(workspace / "alpha"))
        await directory_filter.enable(str(workspace / "beta"))

        assert excludes.patterns == {**ORIGINAL, "alpha": True, "gamma": True}

        await directory_filter.disable()

        assert excludes.patterns == ORIGINAL
        assert directory_filter.mode == FilterMode.NOT_FILTERING

    @pytest.mark.asyncio
    async def test_original_entry_for_project_name_survives(self, directory_filter, excludes, workspace):
        """Test an original pattern shadowed while filtering comes back unchanged."""
        excludes.patterns = {"beta": False}

        await directory_filter.enable(str(workspace / "alpha"))
        assert excludes.patterns["beta"] is True

        await directory_filter.disable()
        assert excludes.patterns == {"beta": False}

    @pytest.mark.asyncio
    async def test_active_project_hidden_by_original(self, directory_filter, excludes, workspace):
        """Test a project hidden by the user is shown while active and hidden again on disable."""
        excludes.patterns = {**ORIGINAL, "alpha": True}

        await directory_filter.enable(str(workspace / "alpha"))
        assert "alpha" not in excludes.patterns

        await directory_filter.disable()
        assert excludes.patterns == {**ORIGINAL, "alpha": True}

    @pytest.mark.asyncio
    async def test_when_clause_survives_round_trip(self, directory_filter, excludes, workspace_storage, workspace):
        """Test conditional exclude values are written back unchanged."""
        original = {"**/*.js": {"when": "$(basename).ts"}, "**/.git": True}
        excludes.patterns = dict(original)

        await directory_filter.enable(str(workspace / "beta"))
        assert excludes.patterns["**/*.js"] == {"when": "$(basename).ts"}
        assert workspace_storage.get("originalFileExcludes") == original

        await directory_filter.disable()
        assert excludes.patterns == original

    @pytest.mark.asyncio
    async def test_enable_persists_flags(self, directory_filter, workspace_storage, workspace):
        """Test filtering flags land in workspace storage."""
        await directory_filter.enable(str(workspace / "gamma"))

        assert workspace_storage.get("originalFileExcludes") == ORIGINAL
        assert workspace_storage.get("isCurrentlyFiltering") is True
        assert workspace_storage.get("currentActiveProject") == str(workspace / "gamma")

    @pytest.mark.asyncio
    async def test_update_only_when_filtering(self, directory_filter, excludes, workspace):
        """Test update is a no-op unless the filter is active."""
        assert await directory_filter.update(str(workspace / "alpha")) is False
        assert excludes.writes == 0

        await directory_filter.enable(str(workspace / "alpha"))
        assert await directory_filter.update(str(workspace / "beta")) is True
        assert "alpha" in excludes.patterns

    @pytest.mark.asyncio
    async def test_disable_when_unarmed(self, directory_filter, excludes):
        """Test disable without a captured original writes nothing."""
        await directory_filter.disable()

        assert excludes.writes == 0
        assert directory_filter.mode == FilterMode.UNARMED


class TestFailures:
    """Test filter failure handling."""

    @pytest.mark.asyncio
    async def test_write_failure_keeps_previous_target(self, directory_filter, excludes, workspace):
        """Test a failed write leaves the filter on its previous project."""
        await directory_filter.enable(str(workspace / "alpha"))
        applied = dict(excludes.patterns)
        excludes.fail_write = True

        with pytest.raises(ExcludeWriteError):
            await directory_filter.enable(str(workspace / "beta"))

        assert excludes.patterns == applied
        assert directory_filter.mode == FilterMode.FILTERING
        assert directory_filter.state.active_filtered_project_path == str(workspace / "alpha")

    @pytest.mark.asyncio
    async def test_write_failure_from_not_filtering(self, directory_filter, excludes, workspace):
        """Test a failed first write leaves the filter inactive."""
        excludes.fail_write = True

        with pytest.raises(ExcludeWriteError):
            await directory_filter.enable(str(workspace / "alpha"))

        assert directory_filter.is_filtering() is False
        assert excludes.patterns == ORIGINAL

    @pytest.mark.asyncio
    async def test_unreadable_settings_leave_filter_unarmed(self, directory_filter, excludes, workspace):
        """Test settings that cannot be parsed are never captured as an empty original."""
        excludes.get_excludes = MagicMock(side_effect=SettingsParseError("settings.json: bad token"))

        with pytest.raises(ExcludeWriteError):
            await directory_filter.enable(str(workspace / "alpha"))

        assert directory_filter.mode == FilterMode.UNARMED
        assert excludes.writes == 0

    @pytest.mark.asyncio
    async def test_listing_failure(self, directory_filter, context, excludes, workspace):
        """Test an unreadable workspace root raises DirectoryReadError."""
        context.workspace_root = str(workspace / "does-not-exist")

        with pytest.raises(DirectoryReadError):
            await directory_filter.enable(str(workspace / "alpha"))

        assert excludes.writes == 0
        assert directory_filter.is_filtering() is False

    @pytest.mark.asyncio
    async def test_no_workspace_root(self, directory_filter, context):
        """Test listing without a workspace root."""
        context.workspace_root = None

        with pytest.raises(DirectoryReadError):
            await directory_filter.list_project_directories()


class TestPersistedState:
    """Test state loading, teardown and restoration."""

    @pytest.mark.asyncio
    async def test_persisted_original_wins_over_live(self, directory_filter, workspace_storage, excludes, workspace):
        """Test a stored original is reused instead of the (possibly filtered) live map."""
        await workspace_storage.set("originalFileExcludes", {"dist": True})
        excludes.patterns = {"dist": True, "beta": True}

        original = await directory_filter.store_original()

        assert original == {"dist": True}

    @pytest.mark.asyncio
    async def test_teardown_forgets_original(self, directory_filter, workspace_storage, excludes, workspace):
        """Test teardown restores the original and clears persisted keys."""
        await directory_filter.enable(str(workspace / "alpha"))

        await directory_filter.teardown()

        assert excludes.patterns == ORIGINAL
        assert directory_filter.mode == FilterMode.UNARMED
        for key in ("originalFileExcludes", "isCurrentlyFiltering", "currentActiveProject"):
            assert workspace_storage.get(key) is None

    @pytest.mark.asyncio
    async def test_restore_state_reapplies_filter(self, context, workspace_storage, excludes, workspace):
        """Test a persisted filtering state is re-applied at startup."""
        await workspace_storage.set("originalFileExcludes", ORIGINAL)
        await workspace_storage.set("isCurrentlyFiltering", True)
        await workspace_storage.set("currentActiveProject", str(workspace / "beta"))

        directory_filter = DirectoryVisibilityFilter(context)
        assert directory_filter.load_state() == FilterMode.FILTERING

        assert await directory_filter.restore_state() is True
        assert excludes.patterns == {**ORIGINAL, "alpha": True, "gamma": True}

    def test_status(self, directory_filter):
        status = directory_filter.status()

        assert status == {"mode": "unarmed", "is_filtering": False, "active_project": None}
