"""Unit tests for workspace mode detection and project directory listing."""

import pytest

from project_switcher.core.filesystem import LocalFileSystem
from project_switcher.services.workspace_detection import (
    WorkspaceMode,
    detect_workspace_mode,
    list_project_directories,
)


@pytest.fixture
def fs():
    return LocalFileSystem()


class TestDetectWorkspaceMode:
    """Test parent/single/none classification."""

    @pytest.mark.asyncio
    async def test_no_root(self, fs):
        assert await detect_workspace_mode(fs, None) == WorkspaceMode.NONE

    @pytest.mark.asyncio
    async def test_parent_directory(self, fs, workspace):
        """Test README.md and dot entries do not make the root a project."""
        (workspace / ".editorconfig").write_text("root = true\n")

        assert await detect_workspace_mode(fs, str(workspace)) == WorkspaceMode.PARENT

    @pytest.mark.asyncio
    async def test_meaningful_file_means_single(self, fs, workspace):
        (workspace / "package.json").write_text("{}")

        assert await detect_workspace_mode(fs, str(workspace)) == WorkspaceMode.SINGLE

    @pytest.mark.asyncio
    async def test_one_directory_is_single(self, fs, tmp_path):
        (tmp_path / "only").mkdir()
        (tmp_path / "node_modules").mkdir()
        (tmp_path / ".git").mkdir()

        assert await detect_workspace_mode(fs, str(tmp_path)) == WorkspaceMode.SINGLE

    @pytest.mark.asyncio
    async def test_unreadable_root_is_single(self, fs, tmp_path):
        assert await detect_workspace_mode(fs, str(tmp_path / "missing")) == WorkspaceMode.SINGLE


class TestListProjectDirectories:
    """Test candidate project directory listing."""

    @pytest.mark.asyncio
    async def test_lists_visible_directories(self, fs, workspace):
        assert await list_project_directories(fs, str(workspace)) == ["alpha", "beta", "gamma"]

    @pytest.mark.asyncio
    async def test_custom_denylist(self, fs, workspace):
        names = await list_project_directories(fs, str(workspace), denylist=["beta"])

        assert names == ["alpha", "gamma", "node_modules"]

    @pytest.mark.asyncio
    async def test_missing_root_raises(self, fs, tmp_path):
        with pytest.raises(OSError):
            await list_project_directories(fs, str(tmp_path / "missing"))
