"""
Unit tests for OptimizedTabCache.

Tests cover:
- Hide removes only the project's tabs and records them
- Show replays active first, then pinned, then the rest
- Document token reuse after a liveness check
- Fallback to the saved session when there is no entry
- Visible tab bookkeeping and tab counts
"""

import pytest

from project_switcher.core.host import path_to_uri
from project_switcher.models.project import Project
from project_switcher.services.session_store import SessionStore
from project_switcher.services.tab_cache import OptimizedTabCache
from project_switcher.services.tab_capture import TabCaptureEngine
from project_switcher.services.tab_restore import TabRestoreEngine


@pytest.fixture
def alpha(workspace):
    return Project(id="alpha", name="alpha", path=str(workspace / "alpha"), order=1)


@pytest.fixture
def beta(workspace):
    return Project(id="beta", name="beta", path=str(workspace / "beta"), order=2)


@pytest.fixture
def store(context):
    return SessionStore(context)


@pytest.fixture
def capture(context):
    return TabCaptureEngine(context)


@pytest.fixture
def cache(context, capture, store):
    return OptimizedTabCache(context, capture, TabRestoreEngine(context), store)


@pytest.fixture
def alpha_tabs(editor, workspace):
    """Open util.py, notes.md (pinned) and main.py (active) for alpha plus one beta tab."""
    editor.add_tab(workspace / "alpha" / "util.py")
    editor.add_tab(workspace / "alpha" / "docs" / "notes.md", pinned=True)
    editor.add_tab(workspace / "alpha" / "main.py", active=True)
    editor.add_tab(workspace / "beta" / "main.py")
    return {
        name: path_to_uri(str(workspace / "alpha" / name))
        for name in ("util.py", "main.py")
    } | {"notes.md": path_to_uri(str(workspace / "alpha" / "docs" / "notes.md"))}


class TestHide:
    """Test hiding a project's tabs."""

    @pytest.mark.asyncio
    async def test_hide_removes_only_project_tabs(self, cache, editor, workspace, alpha, alpha_tabs):
        hidden = await cache.hide(alpha)

        assert hidden == 3
        assert editor.open_uris() == [path_to_uri(str(workspace / "beta" / "main.py"))]
        assert cache.has_entry("alpha")
        assert set(cache.cached_uris("alpha")) == set(alpha_tabs.values())

    @pytest.mark.asyncio
    async def test_hide_without_tabs(self, cache, alpha):
        assert await cache.hide(alpha) == 0
        assert cache.has_entry("alpha") is False


class TestShow:
    """Test replaying hidden tabs."""

    @pytest.mark.asyncio
    async def test_show_order_active_pinned_rest(self, cache, editor, alpha, alpha_tabs):
        """Test the previously-active tab opens first, then pinned tabs, then the rest."""
        await cache.hide(alpha)
        editor.opened.clear()

        result = await cache.show(alpha)

        assert result.source == "cache"
        assert result.restored == 3
        assert [call.uri for call in editor.opened] == [
            alpha_tabs["main.py"],
            alpha_tabs["notes.md"],
            alpha_tabs["util.py"],
        ]
        assert editor.opened[0].preserve_focus is False
        assert editor.active_uri == alpha_tabs["main.py"]
        assert cache.has_entry("alpha") is False

    @pytest.mark.asyncio
    async def test_live_tokens_reused(self, cache, editor, alpha, alpha_tabs):
        """Test resident documents are reopened from their token."""
        await cache.hide(alpha)
        editor.opened.clear()

        result = await cache.show(alpha)

        assert result.metrics.cache_hits == 3
        assert result.metrics.cache_misses == 0
        assert all(call.document_token is not None for call in editor.opened)

    @pytest.mark.asyncio
    async def test_dead_token_reopened(self, cache, editor, alpha, alpha_tabs):
        """Test a token that is no longer live falls back to a fresh open."""
        await cache.hide(alpha)
        editor.evict(alpha_tabs["util.py"])
        editor.opened.clear()

        result = await cache.show(alpha)

        assert result.restored == 3
        assert result.metrics.cache_misses == 1
        util_call = next(call for call in editor.opened if call.uri == alpha_tabs["util.py"])
        assert util_call.document_token is None

    @pytest.mark.asyncio
    async def test_deleted_file_skipped(self, cache, editor, workspace, alpha, alpha_tabs):
        await cache.hide(alpha)
        (workspace / "alpha" / "util.py").unlink()

        result = await cache.show(alpha)

        assert result.requested == 3
        assert result.restored == 2
        assert alpha_tabs["util.py"] not in editor.open_uris()

    @pytest.mark.asyncio
    async def test_show_falls_back_to_session(self, cache, capture, store, editor, alpha, alpha_tabs):
        """Test a project without an entry is restored from its saved session."""
        await store.save(capture.snapshot(alpha))
        await editor.close_all_tabs()

        result = await cache.show(alpha)

        assert result.source == "session"
        assert result.restored == 3

    @pytest.mark.asyncio
    async def test_show_without_entry_or_session(self, cache, beta):
        result = await cache.show(beta)

        assert result.source == "none"
        assert result.restored == 0


class TestBookkeeping:
    """Test entry management and counts."""

    @pytest.mark.asyncio
    async def test_forget_and_clear(self, cache, alpha, alpha_tabs):
        await cache.hide(alpha)

        assert cache.forget("alpha") is True
        assert cache.forget("alpha") is False

        await cache.show(alpha)
        cache.clear_all()
        assert cache.has_entry("alpha") is False

    @pytest.mark.asyncio
    async def test_visible_tabs_follow_strip(self, cache, editor, workspace):
        cache.attach()
        uri = path_to_uri(str(workspace / "gamma" / "main.py"))

        editor.add_tab(workspace / "gamma" / "main.py")
        assert uri in cache.visible_tabs

        await editor.close_tabs([uri])
        assert uri not in cache.visible_tabs

        cache.detach()
        editor.add_tab(workspace / "gamma" / "main.py")
        assert uri not in cache.visible_tabs

    @pytest.mark.asyncio
    async def test_tab_count(self, cache, capture, store, editor, alpha, beta, workspace, alpha_tabs):
        """Test counts come from the cache entry, the strip, then the session."""
        cache.attach()
        assert cache.tab_count(alpha) == 3

        await cache.hide(alpha)
        assert cache.tab_count(alpha) == 3

        assert cache.tab_count(beta) == 1
        await store.save(capture.snapshot(beta))
        await editor.close_all_tabs()
        assert cache.tab_count(beta) == 1

        cache.forget("alpha")
        assert cache.tab_count(alpha) == 0
