"""Unit tests for SessionStore."""

from datetime import datetime

import pytest

from project_switcher.models.session import ExplorerHint, Position, Selection, SessionSnapshot, TabRecord
from project_switcher.services.session_store import SessionStore


def make_snapshot(project_id="p1", count=2):
    tabs = [
        TabRecord(
            uri=f"file:///ws/alpha/f{i}.py",
            tab_index=i,
            is_active=i == 0,
            selection=Selection(start=Position(line=i, character=1), end=Position(line=i, character=4)),
        )
        for i in range(count)
    ]
    return SessionSnapshot(
        project_id=project_id,
        tabs=tabs,
        active_tab_uri=tabs[0].uri if tabs else None,
        explorer_hint=ExplorerHint(selected_file=tabs[0].uri if tabs else None),
    )


@pytest.fixture
def store(context):
    return SessionStore(context)


class TestSessionStore:
    """Test per-project snapshot storage."""

    @pytest.mark.asyncio
    async def test_save_and_get(self, store):
        assert await store.save(make_snapshot()) is True

        snapshot = store.get("p1")
        assert snapshot.tab_count == 2
        assert snapshot.tabs[1].selection.start.line == 1
        assert store.has("p1")
        assert store.get("other") is None

    @pytest.mark.asyncio
    async def test_get_returns_copy(self, store):
        """Test callers cannot mutate the stored snapshot."""
        await store.save(make_snapshot())

        store.get("p1").tabs.clear()

        assert store.get("p1").tab_count == 2

    @pytest.mark.asyncio
    async def test_persisted_layout(self, store, global_storage):
        """Test the whole mapping is written under one global key."""
        await store.save(make_snapshot("p1"))
        await store.save(make_snapshot("p2", count=1))

        stored = global_storage.get("projectSessions")
        assert set(stored) == {"p1", "p2"}
        assert stored["p1"]["tabs"][0]["uri"] == "file:///ws/alpha/f0.py"
        assert "document_token" not in stored["p1"]["tabs"][0]

    @pytest.mark.asyncio
    async def test_load_round_trip(self, store, context):
        await store.save(make_snapshot("p1"))

        reloaded = SessionStore(context)
        assert reloaded.load() == 1
        assert reloaded.get("p1").active_tab_uri == "file:///ws/alpha/f0.py"

    @pytest.mark.asyncio
    async def test_load_drops_invalid_entries(self, context, global_storage):
        await global_storage.set("projectSessions", {
            "good": make_snapshot("good").model_dump(mode="json"),
            "bad": {"tabs": "not-a-list"},
        })

        store = SessionStore(context)

        assert store.load() == 1
        assert store.project_ids() == ["good"]

    @pytest.mark.asyncio
    async def test_clear(self, store):
        await store.save(make_snapshot("p1"))
        await store.save(make_snapshot("p2"))

        assert await store.clear("p1") is True
        assert await store.clear("p1") is False
        assert store.project_ids() == ["p2"]

        assert await store.clear_all() == 1
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_session_info(self, store):
        snapshot = make_snapshot(count=3)
        await store.save(snapshot)

        info = store.session_info("p1")

        assert info["has_session"] is True
        assert info["tab_count"] == 3
        assert info["last_saved"] == datetime.fromtimestamp(snapshot.last_saved)
        assert store.session_info("none") == {"has_session": False, "tab_count": 0, "last_saved": None}

    @pytest.mark.asyncio
    async def test_write_failure_reported(self, store, global_storage):
        """Test storage failures are swallowed and reported as False."""
        global_storage.fail_writes = True

        assert await store.save(make_snapshot()) is False
