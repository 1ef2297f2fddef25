from __future__ import annotations

import json
import logging
from pathlib import Path

import httpx
import pytest

from dark_todo.controller import TaskListController
from dark_todo.db import SQLiteTaskStore
from dark_todo.hosted_store import SupabaseTaskStore
from dark_todo.settings import Settings
from dark_todo.store import InMemoryTaskStore, RemoteError, get_task_store


def _settings(**overrides) -> Settings:
    base = dict(
        task_store_backend="memory",
        sqlite_db_path="./data/tasks.db",
        supabase_url=None,
        supabase_key=None,
        supabase_timeout=10.0,
        cors_allow_origins=["*"],
        mobile_breakpoint=768,
        log_level="INFO",
    )
    base.update(overrides)
    return Settings(**base)


class TestInMemoryStore:
    @pytest.mark.asyncio
    async def test_insert_assigns_id_and_ignores_client_id(self):
        store = InMemoryTaskStore()
        (stored,) = await store.insert({"id": "forged", "title": "x"})
        assert stored["id"] != "forged"
        assert stored["completed"] is False
        assert [r["id"] for r in await store.select()] == [stored["id"]]

    @pytest.mark.asyncio
    async def test_update_and_delete_missing_id_are_not_errors(self):
        store = InMemoryTaskStore()
        await store.update("missing", {"completed": True})
        await store.delete("missing")
        assert await store.select() == []

    @pytest.mark.asyncio
    async def test_select_returns_copies(self):
        store = InMemoryTaskStore()
        await store.insert({"title": "x"})
        (first,) = await store.select()
        first["title"] = "changed"
        (again,) = await store.select()
        assert again["title"] == "x"


class TestSQLiteStore:
    @pytest.mark.asyncio
    async def test_round_trip_through_table(self, tmp_path: Path):
        store = SQLiteTaskStore(str(tmp_path / "nested" / "tasks.db"))
        (stored,) = await store.insert(
            {"title": "Pay rent", "importance": "high", "category": "home", "description": "soon"}
        )
        assert isinstance(stored["id"], str) and stored["id"]
        assert stored["position"] is None

        await store.update(stored["id"], {"completed": True, "position": {"x": 10, "y": 20}})
        (loaded,) = await store.select()
        assert loaded["completed"] is True
        assert loaded["expanded"] is False
        assert loaded["position"] == {"x": 10.0, "y": 20.0}
        assert loaded["importance"] == "high"

        await store.delete(stored["id"])
        assert await store.select() == []

    @pytest.mark.asyncio
    async def test_categories_skip_null(self, tmp_path: Path):
        store = SQLiteTaskStore(str(tmp_path / "tasks.db"))
        await store.insert({"title": "a", "category": "work"})
        await store.insert({"title": "b", "category": None})
        await store.insert({"title": "c", "category": "work"})
        assert sorted(await store.select_categories()) == ["work", "work"]

    @pytest.mark.asyncio
    async def test_constraint_violation_is_remote_error(self, tmp_path: Path):
        store = SQLiteTaskStore(str(tmp_path / "tasks.db"))
        with pytest.raises(RemoteError):
            await store.insert({"description": "no title"})

    @pytest.mark.asyncio
    async def test_rows_survive_reopen(self, tmp_path: Path):
        path = str(tmp_path / "tasks.db")
        await SQLiteTaskStore(path).insert({"title": "persist"})
        rows = await SQLiteTaskStore(path).select()
        assert [r["title"] for r in rows] == ["persist"]


def _supabase(handler) -> SupabaseTaskStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SupabaseTaskStore("https://demo.supabase.co/", "anon-key", client=client)


class TestSupabaseStore:
    @pytest.mark.asyncio
    async def test_select_sends_key_headers(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["apikey"] = request.headers["apikey"]
            seen["auth"] = request.headers["authorization"]
            return httpx.Response(200, json=[{"id": "1", "title": "t"}])

        async with _supabase(handler) as store:
            rows = await store.select()

        assert rows == [{"id": "1", "title": "t"}]
        assert seen["url"].startswith("https://demo.supabase.co/rest/v1/tasks?")
        assert "select=%2A" in seen["url"] or "select=*" in seen["url"]
        assert seen["apikey"] == "anon-key"
        assert seen["auth"] == "Bearer anon-key"

    @pytest.mark.asyncio
    async def test_categories_filter_not_null(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["category"] == "not.is.null"
            assert request.url.params["select"] == "category"
            return httpx.Response(200, json=[{"category": "home"}, {"category": None}])

        async with _supabase(handler) as store:
            assert await store.select_categories() == ["home"]

    @pytest.mark.asyncio
    async def test_insert_asks_for_representation(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert request.headers["prefer"] == "return=representation"
            body = json.loads(request.content)
            assert body == [{"title": "Buy milk", "importance": "low"}]
            return httpx.Response(201, json=[{"id": "9", **body[0]}])

        async with _supabase(handler) as store:
            rows = await store.insert({"title": "Buy milk", "importance": "low"})
        assert rows[0]["id"] == "9"

    @pytest.mark.asyncio
    async def test_update_and_delete_filter_by_id(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.method, request.url.params["id"]))
            return httpx.Response(204)

        async with _supabase(handler) as store:
            await store.update("abc", {"completed": True})
            await store.delete("abc")
        assert seen == [("PATCH", "eq.abc"), ("DELETE", "eq.abc")]

    @pytest.mark.asyncio
    async def test_error_status_becomes_remote_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"message": "Invalid API key"})

        async with _supabase(handler) as store:
            with pytest.raises(RemoteError) as info:
                await store.select()
        assert "Invalid API key" in info.value.message

    @pytest.mark.asyncio
    async def test_transport_error_becomes_remote_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _supabase(handler) as store:
            with pytest.raises(RemoteError):
                await store.delete("x")

    @pytest.mark.asyncio
    async def test_html_reply_becomes_remote_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>gateway</html>", headers={"content-type": "text/html"})

        async with _supabase(handler) as store:
            with pytest.raises(RemoteError) as info:
                await store.select()
            assert "not JSON" in info.value.message
            with pytest.raises(RemoteError):
                await store.select_categories()
            with pytest.raises(RemoteError):
                await store.insert({"title": "x"})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{"id": "1"}, ["home"], [{"category": "ok"}, 3]])
    async def test_unexpected_shape_becomes_remote_error(self, body):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=body)

        async with _supabase(handler) as store:
            with pytest.raises(RemoteError):
                await store.select_categories()

    @pytest.mark.asyncio
    async def test_bad_reply_does_not_break_controller_load(self, caplog):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>gateway</html>")

        async with _supabase(handler) as store:
            controller = TaskListController(store)
            with caplog.at_level(logging.ERROR, logger="dark_todo.controller"):
                assert await controller.load() is False
                assert await controller.load_categories() is False
        assert controller.tasks == []
        assert "Error fetching tasks" in caplog.text


class TestFactory:
    def test_memory_default(self):
        assert isinstance(get_task_store(_settings()), InMemoryTaskStore)

    def test_sqlite(self, tmp_path: Path):
        store = get_task_store(_settings(task_store_backend="sqlite", sqlite_db_path=str(tmp_path / "t.db")))
        assert isinstance(store, SQLiteTaskStore)

    def test_supabase_without_credentials_falls_back(self):
        assert isinstance(get_task_store(_settings(task_store_backend="supabase")), InMemoryTaskStore)

    def test_supabase_with_credentials(self):
        store = get_task_store(
            _settings(task_store_backend="supabase", supabase_url="https://x.supabase.co", supabase_key="k")
        )
        assert isinstance(store, SupabaseTaskStore)
