"""Tests for the local draft store, the Supabase document store and background writes."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from caloritrack.db.local import LocalDraftStore
from caloritrack.db.result import GatewayResult
from caloritrack.db.supabase import RemoteDocumentStore
from caloritrack.db.writes import BackgroundWrites
from caloritrack.models.tracking import Achievement, StreakData


def supabase_client(rows=None, error=None):
    """MagicMock shaped like the supabase query builder."""
    client = MagicMock()
    query = client.table.return_value
    for method in ("select", "eq", "upsert"):
        getattr(query, method).return_value = query
    if error is not None:
        query.execute.side_effect = error
    else:
        query.execute.return_value = MagicMock(data=rows or [])
    return client, query


def achievement(achievement_id):
    return Achievement(
        id=achievement_id,
        title="t",
        description="d",
        icon="fire",
        unlocked_at=datetime(2024, 3, 15, tzinfo=timezone.utc),
        category="streak",
        rarity="common",
    )


class TestGatewayResult:
    def test_value_or(self):
        assert GatewayResult.success(3).value_or(0) == 3
        assert GatewayResult.success(None).value_or(0) == 0
        assert GatewayResult.failure("x").value_or(0) == 0

    def test_failure_keeps_message(self):
        result = GatewayResult.failure(ValueError("bad"))
        assert not result.ok
        assert result.error == "bad"


class TestLocalDraftStore:
    @pytest.mark.asyncio
    async def test_save_and_load(self, tmp_path):
        store = LocalDraftStore(str(tmp_path))
        assert (await store.save({"current_step": 4})).ok
        result = await store.load()
        assert result.ok
        assert result.value == {"current_step": 4}

    @pytest.mark.asyncio
    async def test_absent_is_success_none(self, tmp_path):
        result = await LocalDraftStore(str(tmp_path / "missing")).load()
        assert result.ok
        assert result.value is None

    @pytest.mark.asyncio
    async def test_corrupt_is_failure(self, tmp_path):
        store = LocalDraftStore(str(tmp_path))
        store.path.write_text("[1, 2")
        result = await store.load()
        assert not result.ok

    @pytest.mark.asyncio
    async def test_non_object_is_failure(self, tmp_path):
        store = LocalDraftStore(str(tmp_path))
        store.path.write_text("[1, 2]")
        assert not (await store.load()).ok

    @pytest.mark.asyncio
    async def test_unserializable_is_failure(self, tmp_path):
        result = await LocalDraftStore(str(tmp_path)).save({"when": object()})
        assert not result.ok

    @pytest.mark.asyncio
    async def test_clear(self, tmp_path):
        store = LocalDraftStore(str(tmp_path))
        await store.save({"a": 1})
        assert (await store.clear()).ok
        assert not store.path.exists()


class TestRemoteDocumentStore:
    @pytest.mark.asyncio
    async def test_get_document(self):
        client, query = supabase_client(rows=[{"user_id": "u1", "onboarding_completed": True, "streaks": {"current_streak": 2}}])
        result = await RemoteDocumentStore(client, "users").get_document("u1")

        assert result.ok
        assert result.value.onboarding_completed
        assert result.value.streaks.current_streak == 2
        query.eq.assert_called_with("user_id", "u1")

    @pytest.mark.asyncio
    async def test_missing_row(self):
        client, _ = supabase_client(rows=[])
        result = await RemoteDocumentStore(client, "users").get_document("u1")
        assert result.ok
        assert result.value is None

    @pytest.mark.asyncio
    async def test_read_error_is_failure(self):
        client, _ = supabase_client(error=RuntimeError("network down"))
        result = await RemoteDocumentStore(client, "users").get_document("u1")
        assert not result.ok
        assert "network down" in result.error

    @pytest.mark.asyncio
    async def test_corrupt_row_is_failure(self):
        client, _ = supabase_client(rows=[{"user_id": "u1", "streaks": {"current_streak": -4}}])
        assert not (await RemoteDocumentStore(client, "users").get_document("u1")).ok

    @pytest.mark.asyncio
    async def test_merge_writes_only_given_fields(self):
        client, query = supabase_client()
        result = await RemoteDocumentStore(client, "users").merge_document("u1", {"streaks": StreakData(current_streak=3)})

        assert result.ok
        row = query.upsert.call_args.args[0]
        assert row["user_id"] == "u1"
        assert row["streaks"]["current_streak"] == 3
        assert "updated_at" in row
        assert set(row) == {"user_id", "streaks", "updated_at"}
        assert query.upsert.call_args.kwargs == {"on_conflict": "user_id"}

    @pytest.mark.asyncio
    async def test_merge_error_is_failure(self):
        client, _ = supabase_client(error=RuntimeError("denied"))
        result = await RemoteDocumentStore(client, "users").merge_document("u1", {"analytics": {}})
        assert not result.ok

    @pytest.mark.asyncio
    async def test_add_achievements_unions_by_id(self):
        stored = [achievement("streak_3").model_dump(mode="json")]
        client, query = supabase_client(rows=[{"achievements": stored}])
        result = await RemoteDocumentStore(client, "users").add_achievements(
            "u1", [achievement("streak_3"), achievement("streak_7")]
        )

        assert [a.id for a in result.value] == ["streak_7"]
        row = query.upsert.call_args.args[0]
        assert [a["id"] for a in row["achievements"]] == ["streak_3", "streak_7"]

    @pytest.mark.asyncio
    async def test_add_nothing_new_skips_write(self):
        stored = [achievement("streak_3").model_dump(mode="json")]
        client, query = supabase_client(rows=[{"achievements": stored}])
        result = await RemoteDocumentStore(client, "users").add_achievements("u1", [achievement("streak_3")])

        assert result.value == []
        query.upsert.assert_not_called()


class TestBackgroundWrites:
    @pytest.mark.asyncio
    async def test_flush_waits_for_pending(self):
        done = []

        async def write(n):
            await asyncio.sleep(0.01)
            done.append(n)

        writes = BackgroundWrites()
        writes.schedule(write(1))
        writes.schedule(write(2))
        assert writes.pending == 2
        await writes.flush()
        assert sorted(done) == [1, 2]
        assert writes.pending == 0

    def test_without_loop_write_is_skipped(self):
        ran = []

        async def write():
            ran.append(True)

        BackgroundWrites().schedule(write())
        assert ran == []
