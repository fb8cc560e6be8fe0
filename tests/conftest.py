"""Shared test fixtures for caloritrack."""

from typing import Any, Dict, List, Optional

import pytest

from caloritrack.config import get_settings
from caloritrack.db.local import LocalDraftStore
from caloritrack.db.result import GatewayResult
from caloritrack.db.supabase import _to_json
from caloritrack.models.tracking import Achievement
from caloritrack.models.user import UserDocument


class InMemoryDocumentStore:
    """Stands in for RemoteDocumentStore with the same merge semantics."""

    def __init__(self, documents: Optional[Dict[str, Dict[str, Any]]] = None, fail: bool = False):
        self.rows: Dict[str, Dict[str, Any]] = documents or {}
        self.fail = fail
        self.writes: List[Dict[str, Any]] = []

    async def get_document(self, user_id: str):
        if self.fail:
            return GatewayResult.failure("connection refused")
        row = self.rows.get(user_id)
        if row is None:
            return GatewayResult.success(None)
        return GatewayResult.success(UserDocument.model_validate({**row, "user_id": user_id}))

    async def merge_document(self, user_id: str, fields: Dict[str, Any]):
        self.writes.append(fields)
        if self.fail:
            return GatewayResult.failure("connection refused")
        self.rows.setdefault(user_id, {}).update(_to_json(fields))
        return GatewayResult.success()

    async def add_achievements(self, user_id: str, achievements: List[Achievement]):
        if self.fail:
            return GatewayResult.failure("connection refused")
        row = self.rows.setdefault(user_id, {})
        stored = row.setdefault("achievements", [])
        known = {a["id"] for a in stored}
        added = [a for a in achievements if a.id not in known]
        stored.extend(_to_json(added))
        return GatewayResult.success(added)


@pytest.fixture
def draft_store(tmp_path):
    return LocalDraftStore(str(tmp_path))


@pytest.fixture
def remote_store():
    return InMemoryDocumentStore()


@pytest.fixture
def profile_data():
    """Complete profile for a 30 year old man, 178 cm and 78 kg."""
    return {
        "name": "Ahmet",
        "last_name": "Yilmaz",
        "age": 30,
        "gender": "male",
        "height": 178,
        "current_weight": 78,
    }


@pytest.fixture
def settings_env(tmp_path, monkeypatch):
    """Local-only settings pointing the draft store at a temp dir."""
    monkeypatch.setenv("CALORITRACK_DRAFT_STORE_PATH", str(tmp_path / "drafts"))
    monkeypatch.setenv("CALORITRACK_SUPABASE_URL", "")
    monkeypatch.setenv("CALORITRACK_SUPABASE_KEY", "")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def failing_remote_store():
    return InMemoryDocumentStore(fail=True)
