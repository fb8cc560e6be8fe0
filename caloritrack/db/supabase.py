"""Supabase client and the remote per-user document store."""

import asyncio
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional

from loguru import logger
from pydantic import BaseModel, ValidationError
from supabase import create_client, Client

from caloritrack.config import get_settings
from caloritrack.db.result import GatewayResult
from caloritrack.models.tracking import Achievement
from caloritrack.models.user import UserDocument


@lru_cache()
def get_supabase_client() -> Client:
    """Get cached Supabase client."""
    settings = get_settings()
    return create_client(settings.supabase_url, settings.supabase_key)


def _to_json(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, dict):
        return {str(k): _to_json(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_json(v) for v in value]
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class RemoteDocumentStore:
    """One row per user; every top-level document field is its own jsonb column.

    Writes are upserts on ``user_id`` carrying only the supplied columns, so
    partial updates never clobber unrelated fields.
    """

    def __init__(self, client: Optional[Client] = None, table: Optional[str] = None):
        settings = get_settings()
        self.client = client or get_supabase_client()
        self.table = table or settings.users_table

    def _select(self, user_id: str, columns: str = "*") -> List[Dict[str, Any]]:
        result = (
            self.client.table(self.table)
            .select(columns)
            .eq("user_id", user_id)
            .execute()
        )
        return result.data

    def _upsert(self, row: Dict[str, Any]) -> None:
        self.client.table(self.table).upsert(row, on_conflict="user_id").execute()

    async def get_document(self, user_id: str) -> GatewayResult[Optional[UserDocument]]:
        """Fetch a user's document. A missing row is a successful ``None``."""
        try:
            rows = await asyncio.to_thread(self._select, user_id)
        except Exception as e:
            logger.error(f"Failed to read user document {user_id}: {e}")
            return GatewayResult.failure(e)

        if not rows:
            return GatewayResult.success(None)

        try:
            return GatewayResult.success(UserDocument.model_validate(rows[0]))
        except ValidationError as e:
            logger.error(f"Corrupt user document {user_id}: {e}")
            return GatewayResult.failure(e)

    async def merge_document(self, user_id: str, fields: Dict[str, Any]) -> GatewayResult[None]:
        """Write the given top-level fields, leaving the others untouched."""
        row = {key: _to_json(value) for key, value in fields.items()}
        row["user_id"] = user_id
        row["updated_at"] = datetime.now(timezone.utc).isoformat()

        try:
            await asyncio.to_thread(self._upsert, row)
        except Exception as e:
            logger.error(f"Failed to write user document {user_id} ({', '.join(sorted(fields))}): {e}")
            return GatewayResult.failure(e)
        return GatewayResult.success()

    async def add_achievements(
        self, user_id: str, achievements: List[Achievement]
    ) -> GatewayResult[List[Achievement]]:
        """Union new achievements into the stored set, keyed by id."""
        if not achievements:
            return GatewayResult.success([])

        try:
            rows = await asyncio.to_thread(self._select, user_id, "achievements")
            stored = (rows[0].get("achievements") if rows else None) or []
            known = {a["id"] for a in stored}
            added = [a for a in achievements if a.id not in known]
            if added:
                await asyncio.to_thread(
                    self._upsert,
                    {
                        "user_id": user_id,
                        "achievements": stored + _to_json(added),
                        "updated_at": datetime.now(timezone.utc).isoformat(),
                    },
                )
        except Exception as e:
            logger.error(f"Failed to add achievements for {user_id}: {e}")
            return GatewayResult.failure(e)

        logger.info(f"Achievements unlocked for {user_id}: {[a.id for a in added]}")
        return GatewayResult.success(added)
