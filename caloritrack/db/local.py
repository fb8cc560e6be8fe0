"""Local key-value store for the onboarding draft."""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Optional

import aiofiles
import aiofiles.os
from loguru import logger

from caloritrack.db.result import GatewayResult

ONBOARDING_DRAFT_KEY = "caloritrack_onboarding"


class LocalDraftStore:
    """JSON blobs on the local filesystem, one file per key."""

    def __init__(self, base_path: str = "~/.caloritrack", key: str = ONBOARDING_DRAFT_KEY):
        self.base_path = Path(base_path).expanduser()
        self.key = key
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self.base_path / f"{self.key}.json"

    async def load(self) -> GatewayResult[Optional[Dict[str, Any]]]:
        """Read the stored blob. An absent blob is a successful ``None``."""
        if not self.path.exists():
            return GatewayResult.success(None)

        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                data = json.loads(await f.read())
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load onboarding draft from {self.path}: {e}")
            return GatewayResult.failure(e)

        if not isinstance(data, dict):
            logger.error(f"Onboarding draft at {self.path} is not an object")
            return GatewayResult.failure("draft is not a JSON object")
        return GatewayResult.success(data)

    async def save(self, blob: Dict[str, Any]) -> GatewayResult[None]:
        """Replace the stored blob. Concurrent saves are applied in order."""
        try:
            async with self._lock:
                self.base_path.mkdir(parents=True, exist_ok=True)
                tmp_path = self.path.with_suffix(".tmp")
                async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                    await f.write(json.dumps(blob))
                await aiofiles.os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save onboarding draft to {self.path}: {e}")
            return GatewayResult.failure(e)
        return GatewayResult.success()

    async def clear(self) -> GatewayResult[None]:
        try:
            if self.path.exists():
                await aiofiles.os.remove(self.path)
        except OSError as e:
            logger.error(f"Failed to clear onboarding draft at {self.path}: {e}")
            return GatewayResult.failure(e)
        return GatewayResult.success()
