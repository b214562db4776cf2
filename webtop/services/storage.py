from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import aiofiles

logger = logging.getLogger("webtop.storage")


class JsonStore:
    """One JSON document on disk, read and written as a whole."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    async def load(self, default: Any = None) -> Any:
        if not self.path.exists():
            return default
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                return json.loads(await f.read())
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load {self.path}: {e}")
            return default

    async def save(self, data: Any) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        async with aiofiles.open(tmp, "w", encoding="utf-8") as f:
            await f.write(json.dumps(data, indent=2, ensure_ascii=False))
        tmp.replace(self.path)


def store_in(data_dir: Optional[Path | str], filename: str) -> Optional[JsonStore]:
    if not data_dir:
        return None
    return JsonStore(Path(data_dir) / filename)
