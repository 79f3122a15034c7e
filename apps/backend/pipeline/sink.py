"""
Dataset sink.

Appends one JSON record per line; never updates or deletes.
"""

import asyncio
import logging
from pathlib import Path
from typing import Union

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class JsonlDatasetSink:
    """Append-only JSON-lines dataset."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.count = 0
        self._lock = asyncio.Lock()

        logger.info(f"Dataset sink initialized: {self.path}")

    async def push(self, record: BaseModel):
        """Append a single record."""
        line = record.model_dump_json(by_alias=True)
        async with self._lock:
            with open(self.path, 'a', encoding='utf-8') as f:
                f.write(line + "\n")
            self.count += 1
        logger.debug(f"Saved record to {self.path}")
