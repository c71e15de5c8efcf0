#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
JSON file record store
======================
One JSON array per collection, e.g. ``storage/topics.json``.

Every operation reads the whole file; mutations rewrite it through a
temporary file and ``os.replace``.  A per-store asyncio lock makes each
operation atomic within the process (last writer wins across processes).
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

import aiofiles
from pydantic import TypeAdapter, ValidationError

from .base import Predicate, RecordStore, T

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------

class JsonFileStore(RecordStore[T]):

    fault_types = (OSError, ValueError, ValidationError)

    def __init__(self, model: type[T], path: Path | str, collection: str | None = None) -> None:
        path = Path(path)
        super().__init__(model, collection or path.stem)
        self.path = path
        self._adapter = TypeAdapter(list[model])  # type: ignore[valid-type]
        self._lock = asyncio.Lock()
        self._ensure_file_exists()

    # -------------------------------------------------------------------- I/O

    def _ensure_file_exists(self) -> None:
        with self._faults("init", path=str(self.path)):
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if not self.path.exists():
                self.path.write_text("[]", encoding="utf-8")
                logger.info("Created empty collection file %s", self.path)

    async def _read(self) -> list[T]:
        with self._faults("read", path=str(self.path)):
            async with aiofiles.open(self.path, "r", encoding="utf-8") as fh:
                raw = await fh.read()
            if not raw.strip():
                return []
            return self._adapter.validate_json(raw)

    async def _write(self, items: list[T]) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with self._faults("write", path=str(self.path), count=len(items)):
            data = self._adapter.dump_json(items, indent=2)
            async with aiofiles.open(tmp, "wb") as fh:
                await fh.write(data)
            os.replace(tmp, self.path)

    # ---------------------------------------------------------------- queries

    async def find_all(self) -> list[T]:
        async with self._lock:
            return await self._read()

    async def find_by_id(self, id: str) -> Optional[T]:
        item = await self.find_by(lambda r: r.id == id)
        logger.debug("%s.find_by_id: %s %s", self.collection, id, "found" if item else "not found")
        return item

    # -------------------------------------------------------------- mutations

    async def create(self, item: T) -> None:
        async with self._lock:
            items = await self._read()
            items.append(item)
            await self._write(items)

    async def update(self, predicate: Predicate, item: T) -> None:
        async with self._lock:
            items = await self._read()
            for i, existing in enumerate(items):
                if predicate(existing):
                    items[i] = item
                    await self._write(items)
                    return

    async def delete(self, predicate: Predicate) -> None:
        async with self._lock:
            items = await self._read()
            kept = [r for r in items if not predicate(r)]
            if len(kept) != len(items):
                await self._write(kept)


# -----------------------------------------------------------------------------
