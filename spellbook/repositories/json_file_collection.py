"""JSON-file backed document collection"""
import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Union

from spellbook.exceptions import StoreError
from spellbook.repositories.memory_collection import InMemoryCollection

logger = logging.getLogger(__name__)


class JsonFileCollection(InMemoryCollection):
    """
    In-memory collection persisted as one JSON array per collection.

    The file is rewritten after every mutation (write to a temp file, then
    rename). If the write fails the in-memory documents are rolled back, so
    a failed upsert/remove leaves nothing half-committed. Mutations are
    serialized by a per-collection lock held until the file is written.
    """

    def __init__(self, name: str, directory: Path):
        self.name = name
        self.path = Path(directory) / f"{name}.json"
        self._lock = asyncio.Lock()
        super().__init__(name, self._load())

    def _load(self) -> List[Dict]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, encoding='utf-8') as f:
                docs = json.load(f)
        except (OSError, ValueError) as e:
            raise StoreError(f"Failed to read collection '{self.name}' from {self.path}: {e}") from e
        if not isinstance(docs, list):
            raise StoreError(f"Collection file {self.path} does not contain a JSON array")
        logger.debug(f"Loaded {len(docs)} documents into '{self.name}'")
        return docs

    def _write(self, snapshot: List[Dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.name}.", suffix='.tmp')
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(snapshot, f, ensure_ascii=False, indent=2)
            tmp_path.replace(self.path)
        except (OSError, TypeError, ValueError):
            tmp_path.unlink(missing_ok=True)
            raise

    async def _flush(self, previous: Dict[str, Dict]) -> None:
        snapshot = list(self._docs.values())
        try:
            await asyncio.to_thread(self._write, snapshot)
        except (OSError, TypeError, ValueError) as e:
            self._docs = previous
            raise StoreError(f"Failed to persist collection '{self.name}': {e}") from e

    async def upsert(self, docs: Union[Dict, List[Dict]]) -> List[Dict]:
        async with self._lock:
            previous = dict(self._docs)
            stored = await super().upsert(docs)
            await self._flush(previous)
            return stored

    async def remove(self, storage_id: str) -> bool:
        async with self._lock:
            previous = dict(self._docs)
            removed = await super().remove(storage_id)
            if removed:
                await self._flush(previous)
            return removed
