from __future__ import annotations

import asyncio
import copy
from typing import Any, Dict, List, Optional


class InMemoryCursor:
    def __init__(self, collection: "InMemoryCollection"):
        self._collection = collection
        self._sort_key: Optional[str] = None
        self._limit: Optional[int] = None

    def sort(self, key: str):
        self._sort_key = key
        return self

    def limit(self, limit: int):
        self._limit = limit
        return self

    async def to_list(self) -> List[Dict[str, Any]]:
        docs = await self._collection._find_all()
        if self._sort_key is not None:
            docs.sort(key=lambda d: d.get(self._sort_key))
        if self._limit is not None:
            docs = docs[: self._limit]
        return docs


class InMemoryCollection:
    """Async document collection keyed by ``id``.

    Documents are deep-copied on the way in and out so callers never alias
    stored state.
    """

    def __init__(self):
        self._docs: List[Dict[str, Any]] = []
        self._lock = asyncio.Lock()

    async def _find_all(self) -> List[Dict[str, Any]]:
        async with self._lock:
            return [copy.deepcopy(doc) for doc in self._docs]

    async def find_one(self, doc_id: Any) -> Optional[Dict[str, Any]]:
        async with self._lock:
            for doc in self._docs:
                if doc.get("id") == doc_id:
                    return copy.deepcopy(doc)
        return None

    def find(self) -> InMemoryCursor:
        return InMemoryCursor(self)

    async def insert_one(self, document: Dict[str, Any]):
        async with self._lock:
            self._docs.append(copy.deepcopy(document))

    async def replace_one(self, document: Dict[str, Any]) -> bool:
        """Replace the stored document with the same id; return whether one matched."""
        async with self._lock:
            for idx, doc in enumerate(self._docs):
                if doc.get("id") == document.get("id"):
                    self._docs[idx] = copy.deepcopy(document)
                    return True
        return False


class InMemoryDatabase:
    def __init__(self):
        self.players = InMemoryCollection()
