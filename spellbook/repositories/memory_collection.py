"""In-memory document collection"""
import copy
import uuid
from typing import Dict, List, Optional, Union

from spellbook.interfaces.document_store import IDocumentCollection, SortSpec
from spellbook.repositories.query import matches, sort_documents


def new_storage_id() -> str:
    return uuid.uuid4().hex


class InMemoryCollection(IDocumentCollection):
    """Insertion-ordered dict of documents keyed by `_id`"""

    def __init__(self, name: str, docs: Optional[List[Dict]] = None):
        self.name = name
        self._docs: Dict[str, Dict] = {}
        for doc in docs or []:
            self._put(doc)

    def _put(self, doc: Dict) -> Dict:
        stored = copy.deepcopy(doc)
        if not stored.get('_id'):
            stored['_id'] = new_storage_id()
        self._docs[stored['_id']] = stored
        return copy.deepcopy(stored)

    async def find(
        self,
        query: Optional[Dict] = None,
        sort: Optional[SortSpec] = None
    ) -> List[Dict]:
        found = [copy.deepcopy(d) for d in self._docs.values() if matches(d, query)]
        return sort_documents(found, sort)

    async def find_one(self, query: Dict) -> Optional[Dict]:
        for doc in self._docs.values():
            if matches(doc, query):
                return copy.deepcopy(doc)
        return None

    async def upsert(self, docs: Union[Dict, List[Dict]]) -> List[Dict]:
        batch = docs if isinstance(docs, list) else [docs]
        return [self._put(doc) for doc in batch]

    async def remove(self, storage_id: str) -> bool:
        return self._docs.pop(storage_id, None) is not None

    def __len__(self) -> int:
        return len(self._docs)
