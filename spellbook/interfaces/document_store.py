"""Document collection interface"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

# Sort spec: ["sortOrder", "name"] (ascending) or [("isTop", "desc", False), ("updatedAt", "desc")];
# the optional third element stands in for a missing field
SortSpec = Sequence[Union[str, Tuple[str, str], Tuple[str, str, Any]]]


class IDocumentCollection(ABC):
    """
    Interface for a schemaless document collection.

    Documents are plain dicts. The store assigns a storage id under `_id`
    on first upsert; business ids (formulaId, tagId, ...) are ordinary fields.

    Queries are Mongo-style predicates: field equality (array fields match
    on membership), $eq, $ne, $in, $elemMatch, $or and $and.
    """

    name: str

    @abstractmethod
    async def find(
        self,
        query: Optional[Dict] = None,
        sort: Optional[SortSpec] = None
    ) -> List[Dict]:
        """Return copies of all matching documents"""
        pass

    @abstractmethod
    async def find_one(self, query: Dict) -> Optional[Dict]:
        """Return the first matching document or None"""
        pass

    @abstractmethod
    async def upsert(self, docs: Union[Dict, List[Dict]]) -> List[Dict]:
        """
        Insert or replace documents.

        Documents carrying an `_id` replace the stored document with that id;
        others are inserted under a new `_id`. Returns the stored copies.
        """
        pass

    @abstractmethod
    async def remove(self, storage_id: str) -> bool:
        """Delete a document by storage id; False if it did not exist"""
        pass
