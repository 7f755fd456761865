"""Snippet domain entity"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class Snippet:
    """Reusable literal text that fills a tag marker"""
    snippet_id: str  # business key
    short_name: str
    content: str
    tag_ids: List[str] = field(default_factory=list)
    is_top: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    storage_id: Optional[str] = None

    @property
    def identity(self) -> str:
        """Key used to de-duplicate lookup results."""
        return self.storage_id or self.snippet_id

    @classmethod
    def from_document(cls, doc: Dict) -> "Snippet":
        content = doc.get('content') or ''
        return cls(
            snippet_id=doc.get('snippetId', ''),
            short_name=doc.get('shortName') or content,
            content=content,
            tag_ids=list(doc.get('tagIds') or []),
            is_top=bool(doc.get('isTop', False)),
            created_at=doc.get('createdAt'),
            updated_at=doc.get('updatedAt'),
            storage_id=doc.get('_id')
        )

    def to_document(self) -> Dict:
        doc = {
            'snippetId': self.snippet_id,
            'shortName': self.short_name,
            'content': self.content,
            'tagIds': list(self.tag_ids),
            'isTop': self.is_top,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at
        }
        if self.storage_id:
            doc['_id'] = self.storage_id
        return doc
