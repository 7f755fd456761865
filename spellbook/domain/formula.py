"""Formula domain entity"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class Formula:
    """Prompt template containing #{slug} markers"""
    formula_id: str  # business key
    title: str
    content: str
    model_ids: List[str] = field(default_factory=list)
    is_top: bool = False
    description: Optional[str] = None
    author: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    storage_id: Optional[str] = None  # assigned by the store

    @classmethod
    def from_document(cls, doc: Dict) -> "Formula":
        return cls(
            formula_id=doc.get('formulaId', ''),
            title=doc.get('title', ''),
            content=doc.get('content') or '',
            model_ids=list(doc.get('modelIds') or []),
            is_top=bool(doc.get('isTop', False)),
            description=doc.get('description'),
            author=doc.get('author'),
            created_at=doc.get('createdAt'),
            updated_at=doc.get('updatedAt'),
            storage_id=doc.get('_id')
        )

    def to_document(self) -> Dict:
        doc = {
            'formulaId': self.formula_id,
            'title': self.title,
            'content': self.content,
            'description': self.description or '',
            'author': self.author or '',
            'modelIds': list(self.model_ids),
            'isTop': self.is_top,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at
        }
        if self.storage_id:
            doc['_id'] = self.storage_id
        return doc
