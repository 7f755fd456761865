"""Model domain entity (read-only reference data)"""
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass
class Model:
    """Image-generation model a formula can be associated with"""
    model_id: str
    name: str
    version: str = ''
    category: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    storage_id: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.name} {self.version}".strip()

    @classmethod
    def from_document(cls, doc: Dict) -> "Model":
        return cls(
            model_id=doc.get('modelId', ''),
            name=doc.get('name', ''),
            version=doc.get('version') or '',
            category=doc.get('category'),
            sort_order=int(doc.get('sortOrder') or 0),
            is_active=bool(doc.get('isActive', True)),
            storage_id=doc.get('_id')
        )
