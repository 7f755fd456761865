"""Tag domain entity"""
from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass
class Tag:
    """Placeholder category referenced from formula markers by slug"""
    tag_id: str  # business key
    slug: str
    display_name: str
    is_multi_select: bool = False  # stored only, selection is always single
    sort_order: int = 999
    is_top: bool = False
    parent_id: Optional[str] = None
    created_at: Optional[str] = None
    storage_id: Optional[str] = None

    def match_keys(self) -> List[str]:
        """Identifiers a snippet may carry in its tagIds, business id first."""
        keys = []
        for key in (self.tag_id, self.slug, self.storage_id):
            if key and key not in keys:
                keys.append(key)
        return keys

    @classmethod
    def from_document(cls, doc: Dict) -> "Tag":
        slug = doc.get('slug') or doc.get('tagId', '')
        return cls(
            tag_id=doc.get('tagId', ''),
            slug=slug,
            display_name=doc.get('displayName') or slug,
            is_multi_select=bool(doc.get('isMultiSelect', False)),
            sort_order=int(doc.get('sortOrder', 999) or 0),
            is_top=bool(doc.get('isTop', False)),
            parent_id=doc.get('parentId'),
            created_at=doc.get('createdAt'),
            storage_id=doc.get('_id')
        )

    def to_document(self) -> Dict:
        doc = {
            'tagId': self.tag_id,
            'slug': self.slug,
            'displayName': self.display_name,
            'isMultiSelect': self.is_multi_select,
            'sortOrder': self.sort_order,
            'isTop': self.is_top,
            'parentId': self.parent_id,
            'createdAt': self.created_at
        }
        if self.storage_id:
            doc['_id'] = self.storage_id
        return doc
