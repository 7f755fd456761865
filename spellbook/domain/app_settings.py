"""Settings singleton document"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

SETTINGS_KEY = 'app_settings'


@dataclass
class AppSettings:
    """
    Singleton settings record.

    The payload is stored JSON-encoded in `settingValue`; it carries the
    seed's settings plus the `initialized`/`initDate`/`version`/`lastUpdated`
    bookkeeping used by the startup import.
    """
    value: Dict[str, Any] = field(default_factory=dict)
    updated_at: Optional[str] = None
    storage_id: Optional[str] = None

    @property
    def initialized(self) -> bool:
        return bool(self.value.get('initialized', False))

    @property
    def version(self) -> Optional[Any]:
        return self.value.get('version')

    @staticmethod
    def parse_value(raw: Any) -> Dict[str, Any]:
        """Decode a stored settingValue; malformed JSON yields an empty dict."""
        if isinstance(raw, dict):
            return dict(raw)
        try:
            value = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Stored settings are not valid JSON, starting from empty settings")
            return {}
        return value if isinstance(value, dict) else {}

    @classmethod
    def from_document(cls, doc: Dict) -> "AppSettings":
        return cls(
            value=cls.parse_value(doc.get('settingValue')),
            updated_at=doc.get('updatedAt'),
            storage_id=doc.get('_id')
        )

    def to_document(self) -> Dict:
        doc = {
            'settingKey': SETTINGS_KEY,
            'settingValue': json.dumps(self.value, ensure_ascii=False),
            'updatedAt': self.updated_at
        }
        if self.storage_id:
            doc['_id'] = self.storage_id
        return doc
