"""Document store: the set of collections the services work against"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from spellbook.config import settings
from spellbook.interfaces.document_store import IDocumentCollection
from spellbook.repositories.dynamodb_client import DynamoDBClient
from spellbook.repositories.dynamodb_collection import DynamoDBCollection
from spellbook.repositories.json_file_collection import JsonFileCollection
from spellbook.repositories.memory_collection import InMemoryCollection

logger = logging.getLogger(__name__)

COLLECTION_NAMES = ("formulas", "models", "tags", "snippets", "settings")

# Business id field per collection; settings is a keyed singleton instead
BUSINESS_KEYS = {
    "models": "modelId",
    "tags": "tagId",
    "snippets": "snippetId",
    "formulas": "formulaId",
}


@dataclass
class DocumentStore:
    formulas: IDocumentCollection
    models: IDocumentCollection
    tags: IDocumentCollection
    snippets: IDocumentCollection
    settings: IDocumentCollection

    def collection(self, name: str) -> IDocumentCollection:
        if name not in COLLECTION_NAMES:
            raise ValueError(f"Unknown collection: {name}")
        return getattr(self, name)

    def all(self) -> Dict[str, IDocumentCollection]:
        return {name: getattr(self, name) for name in COLLECTION_NAMES}

    @classmethod
    def in_memory(cls, seed: Optional[Dict[str, List[Dict]]] = None) -> "DocumentStore":
        """Store backed by plain dicts; `seed` pre-populates collections."""
        seed = seed or {}
        return cls(**{name: InMemoryCollection(name, seed.get(name)) for name in COLLECTION_NAMES})


async def create_store(backend: Optional[str] = None) -> DocumentStore:
    """Build the store for the configured backend."""
    backend = backend or settings.STORE_BACKEND
    logger.info(f"Using '{backend}' document store")

    if backend == "memory":
        return DocumentStore.in_memory()

    if backend == "file":
        directory = Path(settings.DATA_DIR) / "db"
        return DocumentStore(**{
            name: JsonFileCollection(name, directory) for name in COLLECTION_NAMES
        })

    if backend == "dynamodb":
        client = DynamoDBClient()
        collections = {}
        for name in COLLECTION_NAMES:
            table_name = f"{settings.DYNAMODB_TABLE_PREFIX}{name}"
            await client.ensure_table(table_name)
            collections[name] = DynamoDBCollection(client, name, table_name)
        return DocumentStore(**collections)

    raise ValueError(f"Unsupported store backend: {backend}")
