"""Pytest configuration and shared fixtures."""
import copy
from unittest.mock import AsyncMock

import pytest

from spellbook.interfaces.prompt_forwarder import REASON_PROMPT_SAVED, SubmitResult
from spellbook.repositories.document_store import BUSINESS_KEYS, DocumentStore


SEED = {
    "version": 1,
    "settings": {"theme": "dark", "language": "zh-CN"},
    "models": [
        {"modelId": "m-sdxl", "name": "SDXL", "version": "1.0", "sortOrder": 2, "isActive": True},
        {"modelId": "m-flux", "name": "Flux", "version": "dev", "sortOrder": 1, "isActive": True},
        {"modelId": "m-old", "name": "Legacy", "version": "0.9", "sortOrder": 0, "isActive": False},
    ],
    "tags": [
        {"tagId": "t1", "slug": "color", "displayName": "Color", "sortOrder": 1},
        {"tagId": "t2", "slug": "animal", "displayName": "Animal", "sortOrder": 2},
    ],
    "snippets": [
        {
            "snippetId": "s1", "shortName": "Orange", "content": "orange", "tagIds": ["t1"],
            "isTop": False, "updatedAt": "2024-01-02T00:00:00.000Z"
        },
        {
            "snippetId": "s2", "shortName": "Black", "content": "black", "tagIds": ["color"],
            "isTop": False, "updatedAt": "2024-01-03T00:00:00.000Z"
        },
        {
            "snippetId": "s3", "shortName": "Tabby", "content": "tabby", "tagIds": ["t2"],
            "isTop": False, "updatedAt": "2024-01-01T00:00:00.000Z"
        },
    ],
    "formulas": [
        {
            "formulaId": "f1", "title": "Cat", "content": "A #{color} cat",
            "modelIds": ["m-sdxl"], "isTop": False,
            "createdAt": "2024-01-01T00:00:00.000Z", "updatedAt": "2024-01-01T00:00:00.000Z"
        },
        {
            "formulaId": "f2", "title": "Scene", "content": "#{animal} sitting on a #{color} rug",
            "modelIds": ["m-flux", "m-sdxl"], "isTop": True,
            "createdAt": "2024-01-01T00:00:00.000Z", "updatedAt": "2023-06-01T00:00:00.000Z"
        },
    ],
}


@pytest.fixture
def sample_seed():
    """Fresh copy of the seed data."""
    return copy.deepcopy(SEED)


@pytest.fixture
def store():
    """Empty in-memory document store."""
    return DocumentStore.in_memory()


@pytest.fixture
def seeded_store(sample_seed):
    """In-memory store pre-populated with the seed collections (no Settings)."""
    return DocumentStore.in_memory({name: sample_seed[name] for name in BUSINESS_KEYS})


@pytest.fixture
def mock_seed_source(sample_seed):
    """Seed source returning the sample seed."""
    source = AsyncMock()
    source.fetch.return_value = sample_seed
    return source


@pytest.fixture
def mock_forwarder():
    """Prompt forwarder that always reports the prompt as saved."""
    forwarder = AsyncMock()
    forwarder.forward.return_value = SubmitResult(
        redirect_url="https://catimg.example/",
        reason=REASON_PROMPT_SAVED,
        message="Prompt saved"
    )
    return forwarder


@pytest.fixture
def controller(seeded_store, mock_forwarder):
    """Session controller over the seeded store."""
    from spellbook.services.selection_state import SessionController
    from spellbook.services.snippet_service import SnippetService
    from spellbook.services.tag_parser import TagParser

    return SessionController(
        parser=TagParser(seeded_store.tags),
        snippet_service=SnippetService(seeded_store.tags, seeded_store.snippets),
        tags=seeded_store.tags,
        forwarder=mock_forwarder,
        session_id="session-test"
    )
