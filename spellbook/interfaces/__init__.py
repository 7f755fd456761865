"""Interfaces (DIP - services depend on these, not on backends)."""
from .document_store import IDocumentCollection, SortSpec
from .seed_source import ISeedDataSource
from .prompt_forwarder import IPromptForwarder, SubmitResult

__all__ = [
    "IDocumentCollection",
    "SortSpec",
    "ISeedDataSource",
    "IPromptForwarder",
    "SubmitResult",
]
