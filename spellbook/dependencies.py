"""Dependency injection for services."""
from typing import Optional

from fastapi import Depends

from spellbook.config import settings
from spellbook.implementations.catimg_forwarder import CatimgForwarder
from spellbook.implementations.seed_sources import FileSeedDataSource, HttpSeedDataSource
from spellbook.interfaces.prompt_forwarder import IPromptForwarder
from spellbook.interfaces.seed_source import ISeedDataSource
from spellbook.repositories.document_store import DocumentStore, create_store
from spellbook.services.data_file_service import DataFileService
from spellbook.services.data_import import DataImportService
from spellbook.services.formula_catalog import FormulaCatalog
from spellbook.services.formula_editor import FormulaEditor
from spellbook.services.selection_state import SessionController, SessionRegistry
from spellbook.services.snippet_service import SnippetService
from spellbook.services.tag_parser import TagParser


# Singletons
_store: Optional[DocumentStore] = None
_seed_source: Optional[ISeedDataSource] = None
_forwarder: Optional[IPromptForwarder] = None
_data_file_service: Optional[DataFileService] = None
_session_registry: Optional[SessionRegistry] = None


async def init_store(backend: Optional[str] = None) -> DocumentStore:
    """Create the document store (called once from the app lifespan)."""
    global _store
    if _store is None:
        _store = await create_store(backend)
    return _store


def get_store() -> DocumentStore:
    """
    Get the document store (singleton).

    Raises:
        RuntimeError: init_store() has not run
    """
    if _store is None:
        raise RuntimeError("Document store is not initialized")
    return _store


def get_seed_source() -> ISeedDataSource:
    """Seed source: SEED_SOURCE_URL when set, else the local seed file."""
    global _seed_source
    if _seed_source is None:
        if settings.SEED_SOURCE_URL:
            _seed_source = HttpSeedDataSource(settings.SEED_SOURCE_URL)
        else:
            _seed_source = FileSeedDataSource()
    return _seed_source


def get_forwarder() -> IPromptForwarder:
    global _forwarder
    if _forwarder is None:
        _forwarder = CatimgForwarder()
    return _forwarder


def get_data_file_service() -> DataFileService:
    global _data_file_service
    if _data_file_service is None:
        _data_file_service = DataFileService()
    return _data_file_service


def get_data_import_service(
    store: DocumentStore = Depends(get_store),
    seed_source: ISeedDataSource = Depends(get_seed_source)
) -> DataImportService:
    return DataImportService(store, seed_source)


def get_formula_catalog(store: DocumentStore = Depends(get_store)) -> FormulaCatalog:
    return FormulaCatalog(store.formulas, store.models)


def get_formula_editor(store: DocumentStore = Depends(get_store)) -> FormulaEditor:
    return FormulaEditor(store.formulas)


def get_snippet_service(store: DocumentStore = Depends(get_store)) -> SnippetService:
    return SnippetService(store.tags, store.snippets)


def build_session_factory(store: DocumentStore, forwarder: IPromptForwarder):
    """Factory creating controllers bound to `store` and `forwarder`."""
    def factory(session_id: str) -> SessionController:
        return SessionController(
            parser=TagParser(store.tags),
            snippet_service=SnippetService(store.tags, store.snippets),
            tags=store.tags,
            forwarder=forwarder,
            session_id=session_id
        )
    return factory


def get_session_registry(
    store: DocumentStore = Depends(get_store),
    forwarder: IPromptForwarder = Depends(get_forwarder)
) -> SessionRegistry:
    """
    Get the session registry (singleton).

    Sessions are bound to the store and forwarder in use when the registry
    is first created.
    """
    global _session_registry
    if _session_registry is None:
        _session_registry = SessionRegistry(build_session_factory(store, forwarder))
    return _session_registry


def reset_dependencies() -> None:
    """Drop all singletons (tests, reconfiguration)."""
    global _store, _seed_source, _forwarder, _data_file_service, _session_registry
    _store = None
    _seed_source = None
    _forwarder = None
    _data_file_service = None
    _session_registry = None
