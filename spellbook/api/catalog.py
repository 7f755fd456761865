"""Formula, model and snippet library endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from spellbook.api.errors import to_http_exception
from spellbook.dependencies import (
    get_formula_catalog,
    get_formula_editor,
    get_session_registry,
    get_snippet_service,
    get_store,
)
from spellbook.domain.formula import Formula
from spellbook.domain.segment import TagSegment
from spellbook.domain.tag import Tag
from spellbook.exceptions import NotFoundError, SpellbookError
from spellbook.models.requests import AddSnippetsRequest, SaveFormulaRequest
from spellbook.models.responses import (
    AddSnippetsResponse,
    FormulaResponse,
    ModelResponse,
    SavedFormulaResponse,
    SessionResponse,
    SnippetResponse,
    TagResponse,
    TagSnippetsResponse,
)
from spellbook.repositories.document_store import DocumentStore
from spellbook.services.formula_catalog import FormulaCatalog
from spellbook.services.formula_editor import FormulaDraft, FormulaEditor
from spellbook.services.selection_state import SessionRegistry
from spellbook.services.snippet_service import SnippetService, default_tags_input

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/models", response_model=List[ModelResponse])
async def list_models(
    include_inactive: bool = False,
    catalog: FormulaCatalog = Depends(get_formula_catalog)
):
    try:
        models = await catalog.list_models(active_only=not include_inactive)
        return [ModelResponse.from_domain(m) for m in models]
    except SpellbookError as e:
        raise to_http_exception(e, "List models")


@router.get("/formulas", response_model=List[FormulaResponse])
async def list_formulas(
    model_id: Optional[str] = None,
    q: Optional[str] = None,
    catalog: FormulaCatalog = Depends(get_formula_catalog)
):
    """Formulas, pinned first then most recently updated, filtered by model and search text"""
    try:
        formulas = await catalog.list_formulas(model_id=model_id, query=q)
        return [FormulaResponse.from_domain(f) for f in formulas]
    except SpellbookError as e:
        raise to_http_exception(e, "List formulas")


@router.get("/formulas/{formula_id}", response_model=FormulaResponse)
async def get_formula(formula_id: str, catalog: FormulaCatalog = Depends(get_formula_catalog)):
    try:
        return FormulaResponse.from_domain(await catalog.get_formula(formula_id))
    except SpellbookError as e:
        raise to_http_exception(e, f"Get formula '{formula_id}'")


@router.post("/formulas", response_model=SavedFormulaResponse)
async def save_formula(
    request: SaveFormulaRequest,
    catalog: FormulaCatalog = Depends(get_formula_catalog),
    editor: FormulaEditor = Depends(get_formula_editor),
    registry: SessionRegistry = Depends(get_session_registry)
):
    """
    Create or replace a formula.

    A title already used by another formula is only overwritten when
    `overwrite` is true; otherwise 409 and nothing is changed.
    """
    logger.info(f"Saving formula '{request.title}'")

    try:
        controller = registry.get(request.session_id) if request.session_id else None

        current: Optional[Formula] = None
        if request.current_formula_id:
            current = await catalog.get_formula(request.current_formula_id)
        elif controller is not None:
            current = controller.current_formula

        async def confirm(existing: Formula) -> bool:
            return request.overwrite

        draft = FormulaDraft(
            title=request.title,
            content=request.content,
            description=request.description,
            author=request.author,
            model_ids=request.model_ids
        )
        saved = await editor.save_formula(draft, current=current, confirm=confirm)

        session = None
        if controller is not None:
            await controller.apply_saved_formula(saved)
            session = SessionResponse.from_controller(controller)

        formulas = await catalog.list_formulas()
        return SavedFormulaResponse(
            formula=FormulaResponse.from_domain(saved),
            formulas=[FormulaResponse.from_domain(f) for f in formulas],
            session=session
        )
    except SpellbookError as e:
        raise to_http_exception(e, f"Save formula '{request.title}'")
    except Exception as e:
        logger.error(f"Unexpected save formula error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/snippets", response_model=AddSnippetsResponse)
async def add_snippets(
    request: AddSnippetsRequest,
    snippets: SnippetService = Depends(get_snippet_service),
    registry: SessionRegistry = Depends(get_session_registry)
):
    """Add snippets under one or more tags, creating missing tags"""
    try:
        controller = registry.get(request.session_id) if request.session_id else None
        added = await snippets.add_snippets(
            request.tags,
            [item.model_dump() for item in request.items]
        )

        session = None
        if controller is not None:
            await controller.refresh_snippets()
            session = SessionResponse.from_controller(controller)

        return AddSnippetsResponse(
            snippets=[SnippetResponse.from_domain(s) for s in added],
            session=session
        )
    except SpellbookError as e:
        raise to_http_exception(e, "Add snippets")


@router.get("/tags/{slug}/snippets", response_model=TagSnippetsResponse)
async def tag_snippets(
    slug: str,
    store: DocumentStore = Depends(get_store),
    snippets: SnippetService = Depends(get_snippet_service)
):
    try:
        doc = await store.tags.find_one({'slug': slug})
        if doc is None:
            raise NotFoundError(f"Tag '{slug}' does not exist")
        tag = Tag.from_document(doc)
        found = await snippets.find_for_tag(tag)
        return TagSnippetsResponse(
            tag=TagResponse.from_domain(tag),
            snippets=[SnippetResponse.from_domain(s) for s in found],
            tags_input=default_tags_input(TagSegment(slug=tag.slug, display_name=tag.display_name, tag=tag))
        )
    except SpellbookError as e:
        raise to_http_exception(e, f"List snippets for tag '{slug}'")
