"""Composition session endpoints (selection state machine over HTTP)."""
import logging

from fastapi import APIRouter, Depends

from spellbook.api.errors import to_http_exception
from spellbook.dependencies import get_formula_catalog, get_session_registry
from spellbook.exceptions import SpellbookError
from spellbook.models.requests import (
    ManualTextRequest,
    SelectFormulaRequest,
    SelectSnippetRequest,
    SelectTagRequest,
    SwitchModeRequest,
)
from spellbook.models.responses import PromptResponse, SessionResponse, SubmitResponse
from spellbook.services.formula_catalog import FormulaCatalog
from spellbook.services.selection_state import SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=SessionResponse)
async def create_session(registry: SessionRegistry = Depends(get_session_registry)):
    controller = registry.create()
    return SessionResponse.from_controller(controller)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    try:
        return SessionResponse.from_controller(registry.get(session_id))
    except SpellbookError as e:
        raise to_http_exception(e, f"Get session {session_id}")


@router.post("/{session_id}/formula", response_model=SessionResponse)
async def select_formula(
    session_id: str,
    request: SelectFormulaRequest,
    registry: SessionRegistry = Depends(get_session_registry),
    catalog: FormulaCatalog = Depends(get_formula_catalog)
):
    """
    Make a formula current; earlier snippet selections are discarded.

    `stale` is set when a newer selection on the same session finished first.
    """
    try:
        controller = registry.get(session_id)
        formula = await catalog.get_formula(request.formula_id)
        snapshot = await controller.select_formula(formula)
        return SessionResponse.from_controller(controller, stale=snapshot is None)
    except SpellbookError as e:
        raise to_http_exception(e, f"Select formula '{request.formula_id}'")


@router.post("/{session_id}/tag", response_model=SessionResponse)
async def select_tag(
    session_id: str,
    request: SelectTagRequest,
    registry: SessionRegistry = Depends(get_session_registry)
):
    """
    Focus a tag of the current formula and list its snippets.

    If a newer tag selection finished first, the session is returned
    unchanged with `stale` set.
    """
    try:
        controller = registry.get(session_id)
        snapshot = await controller.select_tag_by_slug(request.slug)
        return SessionResponse.from_controller(controller, stale=snapshot is None)
    except SpellbookError as e:
        raise to_http_exception(e, f"Select tag '{request.slug}'")


@router.post("/{session_id}/snippet", response_model=SessionResponse)
async def select_snippet(
    session_id: str,
    request: SelectSnippetRequest,
    registry: SessionRegistry = Depends(get_session_registry)
):
    try:
        controller = registry.get(session_id)
        controller.select_snippet_by_id(request.snippet_id)
        return SessionResponse.from_controller(controller)
    except SpellbookError as e:
        raise to_http_exception(e, f"Select snippet '{request.snippet_id}'")


@router.post("/{session_id}/mode", response_model=SessionResponse)
async def switch_mode(
    session_id: str,
    request: SwitchModeRequest,
    registry: SessionRegistry = Depends(get_session_registry)
):
    try:
        controller = registry.get(session_id)
        controller.switch_mode(request.mode)
        return SessionResponse.from_controller(controller)
    except SpellbookError as e:
        raise to_http_exception(e, f"Switch to {request.mode.value} mode")


@router.post("/{session_id}/manual-text", response_model=SessionResponse)
async def set_manual_text(
    session_id: str,
    request: ManualTextRequest,
    registry: SessionRegistry = Depends(get_session_registry)
):
    try:
        controller = registry.get(session_id)
        controller.set_manual_text(request.text)
        return SessionResponse.from_controller(controller)
    except SpellbookError as e:
        raise to_http_exception(e, "Set manual text")


@router.get("/{session_id}/prompt", response_model=PromptResponse)
async def get_prompt(session_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    """Text to copy: the manual edit in manual mode, else the composed prompt"""
    try:
        controller = registry.get(session_id)
        return PromptResponse(
            session_id=session_id,
            prompt_text=controller.prompt_text(),
            unresolved_tags=controller.unresolved_tags()
        )
    except SpellbookError as e:
        raise to_http_exception(e, "Get prompt")


@router.post("/{session_id}/submit", response_model=SubmitResponse)
async def submit_prompt(session_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    try:
        controller = registry.get(session_id)
        result = await controller.submit_prompt()
        logger.info(f"Session {session_id} submitted prompt: {result.reason}")
        return SubmitResponse.from_result(result)
    except SpellbookError as e:
        raise to_http_exception(e, "Submit prompt")
