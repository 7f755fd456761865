"""Data file, settings and catimg endpoints."""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException

from spellbook.api.errors import to_http_exception
from spellbook.config import settings
from spellbook.dependencies import get_data_file_service, get_forwarder
from spellbook.exceptions import SpellbookError
from spellbook.interfaces.prompt_forwarder import IPromptForwarder
from spellbook.models.requests import CatimgPromptRequest, SaveDataRequest
from spellbook.models.responses import SubmitResponse
from spellbook.services.data_file_service import DataFileService
from spellbook.utils.ids import now_iso

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health():
    """Health check endpoint"""
    return {
        "status": "ok",
        "timestamp": now_iso(),
        "service": settings.APP_NAME,
        "version": settings.VERSION
    }


@router.get("/init-data")
async def get_init_data(files: DataFileService = Depends(get_data_file_service)):
    """Seed data file, for other instances using it as their seed source"""
    try:
        data = await files.load_init_data()
        return {"success": True, "data": data, "timestamp": now_iso()}
    except SpellbookError as e:
        raise to_http_exception(e, "Read init data")


@router.post("/save-data")
async def save_data(
    request: SaveDataRequest,
    files: DataFileService = Depends(get_data_file_service)
):
    try:
        written = await files.save_data(request.filename, request.data)
        return {
            "success": True,
            "message": f"Data saved to {written}",
            "timestamp": now_iso()
        }
    except SpellbookError as e:
        raise to_http_exception(e, "Save data")


@router.get("/load-data/{filename}")
async def load_data(filename: str, files: DataFileService = Depends(get_data_file_service)):
    try:
        data = await files.load_data(filename)
        return {
            "success": True,
            "data": data,
            "filename": filename,
            "timestamp": now_iso()
        }
    except SpellbookError as e:
        raise to_http_exception(e, f"Load data '{filename}'")


@router.get("/settings")
async def get_settings(files: DataFileService = Depends(get_data_file_service)):
    """UI settings; defaults are written on first read"""
    try:
        data, is_default = await files.get_ui_settings()
        response = {"success": True, "data": data}
        if is_default:
            response["isDefault"] = True
        return response
    except SpellbookError as e:
        raise to_http_exception(e, "Get settings")


@router.post("/settings")
async def save_settings(
    data: Dict[str, Any] = Body(...),
    files: DataFileService = Depends(get_data_file_service)
):
    try:
        saved = await files.save_ui_settings(data)
        return {"success": True, "message": "Settings saved", "data": saved}
    except SpellbookError as e:
        raise to_http_exception(e, "Save settings")


@router.post("/catimg/prompt", response_model=SubmitResponse)
async def submit_catimg_prompt(
    request: CatimgPromptRequest,
    forwarder: IPromptForwarder = Depends(get_forwarder)
):
    """Hand a prompt to catimg, or point the caller at the app store"""
    try:
        result = await forwarder.forward(request.prompt)
        return SubmitResponse.from_result(result)
    except SpellbookError as e:
        raise to_http_exception(e, "Forward prompt to catimg")
    except Exception as e:
        logger.error(f"Unexpected catimg error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
