"""Maintenance endpoints (deduplicate, reset, export, integrity check)."""
import logging

from fastapi import APIRouter, Depends

from spellbook.api.errors import to_http_exception
from spellbook.dependencies import get_data_import_service
from spellbook.exceptions import SpellbookError
from spellbook.services.data_import import DataImportService
from spellbook.utils.ids import now_iso

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/deduplicate")
async def deduplicate(service: DataImportService = Depends(get_data_import_service)):
    """Keep the newest record per business id in every collection"""
    removed = await service.deduplicate_all()
    return {"success": all(v is not None for v in removed.values()), "removed": removed}


@router.post("/reset")
async def reset(service: DataImportService = Depends(get_data_import_service)):
    """Clear every collection and re-import the seed data"""
    try:
        removed = await service.reset()
        result = await service.run()
        return {
            "success": True,
            "removed": removed,
            "import": {"action": result.action, "inserted": result.inserted, "version": result.version}
        }
    except SpellbookError as e:
        raise to_http_exception(e, "Reset data")


@router.get("/export")
async def export(service: DataImportService = Depends(get_data_import_service)):
    try:
        return {"success": True, "data": await service.export_snapshot(), "timestamp": now_iso()}
    except SpellbookError as e:
        raise to_http_exception(e, "Export data")


@router.get("/integrity")
async def integrity(service: DataImportService = Depends(get_data_import_service)):
    try:
        return {"success": True, **await service.validate_integrity()}
    except SpellbookError as e:
        raise to_http_exception(e, "Validate data integrity")
