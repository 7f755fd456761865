"""Mapping of domain errors to HTTP responses"""
import logging

from fastapi import HTTPException

from spellbook.exceptions import (
    CollisionError,
    ExternalAppError,
    InvalidTransition,
    NotFoundError,
    SpellbookError,
    StoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_CODES = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (CollisionError, 409),
    (InvalidTransition, 409),
    (ExternalAppError, 502),
    (StoreError, 503),
)


def status_for(error: SpellbookError) -> int:
    for error_type, status_code in STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500


def to_http_exception(error: SpellbookError, action: str) -> HTTPException:
    """Log `error` and turn it into an HTTPException for the client."""
    status_code = status_for(error)
    if status_code >= 500:
        logger.error(f"{action} failed: {error}")
    else:
        logger.warning(f"{action} rejected: {error}")

    field = getattr(error, 'field', None)
    if field:
        return HTTPException(status_code=status_code, detail={"field": field, "message": str(error)})
    return HTTPException(status_code=status_code, detail=str(error))
