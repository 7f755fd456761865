"""Custom exceptions for Prompt Spellbook."""
from typing import Any, Optional


class SpellbookError(Exception):
    """Base exception for Prompt Spellbook."""
    pass


class ValidationError(SpellbookError):
    """Raised when user input fails validation (nothing is persisted)."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class NotFoundError(SpellbookError):
    """Raised when a referenced formula, tag or session does not exist."""
    pass


class StoreError(SpellbookError):
    """Raised when the document store fails (I/O, serialization, backend)."""
    pass


class CollisionError(SpellbookError):
    """Raised when a formula title collision was not confirmed by the user."""

    def __init__(self, title: str, existing: Optional[Any] = None):
        super().__init__(f"A formula named '{title}' already exists")
        self.field = "title"
        self.title = title
        self.existing = existing


class ExternalAppError(SpellbookError):
    """Raised when a prompt cannot be handed over to the external app."""
    pass


class InvalidTransition(SpellbookError):
    """Raised when a session transition is not allowed in the current state."""
    pass


class InitializationError(SpellbookError):
    """Raised when startup data import fails; the app cannot proceed."""
    pass
