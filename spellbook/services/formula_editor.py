"""Formula editing: validation, title collisions and replace-on-save"""
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from spellbook.domain.formula import Formula
from spellbook.exceptions import CollisionError, ValidationError
from spellbook.interfaces.document_store import IDocumentCollection
from spellbook.utils.ids import new_business_id, now_iso

logger = logging.getLogger(__name__)

# Asked before overwriting a different formula that has the same title
ConfirmOverwrite = Callable[[Formula], Awaitable[bool]]


@dataclass
class FormulaDraft:
    """User-edited formula fields"""
    title: str
    content: str
    description: str = ''
    author: str = ''
    model_ids: List[str] = field(default_factory=list)


class FormulaEditor:
    """
    Saves formulas by replacing the record for a business id.

    Replacement is delete-then-insert and not atomic: two saves racing on
    one business id can lose an update. Acceptable for a single-user
    session only.
    """

    def __init__(self, formulas: IDocumentCollection):
        self.formulas = formulas

    @staticmethod
    def validate(draft: FormulaDraft) -> FormulaDraft:
        title = (draft.title or '').strip()
        content = (draft.content or '').strip()
        if not title:
            raise ValidationError("title", "Formula title cannot be empty")
        if not content:
            raise ValidationError("content", "Formula content cannot be empty")
        return FormulaDraft(
            title=title,
            content=content,
            description=(draft.description or '').strip(),
            author=(draft.author or '').strip(),
            model_ids=list(draft.model_ids or [])
        )

    async def find_collision(self, title: str, current: Optional[Formula]) -> Optional[Formula]:
        """A stored formula with this title and a business id other than current's."""
        query = {'title': title}
        if current is not None:
            query['formulaId'] = {'$ne': current.formula_id}
        doc = await self.formulas.find_one(query)
        return Formula.from_document(doc) if doc else None

    async def save_formula(
        self,
        draft: FormulaDraft,
        current: Optional[Formula] = None,
        confirm: Optional[ConfirmOverwrite] = None
    ) -> Formula:
        """
        Validate and persist a formula.

        Args:
            draft: Edited fields
            current: Formula being edited, None when creating
            confirm: Asked with the colliding formula; no callback means decline

        Returns:
            The persisted formula

        Raises:
            ValidationError: empty title or content
            CollisionError: title collision was not confirmed
        """
        draft = self.validate(draft)

        existing = await self.find_collision(draft.title, current)
        if existing is not None:
            confirmed = await confirm(existing) if confirm is not None else False
            if not confirmed:
                logger.info(f"Save of '{draft.title}' declined: title already used by {existing.formula_id}")
                raise CollisionError(draft.title, existing)

            formula_id = existing.formula_id
            created_at = existing.created_at
            replaced_id = existing.storage_id
            logger.info(f"Overwriting formula {formula_id} ('{draft.title}')")
        elif current is not None:
            formula_id = current.formula_id
            created_at = current.created_at
            stored = await self.formulas.find_one({'formulaId': current.formula_id})
            replaced_id = stored['_id'] if stored else None
        else:
            formula_id = new_business_id('formula')
            created_at = now_iso()
            replaced_id = None

        if replaced_id:
            await self.formulas.remove(replaced_id)

        formula = Formula(
            formula_id=formula_id,
            title=draft.title,
            content=draft.content,
            description=draft.description,
            author=draft.author,
            model_ids=draft.model_ids,
            is_top=current.is_top if current is not None else False,
            created_at=created_at,
            updated_at=now_iso()
        )
        stored = await self.formulas.upsert(formula.to_document())
        logger.info(f"Saved formula {formula_id} ('{formula.title}')")
        return Formula.from_document(stored[0])
