"""Read-side listings of formulas and models"""
from typing import List, Optional

from spellbook.domain.formula import Formula
from spellbook.domain.model import Model
from spellbook.exceptions import NotFoundError
from spellbook.interfaces.document_store import IDocumentCollection

FORMULA_SORT = [("isTop", "desc", False), ("updatedAt", "desc")]
MODEL_SORT = ["sortOrder", "name"]


class FormulaCatalog:
    """Formula list (pinned first, newest first) with model filter and search"""

    def __init__(self, formulas: IDocumentCollection, models: IDocumentCollection):
        self.formulas = formulas
        self.models = models

    async def list_formulas(self, model_id: Optional[str] = None, query: Optional[str] = None) -> List[Formula]:
        predicate = {'modelIds': model_id} if model_id else {}
        docs = await self.formulas.find(predicate, sort=FORMULA_SORT)
        formulas = [Formula.from_document(doc) for doc in docs]

        needle = (query or '').strip().lower()
        if needle:
            formulas = [
                f for f in formulas
                if needle in f.title.lower()
                or needle in f.content.lower()
                or needle in (f.description or '').lower()
            ]
        return formulas

    async def list_models(self, active_only: bool = True) -> List[Model]:
        docs = await self.models.find({}, sort=MODEL_SORT)
        models = [Model.from_document(doc) for doc in docs]
        # isActive defaults to true when absent
        return [m for m in models if m.is_active] if active_only else models

    async def get_formula(self, formula_id: str) -> Formula:
        doc = await self.formulas.find_one({'formulaId': formula_id})
        if doc is None:
            raise NotFoundError(f"Formula '{formula_id}' not found")
        return Formula.from_document(doc)
