"""API response models"""
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from spellbook.domain.formula import Formula
from spellbook.domain.model import Model
from spellbook.domain.segment import Segment, TagSegment
from spellbook.domain.snippet import Snippet
from spellbook.domain.tag import Tag
from spellbook.interfaces.prompt_forwarder import SubmitResult
from spellbook.services.selection_state import SessionController


class FormulaResponse(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    formula_id: str
    title: str
    content: str
    description: Optional[str] = None
    author: Optional[str] = None
    model_ids: List[str]
    is_top: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_domain(cls, formula: Formula):
        return cls(
            formula_id=formula.formula_id,
            title=formula.title,
            content=formula.content,
            description=formula.description,
            author=formula.author,
            model_ids=formula.model_ids,
            is_top=formula.is_top,
            created_at=formula.created_at,
            updated_at=formula.updated_at
        )


class ModelResponse(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    name: str
    label: str
    category: Optional[str] = None
    sort_order: int

    @classmethod
    def from_domain(cls, model: Model):
        return cls(
            model_id=model.model_id,
            name=model.name,
            label=model.label,
            category=model.category,
            sort_order=model.sort_order
        )


class TagResponse(BaseModel):
    tag_id: str
    slug: str
    display_name: str

    @classmethod
    def from_domain(cls, tag: Tag):
        return cls(tag_id=tag.tag_id, slug=tag.slug, display_name=tag.display_name)


class SnippetResponse(BaseModel):
    snippet_id: str
    short_name: str
    content: str
    tag_ids: List[str]
    is_top: bool

    @classmethod
    def from_domain(cls, snippet: Snippet):
        return cls(
            snippet_id=snippet.snippet_id,
            short_name=snippet.short_name,
            content=snippet.content,
            tag_ids=snippet.tag_ids,
            is_top=snippet.is_top
        )


class SegmentResponse(BaseModel):
    kind: str  # 'text' | 'tag'
    value: Optional[str] = None
    slug: Optional[str] = None
    display_name: Optional[str] = None
    resolved: Optional[bool] = None

    @classmethod
    def from_domain(cls, segment: Segment):
        if isinstance(segment, TagSegment):
            return cls(
                kind=segment.kind,
                slug=segment.slug,
                display_name=segment.display_name,
                resolved=segment.resolved
            )
        return cls(kind=segment.kind, value=segment.value)


class SessionResponse(BaseModel):
    session_id: str
    mode: str
    formula: Optional[FormulaResponse] = None
    segments: List[SegmentResponse]
    current_tag: Optional[SegmentResponse] = None
    selections: Dict[str, SnippetResponse]
    visible_snippets: List[SnippetResponse]
    composed_prompt: str
    prompt_text: str
    unresolved_tags: List[str]
    stale: bool = False  # a newer selection superseded this request

    @classmethod
    def from_controller(cls, controller: SessionController, stale: bool = False):
        snapshot = controller.snapshot()
        return cls(
            session_id=controller.session_id,
            mode=snapshot.mode.value,
            formula=FormulaResponse.from_domain(snapshot.current_formula) if snapshot.current_formula else None,
            segments=[SegmentResponse.from_domain(s) for s in snapshot.segments],
            current_tag=SegmentResponse.from_domain(snapshot.current_tag) if snapshot.current_tag else None,
            selections={slug: SnippetResponse.from_domain(s) for slug, s in snapshot.selections.items()},
            visible_snippets=[SnippetResponse.from_domain(s) for s in snapshot.visible_snippets],
            composed_prompt=controller.composed_prompt(),
            prompt_text=controller.prompt_text(),
            unresolved_tags=controller.unresolved_tags(),
            stale=stale
        )


class PromptResponse(BaseModel):
    session_id: str
    prompt_text: str
    unresolved_tags: List[str]


class SubmitResponse(BaseModel):
    success: bool
    message: str
    redirect_url: str
    reason: str

    @classmethod
    def from_result(cls, result: SubmitResult):
        return cls(
            success=True,
            message=result.message,
            redirect_url=result.redirect_url,
            reason=result.reason
        )


class SavedFormulaResponse(BaseModel):
    formula: FormulaResponse
    formulas: List[FormulaResponse]  # list re-read after the save
    session: Optional[SessionResponse] = None


class TagSnippetsResponse(BaseModel):
    tag: TagResponse
    snippets: List[SnippetResponse]
    tags_input: str  # pre-fill for the add-snippet form


class AddSnippetsResponse(BaseModel):
    snippets: List[SnippetResponse]
    session: Optional[SessionResponse] = None
