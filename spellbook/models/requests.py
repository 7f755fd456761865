"""API request models"""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from spellbook.services.selection_state import SessionMode


class SaveDataRequest(BaseModel):
    # Optional so a missing field is reported as a 400, not a schema error
    filename: Optional[str] = None
    data: Optional[Any] = None


class CatimgPromptRequest(BaseModel):
    prompt: str = ''


class SaveFormulaRequest(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    title: str = ''
    content: str = ''
    description: str = ''
    author: str = ''
    model_ids: List[str] = Field(default_factory=list)
    current_formula_id: Optional[str] = None  # formula being edited; None creates
    session_id: Optional[str] = None  # session to switch to the saved formula
    overwrite: bool = False  # answer to the title-collision confirmation


class SnippetItem(BaseModel):
    content: str = ''
    short_name: Optional[str] = None


class AddSnippetsRequest(BaseModel):
    tags: str = ''  # '#{Display|slug} other-slug'
    items: List[SnippetItem] = Field(default_factory=list)
    session_id: Optional[str] = None  # session whose snippet list to refresh


class SelectFormulaRequest(BaseModel):
    formula_id: str


class SelectTagRequest(BaseModel):
    slug: str


class SelectSnippetRequest(BaseModel):
    snippet_id: str


class SwitchModeRequest(BaseModel):
    mode: SessionMode


class ManualTextRequest(BaseModel):
    text: str
