"""Per-session selection state: current formula, focused tag, selections and mode.

All mutation goes through SessionController transitions. Callers read
state through immutable snapshots.
"""
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from spellbook.domain.formula import Formula
from spellbook.domain.segment import Segment, TagSegment
from spellbook.domain.snippet import Snippet
from spellbook.domain.tag import Tag
from spellbook.exceptions import InvalidTransition, NotFoundError, ValidationError
from spellbook.interfaces.document_store import IDocumentCollection
from spellbook.interfaces.prompt_forwarder import IPromptForwarder, SubmitResult
from spellbook.services.composition_engine import compose, list_unresolved_tags
from spellbook.services.snippet_service import SnippetService
from spellbook.services.tag_parser import TagParser

logger = logging.getLogger(__name__)


class SessionMode(str, Enum):
    COMPOSE = "compose"
    MANUAL = "manual"
    EDIT = "edit"


@dataclass
class SessionState:
    current_formula: Optional[Formula] = None
    segments: List[Segment] = field(default_factory=list)
    current_tag: Optional[TagSegment] = None
    selections: Dict[str, Snippet] = field(default_factory=dict)
    mode: SessionMode = SessionMode.COMPOSE
    visible_snippets: List[Snippet] = field(default_factory=list)
    manual_text: Optional[str] = None


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session at one point in time"""
    current_formula: Optional[Formula]
    segments: Tuple[Segment, ...]
    current_tag: Optional[TagSegment]
    selections: Mapping[str, Snippet]
    mode: SessionMode
    visible_snippets: Tuple[Snippet, ...]
    manual_text: Optional[str]

    @property
    def has_formula(self) -> bool:
        return self.current_formula is not None


class SessionController:
    """
    Owns one user's selection state.

    States are NoFormulaSelected (initial) and FormulaSelected{mode}. Tag
    selection is async (snippet lookup); every select_tag and
    select_formula call bumps a sequence number, and a select_tag whose
    number is no longer current when its lookup finishes is discarded.
    """

    def __init__(
        self,
        parser: TagParser,
        snippet_service: SnippetService,
        tags: IDocumentCollection,
        forwarder: Optional[IPromptForwarder] = None,
        session_id: Optional[str] = None
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.parser = parser
        self.snippet_service = snippet_service
        self.tags = tags
        self.forwarder = forwarder
        self._state = SessionState()
        self._sequence = 0

    # ---- read access ----

    def snapshot(self) -> SessionSnapshot:
        s = self._state
        return SessionSnapshot(
            current_formula=s.current_formula,
            segments=tuple(s.segments),
            current_tag=s.current_tag,
            selections=MappingProxyType(dict(s.selections)),
            mode=s.mode,
            visible_snippets=tuple(s.visible_snippets),
            manual_text=s.manual_text
        )

    @property
    def current_formula(self) -> Optional[Formula]:
        return self._state.current_formula

    @property
    def current_tag(self) -> Optional[TagSegment]:
        return self._state.current_tag

    @property
    def mode(self) -> SessionMode:
        return self._state.mode

    @property
    def selections(self) -> Mapping[str, Snippet]:
        return MappingProxyType(dict(self._state.selections))

    def composed_prompt(self) -> str:
        return compose(self._state.current_formula, self._state.selections)

    def prompt_text(self) -> str:
        """Text to copy or submit: the manual edit in Manual mode, else the composed prompt."""
        if self._state.mode == SessionMode.MANUAL and self._state.manual_text is not None:
            return self._state.manual_text
        return self.composed_prompt()

    def unresolved_tags(self) -> List[str]:
        return list_unresolved_tags(self._state.current_formula, self._state.selections)

    # ---- transitions ----

    def _next_sequence(self) -> int:
        self._sequence += 1
        return self._sequence

    async def select_formula(self, formula: Formula) -> Optional[SessionSnapshot]:
        """
        Any state -> FormulaSelected{Compose}; prior selections are discarded.

        Returns None when a newer select_formula or select_tag call was
        made while the formula was being parsed; nothing is applied then.
        """
        sequence = self._next_sequence()
        segments = await self.parser.parse(formula.content)

        if sequence != self._sequence:
            logger.debug(f"Session {self.session_id}: discarding stale selection of formula '{formula.formula_id}'")
            return None

        self._state = SessionState(
            current_formula=formula,
            segments=segments,
            mode=SessionMode.COMPOSE
        )
        logger.debug(f"Session {self.session_id}: selected formula '{formula.formula_id}'")
        return self.snapshot()

    async def _resolve_tag(self, segment: TagSegment) -> Tag:
        """
        Tag record for a segment, found by tagId or slug.

        A slug with no record gets a transient Tag so snippets tagged with
        the raw slug are still listed.
        """
        if segment.tag is not None:
            return segment.tag
        if not segment.slug:
            raise NotFoundError("Empty tag marker")
        doc = await self.tags.find_one({'$or': [{'tagId': segment.slug}, {'slug': segment.slug}]})
        if doc:
            return Tag.from_document(doc)
        logger.debug(f"Session {self.session_id}: no tag record for '{segment.slug}', matching by slug only")
        return Tag(tag_id='', slug=segment.slug, display_name=segment.display_name or segment.slug)

    async def select_tag(self, segment: TagSegment) -> Optional[SessionSnapshot]:
        """
        Focus a tag and load its snippets.

        Returns None when a newer select_tag or select_formula superseded
        this call before the lookup finished; nothing is applied then.

        Raises:
            InvalidTransition: no formula selected
            NotFoundError: empty tag marker
        """
        if self._state.current_formula is None:
            raise InvalidTransition("Select a formula before selecting a tag")

        sequence = self._next_sequence()
        tag = await self._resolve_tag(segment)
        snippets = await self.snippet_service.find_for_tag(tag)

        if sequence != self._sequence:
            logger.debug(f"Session {self.session_id}: discarding stale lookup for tag '{segment.slug}'")
            return None

        if segment.tag is None and tag.storage_id:
            segment = TagSegment(slug=segment.slug, display_name=tag.display_name, tag=tag)
        self._state.current_tag = segment
        self._state.visible_snippets = snippets
        return self.snapshot()

    async def select_tag_by_slug(self, slug: str) -> Optional[SessionSnapshot]:
        """Select the first marker of the current formula with this slug."""
        if self._state.current_formula is None:
            raise InvalidTransition("Select a formula before selecting a tag")
        for segment in self._state.segments:
            if isinstance(segment, TagSegment) and segment.slug == slug:
                return await self.select_tag(segment)
        raise NotFoundError(f"Formula has no tag '{slug}'")

    async def refresh_snippets(self) -> Optional[SessionSnapshot]:
        """Re-run the lookup for the focused tag, e.g. after snippets were added."""
        if self._state.current_tag is None:
            return self.snapshot()
        return await self.select_tag(self._state.current_tag)

    def select_snippet(self, snippet: Snippet) -> SessionSnapshot:
        """Record `snippet` as the choice for the focused tag, replacing any earlier one."""
        if self._state.current_tag is None:
            raise InvalidTransition("Select a tag before selecting a snippet")
        self._state.selections[self._state.current_tag.slug] = snippet
        return self.snapshot()

    def select_snippet_by_id(self, snippet_id: str) -> SessionSnapshot:
        """Select one of the currently visible snippets by business or storage id."""
        if self._state.current_tag is None:
            raise InvalidTransition("Select a tag before selecting a snippet")
        for snippet in self._state.visible_snippets:
            if snippet_id in (snippet.snippet_id, snippet.storage_id):
                return self.select_snippet(snippet)
        raise NotFoundError(f"Snippet '{snippet_id}' is not listed for tag '{self._state.current_tag.slug}'")

    def switch_mode(self, mode: SessionMode) -> SessionSnapshot:
        """
        Change the view mode; selections are never touched.

        Edit is allowed with no formula (authoring a new one); leaving it
        for Compose is allowed too. Other switches need a formula.
        """
        mode = SessionMode(mode)
        current = self._state.mode
        if mode == current:
            return self.snapshot()

        if self._state.current_formula is None:
            leaving_edit = current == SessionMode.EDIT and mode == SessionMode.COMPOSE
            if mode != SessionMode.EDIT and not leaving_edit:
                raise InvalidTransition(f"Cannot switch to {mode.value} mode without a formula")

        if mode == SessionMode.MANUAL:
            self._state.manual_text = self.composed_prompt()
        self._state.mode = mode
        return self.snapshot()

    def set_manual_text(self, text: str) -> SessionSnapshot:
        if self._state.mode != SessionMode.MANUAL:
            raise InvalidTransition("Manual text can only be edited in manual mode")
        self._state.manual_text = text
        return self.snapshot()

    async def apply_saved_formula(self, formula: Formula) -> Optional[SessionSnapshot]:
        """
        Make a just-saved formula current and return to Compose.

        Selections survive when the saved formula keeps the current
        business id; a different id is a formula switch.
        """
        current = self._state.current_formula
        if current is None or current.formula_id != formula.formula_id:
            return await self.select_formula(formula)

        sequence = self._next_sequence()
        segments = await self.parser.parse(formula.content)
        if sequence != self._sequence:
            return None

        self._state.current_formula = formula
        self._state.segments = segments
        self._state.current_tag = None
        self._state.visible_snippets = []
        self._state.mode = SessionMode.COMPOSE
        return self.snapshot()

    async def submit_prompt(self) -> SubmitResult:
        """
        Hand the prompt text to the external app.

        Raises:
            ValidationError: nothing to submit
            ExternalAppError: the prompt could not be handed over
        """
        if self.forwarder is None:
            raise InvalidTransition("No prompt forwarder configured")
        text = self.prompt_text()
        if not text.strip():
            raise ValidationError("prompt", "There is no prompt to submit")

        unresolved = self.unresolved_tags()
        if unresolved and self._state.mode != SessionMode.MANUAL:
            logger.info(f"Session {self.session_id}: submitting with unresolved tags {unresolved}")
        return await self.forwarder.forward(text)


class SessionRegistry:
    """In-process session id -> controller map (single user, not persisted)"""

    def __init__(self, factory: Callable[[str], SessionController]):
        self._factory = factory
        self._sessions: Dict[str, SessionController] = {}

    def create(self) -> SessionController:
        session_id = uuid.uuid4().hex
        controller = self._factory(session_id)
        self._sessions[session_id] = controller
        logger.info(f"Created session {session_id}")
        return controller

    def get(self, session_id: str) -> SessionController:
        controller = self._sessions.get(session_id)
        if controller is None:
            raise NotFoundError(f"Session '{session_id}' not found")
        return controller

    def __len__(self) -> int:
        return len(self._sessions)
