"""Chat transcript state and its transitions.

The transcript is an immutable value; ``reduce`` maps a state and an action
to the next state. Messages are only ever appended.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from docassist.models import Answer, ChatMessage, Role

LOGGER = logging.getLogger(__name__)

GREETING = (
    "Hello! I can help you understand the ZeroEntropy documentation. "
    "Try asking questions like:\n\n"
    "• How do I install ZeroEntropy?\n"
    "• How do I create a collection?\n"
    "• What are the available query methods?\n"
    "• How do I handle document metadata?"
)


@dataclass(frozen=True, slots=True)
class TranscriptState:
    messages: Tuple[ChatMessage, ...] = ()
    draft: str = ""
    loading: bool = False
    next_id: int = 0
    pending_request: Optional[int] = None

    @property
    def can_submit(self) -> bool:
        return not self.loading and bool(self.draft.strip())


@dataclass(frozen=True, slots=True)
class EditDraft:
    text: str


@dataclass(frozen=True, slots=True)
class Submit:
    pass


@dataclass(frozen=True, slots=True)
class ReceiveAnswer:
    request_id: int
    answer: Answer


Action = Union[EditDraft, Submit, ReceiveAnswer]


def new_transcript(greeting: str = GREETING) -> TranscriptState:
    """Transcript seeded with the system greeting."""
    return TranscriptState(
        messages=(ChatMessage(id=0, role=Role.SYSTEM, content=greeting),),
        next_id=1,
    )


def _append(state: TranscriptState, message: ChatMessage) -> TranscriptState:
    return replace(state, messages=state.messages + (message,), next_id=message.id + 1)


def reduce(state: TranscriptState, action: Action) -> TranscriptState:
    """Return the state that follows ``action``."""
    if isinstance(action, EditDraft):
        return replace(state, draft=action.text)

    if isinstance(action, Submit):
        if not state.can_submit:
            return state
        message = ChatMessage(id=state.next_id, role=Role.USER, content=state.draft)
        state = _append(state, message)
        return replace(state, draft="", loading=True, pending_request=message.id)

    if isinstance(action, ReceiveAnswer):
        if action.request_id != state.pending_request:
            # Superseded or unknown request.
            LOGGER.debug("Ignoring stale answer for request %s", action.request_id)
            return state
        answer = action.answer
        message = ChatMessage(
            id=state.next_id,
            role=Role.ASSISTANT,
            content=answer.content,
            snippets=answer.snippets,
            documents=answer.documents,
            pages=answer.pages,
        )
        state = _append(state, message)
        return replace(state, loading=False, pending_request=None)

    raise TypeError(f"Unknown transcript action: {action!r}")
