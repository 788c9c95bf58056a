"""Drives a transcript against the documentation assistant."""

from __future__ import annotations

import logging
from typing import Optional

from docassist.chat.answer import error_answer
from docassist.chat.assistant import DocumentationAssistant
from docassist.chat.transcript import (
    EditDraft,
    ReceiveAnswer,
    Submit,
    TranscriptState,
    new_transcript,
    reduce,
)
from docassist.models import ChatMessage

LOGGER = logging.getLogger(__name__)


class ChatSession:
    """One conversation: a transcript plus the assistant answering into it."""

    def __init__(
        self,
        assistant: DocumentationAssistant,
        state: TranscriptState | None = None,
    ) -> None:
        self.assistant = assistant
        self.state = state or new_transcript()

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return self.state.messages

    async def ask(self, text: str) -> Optional[ChatMessage]:
        """Submit ``text`` and wait for the answer.

        Returns the assistant message, or None when the submission was
        rejected (blank text or a request already in flight).
        """
        state = reduce(self.state, EditDraft(text))
        submitted = reduce(state, Submit())
        if submitted is state:
            return None

        self.state = submitted
        request_id = submitted.pending_request
        query = submitted.messages[-1].content

        try:
            answer = await self.assistant.answer(query)
        except Exception:
            LOGGER.exception("Assistant failed to answer %r", query)
            answer = error_answer()
        self.state = reduce(self.state, ReceiveAnswer(request_id, answer))
        return self.state.messages[-1]
