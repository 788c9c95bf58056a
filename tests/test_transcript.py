"""Tests for the chat transcript reducer and chat sessions."""

from __future__ import annotations

import asyncio

import pytest

from docassist.chat.answer import SEARCH_ERROR_MESSAGE
from docassist.chat.assistant import DocumentationAssistant
from docassist.chat.session import ChatSession
from docassist.chat.transcript import (
    GREETING,
    EditDraft,
    ReceiveAnswer,
    Submit,
    TranscriptState,
    new_transcript,
    reduce,
)
from docassist.models import Answer, Document, Role, Snippet


def _submitted(text: str = "How do I install?") -> TranscriptState:
    state = reduce(new_transcript(), EditDraft(text))
    return reduce(state, Submit())


class TestNewTranscript:
    """Tests for the initial transcript."""

    def test_starts_with_greeting(self) -> None:
        state = new_transcript()
        assert len(state.messages) == 1
        assert state.messages[0].role is Role.SYSTEM
        assert state.messages[0].content == GREETING
        assert state.messages[0].id == 0
        assert not state.loading


class TestReduce:
    """Tests for reduce."""

    def test_edit_draft(self) -> None:
        state = reduce(new_transcript(), EditDraft("hello"))
        assert state.draft == "hello"
        assert state.can_submit

    def test_submit_appends_user_message(self) -> None:
        state = _submitted("How do I install?")

        assert state.messages[-1].role is Role.USER
        assert state.messages[-1].content == "How do I install?"
        assert state.draft == ""
        assert state.loading
        assert state.pending_request == state.messages[-1].id

    @pytest.mark.parametrize("draft", ["", "   ", "\n\t"])
    def test_blank_submit_is_ignored(self, draft: str) -> None:
        state = reduce(new_transcript(), EditDraft(draft))
        assert reduce(state, Submit()) is state

    def test_submit_while_loading_is_ignored(self) -> None:
        state = reduce(_submitted(), EditDraft("another question"))
        assert not state.can_submit
        assert reduce(state, Submit()) is state

    def test_receive_answer_appends_assistant_message(self) -> None:
        state = _submitted()
        snippet = Snippet(content="Use pip.", path="a.pdf", score=0.9)
        answer = Answer(content="Here's what I found", snippets=(snippet,), documents=(Document(path="a.pdf"),))

        state = reduce(state, ReceiveAnswer(state.pending_request, answer))

        message = state.messages[-1]
        assert message.role is Role.ASSISTANT
        assert message.content == "Here's what I found"
        assert message.snippets == (snippet,)
        assert message.documents == (Document(path="a.pdf"),)
        assert message.pages is None
        assert not state.loading
        assert state.pending_request is None

    def test_stale_answer_is_ignored(self) -> None:
        state = _submitted()
        stale = reduce(state, ReceiveAnswer(state.pending_request + 100, Answer(content="old")))
        assert stale is state

    def test_answer_without_pending_request_is_ignored(self) -> None:
        state = new_transcript()
        assert reduce(state, ReceiveAnswer(0, Answer(content="x"))) is state

    def test_ids_are_monotonic(self) -> None:
        state = _submitted("first")
        state = reduce(state, ReceiveAnswer(state.pending_request, Answer(content="a1")))
        state = reduce(reduce(state, EditDraft("second")), Submit())
        state = reduce(state, ReceiveAnswer(state.pending_request, Answer(content="a2")))

        ids = [message.id for message in state.messages]
        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)
        assert [m.role for m in state.messages] == [
            Role.SYSTEM,
            Role.USER,
            Role.ASSISTANT,
            Role.USER,
            Role.ASSISTANT,
        ]

    def test_previous_state_unchanged(self) -> None:
        initial = new_transcript()
        reduce(reduce(initial, EditDraft("question")), Submit())
        assert len(initial.messages) == 1
        assert initial.draft == ""

    def test_unknown_action(self) -> None:
        with pytest.raises(TypeError):
            reduce(new_transcript(), "not an action")  # type: ignore[arg-type]


class TestChatSession:
    """Tests for ChatSession."""

    def test_ask_show_all_documents(self, fake_index) -> None:
        fake_index.documents = [Document(path="a"), Document(path="b"), Document(path="a")]
        session = ChatSession(DocumentationAssistant(fake_index))

        message = asyncio.run(session.ask("show all documents"))

        assert message is not None
        assert message.role is Role.ASSISTANT
        numbered = [line for line in message.content.splitlines() if line[:1].isdigit()]
        assert numbered == ["1. **a**", "2. **b**"]
        assert len(session.messages) == 3
        assert not session.state.loading

    def test_ask_blank_returns_none(self, fake_index) -> None:
        session = ChatSession(DocumentationAssistant(fake_index))

        assert asyncio.run(session.ask("   ")) is None
        assert len(session.messages) == 1
        assert fake_index.calls == []

    def test_ask_error_goes_into_transcript(self, fake_index) -> None:
        fake_index.fail_on.add("query_top_documents")
        session = ChatSession(DocumentationAssistant(fake_index))

        message = asyncio.run(session.ask("question"))

        assert message is not None
        assert message.content == SEARCH_ERROR_MESSAGE
        assert message.snippets == ()

    def test_second_ask_while_loading_is_rejected(self, fake_index) -> None:
        release = asyncio.Event()

        async def slow_documents(*args, **kwargs):
            await release.wait()
            return []

        fake_index.query_top_documents = slow_documents
        session = ChatSession(DocumentationAssistant(fake_index))

        async def scenario():
            first = asyncio.ensure_future(session.ask("first question"))
            while not session.state.loading:
                await asyncio.sleep(0)
            second = await session.ask("second question")
            release.set()
            return await first, second

        first, second = asyncio.run(scenario())

        assert first is not None
        assert second is None
        user_messages = [m.content for m in session.messages if m.role is Role.USER]
        assert user_messages == ["first question"]

    def test_session_recovers_when_assistant_raises(self, fake_index) -> None:
        """An unexpected failure still ends loading so the user can retry."""
        assistant = DocumentationAssistant(fake_index)
        original = assistant.answer
        calls = {"count": 0}

        async def flaky(query):
            calls["count"] += 1
            if calls["count"] == 1:
                raise KeyError("path")
            return await original(query)

        assistant.answer = flaky
        session = ChatSession(assistant)

        first = asyncio.run(session.ask("first question"))

        assert first is not None
        assert first.content == SEARCH_ERROR_MESSAGE
        assert not session.state.loading
        assert session.state.pending_request is None

        fake_index.documents = [Document(path="a"), Document(path="b")]
        second = asyncio.run(session.ask("show all documents"))

        assert second is not None
        assert "available documents" in second.content
        assert len(session.messages) == 5
