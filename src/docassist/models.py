"""Core DocAssist data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

INDEX_STATUSES = ("indexed", "indexing", "not_indexed")


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True, slots=True)
class Document:
    """Document record as reported by the index service."""

    path: str
    index_status: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    content: Optional[str] = None
    score: Optional[float] = None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Document":
        score = payload.get("score")
        return cls(
            path=payload["path"],
            index_status=payload.get("index_status"),
            metadata=dict(payload.get("metadata") or {}),
            content=payload.get("content"),
            score=float(score) if score is not None else None,
        )


@dataclass(frozen=True, slots=True)
class Snippet:
    """Retrieved text span with a relevance score."""

    content: str
    path: str
    score: float
    page_span: Optional[Tuple[int, int]] = None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Snippet":
        span = payload.get("page_span")
        return cls(
            content=payload.get("content") or "",
            path=payload["path"],
            score=float(payload.get("score", 0.0)),
            page_span=(int(span[0]), int(span[1])) if span else None,
        )


@dataclass(frozen=True, slots=True)
class Page:
    """Full text of a single document page."""

    path: str
    page_index: int
    content: str
    score: Optional[float] = None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Page":
        score = payload.get("score")
        return cls(
            path=payload["path"],
            page_index=int(payload["page_index"]),
            content=payload.get("content") or "",
            score=float(score) if score is not None else None,
        )


@dataclass(frozen=True, slots=True)
class Answer:
    """Rendered answer plus the evidence it was built from.

    ``pages`` is ``None`` when page results were not requested and an empty
    tuple when they were requested but nothing matched.
    """

    content: str
    snippets: Tuple[Snippet, ...] = ()
    documents: Tuple[Document, ...] = ()
    pages: Optional[Tuple[Page, ...]] = None


@dataclass(frozen=True, slots=True)
class ChatMessage:
    """Single transcript entry."""

    id: int
    role: Role
    content: str
    snippets: Tuple[Snippet, ...] = ()
    documents: Tuple[Document, ...] = ()
    pages: Optional[Tuple[Page, ...]] = None
