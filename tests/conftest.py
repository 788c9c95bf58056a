"""Shared fixtures: an in-memory document index."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

import pytest

from docassist.client.errors import RetrievalError
from docassist.models import Document, Page, Snippet


class FakeIndex:
    """In-memory stand-in for a document index service."""

    def __init__(self) -> None:
        self.documents: List[Document] = []
        self.snippets: List[Snippet] = []
        self.pages: List[Page] = []
        self.collections: set[str] = set()
        self.added: List[Dict[str, Any]] = []
        self.calls: List[str] = []
        self.fail_on: set[str] = set()
        self.closed = False

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise RetrievalError(f"{name} failed")

    async def ensure_collection(self, collection: str) -> None:
        self._record("ensure_collection")
        self.collections.add(collection)

    async def list_documents(self, collection: str, *, limit: int = 1000) -> List[Document]:
        self._record("list_documents")
        return list(self.documents[:limit])

    async def get_document(
        self, collection: str, path: str, *, include_content: bool = False
    ) -> Document:
        self._record("get_document")
        for document in self.documents:
            if document.path == path:
                return document
        raise RetrievalError(f"Document not found: {path}")

    async def add_document(
        self,
        collection: str,
        path: str,
        content: Mapping[str, str],
        metadata: Mapping[str, str],
    ) -> None:
        self._record("add_document")
        self.added.append(
            {"collection": collection, "path": path, "content": dict(content), "metadata": dict(metadata)}
        )
        self.documents.append(Document(path=path, index_status="indexing", metadata=dict(metadata)))

    async def query_top_documents(
        self, collection: str, query: str, *, k: int, include_metadata: bool = True
    ) -> List[Document]:
        self._record("query_top_documents")
        return list(self.documents[:k])

    async def query_top_snippets(
        self, collection: str, query: str, *, k: int, precise_responses: bool = True
    ) -> List[Snippet]:
        self._record("query_top_snippets")
        return list(self.snippets[:k])

    async def query_top_pages(
        self, collection: str, query: str, *, k: int, include_content: bool = True
    ) -> List[Page]:
        self._record("query_top_pages")
        return list(self.pages[:k])

    async def get_status(self) -> Dict[str, Any]:
        self._record("get_status")
        return {"num_documents": len(self.documents)}

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_index() -> FakeIndex:
    return FakeIndex()
