"""Document index interface consumed by the console and the assistant."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Protocol, runtime_checkable

from docassist.models import Document, Page, Snippet


@runtime_checkable
class DocumentIndex(Protocol):
    """Operations of a remote document-index service.

    Implementations: ZeroEntropyIndex (HTTP API). Every method raises a
    ``DocumentIndexError`` subclass on failure.
    """

    async def ensure_collection(self, collection: str) -> None:
        """Create the collection; an existing collection is not an error."""
        ...

    async def list_documents(self, collection: str, *, limit: int = 1000) -> List[Document]:
        ...

    async def get_document(
        self, collection: str, path: str, *, include_content: bool = False
    ) -> Document:
        ...

    async def add_document(
        self,
        collection: str,
        path: str,
        content: Mapping[str, str],
        metadata: Mapping[str, str],
    ) -> None:
        """Add a document. ``content`` carries ``type`` and ``base64_data``."""
        ...

    async def query_top_documents(
        self, collection: str, query: str, *, k: int, include_metadata: bool = True
    ) -> List[Document]:
        ...

    async def query_top_snippets(
        self, collection: str, query: str, *, k: int, precise_responses: bool = True
    ) -> List[Snippet]:
        ...

    async def query_top_pages(
        self, collection: str, query: str, *, k: int, include_content: bool = True
    ) -> List[Page]:
        ...

    async def get_status(self) -> Dict[str, Any]:
        ...

    async def aclose(self) -> None:
        ...
