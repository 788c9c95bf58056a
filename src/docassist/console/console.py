"""Document console: authentication, upload and listing of a collection."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Awaitable, Callable, Optional, Sequence, Tuple

from docassist.client.errors import DocumentIndexError, UploadError
from docassist.client.protocol import DocumentIndex
from docassist.client.rest import authenticate as rest_authenticate
from docassist.config import AppConfig
from docassist.console.listing import ALL_STATUSES, SortOrder, derive_listing, toggle
from docassist.models import Document
from docassist.utils.files import encode_base64, guess_content_type

LOGGER = logging.getLogger(__name__)

AUTH_SUCCESS = "Authentication successful!"
AUTH_FAILED = "Authentication failed. Please check your API key."
LOAD_FAILED = "Failed to load documents"
UPLOAD_SUCCESS = "Files uploaded successfully!"
UPLOAD_FAILED = "Upload failed. Please try again."

Authenticator = Callable[[str, AppConfig], Awaitable[DocumentIndex]]


@dataclass(frozen=True, slots=True)
class ConsoleState:
    authenticated: bool = False
    documents: Tuple[Document, ...] = ()
    selected_document: Optional[Document] = None
    message: str = ""
    loading: bool = False
    search_query: str = ""
    sort_order: SortOrder = "desc"
    filter_status: str = ALL_STATUSES


def upload_metadata(path: Path, *, now: datetime | None = None) -> dict[str, str]:
    """Metadata attached to an uploaded file."""
    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    return {
        "upload_timestamp": timestamp,
        "filename": path.name,
        "content_type": guess_content_type(path),
        "size": str(path.stat().st_size),
    }


class DocumentConsole:
    """Manages one collection of the document index.

    Every operation handles its own failures: the outcome is reported through
    ``state.message`` and nothing is raised to the caller.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        index: DocumentIndex | None = None,
        authenticator: Authenticator | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.index = index
        self._authenticator = authenticator or rest_authenticate
        self._fetched: Tuple[Document, ...] = ()
        self.state = ConsoleState(authenticated=index is not None)

    async def authenticate(self, api_key: str) -> bool:
        try:
            index = await self._authenticator(api_key, self.config)
        except DocumentIndexError as exc:
            LOGGER.error("Authentication error: %s", exc)
            self.state = replace(self.state, message=AUTH_FAILED)
            return False

        if self.index is not None:
            await self.index.aclose()
        self.index = index
        self.state = replace(self.state, authenticated=True, message=AUTH_SUCCESS)
        await self.refresh()
        return True

    async def aclose(self) -> None:
        if self.index is not None:
            await self.index.aclose()
            self.index = None
        self.state = replace(self.state, authenticated=False)

    def _recompute(self) -> None:
        documents = derive_listing(
            self._fetched,
            search_query=self.state.search_query,
            status=self.state.filter_status,
            sort_order=self.state.sort_order,
        )
        self.state = replace(self.state, documents=documents)

    async def refresh(self) -> Tuple[Document, ...]:
        """Fetch the collection's documents and recompute the listing."""
        if self.index is None:
            return self.state.documents

        self.state = replace(self.state, loading=True)
        try:
            fetched = await self.index.list_documents(
                self.config.collection_name, limit=self.config.document_limit
            )
        except DocumentIndexError as exc:
            LOGGER.error("Loading error: %s", exc)
            self.state = replace(self.state, message=LOAD_FAILED, loading=False)
            return self.state.documents

        self._fetched = tuple(fetched)
        self._recompute()
        self.state = replace(self.state, loading=False)
        return self.state.documents

    async def apply_view(
        self,
        *,
        search_query: str | None = None,
        filter_status: str | None = None,
        sort_order: SortOrder | None = None,
    ) -> Tuple[Document, ...]:
        """Change several view settings at once and reload."""
        self.state = replace(
            self.state,
            search_query=self.state.search_query if search_query is None else search_query,
            filter_status=self.state.filter_status if filter_status is None else filter_status,
            sort_order=self.state.sort_order if sort_order is None else sort_order,
        )
        return await self.refresh()

    async def set_search_query(self, query: str) -> Tuple[Document, ...]:
        self.state = replace(self.state, search_query=query)
        return await self.refresh()

    async def set_filter_status(self, status: str) -> Tuple[Document, ...]:
        self.state = replace(self.state, filter_status=status)
        return await self.refresh()

    async def toggle_sort_order(self) -> Tuple[Document, ...]:
        self.state = replace(self.state, sort_order=toggle(self.state.sort_order))
        return await self.refresh()

    async def _upload_one(self, path: Path) -> None:
        try:
            payload = encode_base64(path)
            metadata = upload_metadata(path)
        except OSError as exc:
            raise UploadError(f"Failed to read {path}: {exc}") from exc

        await self.index.add_document(  # type: ignore[union-attr]
            self.config.collection_name,
            f"{self.config.upload_prefix}{path.name}",
            {"type": "auto", "base64_data": payload},
            metadata,
        )
        LOGGER.info("Uploaded %s", path)

    async def upload(self, paths: Sequence[Path]) -> bool:
        """Upload files one at a time, then reload the listing."""
        if self.index is None or not paths:
            return False

        self.state = replace(self.state, loading=True)
        try:
            await self.index.ensure_collection(self.config.collection_name)
            for path in paths:
                await self._upload_one(path)
        except DocumentIndexError as exc:
            LOGGER.error("Upload error: %s", exc)
            self.state = replace(self.state, message=UPLOAD_FAILED, loading=False)
            return False

        await self.refresh()
        self.state = replace(self.state, message=UPLOAD_SUCCESS, loading=False)
        return True

    async def view_document(self, path: str) -> Optional[Document]:
        if self.index is None:
            return None
        try:
            document = await self.index.get_document(
                self.config.collection_name, path, include_content=True
            )
        except DocumentIndexError as exc:
            LOGGER.error("Document retrieval error: %s", exc)
            return None
        self.state = replace(self.state, selected_document=document)
        return document

    def close_document(self) -> None:
        self.state = replace(self.state, selected_document=None)
