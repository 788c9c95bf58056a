"""REST client for the ZeroEntropy document index API."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Type, TypeVar

import httpx

from docassist.client.errors import (
    AuthenticationError,
    CollectionCreationError,
    DocumentIndexError,
    RetrievalError,
    UploadError,
)
from docassist.config import DEFAULT_BASE_URL, AppConfig
from docassist.models import Document, Page, Snippet

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def _error_message(response: httpx.Response) -> str:
    """Extract a readable message from an error response."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        if payload.get("detail"):
            return str(payload["detail"])
    return response.text or response.reason_phrase


def _parse_records(endpoint: str, data: Any, key: str, factory: Callable[[Any], T]) -> List[T]:
    """Build records from ``data[key]``, reporting a malformed body as a retrieval error."""
    try:
        return [factory(item) for item in data.get(key) or []]
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise RetrievalError(f"{endpoint} returned a malformed response: {exc!r}") from exc


class ZeroEntropyIndex:
    """Async client implementing ``DocumentIndex`` over the REST API."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "ZeroEntropyIndex":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(
        self,
        endpoint: str,
        payload: Mapping[str, Any],
        *,
        error: Type[DocumentIndexError] = RetrievalError,
    ) -> Dict[str, Any]:
        try:
            response = await self._client.post(endpoint, json=dict(payload))
        except httpx.HTTPError as exc:
            raise error(f"Request to {endpoint} failed: {exc}") from exc

        if response.status_code in (401, 403):
            raise AuthenticationError(_error_message(response))
        if response.is_error:
            raise error(f"{endpoint} returned {response.status_code}: {_error_message(response)}")
        try:
            return response.json()
        except ValueError as exc:
            raise error(f"{endpoint} returned invalid JSON") from exc

    async def get_status(self) -> Dict[str, Any]:
        return await self._post("/status/get-status", {})

    async def ensure_collection(self, collection: str) -> None:
        try:
            response = await self._client.post(
                "/collections/add-collection", json={"collection_name": collection}
            )
        except httpx.HTTPError as exc:
            raise CollectionCreationError(f"Unable to create collection {collection!r}: {exc}") from exc

        if response.status_code in (401, 403):
            raise AuthenticationError(_error_message(response))
        if response.is_error:
            message = _error_message(response)
            if response.status_code == 409 or "already exists" in message:
                LOGGER.info("Collection %s already exists, proceeding", collection)
                return
            raise CollectionCreationError(message)
        LOGGER.info("Created collection %s", collection)

    async def list_documents(self, collection: str, *, limit: int = 1000) -> List[Document]:
        data = await self._post(
            "/documents/get-document-info-list",
            {"collection_name": collection, "limit": limit},
        )
        return _parse_records("/documents/get-document-info-list", data, "documents", Document.from_api)

    async def get_document(
        self, collection: str, path: str, *, include_content: bool = False
    ) -> Document:
        data = await self._post(
            "/documents/get-document-info",
            {"collection_name": collection, "path": path, "include_content": include_content},
        )
        try:
            return Document.from_api(data["document"])
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise RetrievalError(
                f"/documents/get-document-info returned a malformed response: {exc!r}"
            ) from exc

    async def add_document(
        self,
        collection: str,
        path: str,
        content: Mapping[str, str],
        metadata: Mapping[str, str],
    ) -> None:
        await self._post(
            "/documents/add-document",
            {
                "collection_name": collection,
                "path": path,
                "content": dict(content),
                "metadata": dict(metadata),
            },
            error=UploadError,
        )

    async def query_top_documents(
        self, collection: str, query: str, *, k: int, include_metadata: bool = True
    ) -> List[Document]:
        data = await self._post(
            "/queries/top-documents",
            {
                "collection_name": collection,
                "query": query,
                "k": k,
                "include_metadata": include_metadata,
            },
        )
        return _parse_records("/queries/top-documents", data, "results", Document.from_api)

    async def query_top_snippets(
        self, collection: str, query: str, *, k: int, precise_responses: bool = True
    ) -> List[Snippet]:
        data = await self._post(
            "/queries/top-snippets",
            {
                "collection_name": collection,
                "query": query,
                "k": k,
                "precise_responses": precise_responses,
            },
        )
        return _parse_records("/queries/top-snippets", data, "results", Snippet.from_api)

    async def query_top_pages(
        self, collection: str, query: str, *, k: int, include_content: bool = True
    ) -> List[Page]:
        data = await self._post(
            "/queries/top-pages",
            {
                "collection_name": collection,
                "query": query,
                "k": k,
                "include_content": include_content,
            },
        )
        return _parse_records("/queries/top-pages", data, "results", Page.from_api)


async def authenticate(
    api_key: str,
    config: AppConfig | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ZeroEntropyIndex:
    """Create a client for ``api_key`` and verify the key with a status call."""
    if not api_key or not api_key.strip():
        raise AuthenticationError("API key is empty")

    config = config or AppConfig()
    index = ZeroEntropyIndex(
        api_key.strip(),
        base_url=config.base_url or DEFAULT_BASE_URL,
        timeout=config.timeout,
        transport=transport,
    )
    try:
        await index.get_status()
    except DocumentIndexError as exc:
        await index.aclose()
        if isinstance(exc, AuthenticationError):
            raise
        raise AuthenticationError(f"Unable to verify API key: {exc}") from exc
    return index
