"""FastAPI application backing the DocAssist web UI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Literal

from fastapi import FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from docassist import __version__
from docassist.chat.assistant import DocumentationAssistant
from docassist.client.errors import DocumentIndexError
from docassist.client.rest import ZeroEntropyIndex, authenticate
from docassist.config import AppConfig
from docassist.console.console import (
    AUTH_FAILED,
    AUTH_SUCCESS,
    LOAD_FAILED,
    UPLOAD_FAILED,
    DocumentConsole,
)
from docassist.models import Answer
from docassist.utils.files import iter_upload_paths
from docassist.utils.text import describe_document
from docassist.web.frontend import router as frontend_router

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="DocAssist Web", version=__version__)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(frontend_router)


class AuthPayload(BaseModel):
    api_key: str


class ChatPayload(BaseModel):
    query: str


class UploadPayload(BaseModel):
    paths: List[str]


def _open_index(api_key: str | None) -> tuple[AppConfig, ZeroEntropyIndex]:
    config = AppConfig(api_key=api_key or None)
    try:
        key = config.require_api_key()
    except DocumentIndexError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    index = ZeroEntropyIndex(key, base_url=config.base_url, timeout=config.timeout)
    return config, index


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.post("/auth")
async def check_api_key(payload: AuthPayload) -> dict[str, Any]:
    try:
        index = await authenticate(payload.api_key, AppConfig(api_key=payload.api_key))
    except DocumentIndexError as exc:
        LOGGER.error("Authentication error: %s", exc)
        return {"authenticated": False, "message": AUTH_FAILED}
    await index.aclose()
    return {"authenticated": True, "message": AUTH_SUCCESS}


@app.get("/documents", response_model=None)
async def list_documents(
    search: str = "",
    status: str = "all",
    order: Literal["asc", "desc"] = "desc",
    x_api_key: str | None = Header(default=None),
) -> dict[str, Any]:
    """List the collection's documents, filtered and sorted."""
    config, index = _open_index(x_api_key)
    console = DocumentConsole(config, index=index)
    try:
        documents = await console.apply_view(
            search_query=search, filter_status=status, sort_order=order
        )
    finally:
        await console.aclose()

    if console.state.message == LOAD_FAILED:
        raise HTTPException(status_code=502, detail=LOAD_FAILED)
    return {"documents": list(documents), "count": len(documents)}


@app.get("/documents/info", response_model=None)
async def document_info(path: str, x_api_key: str | None = Header(default=None)) -> dict[str, Any]:
    config, index = _open_index(x_api_key)
    console = DocumentConsole(config, index=index)
    try:
        document = await console.view_document(path)
    finally:
        await console.aclose()

    if document is None:
        raise HTTPException(status_code=404, detail=f"Document not found: {path}")
    return {"document": document, "details": describe_document(document.metadata)}


@app.post("/documents/upload")
async def upload_documents(
    payload: UploadPayload, x_api_key: str | None = Header(default=None)
) -> dict[str, Any]:
    if not payload.paths:
        raise HTTPException(status_code=400, detail="No path provided")

    resolved: list[Path] = []
    for raw in payload.paths:
        clean_path = raw.strip().replace("\r", "").replace("\n", "")
        if not clean_path:
            continue
        if "\0" in clean_path:
            raise HTTPException(status_code=400, detail="Invalid path: contains null byte")
        path = Path(clean_path).expanduser()
        if not path.exists():
            raise HTTPException(status_code=404, detail=f"Path not found: {clean_path}")
        resolved.append(path)

    files = list(iter_upload_paths(resolved))
    if not files:
        raise HTTPException(status_code=400, detail="No files found")

    config, index = _open_index(x_api_key)
    console = DocumentConsole(config, index=index)
    try:
        uploaded = await console.upload(files)
    finally:
        await console.aclose()

    if not uploaded:
        raise HTTPException(status_code=502, detail=UPLOAD_FAILED)
    return {
        "status": "ok",
        "message": console.state.message,
        "uploaded": [path.name for path in files],
    }


@app.post("/chat", response_model=None)
async def chat(payload: ChatPayload, x_api_key: str | None = Header(default=None)) -> Answer:
    query = payload.query.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Empty query")

    config, index = _open_index(x_api_key)
    assistant = DocumentationAssistant(
        index, collection_name=config.collection_name, top_k=config.top_k
    )
    try:
        return await assistant.answer(payload.query)
    finally:
        await index.aclose()
