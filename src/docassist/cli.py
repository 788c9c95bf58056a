"""Command line interface for DocAssist."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from docassist.chat.answer import SNIPPETS_HEADER, format_relevance
from docassist.chat.assistant import DocumentationAssistant
from docassist.chat.session import ChatSession
from docassist.client.errors import DocumentIndexError
from docassist.client.rest import authenticate
from docassist.config import AppConfig, DEFAULT_COLLECTION
from docassist.console.console import AUTH_SUCCESS, DocumentConsole
from docassist.models import Answer, Role
from docassist.utils.files import iter_upload_paths
from docassist.utils.text import describe_document, format_date


console = Console()
app = typer.Typer(help="DocAssist - document console and documentation assistant")

API_KEY_OPTION = typer.Option(
    None, "--api-key", envvar="ZEROENTROPY_API_KEY", help="Document index API key"
)
COLLECTION_OPTION = typer.Option(DEFAULT_COLLECTION, "--collection", help="Collection name")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Verbose logging")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _build_config(api_key: Optional[str], collection: str) -> AppConfig:
    return AppConfig(api_key=api_key, collection_name=collection)


async def _open_console(config: AppConfig) -> DocumentConsole:
    doc_console = DocumentConsole(config)
    await doc_console.authenticate(config.api_key or "")
    if not doc_console.state.authenticated:
        console.print(f"[red]{doc_console.state.message}[/red]")
        raise typer.Exit(code=1)
    return doc_console


def _print_answer(answer: Answer) -> None:
    console.print(Markdown(answer.content))
    if not answer.snippets or not answer.content.startswith(SNIPPETS_HEADER):
        return
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Relevance")
    table.add_column("Document")
    table.add_column("Pages")
    for snippet in answer.snippets:
        pages = (
            f"{snippet.page_span[0] + 1}-{snippet.page_span[1] + 1}" if snippet.page_span else "-"
        )
        table.add_row(format_relevance(snippet.score), snippet.path, pages)
    console.print(table)


@app.command()
def auth(
    api_key: Optional[str] = API_KEY_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Check that an API key is accepted by the service."""
    _setup_logging(verbose)
    config = AppConfig(api_key=api_key)

    async def _run() -> bool:
        try:
            index = await authenticate(config.api_key or "", config)
        except DocumentIndexError as exc:
            logging.getLogger(__name__).debug("Authentication error: %s", exc)
            return False
        await index.aclose()
        return True

    if not asyncio.run(_run()):
        console.print("[red]Authentication failed. Please check your API key.[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]{AUTH_SUCCESS}[/green]")


@app.command()
def documents(
    search: str = typer.Option("", "--search", "-s", help="Filter by path substring"),
    status: str = typer.Option("all", "--status", help="indexed, indexing, not_indexed or all"),
    sort: str = typer.Option("desc", "--sort", help="Sort order by path: asc or desc"),
    api_key: Optional[str] = API_KEY_OPTION,
    collection: str = COLLECTION_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """List documents in the collection."""
    _setup_logging(verbose)
    if sort not in ("asc", "desc"):
        raise typer.BadParameter("--sort must be 'asc' or 'desc'")
    config = _build_config(api_key, collection)

    async def _run() -> DocumentConsole:
        doc_console = await _open_console(config)
        try:
            await doc_console.apply_view(
                search_query=search, filter_status=status, sort_order=sort  # type: ignore[arg-type]
            )
        finally:
            await doc_console.aclose()
        return doc_console

    doc_console = asyncio.run(_run())
    state = doc_console.state
    if state.message and state.message != AUTH_SUCCESS:
        console.print(f"[red]{state.message}[/red]")
        raise typer.Exit(code=1)
    if not state.documents:
        console.print("[yellow]No documents found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Document")
    table.add_column("Status")
    table.add_column("Uploaded")
    for doc in state.documents:
        table.add_row(doc.path, doc.index_status or "-", format_date(doc.metadata.get("upload_timestamp")))
    console.print(table)


@app.command()
def show(
    path: str = typer.Argument(..., help="Document path inside the collection"),
    api_key: Optional[str] = API_KEY_OPTION,
    collection: str = COLLECTION_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show details for one document."""
    _setup_logging(verbose)
    config = _build_config(api_key, collection)

    async def _run():
        doc_console = await _open_console(config)
        try:
            return await doc_console.view_document(path)
        finally:
            await doc_console.aclose()

    document = asyncio.run(_run())
    if document is None:
        console.print(f"[yellow]Document not found: {path}[/yellow]")
        raise typer.Exit(code=1)

    details = describe_document(document.metadata)
    console.print(f"[bold]Path:[/bold] {document.path}")
    console.print(f"[bold]Status:[/bold] {document.index_status or '-'}")
    console.print(f"[bold]Upload Date:[/bold] {details['uploaded']}")
    console.print(f"[bold]File Type:[/bold] {details['content_type']}")
    console.print(f"[bold]Size:[/bold] {details['size']}")


@app.command()
def upload(
    inputs: List[Path] = typer.Argument(
        ..., help="Files or folders to upload.", resolve_path=True
    ),
    api_key: Optional[str] = API_KEY_OPTION,
    collection: str = COLLECTION_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Upload files to the collection, one at a time."""
    _setup_logging(verbose)
    files = list(iter_upload_paths(inputs))
    if not files:
        console.print("[yellow]No files found.[/yellow]")
        return

    config = _build_config(api_key, collection)

    async def _run() -> tuple[bool, str]:
        doc_console = await _open_console(config)
        try:
            uploaded = await doc_console.upload(files)
        finally:
            await doc_console.aclose()
        return uploaded, doc_console.state.message

    console.print(f"Uploading {len(files)} file(s) to [bold]{collection}[/bold]...")
    uploaded, message = asyncio.run(_run())
    if not uploaded:
        console.print(f"[red]{message}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]{message}[/green]")


@app.command()
def ask(
    query: str = typer.Argument(..., help="Question about the documentation"),
    api_key: Optional[str] = API_KEY_OPTION,
    collection: str = COLLECTION_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Answer a single question from the collection."""
    _setup_logging(verbose)
    if not query.strip():
        raise typer.BadParameter("Empty query")
    config = _build_config(api_key, collection)

    async def _run() -> Answer:
        try:
            index = await authenticate(config.api_key or "", config)
        except DocumentIndexError as exc:
            logging.getLogger(__name__).debug("Authentication error: %s", exc)
            console.print("[red]Authentication failed. Please check your API key.[/red]")
            raise typer.Exit(code=1)
        assistant = DocumentationAssistant(
            index, collection_name=config.collection_name, top_k=config.top_k
        )
        try:
            return await assistant.answer(query)
        finally:
            await index.aclose()

    _print_answer(asyncio.run(_run()))


@app.command()
def chat(
    api_key: Optional[str] = API_KEY_OPTION,
    collection: str = COLLECTION_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Interactive documentation assistant. Empty line or Ctrl-D exits."""
    _setup_logging(verbose)
    config = _build_config(api_key, collection)

    async def _run() -> None:
        try:
            index = await authenticate(config.api_key or "", config)
        except DocumentIndexError as exc:
            logging.getLogger(__name__).debug("Authentication error: %s", exc)
            console.print("[red]Authentication failed. Please check your API key.[/red]")
            raise typer.Exit(code=1)

        session = ChatSession(
            DocumentationAssistant(
                index, collection_name=config.collection_name, top_k=config.top_k
            )
        )
        console.print(Markdown(session.messages[0].content))
        try:
            while True:
                try:
                    text = console.input("[bold blue]> [/bold blue]")
                except EOFError:
                    break
                if not text.strip():
                    break
                with console.status("Searching..."):
                    message = await session.ask(text)
                if message is not None and message.role is Role.ASSISTANT:
                    _print_answer(
                        Answer(
                            content=message.content,
                            snippets=message.snippets,
                            documents=message.documents,
                            pages=message.pages,
                        )
                    )
        finally:
            await index.aclose()

    asyncio.run(_run())


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
) -> None:
    """Start the web interface."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    from docassist.web.app import app as web_app

    if not AppConfig().api_key:
        console.print(
            "[yellow]Warning: ZEROENTROPY_API_KEY not set, requests must send an X-API-Key header.[/yellow]"
        )

    console.print(f"Starting web interface on http://{host}:{port}")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
