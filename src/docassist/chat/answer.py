"""Answer assembly for documentation queries.

Turns the three retrieval result sets (documents, snippets, pages) into one
markdown answer. The function is pure: identical inputs always give identical
output, and result order from the service is never changed.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from docassist.models import Answer, Document, Page, Snippet

NO_RESULTS_MESSAGE = (
    "I couldn't find any relevant information. Please try rephrasing your question."
)
SEARCH_ERROR_MESSAGE = "Sorry, I encountered an error while searching the documentation."

LISTING_HEADER = "Here are the available documents:"
PAGES_HEADER = "Here are the relevant pages:"
SNIPPETS_HEADER = "Here's what I found:"


def is_listing_query(query: str) -> bool:
    """Return True when the query asks to show (all) documents."""
    lowered = query.lower()
    return "show" in lowered and ("document" in lowered or "all" in lowered)


def wants_pages(query: str) -> bool:
    """Return True when page-level results should be requested."""
    return "page" in query.lower()


def format_relevance(score: float) -> str:
    """Format a [0, 1] score as a percentage with one decimal, rounding half up."""
    percent = Decimal(score * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{percent}%"


def format_citation(snippet: Snippet) -> str:
    relevance = format_relevance(snippet.score)
    if snippet.page_span is not None:
        start, end = snippet.page_span
        return (
            f"*Source: `{snippet.path}` "
            f"(Pages {start + 1}-{end + 1}, Relevance: {relevance})*"
        )
    return f"*Source: `{snippet.path}` (Relevance: {relevance})*"


def unique_paths(documents: Iterable[Document]) -> list[str]:
    """Document paths without duplicates, first occurrence wins."""
    seen: dict[str, None] = {}
    for document in documents:
        seen.setdefault(document.path, None)
    return list(seen)


def _render_listing(documents: Sequence[Document]) -> str:
    response = f"{LISTING_HEADER}\n\n"
    for i, path in enumerate(unique_paths(documents), start=1):
        response += f"{i}. **{path}**\n"
    return response


def _render_pages(pages: Sequence[Page]) -> str:
    response = f"{PAGES_HEADER}\n\n"
    for page in pages:
        response += f"From document `{page.path}` (Page {page.page_index + 1}):\n"
        response += f"{page.content}\n\n"
    return response


def _render_snippets(snippets: Sequence[Snippet]) -> str:
    response = f"{SNIPPETS_HEADER}\n\n"
    for snippet in snippets:
        response += f"{snippet.content}\n\n"
        response += f"{format_citation(snippet)}\n\n"
    return response


def format_answer(
    query: str,
    documents: Sequence[Document],
    snippets: Sequence[Snippet],
    pages: Optional[Sequence[Page]] = None,
) -> Answer:
    """Build the answer for ``query`` from retrieval results.

    Rules are checked in a fixed order: listing intent, then page results,
    then snippets. ``pages=None`` means pages were not requested.
    """
    documents = tuple(documents)
    snippets = tuple(snippets)
    pages = tuple(pages) if pages is not None else None

    if not documents and not snippets and not pages:
        return Answer(content=NO_RESULTS_MESSAGE, pages=None if pages is None else ())

    if is_listing_query(query):
        content = _render_listing(documents)
    elif pages:
        content = _render_pages(pages)
    else:
        content = _render_snippets(snippets)

    return Answer(content=content, snippets=snippets, documents=documents, pages=pages)


def error_answer() -> Answer:
    """Fixed answer used when retrieval fails."""
    return Answer(content=SEARCH_ERROR_MESSAGE)
