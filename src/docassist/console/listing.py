"""Filtered and sorted view over a collection's documents."""

from __future__ import annotations

from typing import Iterable, Literal, Tuple

from docassist.models import Document

SortOrder = Literal["asc", "desc"]
ALL_STATUSES = "all"


def derive_listing(
    documents: Iterable[Document],
    *,
    search_query: str = "",
    status: str = ALL_STATUSES,
    sort_order: SortOrder = "desc",
) -> Tuple[Document, ...]:
    """Apply the search filter, the status filter and the path sort."""
    results = list(documents)

    if search_query:
        needle = search_query.lower()
        results = [doc for doc in results if needle in doc.path.lower()]

    if status != ALL_STATUSES:
        results = [doc for doc in results if doc.index_status == status]

    results.sort(key=lambda doc: (doc.path.casefold(), doc.path), reverse=sort_order == "desc")
    return tuple(results)


def toggle(sort_order: SortOrder) -> SortOrder:
    return "desc" if sort_order == "asc" else "asc"
