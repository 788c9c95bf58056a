"""Documentation assistant: retrieval plus answer assembly."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from docassist.chat.answer import error_answer, format_answer, wants_pages
from docassist.client.errors import DocumentIndexError
from docassist.client.protocol import DocumentIndex
from docassist.models import Answer, Page

LOGGER = logging.getLogger(__name__)


class DocumentationAssistant:
    """Answers free-text questions from a document collection."""

    def __init__(
        self,
        index: DocumentIndex,
        *,
        collection_name: str = "default",
        top_k: int = 3,
    ) -> None:
        self.index = index
        self.collection_name = collection_name
        self.top_k = top_k

    async def _top_pages(self, query: str) -> Optional[List[Page]]:
        if not wants_pages(query):
            return None
        return await self.index.query_top_pages(
            self.collection_name, query, k=self.top_k, include_content=True
        )

    async def answer(self, query: str) -> Answer:
        """Run the retrieval calls concurrently and format the result.

        Every call is awaited to completion before the first failure, if any,
        is reported. Retrieval failures are logged and turned into a fixed
        error answer.
        """
        results = await asyncio.gather(
            self.index.query_top_documents(
                self.collection_name, query, k=self.top_k, include_metadata=True
            ),
            self.index.query_top_snippets(
                self.collection_name, query, k=self.top_k, precise_responses=True
            ),
            self._top_pages(query),
            return_exceptions=True,
        )
        failures = [result for result in results if isinstance(result, BaseException)]
        if failures:
            exc = failures[0]
            if isinstance(exc, DocumentIndexError):
                LOGGER.error("Error querying documents: %s", exc)
            elif isinstance(exc, Exception):
                LOGGER.error("Unexpected error querying documents", exc_info=exc)
            else:
                raise exc
            return error_answer()

        documents, snippets, pages = results

        LOGGER.debug(
            "Retrieved %d documents, %d snippets, %s pages",
            len(documents),
            len(snippets),
            "no" if pages is None else len(pages),
        )
        return format_answer(query, documents, snippets, pages)
