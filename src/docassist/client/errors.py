"""Errors raised by document index clients."""

from __future__ import annotations


class DocumentIndexError(Exception):
    """Base class for failures talking to the document index service."""


class AuthenticationError(DocumentIndexError):
    """The API key is missing or was rejected."""


class RetrievalError(DocumentIndexError):
    """A query, listing or lookup call failed."""


class UploadError(DocumentIndexError):
    """A document could not be read, encoded or added."""


class CollectionCreationError(DocumentIndexError):
    """The collection could not be created (other than it already existing)."""
