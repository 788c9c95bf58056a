"""Application configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass

from docassist.client.errors import AuthenticationError

DEFAULT_BASE_URL = "https://api.zeroentropy.dev/v1"
DEFAULT_COLLECTION = "default"


def _get_default_api_key() -> str | None:
    """Read the API key from the environment, ignoring blank values."""
    key = os.environ.get("ZEROENTROPY_API_KEY", "").strip()
    return key or None


def _get_default_base_url() -> str:
    return os.environ.get("ZEROENTROPY_BASE_URL") or DEFAULT_BASE_URL


@dataclass(slots=True)
class AppConfig:
    api_key: str | None = None
    base_url: str | None = None
    collection_name: str = DEFAULT_COLLECTION
    document_limit: int = 1000
    top_k: int = 3
    upload_prefix: str = "documents/"
    timeout: float = 30.0

    def __post_init__(self) -> None:
        if self.api_key is None:
            self.api_key = _get_default_api_key()
        if self.base_url is None:
            self.base_url = _get_default_base_url()

    def require_api_key(self) -> str:
        if not self.api_key or not self.api_key.strip():
            raise AuthenticationError(
                "No API key configured. Pass --api-key or set ZEROENTROPY_API_KEY."
            )
        return self.api_key.strip()
