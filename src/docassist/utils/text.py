"""Display helpers for document metadata."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z``."""
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_date(value: Any) -> str:
    parsed = parse_timestamp(value)
    return parsed.strftime("%Y-%m-%d") if parsed else "-"


def format_datetime(value: Any) -> str:
    parsed = parse_timestamp(value)
    return parsed.strftime("%Y-%m-%d %H:%M:%S") if parsed else "-"


def format_size_kb(value: Any) -> str:
    """Render a byte count (number or numeric string) in KB with two decimals."""
    try:
        size = float(value)
    except (TypeError, ValueError):
        return "-"
    return f"{size / 1024:.2f} KB"


def describe_document(metadata: Mapping[str, Any]) -> dict[str, str]:
    """Human readable upload date, file type and size for a document."""
    return {
        "uploaded": format_datetime(metadata.get("upload_timestamp")),
        "content_type": str(metadata.get("content_type") or "-"),
        "size": format_size_kb(metadata.get("size")),
    }
