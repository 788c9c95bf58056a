"""Utility helpers for working with files."""

from __future__ import annotations

import base64
import mimetypes
from pathlib import Path
from typing import Iterable, Iterator


def iter_upload_paths(inputs: Iterable[Path]) -> Iterator[Path]:
    """Yield regular files from input paths, descending into directories."""
    for item in inputs:
        if item.is_dir():
            yield from iter_upload_paths(
                sorted(child for child in item.rglob("*") if child.is_file())
            )
        elif item.is_file():
            yield item


def encode_base64(path: Path) -> str:
    """Read a file and return its contents as base64 text."""
    return base64.b64encode(path.read_bytes()).decode("ascii")


def guess_content_type(path: Path) -> str:
    content_type, _ = mimetypes.guess_type(path.name)
    return content_type or "application/octet-stream"
