"""File helpers shared by the path-based API."""

from __future__ import annotations

import os
from pathlib import Path

from ..codec.errors import E_IO, StreamIOError

__all__ = ["max_file_size", "safe_read_file", "write_file"]

DEFAULT_MAX_FILE_SIZE = 512 * 1024 * 1024


def max_file_size() -> int:
    raw = os.getenv("CM3D2CODEC_MAX_FILE_SIZE")
    if not raw:
        return DEFAULT_MAX_FILE_SIZE
    try:
        return int(raw)
    except ValueError:
        raise StreamIOError(
            code=E_IO,
            message=f"CM3D2CODEC_MAX_FILE_SIZE must be an integer, got {raw!r}",
        ) from None


def safe_read_file(path: Path, max_size: int | None = None) -> bytes:
    limit = max_file_size() if max_size is None else max_size
    if not path.is_file():
        raise StreamIOError(
            code=E_IO, message=f"File not found: {path}", context={"path": str(path)}
        )
    size = path.stat().st_size
    if size > limit:
        raise StreamIOError(
            code=E_IO,
            message=f"File too large: {size}>{limit}",
            context={"path": str(path), "size": size},
        )
    return path.read_bytes()


def write_file(path: Path, data: bytes) -> int:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return len(data)
