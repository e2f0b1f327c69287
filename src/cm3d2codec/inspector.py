"""File inspection utilities.

Public functions:
- detect_format(path) -> str
- inspect_file(path) -> dict
- validate_file(info) -> list[str]
"""

from __future__ import annotations

import io
from collections import Counter
from pathlib import Path
from typing import Any, Callable, Dict, List

from .codec.binio import BinaryReader
from .codec.col import ColliderList, read_col
from .codec.constants import (
    COL_SIGNATURE,
    KNOWN_VERSIONS,
    MATE_SIGNATURE,
    TEX_SIGNATURE,
    TextureFormat,
)
from .codec.errors import CodecError, malformed
from .codec.mate import Mate, read_mate
from .codec.tex import Tex, is_legacy_version, read_tex
from .utils.io import safe_read_file

__all__ = [
    "FORMATS",
    "detect_format",
    "inspect_bytes",
    "inspect_file",
    "validate_file",
]

FORMATS = ("col", "mate", "tex")

_SIGNATURES = {
    COL_SIGNATURE: "col",
    MATE_SIGNATURE: "mate",
    TEX_SIGNATURE: "tex",
}


def _peek_signature(data: bytes) -> str | None:
    try:
        return BinaryReader(io.BytesIO(data)).read_string()
    except CodecError:
        return None


def detect_format(path: str | Path, data: bytes | None = None) -> str:
    p = Path(path)
    suffix = p.suffix.lower().lstrip(".")
    if suffix in FORMATS:
        return suffix
    if data is None:
        data = safe_read_file(p)
    fmt = _SIGNATURES.get(_peek_signature(data) or "")
    if fmt is None:
        raise malformed(f"cannot determine format of {p.name}", path=str(p))
    return fmt


def _col_summary(col: ColliderList) -> Dict[str, Any]:
    return {
        "signature": col.signature,
        "version": col.version,
        "elements": len(col.colliders),
        "tags": dict(Counter(c.tag for c in col.colliders)),
    }


def _mate_summary(mate: Mate) -> Dict[str, Any]:
    props = mate.material.properties
    return {
        "signature": mate.signature,
        "version": mate.version,
        "name": mate.name,
        "material": mate.material.name,
        "shader": mate.material.shader_name,
        "properties": len(props),
        "tags": dict(Counter(p.tag for p in props)),
    }


def _tex_summary(tex: Tex) -> Dict[str, Any]:
    fmt = tex.texture_format
    return {
        "signature": tex.signature,
        "version": tex.version,
        "texture_name": tex.texture_name,
        "width": tex.width,
        "height": tex.height,
        "texture_format": fmt.name if isinstance(fmt, TextureFormat) else fmt,
        "rects": None if tex.rects is None else len(tex.rects),
        "data_size": len(tex.data),
    }


_INSPECTORS: Dict[str, tuple[Callable[[Any], Any], Callable[[Any], Dict]]] = {
    "col": (read_col, _col_summary),
    "mate": (read_mate, _mate_summary),
    "tex": (read_tex, _tex_summary),
}


def inspect_bytes(fmt: str, data: bytes) -> Dict[str, Any]:
    read, summarize = _INSPECTORS[fmt]
    stream = io.BytesIO(data)
    value = read(stream)
    return {
        "format": fmt,
        "file_size": len(data),
        **summarize(value),
        "trailing_bytes": len(data) - stream.tell(),
    }


def inspect_file(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    data = safe_read_file(p)
    info = inspect_bytes(detect_format(p, data), data)
    info["path"] = str(p)
    return info


def validate_file(info: Dict[str, Any]) -> List[str]:
    issues: List[str] = []
    fmt = info["format"]
    if info.get("trailing_bytes"):
        issues.append(f"{info['trailing_bytes']} trailing bytes after {fmt} data")
    if fmt == "col" and info["signature"] != COL_SIGNATURE:
        issues.append(f"Unexpected col signature {info['signature']!r}")
    if info["version"] not in KNOWN_VERSIONS[fmt]:
        issues.append(f"Unknown {fmt} version {info['version']}")
    if fmt == "tex":
        if is_legacy_version(info["version"]):
            issues.append(
                f"Legacy tex version {info['version']}; cannot be re-encoded"
            )
        elif isinstance(info.get("texture_format"), int):
            issues.append(f"Unknown texture format {info['texture_format']}")
    return issues
