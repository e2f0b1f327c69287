"""High-level, path-based API for cm3d2codec."""

from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, List, Union

from .codec.col import ColliderList, read_col, write_col
from .codec.mate import Mate, read_mate, write_mate
from .codec.tex import Tex, read_tex, write_tex
from .imaging import image_to_tex, tex_to_image
from .inspector import (
    detect_format,
    inspect_file as _inspect_file_impl,
    validate_file as _validate_file_impl,
)
from .logging import get_logger
from .reporting import get_reporter, task
from .utils.io import safe_read_file, write_file

__all__ = [
    "ImageImportOptions",
    "ImageExportOptions",
    "RoundtripResult",
    "load_col",
    "save_col",
    "load_mate",
    "save_mate",
    "load_tex",
    "save_tex",
    "decode_bytes",
    "encode_bytes",
    "roundtrip_file",
    "convert_tex_to_image",
    "convert_image_to_tex",
    "inspect",
    "validate",
]

Asset = Union[ColliderList, Mate, Tex]

_CODECS: Dict[str, tuple[Callable[[BinaryIO], Any], Callable[[Any, BinaryIO], None]]] = {
    "col": (read_col, write_col),
    "mate": (read_mate, write_mate),
    "tex": (read_tex, write_tex),
}

_FORMAT_OF = {ColliderList: "col", Mate: "mate", Tex: "tex"}


@dataclass(slots=True)
class ImageImportOptions:
    input_path: Path
    output_path: Path
    # Name stored in the container; defaults to the input file's stem
    texture_name: str | None = None
    # Encode as DXT1/DXT5 DDS instead of PNG/JPEG
    compress: bool = False
    force_png: bool = False


@dataclass(slots=True)
class ImageExportOptions:
    input_path: Path
    # Directory or file path; defaults to the input path without its suffix
    output_path: Path | None = None
    force_png: bool = False


@dataclass(slots=True)
class RoundtripResult:
    path: Path
    format: str
    original_size: int
    encoded_size: int
    identical: bool
    first_difference: int | None = None


# Bytes -----------------------------------------------------------------------
def decode_bytes(fmt: str, data: bytes) -> Asset:
    read, _ = _CODECS[fmt]
    return read(io.BytesIO(data))


def encode_bytes(value: Asset) -> bytes:
    fmt = _FORMAT_OF[type(value)]
    _, write = _CODECS[fmt]
    buf = io.BytesIO()
    write(value, buf)
    return buf.getvalue()


def _load(fmt: str, path: str | Path) -> Any:
    p = Path(path)
    with task(f"{fmt}.decode", f"Decode {p.name}", file=p.name):
        return decode_bytes(fmt, safe_read_file(p))


def _save(value: Asset, path: str | Path) -> int:
    p = Path(path)
    fmt = _FORMAT_OF[type(value)]
    with task(f"{fmt}.encode", f"Encode {p.name}", file=p.name):
        # Encode fully before touching the destination.
        data = encode_bytes(value)
        return write_file(p, data)


# Collider lists --------------------------------------------------------------
def load_col(path: str | Path) -> ColliderList:
    col = _load("col", path)
    get_reporter().summary(
        "col", file=Path(path).name, version=col.version, elements=len(col.colliders)
    )
    return col


def save_col(col: ColliderList, path: str | Path) -> int:
    return _save(col, path)


# Materials -------------------------------------------------------------------
def load_mate(path: str | Path) -> Mate:
    mate = _load("mate", path)
    get_reporter().summary(
        "mate",
        file=Path(path).name,
        version=mate.version,
        properties=len(mate.material.properties),
    )
    return mate


def save_mate(mate: Mate, path: str | Path) -> int:
    return _save(mate, path)


# Textures --------------------------------------------------------------------
def load_tex(path: str | Path) -> Tex:
    tex = _load("tex", path)
    get_reporter().summary(
        "tex",
        file=Path(path).name,
        version=tex.version,
        bytes=len(tex.data),
        rects=0 if tex.rects is None else len(tex.rects),
    )
    return tex


def save_tex(tex: Tex, path: str | Path) -> int:
    return _save(tex, path)


# Round trip ------------------------------------------------------------------
def roundtrip_file(path: str | Path, output_path: str | Path | None = None) -> RoundtripResult:
    """Decode a file, re-encode it and compare against the original bytes.

    When ``output_path`` is given the re-encoded bytes are written there.
    """
    logger = get_logger()
    p = Path(path)
    original = safe_read_file(p)
    fmt = detect_format(p, original)
    with task(f"{fmt}.roundtrip", f"Round trip {p.name}", file=p.name):
        encoded = encode_bytes(decode_bytes(fmt, original))
    first_diff = None
    if encoded != original:
        first_diff = next(
            (i for i, (a, b) in enumerate(zip(original, encoded)) if a != b),
            min(len(original), len(encoded)),
        )
        logger.warning(
            "Round trip of %s differs at byte %d (%d -> %d bytes)",
            p.name,
            first_diff,
            len(original),
            len(encoded),
        )
    if output_path is not None:
        write_file(Path(output_path), encoded)
    get_reporter().summary(
        "roundtrip", file=p.name, bytes=len(encoded), identical=first_diff is None
    )
    return RoundtripResult(
        path=p,
        format=fmt,
        original_size=len(original),
        encoded_size=len(encoded),
        identical=first_diff is None,
        first_difference=first_diff,
    )


# Image conversion ------------------------------------------------------------
def convert_tex_to_image(options: ImageExportOptions) -> Path:
    tex = load_tex(options.input_path)
    out = options.output_path
    if out is None:
        out = options.input_path.with_suffix("")
    elif out.is_dir():
        out = out / options.input_path.stem
    with task("tex.export", f"Export {options.input_path.name}"):
        written = tex_to_image(tex, out, force_png=options.force_png)
    get_logger().info("Wrote image: %s", written)
    return written


def convert_image_to_tex(options: ImageImportOptions) -> Tex:
    name = options.texture_name or options.input_path.stem
    with task("tex.import", f"Import {options.input_path.name}"):
        tex = image_to_tex(
            options.input_path,
            name,
            compress=options.compress,
            force_png=options.force_png,
        )
    bytes_written = save_tex(tex, options.output_path)
    get_logger().info(
        "Built tex: %s (%d bytes, version=%d)",
        options.output_path.name,
        bytes_written,
        tex.version,
    )
    return tex


# Inspection ------------------------------------------------------------------
def inspect(path: str | Path) -> dict:
    return _inspect_file_impl(path)


def validate(path: str | Path) -> List[str]:
    return _validate_file_impl(_inspect_file_impl(path))
