"""Texture container (.tex) codec.

Wire layout::

    signature:str  version:i32  texture_name:str
    [rect_count:i32  {x,y,w,h:f32} x rect_count]     version >= 1011
    [width:i32  height:i32  texture_format:i32]      version >= 1010
    data_len:i32  data:bytes[data_len]

Versions below 1010 use the legacy layout (only 1000 is documented): the
size lives in the payload header and there is no texture format. Legacy
containers are read-only.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO, Optional, Tuple, Union

from ..logging import get_logger
from .binio import BinaryReader, BinaryWriter
from .constants import (
    LEGACY_HEADER_SIZE,
    LEGACY_HEIGHT_OFFSET,
    LEGACY_WIDTH_OFFSET,
    TEX_SIGNATURE,
    TEX_VERSION,
    TEX_VERSION_EXPLICIT_SIZE,
    TEX_VERSION_RECTS,
    TextureFormat,
)
from .errors import (
    E_SIGNATURE,
    SignatureMismatchError,
    field_context,
    malformed,
    unsupported,
)

__all__ = [
    "Rect",
    "Tex",
    "is_legacy_version",
    "legacy_dimensions",
    "read_tex",
    "write_tex",
]


@dataclass(frozen=True, slots=True)
class Rect:
    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0


@dataclass(frozen=True, slots=True)
class Tex:
    """A decoded .tex container.

    ``rects`` is ``None`` when the version has no atlas table and
    ``texture_format`` is ``None`` when the version has no explicit format.
    Known format values are :class:`TextureFormat` members, others stay
    plain ints.
    """

    signature: str = TEX_SIGNATURE
    version: int = TEX_VERSION
    texture_name: str = ""
    rects: Optional[Tuple[Rect, ...]] = None
    width: int = 0
    height: int = 0
    texture_format: Optional[Union[TextureFormat, int]] = None
    data: bytes = b""

    def __post_init__(self) -> None:
        if self.rects is not None:
            object.__setattr__(self, "rects", tuple(self.rects))
        object.__setattr__(self, "data", bytes(self.data))


def is_legacy_version(version: int) -> bool:
    return version < TEX_VERSION_EXPLICIT_SIZE


def legacy_dimensions(data: bytes) -> Tuple[int, int]:
    """Width and height from a legacy payload header.

    Read big-endian as the reference reader does, although DDS headers are
    little-endian.
    """
    if len(data) < LEGACY_HEADER_SIZE:
        raise malformed(
            f"payload too short for legacy header: {len(data)} < {LEGACY_HEADER_SIZE}",
            length=len(data),
        )
    (width,) = struct.unpack_from(">i", data, LEGACY_WIDTH_OFFSET)
    (height,) = struct.unpack_from(">i", data, LEGACY_HEIGHT_OFFSET)
    return width, height


def _as_format(value: int) -> Union[TextureFormat, int]:
    try:
        return TextureFormat(value)
    except ValueError:
        return value


def read_tex(stream: BinaryIO) -> Tex:
    r = BinaryReader(stream)
    with field_context("signature"):
        signature = r.read_string()
        if signature != TEX_SIGNATURE:
            raise SignatureMismatchError(
                code=E_SIGNATURE,
                message=f"invalid .tex signature: got {signature!r}, want {TEX_SIGNATURE!r}",
                context={"expected": TEX_SIGNATURE, "actual": signature},
            )
    with field_context("version"):
        version = r.read_int32()
    with field_context("texture_name"):
        texture_name = r.read_string()

    rects: Optional[Tuple[Rect, ...]] = None
    if version >= TEX_VERSION_RECTS:
        with field_context("rect_count"):
            count = r.read_int32()
            if count < 0:
                raise malformed(f"negative rect count {count}", count=count)
        items = []
        for i in range(count):
            with field_context(f"rects[{i}]"):
                items.append(Rect(*r.read_floats(4)))
        rects = tuple(items)

    width = height = 0
    texture_format: Optional[Union[TextureFormat, int]] = None
    if version >= TEX_VERSION_EXPLICIT_SIZE:
        with field_context("width"):
            width = r.read_int32()
        with field_context("height"):
            height = r.read_int32()
        with field_context("texture_format"):
            texture_format = _as_format(r.read_int32())

    with field_context("data_length"):
        data_length = r.read_int32()
        if data_length < 0:
            raise malformed(
                f"negative data length {data_length}", length=data_length
            )
    with field_context("data"):
        data = r.read_exact(data_length)
        if is_legacy_version(version):
            width, height = legacy_dimensions(data)

    get_logger().debug(
        "decoded tex: name=%s version=%d %dx%d format=%s bytes=%d",
        texture_name,
        version,
        width,
        height,
        texture_format,
        len(data),
    )
    return Tex(
        signature=signature,
        version=version,
        texture_name=texture_name,
        rects=rects,
        width=width,
        height=height,
        texture_format=texture_format,
        data=data,
    )


def write_tex(tex: Tex, stream: BinaryIO) -> None:
    # Checked up front so a refused container leaves the stream untouched.
    if is_legacy_version(tex.version):
        raise unsupported(
            f"encoding legacy .tex version {tex.version} is not supported",
            field="version",
            version=tex.version,
        )
    if tex.texture_format is None:
        raise unsupported(
            f".tex version {tex.version} requires a texture format",
            field="texture_format",
            version=tex.version,
        )
    has_rects = tex.version >= TEX_VERSION_RECTS
    if has_rects and tex.rects is None:
        raise unsupported(
            f".tex version {tex.version} requires rects (use () for none)",
            field="rects",
            version=tex.version,
        )
    if not has_rects and tex.rects is not None:
        raise unsupported(
            f".tex version {tex.version} cannot store rects",
            field="rects",
            version=tex.version,
        )
    if tex.signature != TEX_SIGNATURE:
        raise SignatureMismatchError(
            code=E_SIGNATURE,
            message=f"refusing to write .tex signature {tex.signature!r}, want {TEX_SIGNATURE!r}",
            context={"field": "signature", "expected": TEX_SIGNATURE, "actual": tex.signature},
        )

    w = BinaryWriter(stream)
    with field_context("signature"):
        w.write_string(tex.signature)
    with field_context("version"):
        w.write_int32(tex.version)
    with field_context("texture_name"):
        w.write_string(tex.texture_name)

    if has_rects:
        with field_context("rect_count"):
            w.write_int32(len(tex.rects))
        for i, rect in enumerate(tex.rects):
            with field_context(f"rects[{i}]"):
                w.write_floats((rect.x, rect.y, rect.w, rect.h), 4)

    with field_context("width"):
        w.write_int32(tex.width)
    with field_context("height"):
        w.write_int32(tex.height)
    with field_context("texture_format"):
        w.write_int32(int(tex.texture_format))

    with field_context("data_length"):
        w.write_int32(len(tex.data))
    with field_context("data"):
        w.write_bytes(tex.data)
