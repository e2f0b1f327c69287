"""Format constants for the COM3D2 codecs."""

from __future__ import annotations

from enum import IntEnum

COL_SIGNATURE = "CM3D21_COL"
MATE_SIGNATURE = "CM3D2_MATERIAL"
TEX_SIGNATURE = "CM3D2_TEX"

COL_VERSION = 24102
MATE_VERSION = 2001
TEX_VERSION = 1010

# Tex layout breakpoints. Versions below TEX_VERSION_EXPLICIT_SIZE use the
# legacy layout whose only documented member is TEX_VERSION_LEGACY.
TEX_VERSION_LEGACY = 1000
TEX_VERSION_EXPLICIT_SIZE = 1010
TEX_VERSION_RECTS = 1011

# Legacy payload header: width/height as big-endian int32 at these offsets.
LEGACY_WIDTH_OFFSET = 16
LEGACY_HEIGHT_OFFSET = 20
LEGACY_HEADER_SIZE = 24

PROPERTY_END = "end"


class TextureFormat(IntEnum):
    """Unity texture formats accepted by COM3D2 .tex containers."""

    RGB24 = 3
    ARGB32 = 5
    DXT1 = 10
    DXT5 = 12

    @property
    def has_alpha(self) -> bool:
        return self in (TextureFormat.ARGB32, TextureFormat.DXT5)

    @property
    def is_dds(self) -> bool:
        return self in (TextureFormat.DXT1, TextureFormat.DXT5)


KNOWN_VERSIONS = {
    "col": {COL_VERSION},
    "mate": {1000, 1001, 2000, 2001},
    "tex": {TEX_VERSION_LEGACY, TEX_VERSION_EXPLICIT_SIZE, TEX_VERSION_RECTS},
}

__all__ = [
    "COL_SIGNATURE",
    "MATE_SIGNATURE",
    "TEX_SIGNATURE",
    "COL_VERSION",
    "MATE_VERSION",
    "TEX_VERSION",
    "TEX_VERSION_LEGACY",
    "TEX_VERSION_EXPLICIT_SIZE",
    "TEX_VERSION_RECTS",
    "LEGACY_WIDTH_OFFSET",
    "LEGACY_HEIGHT_OFFSET",
    "LEGACY_HEADER_SIZE",
    "PROPERTY_END",
    "TextureFormat",
    "KNOWN_VERSIONS",
]
