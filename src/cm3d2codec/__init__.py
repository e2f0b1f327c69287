"""Codecs and conversion tools for COM3D2 .col, .mate and .tex files."""

from .codec import (
    ColliderList,
    Mate,
    Tex,
    TextureFormat,
    CodecError,
    read_col,
    write_col,
    read_mate,
    write_mate,
    read_tex,
    write_tex,
)

__version__ = "0.1.0"

__all__ = [
    "ColliderList",
    "Mate",
    "Tex",
    "TextureFormat",
    "CodecError",
    "read_col",
    "write_col",
    "read_mate",
    "write_mate",
    "read_tex",
    "write_tex",
    "__version__",
]
