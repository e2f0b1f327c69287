"""Binary codecs for the COM3D2 .col, .mate and .tex formats."""

from .constants import TextureFormat
from .col import (
    ColliderBase,
    CapsuleCollider,
    PlaneCollider,
    MuneCollider,
    MissingCollider,
    ColliderList,
    read_col,
    write_col,
)
from .mate import (
    Texture2DRef,
    RenderTextureRef,
    TextureProperty,
    ColorProperty,
    VectorProperty,
    ScalarProperty,
    Material,
    Mate,
    read_mate,
    write_mate,
)
from .tex import Rect, Tex, read_tex, write_tex
from .errors import (
    CodecError,
    MalformedStreamError,
    SignatureMismatchError,
    UnknownTagError,
    UnsupportedOperationError,
    StreamIOError,
    DocumentError,
    TranscodeError,
)

__all__ = [
    "TextureFormat",
    "ColliderBase",
    "CapsuleCollider",
    "PlaneCollider",
    "MuneCollider",
    "MissingCollider",
    "ColliderList",
    "read_col",
    "write_col",
    "Texture2DRef",
    "RenderTextureRef",
    "TextureProperty",
    "ColorProperty",
    "VectorProperty",
    "ScalarProperty",
    "Material",
    "Mate",
    "read_mate",
    "write_mate",
    "Rect",
    "Tex",
    "read_tex",
    "write_tex",
    "CodecError",
    "MalformedStreamError",
    "SignatureMismatchError",
    "UnknownTagError",
    "UnsupportedOperationError",
    "StreamIOError",
    "DocumentError",
    "TranscodeError",
]
