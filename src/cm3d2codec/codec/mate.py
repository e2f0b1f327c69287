"""Material (.mate) codec.

Wire layout::

    signature:str  version:i32  name:str
    material.name:str  shader_name:str  shader_filename:str
    {tag:str  prop_name:str  <variant fields>} x N
    "end"

The property list has no count; the sentinel ``"end"`` shares the position of
the next property's tag, so the reader looks one string ahead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO, Callable, ClassVar, Dict, Optional, Tuple, Type, Union

from ..logging import get_logger
from .binio import BinaryReader, BinaryWriter
from .constants import MATE_SIGNATURE, MATE_VERSION, PROPERTY_END
from .errors import (
    E_SIGNATURE,
    SignatureMismatchError,
    field_context,
    malformed,
    unknown_tag,
)

__all__ = [
    "Texture2DRef",
    "RenderTextureRef",
    "TextureProperty",
    "ColorProperty",
    "VectorProperty",
    "ScalarProperty",
    "Property",
    "Material",
    "Mate",
    "read_mate",
    "write_mate",
]

Vec2 = Tuple[float, float]
Vec4 = Tuple[float, float, float, float]


@dataclass(frozen=True, slots=True)
class Texture2DRef:
    """Payload of ``tex2d`` and ``cube`` texture properties."""

    name: str = ""
    path: str = ""
    offset: Vec2 = (0.0, 0.0)
    scale: Vec2 = (1.0, 1.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "offset", tuple(self.offset))
        object.__setattr__(self, "scale", tuple(self.scale))


@dataclass(frozen=True, slots=True)
class RenderTextureRef:
    """Payload of ``texRT`` properties; the game ignores both strings."""

    discarded_1: str = ""
    discarded_2: str = ""


@dataclass(frozen=True, slots=True)
class TextureProperty:
    tag: ClassVar[str] = "tex"

    prop_name: str
    sub_tag: str = "tex2d"
    texture: Union[Texture2DRef, RenderTextureRef] = field(
        default_factory=Texture2DRef
    )


@dataclass(frozen=True, slots=True)
class ColorProperty:
    tag: ClassVar[str] = "col"

    prop_name: str
    color: Vec4 = (0.0, 0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", tuple(self.color))


@dataclass(frozen=True, slots=True)
class VectorProperty:
    tag: ClassVar[str] = "vec"

    prop_name: str
    vector: Vec4 = (0.0, 0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "vector", tuple(self.vector))


@dataclass(frozen=True, slots=True)
class ScalarProperty:
    tag: ClassVar[str] = "f"

    prop_name: str
    value: float = 0.0


Property = Union[TextureProperty, ColorProperty, VectorProperty, ScalarProperty]

@dataclass(frozen=True, slots=True)
class Material:
    name: str = ""
    shader_name: str = ""
    shader_filename: str = ""
    properties: Tuple[Property, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", tuple(self.properties))


@dataclass(frozen=True, slots=True)
class Mate:
    signature: str = MATE_SIGNATURE
    version: int = MATE_VERSION
    name: str = ""
    material: Material = field(default_factory=Material)


class _LookaheadReader(BinaryReader):
    """BinaryReader with a single pushed-back string token."""

    def __init__(self, stream: BinaryIO):
        super().__init__(stream)
        self._pending: Optional[str] = None

    def peek_string(self) -> str:
        if self._pending is None:
            self._pending = super().read_string()
        return self._pending

    def read_string(self) -> str:
        if self._pending is not None:
            value, self._pending = self._pending, None
            return value
        return super().read_string()

    def read_exact(self, size: int) -> bytes:
        if self._pending is not None:
            raise malformed("raw read with a pending look-ahead token")
        return super().read_exact(size)


# Texture sub-variants ----------------------------------------------------------
def _read_texture_2d(r: BinaryReader) -> Texture2DRef:
    with field_context("name"):
        name = r.read_string()
    with field_context("path"):
        path = r.read_string()
    with field_context("offset"):
        offset = r.read_floats(2)
    with field_context("scale"):
        scale = r.read_floats(2)
    return Texture2DRef(name=name, path=path, offset=offset, scale=scale)


def _write_texture_2d(w: BinaryWriter, t: Texture2DRef) -> None:
    with field_context("name"):
        w.write_string(t.name)
    with field_context("path"):
        w.write_string(t.path)
    with field_context("offset"):
        w.write_floats(t.offset, 2)
    with field_context("scale"):
        w.write_floats(t.scale, 2)


def _read_render_texture(r: BinaryReader) -> RenderTextureRef:
    with field_context("discarded_1"):
        s1 = r.read_string()
    with field_context("discarded_2"):
        s2 = r.read_string()
    return RenderTextureRef(discarded_1=s1, discarded_2=s2)


def _write_render_texture(w: BinaryWriter, t: RenderTextureRef) -> None:
    with field_context("discarded_1"):
        w.write_string(t.discarded_1)
    with field_context("discarded_2"):
        w.write_string(t.discarded_2)


_TEXTURE_SUB_TYPES: Dict[str, Type] = {
    "tex2d": Texture2DRef,
    "cube": Texture2DRef,
    "texRT": RenderTextureRef,
}


# Property variants -----------------------------------------------------------
def _read_texture(r: BinaryReader, prop_name: str) -> TextureProperty:
    with field_context("sub_tag"):
        sub_tag = r.read_string()
    sub_type = _TEXTURE_SUB_TYPES.get(sub_tag)
    if sub_type is None:
        raise unknown_tag("texture sub", sub_tag)
    with field_context("texture"):
        if sub_type is Texture2DRef:
            texture = _read_texture_2d(r)
        else:
            texture = _read_render_texture(r)
    return TextureProperty(prop_name=prop_name, sub_tag=sub_tag, texture=texture)


def _write_texture(w: BinaryWriter, p: TextureProperty) -> None:
    sub_type = _TEXTURE_SUB_TYPES.get(p.sub_tag)
    if sub_type is None:
        raise unknown_tag("texture sub", p.sub_tag)
    if not isinstance(p.texture, sub_type):
        raise malformed(
            f"sub tag {p.sub_tag!r} requires {sub_type.__name__}, "
            f"got {type(p.texture).__name__}",
            tag=p.sub_tag,
        )
    with field_context("sub_tag"):
        w.write_string(p.sub_tag)
    with field_context("texture"):
        if isinstance(p.texture, Texture2DRef):
            _write_texture_2d(w, p.texture)
        else:
            _write_render_texture(w, p.texture)


def _read_color(r: BinaryReader, prop_name: str) -> ColorProperty:
    with field_context("color"):
        return ColorProperty(prop_name=prop_name, color=r.read_floats(4))


def _write_color(w: BinaryWriter, p: ColorProperty) -> None:
    with field_context("color"):
        w.write_floats(p.color, 4)


def _read_vector(r: BinaryReader, prop_name: str) -> VectorProperty:
    with field_context("vector"):
        return VectorProperty(prop_name=prop_name, vector=r.read_floats(4))


def _write_vector(w: BinaryWriter, p: VectorProperty) -> None:
    with field_context("vector"):
        w.write_floats(p.vector, 4)


def _read_scalar(r: BinaryReader, prop_name: str) -> ScalarProperty:
    with field_context("value"):
        return ScalarProperty(prop_name=prop_name, value=r.read_float32())


def _write_scalar(w: BinaryWriter, p: ScalarProperty) -> None:
    with field_context("value"):
        w.write_float32(p.value)


_READERS: Dict[str, Callable[[BinaryReader, str], Property]] = {
    TextureProperty.tag: _read_texture,
    ColorProperty.tag: _read_color,
    VectorProperty.tag: _read_vector,
    ScalarProperty.tag: _read_scalar,
}

_WRITERS: Dict[Type, Callable[[BinaryWriter, Property], None]] = {
    TextureProperty: _write_texture,
    ColorProperty: _write_color,
    VectorProperty: _write_vector,
    ScalarProperty: _write_scalar,
}


def _read_property(r: BinaryReader, index: int) -> Property:
    with field_context("tag"):
        tag = r.read_string()
    with field_context("prop_name"):
        prop_name = r.read_string()
    reader = _READERS.get(tag)
    if reader is None:
        raise unknown_tag("property", tag, index=index)
    return reader(r, prop_name)


def _write_property(w: BinaryWriter, prop: Property, index: int) -> None:
    writer = _WRITERS.get(type(prop))
    if writer is None:
        raise unknown_tag("property", type(prop).__name__, index=index)
    with field_context("tag"):
        w.write_string(prop.tag)
    with field_context("prop_name"):
        w.write_string(prop.prop_name)
    writer(w, prop)


# Material --------------------------------------------------------------------
def _read_material(r: _LookaheadReader) -> Material:
    with field_context("name"):
        name = r.read_string()
    with field_context("shader_name"):
        shader_name = r.read_string()
    with field_context("shader_filename"):
        shader_filename = r.read_string()

    properties = []
    while True:
        index = len(properties)
        with field_context(f"properties[{index}]"):
            if r.peek_string() == PROPERTY_END:
                r.read_string()
                break
            properties.append(_read_property(r, index))
    return Material(
        name=name,
        shader_name=shader_name,
        shader_filename=shader_filename,
        properties=tuple(properties),
    )


def _write_material(w: BinaryWriter, material: Material) -> None:
    with field_context("name"):
        w.write_string(material.name)
    with field_context("shader_name"):
        w.write_string(material.shader_name)
    with field_context("shader_filename"):
        w.write_string(material.shader_filename)
    for i, prop in enumerate(material.properties):
        with field_context(f"properties[{i}]"):
            _write_property(w, prop, i)
    with field_context("end"):
        w.write_string(PROPERTY_END)


# Container -------------------------------------------------------------------
def read_mate(stream: BinaryIO) -> Mate:
    r = _LookaheadReader(stream)
    with field_context("signature"):
        signature = r.read_string()
        if signature != MATE_SIGNATURE:
            raise SignatureMismatchError(
                code=E_SIGNATURE,
                message=f"invalid .mate signature: got {signature!r}, want {MATE_SIGNATURE!r}",
                context={"expected": MATE_SIGNATURE, "actual": signature},
            )
    with field_context("version"):
        version = r.read_int32()
    with field_context("name"):
        name = r.read_string()
    with field_context("material"):
        material = _read_material(r)
    get_logger().debug(
        "decoded mate: name=%s shader=%s properties=%d",
        name,
        material.shader_name,
        len(material.properties),
    )
    return Mate(signature=signature, version=version, name=name, material=material)


def write_mate(mate: Mate, stream: BinaryIO) -> None:
    if mate.signature != MATE_SIGNATURE:
        raise SignatureMismatchError(
            code=E_SIGNATURE,
            message=f"refusing to write .mate signature {mate.signature!r}, want {MATE_SIGNATURE!r}",
            context={"field": "signature", "expected": MATE_SIGNATURE, "actual": mate.signature},
        )
    w = BinaryWriter(stream)
    with field_context("signature"):
        w.write_string(mate.signature)
    with field_context("version"):
        w.write_int32(mate.version)
    with field_context("name"):
        w.write_string(mate.name)
    with field_context("material"):
        _write_material(w, mate.material)
