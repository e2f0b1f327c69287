"""Collider list (.col) codec.

Wire layout::

    signature:str  version:i32  count:i32  {tag:str  <variant fields>} x count

Every variant except ``missing`` starts with a :class:`ColliderBase` block.
The signature is accepted as-is; files in the wild carry variants of it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Callable, ClassVar, Dict, Tuple, Type, Union

from ..logging import get_logger
from .binio import BinaryReader, BinaryWriter
from .constants import COL_SIGNATURE, COL_VERSION
from .errors import field_context, malformed, unknown_tag

__all__ = [
    "ColliderBase",
    "CapsuleCollider",
    "PlaneCollider",
    "MuneCollider",
    "MissingCollider",
    "Collider",
    "ColliderList",
    "read_collider_base",
    "write_collider_base",
    "read_col",
    "write_col",
]

Vec3 = Tuple[float, float, float]
Vec4 = Tuple[float, float, float, float]


@dataclass(frozen=True, slots=True)
class ColliderBase:
    parent_name: str = ""
    self_name: str = ""
    local_position: Vec3 = (0.0, 0.0, 0.0)
    local_rotation: Vec4 = (0.0, 0.0, 0.0, 1.0)
    local_scale: Vec3 = (1.0, 1.0, 1.0)
    direction: int = 0
    center: Vec3 = (0.0, 0.0, 0.0)
    bound: int = 0

    def __post_init__(self) -> None:
        for name in ("local_position", "local_rotation", "local_scale", "center"):
            object.__setattr__(self, name, tuple(getattr(self, name)))


@dataclass(frozen=True, slots=True)
class CapsuleCollider:
    tag: ClassVar[str] = "dbc"

    base: ColliderBase
    radius: float = 0.0
    height: float = 0.0


@dataclass(frozen=True, slots=True)
class PlaneCollider:
    tag: ClassVar[str] = "dpc"

    base: ColliderBase


@dataclass(frozen=True, slots=True)
class MuneCollider:
    tag: ClassVar[str] = "dbm"

    base: ColliderBase
    radius: float = 0.0
    height: float = 0.0
    scale_rate_mul_max: float = 0.0
    center_rate_max: Vec3 = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "center_rate_max", tuple(self.center_rate_max))


@dataclass(frozen=True, slots=True)
class MissingCollider:
    """Placeholder for a collider that did not resolve when authored."""

    tag: ClassVar[str] = "missing"


Collider = Union[CapsuleCollider, PlaneCollider, MuneCollider, MissingCollider]

@dataclass(frozen=True, slots=True)
class ColliderList:
    signature: str = COL_SIGNATURE
    version: int = COL_VERSION
    colliders: Tuple[Collider, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "colliders", tuple(self.colliders))


# Base record -----------------------------------------------------------------
def read_collider_base(r: BinaryReader) -> ColliderBase:
    with field_context("parent_name"):
        parent_name = r.read_string()
    with field_context("self_name"):
        self_name = r.read_string()
    with field_context("local_position"):
        local_position = r.read_floats(3)
    with field_context("local_rotation"):
        local_rotation = r.read_floats(4)
    with field_context("local_scale"):
        local_scale = r.read_floats(3)
    with field_context("direction"):
        direction = r.read_int32()
    with field_context("center"):
        center = r.read_floats(3)
    with field_context("bound"):
        bound = r.read_int32()
    return ColliderBase(
        parent_name=parent_name,
        self_name=self_name,
        local_position=local_position,
        local_rotation=local_rotation,
        local_scale=local_scale,
        direction=direction,
        center=center,
        bound=bound,
    )


def write_collider_base(w: BinaryWriter, base: ColliderBase) -> None:
    with field_context("parent_name"):
        w.write_string(base.parent_name)
    with field_context("self_name"):
        w.write_string(base.self_name)
    with field_context("local_position"):
        w.write_floats(base.local_position, 3)
    with field_context("local_rotation"):
        w.write_floats(base.local_rotation, 4)
    with field_context("local_scale"):
        w.write_floats(base.local_scale, 3)
    with field_context("direction"):
        w.write_int32(base.direction)
    with field_context("center"):
        w.write_floats(base.center, 3)
    with field_context("bound"):
        w.write_int32(base.bound)


def _read_base_field(r: BinaryReader) -> ColliderBase:
    with field_context("base"):
        return read_collider_base(r)


def _write_base_field(w: BinaryWriter, base: ColliderBase) -> None:
    with field_context("base"):
        write_collider_base(w, base)


# Variants --------------------------------------------------------------------
def _read_capsule(r: BinaryReader) -> CapsuleCollider:
    base = _read_base_field(r)
    with field_context("radius"):
        radius = r.read_float32()
    with field_context("height"):
        height = r.read_float32()
    return CapsuleCollider(base=base, radius=radius, height=height)


def _write_capsule(w: BinaryWriter, c: CapsuleCollider) -> None:
    _write_base_field(w, c.base)
    with field_context("radius"):
        w.write_float32(c.radius)
    with field_context("height"):
        w.write_float32(c.height)


def _read_plane(r: BinaryReader) -> PlaneCollider:
    return PlaneCollider(base=_read_base_field(r))


def _write_plane(w: BinaryWriter, c: PlaneCollider) -> None:
    _write_base_field(w, c.base)


def _read_mune(r: BinaryReader) -> MuneCollider:
    base = _read_base_field(r)
    with field_context("radius"):
        radius = r.read_float32()
    with field_context("height"):
        height = r.read_float32()
    with field_context("scale_rate_mul_max"):
        scale_rate_mul_max = r.read_float32()
    with field_context("center_rate_max"):
        center_rate_max = r.read_floats(3)
    return MuneCollider(
        base=base,
        radius=radius,
        height=height,
        scale_rate_mul_max=scale_rate_mul_max,
        center_rate_max=center_rate_max,
    )


def _write_mune(w: BinaryWriter, c: MuneCollider) -> None:
    _write_base_field(w, c.base)
    with field_context("radius"):
        w.write_float32(c.radius)
    with field_context("height"):
        w.write_float32(c.height)
    with field_context("scale_rate_mul_max"):
        w.write_float32(c.scale_rate_mul_max)
    with field_context("center_rate_max"):
        w.write_floats(c.center_rate_max, 3)


def _read_missing(r: BinaryReader) -> MissingCollider:
    return MissingCollider()


def _write_missing(w: BinaryWriter, c: MissingCollider) -> None:
    pass


_READERS: Dict[str, Callable[[BinaryReader], Collider]] = {
    CapsuleCollider.tag: _read_capsule,
    PlaneCollider.tag: _read_plane,
    MuneCollider.tag: _read_mune,
    MissingCollider.tag: _read_missing,
}

_WRITERS: Dict[Type, Callable[[BinaryWriter, Collider], None]] = {
    CapsuleCollider: _write_capsule,
    PlaneCollider: _write_plane,
    MuneCollider: _write_mune,
    MissingCollider: _write_missing,
}


# Container -------------------------------------------------------------------
def read_col(stream: BinaryIO) -> ColliderList:
    r = BinaryReader(stream)
    with field_context("signature"):
        signature = r.read_string()
    with field_context("version"):
        version = r.read_int32()
    with field_context("count"):
        count = r.read_int32()
        if count < 0:
            raise malformed(f"negative collider count {count}", count=count)

    colliders = []
    for i in range(count):
        with field_context(f"colliders[{i}]"):
            with field_context("tag"):
                tag = r.read_string()
            reader = _READERS.get(tag)
            if reader is None:
                raise unknown_tag("collider", tag, index=i)
            colliders.append(reader(r))
    get_logger().debug(
        "decoded col: signature=%s version=%d colliders=%d",
        signature,
        version,
        len(colliders),
    )
    return ColliderList(
        signature=signature, version=version, colliders=tuple(colliders)
    )


def write_col(col: ColliderList, stream: BinaryIO) -> None:
    w = BinaryWriter(stream)
    with field_context("signature"):
        w.write_string(col.signature)
    with field_context("version"):
        w.write_int32(col.version)
    with field_context("count"):
        w.write_int32(len(col.colliders))
    for i, collider in enumerate(col.colliders):
        with field_context(f"colliders[{i}]"):
            writer = _WRITERS.get(type(collider))
            if writer is None:
                raise unknown_tag(
                    "collider", type(collider).__name__, index=i
                )
            with field_context("tag"):
                w.write_string(collider.tag)
            writer(w, collider)
