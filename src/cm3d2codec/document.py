"""JSON/YAML document form of collider lists.

Key names follow the mod editor's JSON so documents can be exchanged with
it. Each collider carries a ``GetTypeName`` discriminator that is read
before the rest of the element is parsed.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, List

import yaml

from .codec.col import (
    CapsuleCollider,
    Collider,
    ColliderBase,
    ColliderList,
    MissingCollider,
    MuneCollider,
    PlaneCollider,
)
from .codec.constants import COL_SIGNATURE, COL_VERSION
from .codec.errors import E_DOCUMENT, DocumentError, field_context, unknown_tag
from .utils.io import safe_read_file

__all__ = [
    "col_to_document",
    "col_from_document",
    "load_col_document",
    "dump_col_document",
]

TYPE_KEY = "GetTypeName"
_YAML_SUFFIXES = {".yaml", ".yml"}


def _doc_error(message: str) -> DocumentError:
    return DocumentError(code=E_DOCUMENT, message=message)


def _require(obj: Dict[str, Any], key: str) -> Any:
    if key not in obj:
        raise _doc_error(f"missing key {key!r}")
    return obj[key]


def _floats(value: Any, n: int) -> tuple:
    if not isinstance(value, (list, tuple)) or len(value) != n:
        raise _doc_error(f"expected a list of {n} numbers, got {value!r}")
    out = []
    for v in value:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise _doc_error(f"expected a number, got {v!r}")
        out.append(float(v))
    return tuple(out)


def _number(value: Any) -> float:
    return _floats([value], 1)[0]


def _int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise _doc_error(f"expected an integer, got {value!r}")
    return value


# To document -----------------------------------------------------------------
def _base_to_dict(base: ColliderBase) -> Dict[str, Any]:
    return {
        "ParentName": base.parent_name,
        "SelfName": base.self_name,
        "LocalPosition": list(base.local_position),
        "LocalRotation": list(base.local_rotation),
        "LocalScale": list(base.local_scale),
        "Direction": base.direction,
        "Center": list(base.center),
        "Bound": base.bound,
    }


def _collider_to_dict(c: Collider) -> Dict[str, Any]:
    d: Dict[str, Any] = {TYPE_KEY: c.tag}
    if isinstance(c, MissingCollider):
        return d
    d["Base"] = _base_to_dict(c.base)
    if isinstance(c, (CapsuleCollider, MuneCollider)):
        d["Radius"] = c.radius
        d["Height"] = c.height
    if isinstance(c, MuneCollider):
        d["ScaleRateMulMax"] = c.scale_rate_mul_max
        d["CenterRateMax"] = list(c.center_rate_max)
    return d


def col_to_document(col: ColliderList) -> Dict[str, Any]:
    return {
        "Signature": col.signature,
        "Version": col.version,
        "Colliders": [_collider_to_dict(c) for c in col.colliders],
    }


# From document ---------------------------------------------------------------
def _base_from_dict(d: Any) -> ColliderBase:
    if not isinstance(d, dict):
        raise _doc_error("Base must be an object")
    with field_context("ParentName"):
        parent_name = _require(d, "ParentName")
        if not isinstance(parent_name, str):
            raise _doc_error("expected a string")
    with field_context("SelfName"):
        self_name = _require(d, "SelfName")
        if not isinstance(self_name, str):
            raise _doc_error("expected a string")
    with field_context("LocalPosition"):
        local_position = _floats(_require(d, "LocalPosition"), 3)
    with field_context("LocalRotation"):
        local_rotation = _floats(_require(d, "LocalRotation"), 4)
    with field_context("LocalScale"):
        local_scale = _floats(_require(d, "LocalScale"), 3)
    with field_context("Direction"):
        direction = _int(_require(d, "Direction"))
    with field_context("Center"):
        center = _floats(_require(d, "Center"), 3)
    with field_context("Bound"):
        bound = _int(_require(d, "Bound"))
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


def _base_of(d: Dict[str, Any]) -> ColliderBase:
    with field_context("Base"):
        return _base_from_dict(_require(d, "Base"))


def _capsule_from_dict(d: Dict[str, Any]) -> CapsuleCollider:
    base = _base_of(d)
    with field_context("Radius"):
        radius = _number(_require(d, "Radius"))
    with field_context("Height"):
        height = _number(_require(d, "Height"))
    return CapsuleCollider(base=base, radius=radius, height=height)


def _plane_from_dict(d: Dict[str, Any]) -> PlaneCollider:
    return PlaneCollider(base=_base_of(d))


def _mune_from_dict(d: Dict[str, Any]) -> MuneCollider:
    base = _base_of(d)
    with field_context("Radius"):
        radius = _number(_require(d, "Radius"))
    with field_context("Height"):
        height = _number(_require(d, "Height"))
    with field_context("ScaleRateMulMax"):
        scale_rate_mul_max = _number(_require(d, "ScaleRateMulMax"))
    with field_context("CenterRateMax"):
        center_rate_max = _floats(_require(d, "CenterRateMax"), 3)
    return MuneCollider(
        base=base,
        radius=radius,
        height=height,
        scale_rate_mul_max=scale_rate_mul_max,
        center_rate_max=center_rate_max,
    )


_FROM_DICT: Dict[str, Callable[[Dict[str, Any]], Collider]] = {
    CapsuleCollider.tag: _capsule_from_dict,
    PlaneCollider.tag: _plane_from_dict,
    MuneCollider.tag: _mune_from_dict,
    MissingCollider.tag: lambda d: MissingCollider(),
}


def col_from_document(doc: Any) -> ColliderList:
    if not isinstance(doc, dict):
        raise _doc_error("root of a collider document must be an object")
    signature = doc.get("Signature", COL_SIGNATURE)
    if not isinstance(signature, str):
        raise _doc_error("Signature must be a string")
    with field_context("Version"):
        version = _int(doc.get("Version", COL_VERSION))
    raw = doc.get("Colliders") or []
    if not isinstance(raw, list):
        raise _doc_error("Colliders must be a list")

    colliders: List[Collider] = []
    for i, item in enumerate(raw):
        with field_context(f"Colliders[{i}]"):
            if not isinstance(item, dict):
                raise _doc_error("collider must be an object")
            tag = item.get(TYPE_KEY)
            parse = _FROM_DICT.get(tag) if isinstance(tag, str) else None
            if parse is None:
                raise unknown_tag("collider", str(tag), index=i)
            colliders.append(parse(item))
    return ColliderList(signature=signature, version=version, colliders=colliders)


# Files -----------------------------------------------------------------------
def load_col_document(path: str | Path) -> ColliderList:
    p = Path(path)
    text = safe_read_file(p).decode("utf-8")
    try:
        if p.suffix.lower() in _YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (ValueError, yaml.YAMLError) as e:
        raise DocumentError(
            code=E_DOCUMENT, message=f"cannot parse {p.name}: {e}"
        ) from e
    return col_from_document(data)


def dump_col_document(col: ColliderList, path: str | Path) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    doc = col_to_document(col)
    with p.open("w", encoding="utf-8") as f:
        if p.suffix.lower() in _YAML_SUFFIXES:
            yaml.safe_dump(doc, f, sort_keys=False, allow_unicode=True)
        else:
            json.dump(doc, f, indent=2, ensure_ascii=False)
            f.write("\n")
    return p
