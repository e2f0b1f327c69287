from __future__ import annotations

"""Collider list codec tests using hand-built streams."""
import io

import pytest

from cm3d2codec.codec import (
    CapsuleCollider,
    ColliderBase,
    ColliderList,
    MissingCollider,
    MuneCollider,
    PlaneCollider,
    read_col,
    write_col,
)
from cm3d2codec.codec.errors import (
    E_IO,
    E_TRUNCATED,
    E_UNKNOWN_TAG,
    MalformedStreamError,
    StreamIOError,
    UnknownTagError,
)
from stream_helper import col_header, collider_base, f32, f32s, s


def _encode(col: ColliderList) -> bytes:
    buf = io.BytesIO()
    write_col(col, buf)
    return buf.getvalue()


def test_single_plane_collider():
    data = col_header(1) + s("dpc") + collider_base(name="floor", direction=1)
    col = read_col(io.BytesIO(data))
    assert col.signature == "CM3D21_COL"
    assert col.version == 24102
    assert len(col.colliders) == 1
    plane = col.colliders[0]
    assert isinstance(plane, PlaneCollider)
    assert plane.base.self_name == "floor"
    assert plane.base.local_rotation == (0.0, 0.0, 0.0, 1.0)
    assert plane.base.direction == 1
    assert _encode(col) == data


def test_all_variants_in_order():
    data = (
        col_header(4)
        + s("dbc") + collider_base(name="cap") + f32(0.5) + f32(2.0)
        + s("dpc") + collider_base(name="plane")
        + s("dbm") + collider_base(name="mune") + f32(0.25) + f32(1.5) + f32(3.0) + f32s((1.0, 2.0, 4.0))
        + s("missing")
    )
    col = read_col(io.BytesIO(data))
    assert [c.tag for c in col.colliders] == ["dbc", "dpc", "dbm", "missing"]
    cap, _, mune, missing = col.colliders
    assert cap.radius == 0.5 and cap.height == 2.0
    assert mune.scale_rate_mul_max == 3.0
    assert mune.center_rate_max == (1.0, 2.0, 4.0)
    assert missing == MissingCollider()
    assert _encode(col) == data


def test_model_built_from_lists_roundtrips_equal():
    base = ColliderBase(parent_name="Bip01 Spine", self_name="c", local_position=[1.0, 2.0, 3.0])
    col = ColliderList(colliders=[CapsuleCollider(base=base, radius=1.0, height=2.0)])
    decoded = read_col(io.BytesIO(_encode(col)))
    assert decoded == col


def test_empty_list():
    data = col_header(0)
    col = read_col(io.BytesIO(data))
    assert col.colliders == ()
    assert _encode(col) == data


def test_signature_is_not_validated():
    data = col_header(1, signature="SOMETHING_ELSE") + s("missing")
    col = read_col(io.BytesIO(data))
    assert col.signature == "SOMETHING_ELSE"
    assert _encode(col) == data


def test_unknown_tag_reports_index():
    data = col_header(2) + s("missing") + s("xyz")
    with pytest.raises(UnknownTagError) as ei:
        read_col(io.BytesIO(data))
    assert ei.value.code == E_UNKNOWN_TAG
    assert ei.value.context["tag"] == "xyz"
    assert ei.value.context["index"] == 1
    assert ei.value.field == "colliders[1]"


def test_truncated_base_reports_field_path():
    data = col_header(1) + s("dbc") + collider_base()[:-2]
    with pytest.raises(MalformedStreamError) as ei:
        read_col(io.BytesIO(data))
    assert ei.value.code == E_TRUNCATED
    assert ei.value.field == "colliders[0].base.bound"


def test_negative_count_is_malformed():
    data = col_header(-1)
    with pytest.raises(MalformedStreamError):
        read_col(io.BytesIO(data))


def test_encode_rejects_wrong_vector_length():
    base = ColliderBase(local_position=(1.0, 2.0))
    col = ColliderList(colliders=[PlaneCollider(base=base)])
    with pytest.raises(MalformedStreamError) as ei:
        write_col(col, io.BytesIO())
    assert ei.value.field == "colliders[0].base.local_position"


def test_mune_defaults():
    m = MuneCollider(base=ColliderBase())
    assert m.center_rate_max == (0.0, 0.0, 0.0)
    assert m.base.local_scale == (1.0, 1.0, 1.0)


class _FailingStream(io.RawIOBase):
    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        raise OSError("device not ready")


def test_stream_oserror_is_wrapped_with_field():
    with pytest.raises(StreamIOError) as ei:
        read_col(_FailingStream())
    assert ei.value.code == E_IO
    assert ei.value.context["field"] == "signature"
    assert isinstance(ei.value.__cause__, OSError)
