from __future__ import annotations

"""Material codec tests."""
import io

import pytest

from cm3d2codec.codec import (
    ColorProperty,
    Mate,
    Material,
    RenderTextureRef,
    ScalarProperty,
    Texture2DRef,
    TextureProperty,
    VectorProperty,
    read_mate,
    write_mate,
)
from cm3d2codec.codec.errors import (
    E_SIGNATURE,
    MalformedStreamError,
    SignatureMismatchError,
    UnknownTagError,
)
from stream_helper import f32, f32s, i32, mate_header, s


def _encode(mate: Mate) -> bytes:
    buf = io.BytesIO()
    write_mate(mate, buf)
    return buf.getvalue()


def test_scalar_and_color_properties():
    data = (
        mate_header()
        + s("f") + s("Glossiness") + f32(0.5)
        + s("col") + s("_Color") + f32s((1.0, 1.0, 1.0, 1.0))
        + s("end")
    )
    mate = read_mate(io.BytesIO(data))
    assert mate.version == 2001
    assert mate.name == "body"
    assert mate.material.shader_name == "CM3D2/Toony_Lighted"
    props = mate.material.properties
    assert props == (
        ScalarProperty(prop_name="Glossiness", value=0.5),
        ColorProperty(prop_name="_Color", color=(1.0, 1.0, 1.0, 1.0)),
    )
    encoded = _encode(mate)
    assert encoded == data
    assert encoded.endswith(b"\x03end")
    assert encoded.count(b"\x03end") == 1


def test_texture_variants():
    data = (
        mate_header()
        + s("tex") + s("_MainTex") + s("tex2d") + s("body_tex") + s("Assets/body.png")
        + f32s((0.0, 0.5)) + f32s((1.0, 2.0))
        + s("tex") + s("_Cube") + s("cube") + s("sky") + s("sky.png") + f32s((0.0, 0.0)) + f32s((1.0, 1.0))
        + s("tex") + s("_RT") + s("texRT") + s("") + s("")
        + s("vec") + s("_Vec") + f32s((1.0, 2.0, 3.0, 4.0))
        + s("end")
    )
    mate = read_mate(io.BytesIO(data))
    main, cube, rt, vec = mate.material.properties
    assert main.texture == Texture2DRef(
        name="body_tex", path="Assets/body.png", offset=(0.0, 0.5), scale=(1.0, 2.0)
    )
    assert cube.sub_tag == "cube"
    assert rt.texture == RenderTextureRef()
    assert isinstance(vec, VectorProperty)
    assert _encode(mate) == data


def test_empty_property_list():
    data = mate_header() + s("end")
    mate = read_mate(io.BytesIO(data))
    assert mate.material.properties == ()
    assert _encode(mate) == data


def test_default_model_encodes_defaults():
    mate = Mate(material=Material(properties=[TextureProperty(prop_name="_MainTex")]))
    decoded = read_mate(io.BytesIO(_encode(mate)))
    assert decoded == mate
    assert decoded.signature == "CM3D2_MATERIAL"
    assert decoded.material.properties[0].texture.scale == (1.0, 1.0)


def test_signature_mismatch_stops_reading():
    data = s("CM3D2_MATERIAX") + i32(2001) + s("x")
    stream = io.BytesIO(data)
    with pytest.raises(SignatureMismatchError) as ei:
        read_mate(stream)
    assert ei.value.code == E_SIGNATURE
    assert ei.value.context["actual"] == "CM3D2_MATERIAX"
    assert stream.tell() == len(s("CM3D2_MATERIAX"))


def test_unknown_property_tag():
    data = mate_header() + s("f") + s("a") + f32(1.0) + s("bogus") + s("b") + s("end")
    with pytest.raises(UnknownTagError) as ei:
        read_mate(io.BytesIO(data))
    assert ei.value.context == {"tag": "bogus", "index": 1, "field": "material.properties[1]"}


def test_unknown_texture_sub_tag():
    data = mate_header() + s("tex") + s("_MainTex") + s("tex3d") + s("end")
    with pytest.raises(UnknownTagError) as ei:
        read_mate(io.BytesIO(data))
    assert ei.value.context["tag"] == "tex3d"


def test_missing_end_is_truncated():
    data = mate_header() + s("f") + s("a") + f32(1.0)
    with pytest.raises(MalformedStreamError):
        read_mate(io.BytesIO(data))


def test_encode_rejects_mismatched_texture_payload():
    prop = TextureProperty(prop_name="_RT", sub_tag="texRT", texture=Texture2DRef())
    mate = Mate(material=Material(properties=[prop]))
    with pytest.raises(MalformedStreamError):
        write_mate(mate, io.BytesIO())


def test_encode_refuses_foreign_signature_without_output():
    buf = io.BytesIO()
    with pytest.raises(SignatureMismatchError) as ei:
        write_mate(Mate(signature="CM3D2_MATERIAX"), buf)
    assert ei.value.code == E_SIGNATURE
    assert ei.value.context["field"] == "signature"
    assert buf.getvalue() == b""
