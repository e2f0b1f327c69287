from __future__ import annotations

"""Collider document (JSON / YAML) tests."""
import json
from pathlib import Path

import pytest

from cm3d2codec.codec import (
    CapsuleCollider,
    ColliderBase,
    ColliderList,
    MissingCollider,
    MuneCollider,
    PlaneCollider,
)
from cm3d2codec.codec.errors import DocumentError, UnknownTagError
from cm3d2codec.document import (
    col_from_document,
    col_to_document,
    dump_col_document,
    load_col_document,
)

SAMPLE = ColliderList(
    colliders=[
        CapsuleCollider(base=ColliderBase(parent_name="Bip01 Head", self_name="head"), radius=0.5, height=1.0),
        PlaneCollider(base=ColliderBase(self_name="floor", direction=2)),
        MuneCollider(
            base=ColliderBase(self_name="mune_L", center=(0.0, 0.25, 0.0)),
            radius=0.25,
            height=0.5,
            scale_rate_mul_max=1.5,
            center_rate_max=(1.0, 0.0, 0.0),
        ),
        MissingCollider(),
    ]
)


def test_document_keys():
    doc = col_to_document(SAMPLE)
    assert doc["Signature"] == "CM3D21_COL"
    assert doc["Version"] == 24102
    first = doc["Colliders"][0]
    assert first["GetTypeName"] == "dbc"
    assert first["Base"]["ParentName"] == "Bip01 Head"
    assert first["Base"]["LocalRotation"] == [0.0, 0.0, 0.0, 1.0]
    assert doc["Colliders"][3] == {"GetTypeName": "missing"}
    assert doc["Colliders"][2]["CenterRateMax"] == [1.0, 0.0, 0.0]


def test_document_roundtrip_in_memory():
    assert col_from_document(col_to_document(SAMPLE)) == SAMPLE


@pytest.mark.parametrize("suffix", [".json", ".yaml"])
def test_document_file_roundtrip(tmp_path: Path, suffix: str):
    out = dump_col_document(SAMPLE, tmp_path / f"sample{suffix}")
    assert out.is_file()
    assert load_col_document(out) == SAMPLE


def test_json_output_is_indented(tmp_path: Path):
    out = dump_col_document(SAMPLE, tmp_path / "c.json")
    text = out.read_text(encoding="utf-8")
    assert text.endswith("\n")
    assert json.loads(text)["Colliders"][1]["Base"]["Direction"] == 2


def test_unknown_type_name_reports_index():
    doc = col_to_document(SAMPLE)
    doc["Colliders"][1]["GetTypeName"] = "sphere"
    with pytest.raises(UnknownTagError) as ei:
        col_from_document(doc)
    assert ei.value.context["index"] == 1
    assert ei.value.field == "Colliders[1]"


def test_missing_key_is_document_error():
    doc = col_to_document(SAMPLE)
    del doc["Colliders"][0]["Radius"]
    with pytest.raises(DocumentError) as ei:
        col_from_document(doc)
    assert ei.value.field == "Colliders[0].Radius"


def test_wrong_vector_length_is_document_error():
    doc = col_to_document(SAMPLE)
    doc["Colliders"][0]["Base"]["LocalScale"] = [1.0, 1.0]
    with pytest.raises(DocumentError) as ei:
        col_from_document(doc)
    assert ei.value.field == "Colliders[0].Base.LocalScale"


def test_unparseable_file(tmp_path: Path):
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(DocumentError):
        load_col_document(bad)
