from __future__ import annotations

"""CLI smoke tests (silent reporter)."""
import json
from pathlib import Path

from cm3d2codec.cli import main
from stream_helper import col_header, collider_base, f32, f32s, mate_header, s


def _col_bytes() -> bytes:
    return (
        col_header(2)
        + s("dbc") + collider_base(name="cap") + f32(0.5) + f32(1.0)
        + s("dbm") + collider_base(name="mune") + f32(0.5) + f32(1.0) + f32(2.0) + f32s((0.0, 1.0, 0.0))
    )


def test_col2json_and_back_is_byte_identical(tmp_path: Path):
    src = tmp_path / "a.col"
    src.write_bytes(_col_bytes())
    doc = tmp_path / "a.json"
    assert main(["-r", "silent", "col2json", str(src), "-o", str(doc)]) == 0
    assert json.loads(doc.read_text(encoding="utf-8"))["Colliders"][1]["GetTypeName"] == "dbm"
    back = tmp_path / "b.col"
    assert main(["-r", "silent", "json2col", str(doc), "-o", str(back)]) == 0
    assert back.read_bytes() == src.read_bytes()


def test_roundtrip_command(tmp_path: Path):
    src = tmp_path / "m.mate"
    src.write_bytes(mate_header() + s("f") + s("x") + f32(1.0) + s("end"))
    assert main(["-r", "silent", "roundtrip", str(src)]) == 0


def test_roundtrip_reports_difference(tmp_path: Path):
    src = tmp_path / "m.mate"
    src.write_bytes(mate_header() + s("end") + b"\x00")
    assert main(["-r", "silent", "roundtrip", str(src)]) == 1


def test_inspect_prints_json(tmp_path: Path, capsys):
    src = tmp_path / "a.col"
    src.write_bytes(_col_bytes())
    assert main(["-r", "silent", "inspect", str(src)]) == 0
    info = json.loads(capsys.readouterr().out)
    assert info["elements"] == 2


def test_inspect_with_json_reporter_keeps_stdout_jsonl(tmp_path: Path, capsys):
    src = tmp_path / "a.col"
    src.write_bytes(_col_bytes())
    assert main(["-r", "json", "inspect", str(src)]) == 0
    events = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    (summary,) = [e for e in events if e["event"] == "summary"]
    assert summary["summary_type"] == "inspect"
    assert summary["elements"] == 2


def test_validate_exit_code(tmp_path: Path):
    good = tmp_path / "a.col"
    good.write_bytes(_col_bytes())
    bad = tmp_path / "b.col"
    bad.write_bytes(_col_bytes() + b"\x01")
    assert main(["-r", "silent", "validate", str(good)]) == 0
    assert main(["-r", "silent", "validate", str(good), str(bad)]) == 1


def test_codec_error_exit_code(tmp_path: Path):
    src = tmp_path / "a.mate"
    src.write_bytes(s("NOPE"))
    assert main(["-r", "silent", "inspect", str(src)]) == 2


def test_plain_reporter_summary(tmp_path: Path, capsys):
    src = tmp_path / "a.col"
    src.write_bytes(_col_bytes())
    assert main(["col2json", str(src)]) == 0
    err = capsys.readouterr().err
    assert "Col summary: file=a.col version=24102 elements=2" in err
    assert (tmp_path / "a.json").is_file()
