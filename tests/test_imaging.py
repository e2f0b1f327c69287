from __future__ import annotations

"""Image transcoding tests with ImageMagick replaced by a recorder."""
import subprocess
from pathlib import Path

import pytest

from cm3d2codec import imaging
from cm3d2codec.codec import Rect, Tex, TextureFormat
from cm3d2codec.codec.errors import TranscodeError


class FakeMagick:
    def __init__(self, identify: str = "4x2 srgb 8 PNG", stdout: bytes = b"converted", returncode: int = 0):
        self.identify = identify
        self.stdout = stdout
        self.returncode = returncode
        self.calls: list[list[str]] = []

    def __call__(self, cmd, input=None, capture_output=False, check=False):
        self.calls.append(list(cmd))
        if cmd[1] == "identify":
            out = self.identify.encode("utf-8")
        else:
            out = self.stdout
        return subprocess.CompletedProcess(cmd, self.returncode, stdout=out, stderr=b"boom")


@pytest.fixture
def magick(monkeypatch):
    fake = FakeMagick()
    monkeypatch.setattr(imaging.shutil, "which", lambda exe: f"/usr/bin/{exe}")
    monkeypatch.setattr(imaging.subprocess, "run", fake)
    return fake


def _tex(fmt, data=b"payload", rects=None) -> Tex:
    return Tex(
        version=1011 if rects is not None else 1010,
        texture_name="t",
        rects=rects,
        width=4,
        height=2,
        texture_format=fmt,
        data=data,
    )


# Tex -> image ----------------------------------------------------------------
def test_argb32_written_directly_as_png(tmp_path: Path, magick: FakeMagick):
    out = imaging.tex_to_image(_tex(TextureFormat.ARGB32), tmp_path / "t")
    assert out.name == "t.png"
    assert out.read_bytes() == b"payload"
    assert magick.calls == []


def test_rgb24_written_directly_as_jpg(tmp_path: Path, magick: FakeMagick):
    out = imaging.tex_to_image(_tex(TextureFormat.RGB24), tmp_path / "t")
    assert out.suffix == ".jpg"
    assert out.read_bytes() == b"payload"


def test_force_png_converts_through_magick(tmp_path: Path, magick: FakeMagick):
    out = imaging.tex_to_image(_tex(TextureFormat.RGB24), tmp_path / "t", force_png=True)
    assert out.suffix == ".png"
    assert out.read_bytes() == b"converted"
    assert magick.calls[0][1:] == ["convert", "jpg:-", "png:-"]


def test_dxt1_converted_to_jpg(tmp_path: Path, magick: FakeMagick):
    out = imaging.tex_to_image(_tex(TextureFormat.DXT1), tmp_path / "t")
    assert out.suffix == ".jpg"
    assert magick.calls[0][1:] == ["convert", "dds:-", "-quality", "90", str(out)]


def test_dxt5_converted_to_png(tmp_path: Path, magick: FakeMagick):
    out = imaging.tex_to_image(_tex(TextureFormat.DXT5), tmp_path / "t")
    assert out.suffix == ".png"
    assert magick.calls[0][1:] == ["convert", "dds:-", str(out)]


def test_rects_written_to_sidecar(tmp_path: Path, magick: FakeMagick):
    tex = _tex(TextureFormat.ARGB32, rects=[Rect(0.0, 0.5, 0.25, 1.0)])
    out = imaging.tex_to_image(tex, tmp_path / "t")
    sidecar = tmp_path / "t.png.uv.csv"
    assert sidecar.read_text(encoding="utf-8") == "0.000000;0.500000;0.250000;1.000000\n"
    assert imaging.read_uv_sidecar(sidecar) == [Rect(0.0, 0.5, 0.25, 1.0)]
    assert out.is_file()


def test_unknown_format_is_refused(tmp_path: Path, magick: FakeMagick):
    with pytest.raises(TranscodeError):
        imaging.tex_to_image(_tex(99), tmp_path / "t")


# Image -> tex ----------------------------------------------------------------
def test_png_with_alpha_embedded_verbatim(tmp_path: Path, magick: FakeMagick):
    magick.identify = "4x2 srgba 8 PNG"
    src = tmp_path / "face.png"
    src.write_bytes(b"\x89PNG raw")
    tex = imaging.image_to_tex(src, "face")
    assert tex.version == 1010
    assert tex.rects is None
    assert tex.texture_format is TextureFormat.ARGB32
    assert (tex.width, tex.height) == (4, 2)
    assert tex.data == b"\x89PNG raw"
    assert len(magick.calls) == 1


def test_jpeg_without_alpha_embedded_verbatim(tmp_path: Path, magick: FakeMagick):
    magick.identify = "8x8 srgb 8 JPEG"
    src = tmp_path / "a.jpg"
    src.write_bytes(b"jpeg")
    tex = imaging.image_to_tex(src, "a")
    assert tex.texture_format is TextureFormat.RGB24
    assert tex.data == b"jpeg"


def test_sidecar_selects_1011_and_skips_bad_lines(tmp_path: Path, magick: FakeMagick):
    src = tmp_path / "a.png"
    src.write_bytes(b"png")
    (tmp_path / "a.png.uv.csv").write_text("0;0;1;1\nbad line\n0.5;x;1;1\n0.5;0.5;0.5;0.5\n", encoding="utf-8")
    tex = imaging.image_to_tex(src, "a")
    assert tex.version == 1011
    assert tex.rects == (Rect(0.0, 0.0, 1.0, 1.0), Rect(0.5, 0.5, 0.5, 0.5))


def test_compress_picks_dxt_by_alpha(tmp_path: Path, magick: FakeMagick):
    src = tmp_path / "a.png"
    src.write_bytes(b"png")
    tex = imaging.image_to_tex(src, "a", compress=True)
    assert tex.texture_format is TextureFormat.DXT1
    assert "dds:compression=dxt1" in magick.calls[-1]
    magick.identify = "4x2 srgba 8 PNG"
    tex = imaging.image_to_tex(src, "a", compress=True)
    assert tex.texture_format is TextureFormat.DXT5
    assert tex.data == b"converted"


def test_lossless_source_converted_to_png(tmp_path: Path, magick: FakeMagick):
    magick.identify = "4x2 srgb 8 BMP"
    src = tmp_path / "a.bmp"
    src.write_bytes(b"bmp")
    tex = imaging.image_to_tex(src, "a")
    assert tex.texture_format is TextureFormat.ARGB32
    assert magick.calls[-1][-1] == "png:-"


def test_lossy_source_converted_to_jpeg(tmp_path: Path, magick: FakeMagick):
    magick.identify = "4x2 srgb 8 WEBP"
    src = tmp_path / "a.webp"
    src.write_bytes(b"webp")
    tex = imaging.image_to_tex(src, "a")
    assert tex.texture_format is TextureFormat.RGB24
    assert magick.calls[-1][-3:] == ["-quality", "85", "jpg:-"]


def test_nonzero_exit_raises(tmp_path: Path, magick: FakeMagick):
    magick.returncode = 1
    src = tmp_path / "a.png"
    src.write_bytes(b"png")
    with pytest.raises(TranscodeError) as ei:
        imaging.image_to_tex(src, "a")
    assert "boom" in ei.value.message
    assert ei.value.context["returncode"] == 1


def test_missing_executable(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("CM3D2CODEC_MAGICK", "no-such-magick")
    monkeypatch.setattr(imaging.shutil, "which", lambda exe: None)
    with pytest.raises(TranscodeError) as ei:
        imaging.check_magick()
    assert ei.value.context["executable"] == "no-such-magick"
