"""Conversion between .tex payloads and ordinary image files.

COM3D2 loads DXT1/DXT5 payloads as raw DDS data and ARGB32/RGB24 payloads
as PNG/JPEG files, so conversion is mostly a matter of choosing the right
container and shelling out to ImageMagick for the actual pixel work.

An image may come with a ``<image>.uv.csv`` sidecar listing atlas rects as
``x;y;w;h`` lines; its presence selects container version 1011.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .codec.constants import (
    TEX_SIGNATURE,
    TEX_VERSION_EXPLICIT_SIZE,
    TEX_VERSION_RECTS,
    TextureFormat,
)
from .codec.errors import E_TRANSCODE, TranscodeError
from .codec.tex import Rect, Tex
from .logging import get_logger
from .utils.io import safe_read_file, write_file

__all__ = [
    "ImageInfo",
    "magick_executable",
    "check_magick",
    "identify_image",
    "is_lossy_format",
    "sidecar_path",
    "read_uv_sidecar",
    "write_uv_sidecar",
    "image_to_tex",
    "tex_to_image",
]

UV_SIDECAR_SUFFIX = ".uv.csv"

# Formats ImageMagick reports that use lossy compression.
LOSSY_FORMATS = frozenset(
    {
        "JPEG", "JPG", "PJPEG", "JPS", "MPO", "JXL", "WEBP", "AVIF", "HEIC",
        "HEIF", "WDP", "HDP", "JNG", "JP2", "J2C", "J2K", "JPC", "MJ2", "PCD",
    }
)

_PAYLOAD_KIND = {
    TextureFormat.DXT1: "dds",
    TextureFormat.DXT5: "dds",
    TextureFormat.ARGB32: "png",
    TextureFormat.RGB24: "jpg",
}


@dataclass(slots=True)
class ImageInfo:
    width: int
    height: int
    has_alpha: bool
    format: str


def magick_executable() -> str:
    return os.getenv("CM3D2CODEC_MAGICK", "magick")


def _transcode_error(message: str, **context) -> TranscodeError:
    return TranscodeError(code=E_TRANSCODE, message=message, context=context or None)


def check_magick() -> str:
    exe = magick_executable()
    resolved = shutil.which(exe)
    if resolved is None:
        raise _transcode_error(
            f"ImageMagick executable {exe!r} not found; install it or set CM3D2CODEC_MAGICK",
            executable=exe,
        )
    return resolved


def _run_magick(args: Sequence[str], stdin: bytes | None = None) -> bytes:
    cmd = [check_magick(), *args]
    get_logger().debug("running %s", " ".join(cmd))
    try:
        completed = subprocess.run(cmd, input=stdin, capture_output=True, check=False)
    except OSError as e:
        raise _transcode_error(f"failed to start ImageMagick: {e}", command=cmd) from e
    if completed.returncode != 0:
        stderr = (completed.stderr or b"").decode("utf-8", "replace").strip()
        raise _transcode_error(
            f"ImageMagick exited with code {completed.returncode}: {stderr}",
            command=cmd,
            returncode=completed.returncode,
        )
    return completed.stdout


def identify_image(path: Path) -> ImageInfo:
    out = _run_magick(
        ["identify", "-format", "%wx%h %[channels] %[depth] %m", str(path)]
    ).decode("utf-8", "replace")
    # e.g. "512x768 srgba 8 PNG"
    parts = out.strip().split(" ", 3)
    if len(parts) < 3:
        raise _transcode_error(f"unexpected identify output: {out!r}")
    size = parts[0].split("x")
    if len(size) != 2 or not all(s.isdigit() for s in size):
        raise _transcode_error(f"unexpected image size: {parts[0]!r}")
    if len(parts) >= 4:
        fmt = parts[3].strip().upper()
    else:
        fmt = path.suffix[1:].upper()
    return ImageInfo(
        width=int(size[0]),
        height=int(size[1]),
        has_alpha="a" in parts[1].lower(),
        format=fmt,
    )


def is_lossy_format(fmt: str) -> bool:
    return fmt.upper() in LOSSY_FORMATS


# UV sidecar ------------------------------------------------------------------
def sidecar_path(image_path: Path) -> Path:
    return image_path.with_name(image_path.name + UV_SIDECAR_SUFFIX)


def read_uv_sidecar(path: Path) -> List[Rect]:
    """Parse ``x;y;w;h`` lines; malformed lines are skipped."""
    rects: List[Rect] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        parts = line.strip().split(";")
        if len(parts) != 4:
            continue
        try:
            rects.append(Rect(*(float(p) for p in parts)))
        except ValueError:
            continue
    return rects


def write_uv_sidecar(path: Path, rects: Sequence[Rect]) -> Path:
    lines = [f"{r.x:.6f};{r.y:.6f};{r.w:.6f};{r.h:.6f}\n" for r in rects]
    path.write_text("".join(lines), encoding="utf-8")
    return path


# Image -> tex ----------------------------------------------------------------
def _encode_payload(
    path: Path, info: ImageInfo, *, compress: bool, force_png: bool
) -> Tuple[bytes, TextureFormat]:
    if compress and not force_png:
        if info.has_alpha:
            fmt, dxt = TextureFormat.DXT5, "dxt5"
        else:
            fmt, dxt = TextureFormat.DXT1, "dxt1"
        data = _run_magick(
            ["convert", str(path), "-define", f"dds:compression={dxt}", "dds:-"]
        )
        return data, fmt
    if force_png:
        return _run_magick(["convert", str(path), "png:-"]), TextureFormat.ARGB32

    is_png = info.format == "PNG"
    is_jpeg = info.format in ("JPEG", "JPG")
    if is_png and info.has_alpha:
        return safe_read_file(path), TextureFormat.ARGB32
    if is_jpeg and not info.has_alpha:
        return safe_read_file(path), TextureFormat.RGB24
    if info.has_alpha or not is_lossy_format(info.format):
        return _run_magick(["convert", str(path), "png:-"]), TextureFormat.ARGB32
    data = _run_magick(["convert", str(path), "-quality", "85", "jpg:-"])
    return data, TextureFormat.RGB24


def image_to_tex(
    input_path: str | Path,
    texture_name: str,
    *,
    compress: bool = False,
    force_png: bool = False,
) -> Tex:
    """Build a .tex container from an image file."""
    path = Path(input_path)
    uv_path = sidecar_path(path)
    rects: Optional[List[Rect]] = None
    if uv_path.is_file():
        rects = read_uv_sidecar(uv_path) or None

    info = identify_image(path)
    data, fmt = _encode_payload(path, info, compress=compress, force_png=force_png)
    get_logger().debug(
        "encoded %s as %s (%dx%d, %d bytes, rects=%d)",
        path.name,
        fmt.name,
        info.width,
        info.height,
        len(data),
        len(rects or ()),
    )
    return Tex(
        signature=TEX_SIGNATURE,
        version=TEX_VERSION_RECTS if rects else TEX_VERSION_EXPLICIT_SIZE,
        texture_name=texture_name,
        rects=tuple(rects) if rects else None,
        width=info.width,
        height=info.height,
        texture_format=fmt,
        data=data,
    )


# Tex -> image ----------------------------------------------------------------
def tex_to_image(
    tex: Tex, output_path: str | Path, *, force_png: bool = False
) -> Path:
    """Write the container's pixels to an image file and return its path.

    Without a suffix the output becomes ``.png`` for alpha formats (or when
    PNG is forced) and ``.jpg`` otherwise.
    """
    try:
        fmt = TextureFormat(tex.texture_format)
    except (TypeError, ValueError):
        raise _transcode_error(
            f"unsupported texture format: {tex.texture_format!r}",
            texture_format=tex.texture_format,
        ) from None
    kind = _PAYLOAD_KIND[fmt]

    out = Path(output_path)
    if not out.suffix:
        out = out.with_name(
            out.name + (".png" if force_png or fmt.has_alpha else ".jpg")
        )

    if not fmt.is_dds and not force_png:
        write_file(out, tex.data)
    elif force_png:
        write_file(out, _run_magick(["convert", f"{kind}:-", "png:-"], stdin=tex.data))
    else:
        out.parent.mkdir(parents=True, exist_ok=True)
        args = ["convert", f"{kind}:-"]
        if not fmt.has_alpha and out.suffix.lower() == ".jpg":
            args += ["-quality", "90"]
        _run_magick([*args, str(out)], stdin=tex.data)

    if tex.rects:
        write_uv_sidecar(sidecar_path(out), tex.rects)
    return out
