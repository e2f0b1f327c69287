"""Command line interface for cm3d2codec."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .logging import configure_logging, get_logger, section, step
from .reporting import (
    REPORTER_NAMES,
    JsonLinesReporter,
    get_reporter,
    make_reporter,
    set_reporter,
    set_verbosity,
    task,
)
from .codec.errors import CodecError
from .document import dump_col_document, load_col_document
from .api import (
    ImageExportOptions,
    ImageImportOptions,
    convert_image_to_tex,
    convert_tex_to_image,
    inspect,
    load_col,
    roundtrip_file,
    save_col,
)
from .inspector import validate_file


def _inspect_cmd(args: argparse.Namespace) -> int:
    info = inspect(args.file)
    rep = get_reporter()
    if isinstance(rep, JsonLinesReporter):
        # stdout already carries the event stream
        rep.summary("inspect", **info)
        return 0
    rep.flush()
    print(json.dumps(info, indent=2, sort_keys=True, ensure_ascii=False))
    return 0


def _validate_cmd(args: argparse.Namespace) -> int:
    failed = 0
    with section("Validation"), task(
        "validate", "Validate files", total=len(args.files)
    ) as rep:
        for path in args.files:
            issues = validate_file(inspect(path))
            for issue in issues:
                rep.warning(f"{path.name}: {issue}")
            if issues:
                failed += 1
            rep.advance("validate", file=path.name)
    rep.summary("validate", files=len(args.files), failed=failed)
    return 1 if failed else 0


def _roundtrip_cmd(args: argparse.Namespace) -> int:
    result = roundtrip_file(args.file, args.output)
    return 0 if result.identical else 1


def _col2json_cmd(args: argparse.Namespace) -> int:
    col = load_col(args.col)
    out = args.output or args.col.with_suffix(".json")
    dump_col_document(col, out)
    step(f"wrote {out}")
    return 0


def _json2col_cmd(args: argparse.Namespace) -> int:
    col = load_col_document(args.document)
    out = args.output or args.document.with_suffix(".col")
    n = save_col(col, out)
    step(f"wrote {out} ({n} bytes)")
    return 0


def _tex2img_cmd(args: argparse.Namespace) -> int:
    written = convert_tex_to_image(
        ImageExportOptions(
            input_path=args.tex, output_path=args.output, force_png=args.png
        )
    )
    step(f"wrote {written}")
    return 0


def _img2tex_cmd(args: argparse.Namespace) -> int:
    out = args.output or args.image.with_suffix(".tex")
    convert_image_to_tex(
        ImageImportOptions(
            input_path=args.image,
            output_path=out,
            texture_name=args.name,
            compress=args.compress,
            force_png=args.png,
        )
    )
    step(f"wrote {out}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="cm3d2codec",
        description="Read, write and convert COM3D2 .col, .mate and .tex files",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (repeatable)",
    )
    p.add_argument(
        "-r",
        "--reporter",
        choices=REPORTER_NAMES,
        default="plain",
        help="Select reporter backend: plain (default), rich, json (JSONL events), silent",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    i = sub.add_parser("inspect", help="Print a JSON summary of a file")
    i.add_argument("file", type=Path)
    i.set_defaults(func=_inspect_cmd)

    v = sub.add_parser("validate", help="Report suspicious files")
    v.add_argument("files", type=Path, nargs="+")
    v.set_defaults(func=_validate_cmd)

    rt = sub.add_parser(
        "roundtrip", help="Decode and re-encode a file, comparing bytes"
    )
    rt.add_argument("file", type=Path)
    rt.add_argument(
        "-o", "--output", type=Path, help="Optional path for the re-encoded file"
    )
    rt.set_defaults(func=_roundtrip_cmd)

    cj = sub.add_parser("col2json", help="Convert a .col file to JSON or YAML")
    cj.add_argument("col", type=Path)
    cj.add_argument(
        "-o", "--output", type=Path, help="Output path (.json, .yaml or .yml)"
    )
    cj.set_defaults(func=_col2json_cmd)

    jc = sub.add_parser("json2col", help="Convert a JSON or YAML document to .col")
    jc.add_argument("document", type=Path)
    jc.add_argument("-o", "--output", type=Path)
    jc.set_defaults(func=_json2col_cmd)

    ti = sub.add_parser("tex2img", help="Extract the image from a .tex file")
    ti.add_argument("tex", type=Path)
    ti.add_argument("-o", "--output", type=Path, help="Output file or directory")
    ti.add_argument("--png", action="store_true", help="Always write PNG")
    ti.set_defaults(func=_tex2img_cmd)

    it = sub.add_parser("img2tex", help="Build a .tex file from an image")
    it.add_argument("image", type=Path)
    it.add_argument("-o", "--output", type=Path)
    it.add_argument("-n", "--name", help="Texture name (default: image stem)")
    it.add_argument(
        "--compress", action="store_true", help="Encode as DXT1/DXT5 DDS"
    )
    it.add_argument("--png", action="store_true", help="Always embed PNG")
    it.set_defaults(func=_img2tex_cmd)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    set_reporter(make_reporter(args.reporter))
    set_verbosity(args.verbose)
    configure_logging(args.verbose)
    try:
        return args.func(args)
    except CodecError as e:
        get_logger().error("%s", e)
        return 2
    finally:
        get_reporter().flush()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
