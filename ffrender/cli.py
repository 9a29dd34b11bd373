from __future__ import annotations

import argparse
import base64
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from ffrender.core.config import YamlConfigProvider
from ffrender.core.errors import RenderError, UnsafeValueError, UnsupportedInputError, ValidationError
from ffrender.core.graph import build_spec_args, compile_filter_graph
from ffrender.core.log import configure_logging
from ffrender.core.renderer import FfmpegRenderer
from ffrender.core.request import RenderRequest
from ffrender.core.spec import load_spec_file
from ffrender.core.tempdir import RunContext, resolve_temp_root


_USAGE_ERRORS = (ValidationError, UnsafeValueError, UnsupportedInputError)


def parse_data_pairs(pairs: List[str]) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = str(pair).partition("=")
        if not sep or not key.strip():
            raise ValidationError(f"--data expects KEY=VALUE, got {pair!r}")
        data[key.strip()] = value
    return data


def _load_data(args: argparse.Namespace) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    if args.data_json:
        try:
            loaded = json.loads(Path(args.data_json).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ValidationError(f"--data-json: {exc}") from exc
        if not isinstance(loaded, dict):
            raise ValidationError("--data-json must contain a JSON object")
        data.update(loaded)
    data.update(parse_data_pairs(args.data or []))
    return data


def cmd_render(args: argparse.Namespace) -> int:
    renderer = FfmpegRenderer(YamlConfigProvider(args.config))
    options: Dict[str, Any] = {"file": args.input, "type": args.type, "quality": args.quality}
    data = _load_data(args)
    if data:
        options["data"] = data
    payload = renderer.render_bytes(RenderRequest.from_options(options))
    if args.base64:
        payload = base64.b64encode(payload) + b"\n"
    if args.output:
        Path(args.output).write_bytes(payload)
    else:
        sys.stdout.buffer.write(payload)
        sys.stdout.buffer.flush()
    return 0


def cmd_compile(args: argparse.Namespace) -> int:
    config = YamlConfigProvider(args.config).get()
    spec_path = os.path.abspath(args.spec)
    spec = load_spec_file(spec_path)
    # Scratch text files are removed on exit; the printed paths are illustrative.
    with RunContext(resolve_temp_root(config.temp_dir)) as run_context:
        graph = compile_filter_graph(
            spec,
            base_dir=os.path.dirname(spec_path),
            run_context=run_context,
            font_file=config.font_file,
        )
        argv = build_spec_args(graph, args.type, args.quality)
    print(json.dumps({"filter_complex": graph.program(), "args": argv}, indent=2, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ffrender", description="Render JSON composition specs with ffmpeg.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("--config", help="Path to a YAML renderer config file.")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render a spec file or image to an encoded still.")
    render.add_argument("input", help="Spec file, image path or image URL.")
    render.add_argument("-o", "--output", help="Output file (default: stdout).")
    render.add_argument("--type", default="png", choices=["png", "jpeg", "jpg", "webp"])
    render.add_argument("--quality", type=float, help="JPEG quality 1-100.")
    render.add_argument("--data", action="append", help="Template value KEY=VALUE (repeatable).")
    render.add_argument("--data-json", help="JSON file with template values.")
    render.add_argument("--base64", action="store_true", help="Write base64 text instead of raw bytes.")
    render.set_defaults(func=cmd_render)

    compile_cmd = sub.add_parser("compile", help="Print the ffmpeg arguments for a spec without running it.")
    compile_cmd.add_argument("spec", help="Spec file.")
    compile_cmd.add_argument("--type", default="png", choices=["png", "jpeg", "jpg", "webp"])
    compile_cmd.add_argument("--quality", type=float)
    compile_cmd.set_defaults(func=cmd_compile)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    try:
        return int(args.func(args))
    except _USAGE_ERRORS as exc:
        print(f"ffrender: {exc}", file=sys.stderr)
        return 2
    except RenderError as exc:
        print(f"ffrender: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
