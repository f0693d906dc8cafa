"""
compile_from_json.py — CLI for the blockcpp workspace compiler
==============================================================
Compiles a serialised workspace JSON file into a C++ source file.

Usage
-----
    blockcpp-compile <workspace.json> [options]
    python -m blockcpp.compile_from_json <workspace.json> [options]

Options
-------
    --out       <dir>   Output directory (default: $BLOCKCPP_OUT_DIR or compiled/)
    --print             Print the generated source to stdout instead of writing a file
    --strict            Treat unknown block types as errors (default: warnings only)
    --one-based         Treat list indices in the workspace as one-based
    --log-level <lvl>   Logging level (default: $BLOCKCPP_LOG_LEVEL or INFO)

Examples
--------
    # Compile into the default output directory:
    blockcpp-compile workspaces/blink.json

    # Print the generated source without writing a file:
    blockcpp-compile workspaces/blink.json --print
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from blockcpp.config import get_settings

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="blockcpp-compile",
        description="Compile a block workspace JSON file to C++ source.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    p.add_argument(
        "workspace_json",
        metavar="workspace.json",
        help="Path to the workspace JSON file to compile.",
    )
    p.add_argument(
        "--out",
        metavar="DIR",
        default=None,
        help="Output directory for the compiled .cpp file.",
    )
    p.add_argument(
        "--print",
        dest="print_only",
        action="store_true",
        help="Print generated source to stdout instead of writing a file.",
    )
    p.add_argument(
        "--strict",
        action="store_true",
        help="Treat unknown block types as errors rather than warnings.",
    )
    p.add_argument(
        "--one-based",
        dest="one_based",
        action="store_true",
        default=None,
        help="Treat list indices as one-based (overrides the workspace options).",
    )
    p.add_argument(
        "--log-level",
        default=None,
        help="Logging level, e.g. DEBUG or WARNING.",
    )
    return p


def _workspace_name_to_filename(name: str) -> str:
    """Turn 'Blink LED-demo' → 'blink_led_demo.cpp'."""
    safe = name.lower().replace("-", "_").replace(" ", "_")
    return f"{safe}.cpp"


def main(argv=None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()

    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    json_path = Path(args.workspace_json)
    if not json_path.exists():
        print(f"[error] File not found: {json_path}", file=sys.stderr)
        return 1

    # ── Validate + deserialise JSON → Workspace ──────────────────────────────
    from blockcpp.compiler import CppEmitter, GeneratorError, SchemaError
    from blockcpp.compiler.deserialiser import load_workspace
    try:
        workspace = load_workspace(json_path, strict=args.strict, one_based_index=args.one_based)
    except json.JSONDecodeError as exc:
        print(f"[error] Invalid JSON: {exc}", file=sys.stderr)
        return 1
    except SchemaError as exc:
        print(f"[error] Schema validation failed: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"[error] Invalid workspace: {exc}", file=sys.stderr)
        return 1

    logger.info(f"workspace : {workspace.name}")
    logger.info(f"blocks    : {len(workspace.blocks)}")

    # ── Emit ─────────────────────────────────────────────────────────────────
    try:
        source = CppEmitter(strict=args.strict).workspace_to_code(workspace)
    except GeneratorError as exc:
        print(f"[error] Code generation failed: {exc}", file=sys.stderr)
        return 1

    # ── Output ───────────────────────────────────────────────────────────────
    if args.print_only:
        print(source)
        return 0

    out_dir = Path(args.out or settings.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / _workspace_name_to_filename(workspace.name)
    out_path.write_text(source, encoding="utf-8")

    logger.info(f"wrote     : {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
