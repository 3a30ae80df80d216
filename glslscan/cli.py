"""Command-line interface for glslscan."""

import argparse
import sys
from pathlib import Path

from loguru import logger

from glslscan import __version__


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="glslscan",
        description="List the uniform and attribute names a GLSL program exposes, "
                    "with struct members flattened to dotted paths",
    )
    parser.add_argument("inputs", nargs="*", metavar="FILE", help="GLSL source files")
    parser.add_argument(
        "--uniforms", action="store_true", help="Only list uniform names"
    )
    parser.add_argument(
        "--attributes", action="store_true", help="Only list attribute names"
    )
    parser.add_argument(
        "--json", action="store_true", help="Print the reflection document as JSON"
    )
    parser.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Write the output to a file instead of stdout",
    )
    parser.add_argument(
        "--raw-keywords", action="store_true",
        help="Match keywords anywhere, even inside longer identifiers",
    )
    parser.add_argument(
        "--builtin", action="append", default=[], metavar="NAME",
        help="Treat NAME as a builtin type (exact match, repeatable)",
    )
    parser.add_argument(
        "--builtin-family", action="append", default=[], metavar="NAME",
        help="Treat any type containing NAME as builtin (repeatable)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log scanner decisions"
    )
    parser.add_argument(
        "--version", action="version", version=f"glslscan {__version__}"
    )

    args = parser.parse_args(argv)

    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if args.verbose else "WARNING",
        format="{level} {name}: {message}",
    )

    if not args.inputs:
        parser.print_help()
        sys.exit(0)

    for name in args.inputs:
        if not Path(name).exists():
            print(f"Error: file not found: {name}", file=sys.stderr)
            sys.exit(1)

    from glslscan.builtins.types import DEFAULT_REGISTRY
    from glslscan.parser.lexer import KeywordSearch
    from glslscan.scanner import scan_file

    registry = DEFAULT_REGISTRY
    for name in args.builtin:
        registry = registry.register(name)
    for name in args.builtin_family:
        registry = registry.register(name, family=True)
    search = KeywordSearch.RAW if args.raw_keywords else KeywordSearch.WORD

    try:
        interfaces = {
            name: scan_file(Path(name), registry, search) for name in args.inputs
        }
        if args.json:
            from glslscan.codegen.reflection import generate_reflection, emit_reflection_json
            text = emit_reflection_json(generate_reflection(interfaces))
        else:
            text = _format_names(interfaces.values(), args.uniforms, args.attributes)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text, encoding="utf-8")
        print(f"Wrote {args.output}")
    else:
        sys.stdout.write(text)


def _format_names(interfaces, only_uniforms: bool, only_attributes: bool) -> str:
    show_all = not (only_uniforms or only_attributes)
    lines = []
    if show_all or only_uniforms:
        lines.extend(f"uniform {u}" for iface in interfaces for u in iface.uniforms)
    if show_all or only_attributes:
        lines.extend(f"attribute {a}" for iface in interfaces for a in iface.attributes)
    return "".join(line + "\n" for line in lines)
