"""Top-level scan orchestration."""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path

from glslscan.builtins.types import BuiltinRegistry, DEFAULT_REGISTRY
from glslscan.parser.declarations import ATTRIBUTE, UNIFORM, extract_declarations
from glslscan.parser.lexer import KeywordSearch
from glslscan.parser.structs import StructTable, build_struct_table


@dataclass
class ShaderInterface:
    uniforms: list[str] = field(default_factory=list)
    attributes: list[str] = field(default_factory=list)
    structs: StructTable = field(default_factory=dict)


def scan_interface(
    source: str,
    registry: BuiltinRegistry = DEFAULT_REGISTRY,
    search: KeywordSearch = KeywordSearch.WORD,
) -> ShaderInterface:
    """Scan one shader source unit for its uniforms and attributes.

    The struct table is built once and shared by both qualifier scans.
    """
    structs = build_struct_table(source, registry, search)
    return ShaderInterface(
        uniforms=extract_declarations(source, UNIFORM, registry, structs, search),
        attributes=extract_declarations(source, ATTRIBUTE, registry, structs, search),
        structs=structs,
    )


def scan_file(
    path: Path,
    registry: BuiltinRegistry = DEFAULT_REGISTRY,
    search: KeywordSearch = KeywordSearch.WORD,
) -> ShaderInterface:
    source = Path(path).read_text(encoding="utf-8")
    return scan_interface(source, registry, search)
