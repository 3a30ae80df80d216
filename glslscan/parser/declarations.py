"""Qualifier declaration extraction: the second pass of an interface scan."""

from __future__ import annotations
from loguru import logger

from glslscan.builtins.types import BuiltinRegistry, DEFAULT_REGISTRY
from glslscan.parser.lexer import (
    KeywordSearch, find_keyword, next_token, read_declarators,
    skip_whitespace_and_comments,
)
from glslscan.parser.structs import StructTable, build_struct_table


UNIFORM = "uniform"
ATTRIBUTE = "attribute"


def extract_declarations(
    source: str,
    qualifier: str,
    registry: BuiltinRegistry = DEFAULT_REGISTRY,
    struct_table: StructTable | None = None,
    search: KeywordSearch = KeywordSearch.WORD,
) -> list[str]:
    """Return the flattened names declared with ``qualifier`` in ``source``.

    Builtin-typed declarations contribute their bare names. Struct-typed
    declarations contribute ``name.leaf`` for every leaf of the struct, in
    the struct's field order. Declarations of any other type are skipped.

    Args:
        source: Shader source text.
        qualifier: The introducing keyword, usually ``uniform`` or ``attribute``.
        registry: Builtin types to recognise.
        struct_table: A table already built for this same source. Built from
            the whole of ``source`` when omitted.
        search: How the qualifier keyword is located.
    """
    if struct_table is None:
        struct_table = build_struct_table(source, registry, search)

    result: list[str] = []
    end = len(source)
    cursor = 0
    while cursor < end:
        at = find_keyword(source, qualifier, cursor, search)
        if at < 0:
            break

        pos = skip_whitespace_and_comments(source, at + len(qualifier))
        type_name, pos = next_token(source, pos)
        cursor = max(pos, at + 1)

        if registry.is_builtin(type_name):
            leaves = None
        elif type_name in struct_table:
            leaves = struct_table[type_name]
        else:
            logger.debug(f"{qualifier} at offset {at} has unknown type {type_name!r}, skipped")
            continue

        names, pos = read_declarators(source, pos)
        for name in names:
            if leaves is None:
                result.append(name)
            else:
                result.extend(f"{name}.{leaf}" for leaf in leaves)
        cursor = pos

    return result


def scan_uniforms(
    source: str,
    registry: BuiltinRegistry = DEFAULT_REGISTRY,
    search: KeywordSearch = KeywordSearch.WORD,
) -> list[str]:
    return extract_declarations(source, UNIFORM, registry, search=search)


def scan_attributes(
    source: str,
    registry: BuiltinRegistry = DEFAULT_REGISTRY,
    search: KeywordSearch = KeywordSearch.WORD,
) -> list[str]:
    return extract_declarations(source, ATTRIBUTE, registry, search=search)
