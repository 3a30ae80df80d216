"""Struct table construction: the first pass of an interface scan.

Every ``struct Name { ... }`` block in the source is turned into an ordered
tuple of flattened leaf paths. Fields typed with a struct defined earlier
in the source are expanded through that struct's entry, so no entry ever
holds a struct-typed leaf.
"""

from __future__ import annotations
from loguru import logger

from glslscan.builtins.types import BuiltinRegistry, DEFAULT_REGISTRY
from glslscan.parser.lexer import (
    KeywordSearch, find_keyword, next_token, read_declarators,
    skip_whitespace_and_comments,
)


StructTable = dict[str, tuple[str, ...]]

_STRUCT_KEYWORD = "struct"


def build_struct_table(
    source: str,
    registry: BuiltinRegistry = DEFAULT_REGISTRY,
    search: KeywordSearch = KeywordSearch.WORD,
) -> StructTable:
    """Scan ``source`` for struct definitions and flatten their fields.

    A ``struct`` keyword that is not followed by a name and a ``{`` body
    stops the whole build; the entries collected up to that point are
    returned. A body left open at the end of the buffer is not registered.
    Redefining a name replaces the earlier entry.
    """
    table: StructTable = {}
    end = len(source)
    cursor = 0
    while cursor < end:
        at = find_keyword(source, _STRUCT_KEYWORD, cursor, search)
        if at < 0:
            break

        pos = skip_whitespace_and_comments(source, at + len(_STRUCT_KEYWORD))
        name, pos = next_token(source, pos)
        pos = skip_whitespace_and_comments(source, pos)
        if pos >= end or source[pos] != "{":
            logger.debug(f"struct {name!r} at offset {at} has no body, stopping struct scan")
            break

        leaves, pos = _read_struct_body(source, pos + 1, registry, table)
        if pos >= end:
            logger.debug(f"struct {name!r} at offset {at} is never closed")
            break

        if name:
            if name in table:
                logger.debug(f"struct {name!r} redefined, replacing earlier definition")
            table[name] = tuple(leaves)
        cursor = pos + 1

    return table


def _read_struct_body(
    source: str, offset: int, registry: BuiltinRegistry, table: StructTable,
) -> tuple[list[str], int]:
    """Collect the leaves of one struct body.

    Returns the leaves and the offset of the closing ``}`` (or the end of
    the buffer when the body is never closed).
    """
    end = len(source)
    leaves: list[str] = []
    pos = offset
    while True:
        pos = skip_whitespace_and_comments(source, pos)
        if pos >= end or source[pos] == "}":
            return leaves, pos

        type_name, pos = next_token(source, pos)
        if not type_name:
            pos += 1
            continue

        names, pos = read_declarators(source, pos, ";}")
        if registry.is_builtin(type_name):
            leaves.extend(names)
        elif type_name in table:
            nested = table[type_name]
            for field_name in names:
                leaves.extend(f"{field_name}.{leaf}" for leaf in nested)
        else:
            logger.debug(f"unknown field type {type_name!r}, keeping {names} as plain fields")
            leaves.extend(names)

        if pos < end and source[pos] == ";":
            pos += 1
