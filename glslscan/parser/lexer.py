"""Cursor-level scanning primitives over raw GLSL source text.

All functions take the source string and an offset and return a new
offset; none of them read past ``len(source)``.
"""

from __future__ import annotations
from bisect import bisect_right
from enum import Enum


WHITESPACE = frozenset(" \t\n\r\v\f")

# Characters that end a token besides whitespace
TOKEN_DELIMITERS = frozenset(";{},/[")


class KeywordSearch(Enum):
    """How qualifier and ``struct`` keywords are located in the source.

    RAW finds any literal occurrence, including one buried inside a longer
    identifier (``uniforms_enabled``). WORD requires the match to be
    bounded by non-identifier characters on both sides.
    """
    RAW = "raw"
    WORD = "word"


def _is_ident_char(ch: str) -> bool:
    return ch == "_" or (ch.isascii() and ch.isalnum())


def skip_whitespace_and_comments(source: str, offset: int) -> int:
    """Advance past whitespace, ``//`` line comments and ``/* */`` block comments.

    A line comment ends at the first ``\\n`` or ``\\r``; a block comment ends
    right after its ``*/``. An unterminated block comment runs to the end of
    the buffer.
    """
    end = len(source)
    pos = offset
    while pos < end:
        ch = source[pos]
        if ch in WHITESPACE:
            pos += 1
        elif source.startswith("//", pos):
            pos += 2
            while pos < end and source[pos] not in "\r\n":
                pos += 1
        elif source.startswith("/*", pos):
            close = source.find("*/", pos + 2)
            pos = end if close < 0 else close + 2
        else:
            break
    return pos


def next_token(source: str, offset: int) -> tuple[str, int]:
    """Read characters up to whitespace, a delimiter or the end of the buffer.

    Leading whitespace is not skipped. Returns ``("", offset)`` when the
    cursor already sits on a delimiter.
    """
    end = len(source)
    pos = offset
    while pos < end and source[pos] not in WHITESPACE and source[pos] not in TOKEN_DELIMITERS:
        pos += 1
    return source[offset:pos], pos


def skip_array_suffix(source: str, offset: int) -> int:
    """Skip an ``[...]`` suffix starting at ``offset``, including nested brackets."""
    end = len(source)
    pos = offset
    depth = 0
    while pos < end:
        ch = source[pos]
        pos += 1
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth <= 0:
                break
    return pos


def comment_spans(source: str) -> list[tuple[int, int]]:
    """Return the ``(start, end)`` offsets of every comment in ``source``, in order."""
    spans: list[tuple[int, int]] = []
    end = len(source)
    pos = source.find("/")
    while 0 <= pos < end - 1:
        nxt = source[pos + 1]
        if nxt == "/":
            stop = pos + 2
            while stop < end and source[stop] not in "\r\n":
                stop += 1
            spans.append((pos, stop))
            pos = stop
        elif nxt == "*":
            close = source.find("*/", pos + 2)
            stop = end if close < 0 else close + 2
            spans.append((pos, stop))
            pos = stop
        else:
            pos += 1
        pos = source.find("/", pos)
    return spans


def _comment_end(spans: list[tuple[int, int]], starts: list[int], pos: int) -> int:
    """Return the end of the comment covering ``pos``, or -1 when it is code."""
    i = bisect_right(starts, pos) - 1
    if i >= 0 and pos < spans[i][1]:
        return spans[i][1]
    return -1


def find_keyword(source: str, keyword: str, start: int = 0,
                 search: KeywordSearch = KeywordSearch.WORD) -> int:
    """Return the offset of the next ``keyword`` at or after ``start``, or -1.

    WORD search also ignores occurrences inside comments.
    """
    pos = source.find(keyword, start)
    if search is KeywordSearch.RAW or pos < 0:
        return pos
    spans = comment_spans(source)
    starts = [s for s, _ in spans]
    while pos >= 0:
        comment_end = _comment_end(spans, starts, pos)
        if comment_end >= 0:
            pos = source.find(keyword, comment_end)
            continue
        after = pos + len(keyword)
        if (pos == 0 or not _is_ident_char(source[pos - 1])) and \
                (after >= len(source) or not _is_ident_char(source[after])):
            return pos
        pos = source.find(keyword, pos + 1)
    return -1


def skip_initializer(source: str, offset: int, terminators: str = ";") -> int:
    """Skip an initializer expression up to the next top-level ``,`` or terminator.

    Brackets, parentheses and braces nest, so ``vec3(1.0, 2.0, 3.0)`` is
    skipped whole. The stopping character is left unconsumed.
    """
    end = len(source)
    pos = offset
    depth = 0
    while True:
        pos = skip_whitespace_and_comments(source, pos)
        if pos >= end:
            break
        ch = source[pos]
        if depth == 0 and (ch == "," or ch in terminators):
            break
        if ch in "([{":
            depth += 1
        elif ch in ")]}" and depth > 0:
            depth -= 1
        pos += 1
    return pos


def read_declarators(source: str, offset: int, terminators: str = ";") -> tuple[list[str], int]:
    """Read a comma-separated list of declared names.

    Array suffixes and ``= ...`` initializers are skipped and not reflected
    in the names. Stops on any character of ``terminators`` (left
    unconsumed) or at the end of the buffer, and returns the names with the
    stopping offset.
    """
    end = len(source)
    names: list[str] = []
    pos = offset
    while True:
        pos = skip_whitespace_and_comments(source, pos)
        if pos >= end or source[pos] in terminators:
            break
        start = pos
        name, pos = next_token(source, pos)
        eq = name.find("=")
        if eq >= 0:
            # initializer glued to the name: "gamma=2.2"
            name = name[:eq]
            pos = start + eq
        if name:
            names.append(name)

        pos = skip_whitespace_and_comments(source, pos)
        if pos >= end:
            break
        if source[pos] == "[":
            pos = skip_whitespace_and_comments(source, skip_array_suffix(source, pos))
            if pos >= end:
                break
        if source[pos] == "=":
            pos = skip_initializer(source, pos + 1, terminators)
            if pos >= end:
                break

        ch = source[pos]
        if ch == ",":
            pos += 1
        elif not name and ch not in terminators:
            # stray delimiter where a name was expected
            pos += 1
    return names, pos
