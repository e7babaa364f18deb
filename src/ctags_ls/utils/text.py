"""
Text position helpers.

LSP positions are (line, character) pairs. Lines are separated by ``\\n``,
``\\r\\n`` or ``\\r``; the character is counted in the code units of the
position encoding negotiated at initialize (UTF-16 unless the client and
server agree on UTF-8 or UTF-32). Python strings index by code point, so
every position crossing into a buffer goes through these helpers.
"""
import re
from typing import List

from lsprotocol import types

DEFAULT_POSITION_ENCODING = types.PositionEncodingKind.Utf16

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> List[str]:
    """
    Split text into lines, each keeping its terminator.

    The result always has one more entry than there are line terminators, so
    a trailing newline yields a final empty line, matching how an editor
    numbers lines.
    """
    lines = []
    start = 0
    for match in _LINE_BREAK.finditer(text):
        lines.append(text[start:match.end()])
        start = match.end()
    lines.append(text[start:])
    return lines


def strip_line_ending(line: str) -> str:
    """Remove the line terminator, if any."""
    return line.rstrip("\r\n")


def code_units(ch: str, encoding: str = DEFAULT_POSITION_ENCODING) -> int:
    """Number of code units one character takes in the position encoding."""
    codepoint = ord(ch)
    if encoding == types.PositionEncodingKind.Utf32:
        return 1
    if encoding == types.PositionEncodingKind.Utf8:
        if codepoint < 0x80:
            return 1
        if codepoint < 0x800:
            return 2
        if codepoint < 0x10000:
            return 3
        return 4
    return 2 if codepoint > 0xFFFF else 1


def column_length(text: str, encoding: str = DEFAULT_POSITION_ENCODING) -> int:
    """Length of text in code units of the position encoding."""
    return sum(code_units(ch, encoding) for ch in text)


def column_to_index(line: str, column: int, encoding: str = DEFAULT_POSITION_ENCODING) -> int:
    """
    Convert a position column to a code point index within line.

    Columns past the end of the line clamp to its length.
    """
    units = 0
    for index, ch in enumerate(line):
        if units >= column:
            return index
        units += code_units(ch, encoding)
    return len(line)


def index_to_column(line: str, index: int, encoding: str = DEFAULT_POSITION_ENCODING) -> int:
    """Convert a code point index within line to a position column."""
    return column_length(line[:index], encoding)


def position_to_offset(text: str, line: int, character: int,
                       encoding: str = DEFAULT_POSITION_ENCODING) -> int:
    """
    Map an LSP position onto a string offset into text.

    Offsets include the full width of every preceding line terminator. A line
    past the end of the document maps to the end of the buffer.
    """
    lines = split_lines(text)
    if line >= len(lines):
        return len(text)
    offset = sum(len(previous) for previous in lines[:line])
    return offset + column_to_index(strip_line_ending(lines[line]), character, encoding)


def is_identifier_char(ch: str) -> bool:
    """Identifier characters are alphanumerics and the underscore."""
    return ch.isalnum() or ch == "_"
