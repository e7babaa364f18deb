"""Tests for LSP position helpers."""
from pathlib import Path as _TestPath
import sys

from lsprotocol import types

ROOT = _TestPath(__file__).resolve().parents[2]
SRC_PATH = ROOT / 'src'
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from ctags_ls.utils.text import (
    column_length,
    column_to_index,
    index_to_column,
    is_identifier_char,
    position_to_offset,
    split_lines,
)

UTF8 = types.PositionEncodingKind.Utf8
UTF32 = types.PositionEncodingKind.Utf32


def test_split_lines_keeps_every_terminator_kind():
    assert split_lines("a\r\nb\rc\n") == ["a\r\n", "b\r", "c\n", ""]


def test_split_lines_without_trailing_newline():
    assert split_lines("one\ntwo") == ["one\n", "two"]
    assert split_lines("") == [""]


def test_utf16_columns_count_astral_characters_twice():
    line = "a\U0001F600b"
    assert column_length(line) == 4
    assert column_to_index(line, 3) == 2
    assert index_to_column(line, 2) == 3


def test_utf8_columns_count_bytes():
    line = "é\U0001F600b"
    assert column_length(line, UTF8) == 7
    assert column_to_index(line, 2, UTF8) == 1
    assert column_to_index(line, 6, UTF8) == 2
    assert index_to_column(line, 2, UTF8) == 6


def test_utf32_columns_count_code_points():
    line = "é\U0001F600b"
    assert column_length(line, UTF32) == 3
    assert column_to_index(line, 2, UTF32) == 2
    assert index_to_column(line, 2, UTF32) == 2


def test_column_to_index_clamps_past_end_of_line():
    assert column_to_index("abc", 99) == 3
    assert column_to_index("é", 99, UTF8) == 1


def test_position_to_offset_counts_line_terminators():
    assert position_to_offset("ab\ncd", 1, 1) == 4
    assert position_to_offset("ab\r\ncd", 1, 0) == 4
    assert position_to_offset("ab\rcd", 1, 2) == 5


def test_position_to_offset_in_utf8():
    assert position_to_offset("x\né=1", 1, 2, UTF8) == 3


def test_position_to_offset_clamps_column_and_line():
    assert position_to_offset("ab\ncd", 0, 10) == 2
    assert position_to_offset("ab\ncd", 5, 0) == 5


def test_identifier_characters():
    assert is_identifier_char("_")
    assert is_identifier_char("z")
    assert is_identifier_char("7")
    assert not is_identifier_char("(")
    assert not is_identifier_char(" ")
