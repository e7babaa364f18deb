"""Tests for the tag index client."""
import logging
import subprocess
from pathlib import Path as _TestPath
from typing import Optional
from unittest.mock import patch
import sys

import pytest

ROOT = _TestPath(__file__).resolve().parents[2]
SRC_PATH = ROOT / 'src'
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from ctags_ls.exceptions import ExternalToolError, TagDecodeError
from ctags_ls.services import TagIndexClient, WorkspaceRoot, select_strategy
from ctags_ls.settings import ServerSettings
from ctags_ls.tags import TagFileStrategy, TagIndexStrategy


class FakeStrategy(TagIndexStrategy):
    """Returns canned output and remembers its calls."""

    def __init__(self, output: bytes = b"", error: Optional[BaseException] = None):
        self.output = output
        self.error = error
        self.calls = []

    @property
    def name(self) -> str:
        return 'fake'

    def is_available(self) -> bool:
        return True

    def query(self, tag_file_path, symbol, timeout=None):
        self.calls.append((tag_file_path, symbol, timeout))
        if self.error is not None:
            raise self.error
        return self.output


ROOT_WITH_TAGS = WorkspaceRoot(uri="file:///proj", name="proj", path="/proj", tag_file_path="/proj/tags")


def test_query_parses_records_against_root_path():
    strategy = FakeStrategy(
        b'foo\tsrc/a.c\t/^int foo() {$/;"\tkind:f\n'
        b'foo\tsrc/a.h\t/^int foo();$/;"\tkind:p\n'
    )
    client = TagIndexClient(ServerSettings(readtags_timeout=3.0), strategy=strategy)

    records = client.query(ROOT_WITH_TAGS, "foo")

    assert [(r.file, r.pattern, r.kind) for r in records] == [
        ("/proj/src/a.c", "int foo() {", "f"),
        ("/proj/src/a.h", "int foo()", "p"),
    ]
    assert strategy.calls == [("/proj/tags", "foo", 3.0)]


def test_query_keeps_exact_case_sensitive_matches_only():
    strategy = FakeStrategy(
        b'Foo\ta.c\t/^struct Foo$/;"\tkind:s\n'
        b'foo\ta.c\t/^int foo;$/;"\tkind:v\n'
    )

    records = TagIndexClient(strategy=strategy).query(ROOT_WITH_TAGS, "foo")

    assert [r.name for r in records] == ["foo"]


def test_query_without_tag_file_returns_nothing():
    strategy = FakeStrategy(b"unused")
    root = WorkspaceRoot(uri="file:///proj", name="proj", path="/proj")

    assert TagIndexClient(strategy=strategy).query(root, "foo") == []
    assert strategy.calls == []


def test_query_with_no_matches_returns_empty_list():
    assert TagIndexClient(strategy=FakeStrategy(b"")).query(ROOT_WITH_TAGS, "foo") == []


def test_invalid_utf8_output_is_a_decode_error():
    client = TagIndexClient(strategy=FakeStrategy(b"foo\t\xff\xfe\t/^x$/\tkind:f\n"))

    with pytest.raises(TagDecodeError):
        client.query(ROOT_WITH_TAGS, "foo")


def test_tool_failure_propagates():
    client = TagIndexClient(strategy=FakeStrategy(error=ExternalToolError("boom")))

    with pytest.raises(ExternalToolError):
        client.query(ROOT_WITH_TAGS, "foo")


def test_timeout_gives_empty_result_and_warning(caplog):
    client = TagIndexClient(strategy=FakeStrategy(error=subprocess.TimeoutExpired("readtags", 1.0)))

    with caplog.at_level(logging.WARNING):
        assert client.query(ROOT_WITH_TAGS, "foo") == []

    assert "timed out" in caplog.text


def test_select_strategy_falls_back_to_tag_file_reader():
    with patch("ctags_ls.tags.readtags.shutil.which", return_value=None):
        strategy = select_strategy(ServerSettings())

    assert isinstance(strategy, TagFileStrategy)


def test_select_strategy_prefers_readtags():
    with patch("ctags_ls.tags.readtags.shutil.which", return_value="/usr/bin/readtags"):
        strategy = select_strategy(ServerSettings(readtags_command="readtags"))

    assert strategy.name == "readtags"
