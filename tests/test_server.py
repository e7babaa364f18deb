"""Tests for server wiring and logging setup."""
import logging
from pathlib import Path as _TestPath
import sys

import pytest
from lsprotocol import types
from pygls import uris
from pygls.lsp.server import LanguageServer

ROOT = _TestPath(__file__).resolve().parents[1]
SRC_PATH = ROOT / 'src'
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from ctags_ls.dispatcher import Dispatcher
from ctags_ls.server import create_server, main, setup_logging
from ctags_ls.tags import TagRecord

DOC_URI = "file:///editor/main.c"


@pytest.fixture
def restore_root_logger():
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    for handler in root_logger.handlers:
        if handler not in handlers:
            handler.close()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


@pytest.fixture
def project(tmp_path):
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "a.c").write_text("int foo();\n/* é */ int foo() {\n}\n", encoding="utf-8")
    (tmp_path / "tags").write_text("")
    return tmp_path


@pytest.fixture
def server():
    queries = []

    def tag_source_factory(settings):
        def query(root, symbol):
            queries.append(symbol)
            return [TagRecord(name=symbol, file=f"{root.path}/src/a.c", pattern="int foo() {", kind="f")]
        return query

    language_server = create_server(Dispatcher(tag_source_factory=tag_source_factory))
    language_server.queries = queries
    return language_server


def run_lsp_method(gen):
    """Drive a pygls builtin handler, running each user handler it yields to."""
    value = None
    try:
        while True:
            handler, args, kwargs = gen.send(value)
            value = handler(*args, **(kwargs or {}))
    except StopIteration as stop:
        return stop.value


def initialize(server, project, position_encodings=None):
    capabilities = types.ClientCapabilities()
    if position_encodings is not None:
        capabilities.general = types.GeneralClientCapabilities(position_encodings=position_encodings)
    params = types.InitializeParams(
        process_id=None,
        root_uri=uris.from_fs_path(str(project)),
        capabilities=capabilities,
    )
    return run_lsp_method(server.protocol.lsp_initialize(params))


def feature(server, method):
    return server.protocol.fm.features[method]


def open_document(server, text):
    feature(server, types.TEXT_DOCUMENT_DID_OPEN)(types.DidOpenTextDocumentParams(
        text_document=types.TextDocumentItem(uri=DOC_URI, language_id="c", version=1, text=text),
    ))


def definition(server, character):
    return feature(server, types.TEXT_DOCUMENT_DEFINITION)(types.DefinitionParams(
        text_document=types.TextDocumentIdentifier(uri=DOC_URI),
        position=types.Position(line=0, character=character),
    ))


def test_setup_logging_writes_to_log_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "ctags_ls.log"

    assert setup_logging(str(log_file), "debug") == str(log_file)
    logging.getLogger("ctags_ls.test").debug("hello from the test")
    for handler in logging.getLogger().handlers:
        handler.flush()

    content = log_file.read_text()
    assert "ctags_ls.test - DEBUG - hello from the test" in content
    assert logging.getLogger().level == logging.DEBUG


def test_setup_logging_uses_environment(tmp_path, monkeypatch, restore_root_logger):
    log_file = tmp_path / "env.log"
    monkeypatch.setenv("CTAGS_LS_LOG_FILE", str(log_file))
    monkeypatch.setenv("CTAGS_LS_LOG_LEVEL", "warning")

    assert setup_logging() == str(log_file)
    assert logging.getLogger().level == logging.WARNING


def test_create_server_keeps_dispatcher():
    dispatcher = Dispatcher(tag_source_factory=lambda settings: (lambda root, symbol: []))

    server = create_server(dispatcher)

    assert isinstance(server, LanguageServer)
    assert server.dispatcher is dispatcher


def test_initialize_advertises_capabilities(server, project):
    result = initialize(server, project)

    capabilities = result.capabilities
    sync = capabilities.text_document_sync
    assert getattr(sync, "change", sync) == types.TextDocumentSyncKind.Full
    assert capabilities.definition_provider
    assert capabilities.declaration_provider
    assert capabilities.implementation_provider
    assert capabilities.workspace.workspace_folders.change_notifications
    assert capabilities.position_encoding == types.PositionEncodingKind.Utf16
    assert server.dispatcher.position_encoding == types.PositionEncodingKind.Utf16


def test_initialize_reaches_dispatcher(server, project):
    initialize(server, project)

    assert server.dispatcher.workspaces.first_indexed_root().path == str(project)


def test_definition_feature_reaches_dispatcher(server, project):
    initialize(server, project)
    open_document(server, "x = foo();")

    [location] = definition(server, 5)

    assert server.queries == ["foo"]
    assert location.uri == uris.from_fs_path(str(project / "src" / "a.c"))
    # "/* " + e-acute + " */ int " is 12 UTF-16 code units
    assert (location.range.start.line, location.range.start.character) == (1, 12)
    assert location.range.end.character == 15


def test_advertised_utf8_encoding_is_used_for_positions(server, project):
    result = initialize(server, project, position_encodings=[
        types.PositionEncodingKind.Utf8,
        types.PositionEncodingKind.Utf16,
    ])
    open_document(server, "é;foo();")

    assert result.capabilities.position_encoding == types.PositionEncodingKind.Utf8
    assert server.dispatcher.position_encoding == result.capabilities.position_encoding

    # e-acute takes two UTF-8 code units, so column 2 is the ';'
    assert definition(server, 2) == []
    [location] = definition(server, 3)
    assert (location.range.start.line, location.range.start.character) == (1, 13)
    assert location.range.end.character == 16


def test_unsupported_client_encodings_fall_back_to_utf16(server, project):
    result = initialize(server, project, position_encodings=["ucs-2"])

    assert result.capabilities.position_encoding == types.PositionEncodingKind.Utf16
    assert server.dispatcher.position_encoding == types.PositionEncodingKind.Utf16


def test_main_version(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])

    assert excinfo.value.code == 0
    assert "ctags-ls" in capsys.readouterr().out
