"""
ctags Language Server

This language server answers goto definition, declaration and implementation
requests from a ctags tag index. pygls owns the transport; every decoded
message is handed to the Dispatcher, which owns the service state.
"""

import argparse
import logging
import os
import sys
import tempfile
from typing import Optional

from lsprotocol import types
from pygls.lsp.server import LanguageServer

from . import __version__
from .constants import (
    DEFAULT_LOG_LEVEL,
    ENV_LOG_FILE,
    ENV_LOG_LEVEL,
    LOG_FILE_NAME,
    LOG_FORMAT,
    SERVER_NAME,
)
from .dispatcher import Dispatcher

logger = logging.getLogger(__name__)


def setup_logging(log_file: Optional[str] = None, level: Optional[str] = None) -> str:
    """
    Setup logging (stderr and a log file; stdout carries the protocol).

    Args:
        log_file: Log file path, ``<tempdir>/ctags_ls.log`` by default
        level: Level name, INFO by default

    Returns:
        The log file path in use
    """
    log_file = log_file or os.getenv(ENV_LOG_FILE) or os.path.join(tempfile.gettempdir(), LOG_FILE_NAME)
    level_name = (level or os.getenv(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper()

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    stderr_handler.setLevel(logging.WARNING)
    root_logger.addHandler(stderr_handler)

    try:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    except OSError as e:
        logger.warning(f"Cannot open log file {log_file}: {e}")

    root_logger.setLevel(getattr(logging, level_name, logging.INFO))
    return log_file


def create_server(dispatcher: Optional[Dispatcher] = None) -> LanguageServer:
    """
    Build the pygls server and route its features to the dispatcher.

    Args:
        dispatcher: Dispatcher to route to, a new one by default

    Returns:
        The LanguageServer, not yet started
    """
    dispatcher = dispatcher or Dispatcher()
    server = LanguageServer(
        SERVER_NAME,
        __version__,
        text_document_sync_kind=types.TextDocumentSyncKind.Full,
    )
    server.dispatcher = dispatcher

    @server.feature(types.INITIALIZE)
    def initialize(ls: LanguageServer, params: types.InitializeParams) -> None:
        dispatcher.dispatch(types.INITIALIZE, params)

    @server.feature(types.SHUTDOWN)
    def shutdown(ls: LanguageServer, params) -> None:
        dispatcher.dispatch(types.SHUTDOWN, params)

    @server.feature(types.TEXT_DOCUMENT_DID_OPEN)
    def did_open(ls: LanguageServer, params: types.DidOpenTextDocumentParams) -> None:
        dispatcher.dispatch(types.TEXT_DOCUMENT_DID_OPEN, params)

    @server.feature(types.TEXT_DOCUMENT_DID_CHANGE)
    def did_change(ls: LanguageServer, params: types.DidChangeTextDocumentParams) -> None:
        dispatcher.dispatch(types.TEXT_DOCUMENT_DID_CHANGE, params)

    @server.feature(types.TEXT_DOCUMENT_DID_CLOSE)
    def did_close(ls: LanguageServer, params: types.DidCloseTextDocumentParams) -> None:
        dispatcher.dispatch(types.TEXT_DOCUMENT_DID_CLOSE, params)

    @server.feature(types.WORKSPACE_DID_CHANGE_WORKSPACE_FOLDERS)
    def did_change_workspace_folders(ls: LanguageServer,
                                     params: types.DidChangeWorkspaceFoldersParams) -> None:
        dispatcher.dispatch(types.WORKSPACE_DID_CHANGE_WORKSPACE_FOLDERS, params)

    @server.feature(types.TEXT_DOCUMENT_DEFINITION)
    def definition(ls: LanguageServer, params: types.DefinitionParams):
        return dispatcher.dispatch(types.TEXT_DOCUMENT_DEFINITION, params) or []

    @server.feature(types.TEXT_DOCUMENT_DECLARATION)
    def declaration(ls: LanguageServer, params: types.DeclarationParams):
        return dispatcher.dispatch(types.TEXT_DOCUMENT_DECLARATION, params) or []

    @server.feature(types.TEXT_DOCUMENT_IMPLEMENTATION)
    def implementation(ls: LanguageServer, params: types.ImplementationParams):
        return dispatcher.dispatch(types.TEXT_DOCUMENT_IMPLEMENTATION, params) or []

    return server


def main(argv: Optional[list] = None):
    """Main function to run the language server over stdio."""
    parser = argparse.ArgumentParser(prog=SERVER_NAME, description=__doc__.strip().splitlines()[0])
    parser.add_argument("--log-file", help="Log file path (default: <tempdir>/ctags_ls.log)")
    parser.add_argument("--log-level", help="Logging level (default: INFO)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    log_file = setup_logging(args.log_file, args.log_level)
    logging.info(f"Starting {SERVER_NAME} {__version__}, logging to {log_file}")

    create_server().start_io()


if __name__ == "__main__":
    main()
