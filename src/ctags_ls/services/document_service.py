"""
Open document tracking for the ctags language server.

The server keeps its own copy of every open document so it can read the
identifier under the cursor without touching the filesystem. Edits arrive
as ordered content change events and are applied one at a time.
"""

import logging
import threading
from typing import Dict, Iterable, Union

from lsprotocol import types

from ..exceptions import DocumentNotFoundError, InvalidPositionError
from ..utils import (
    DEFAULT_POSITION_ENCODING,
    column_to_index,
    is_identifier_char,
    position_to_offset,
    split_lines,
    strip_line_ending,
)

logger = logging.getLogger(__name__)

ContentChange = Union[
    types.TextDocumentContentChangePartial,
    types.TextDocumentContentChangeWholeDocument,
]


class TextDocument:
    """The current text of one open document."""

    def __init__(self, uri: str, text: str):
        self.uri = uri
        self.text = text

    def get_line(self, line_number: int) -> str:
        """
        Return one line without its terminator.

        Raises:
            InvalidPositionError: If the line does not exist
        """
        lines = split_lines(self.text)
        if line_number < 0 or line_number >= len(lines):
            raise InvalidPositionError(
                f"Line {line_number} out of range for {self.uri} ({len(lines)} lines)"
            )
        return strip_line_ending(lines[line_number])

    def apply_change(self, change: ContentChange, encoding: str = DEFAULT_POSITION_ENCODING) -> None:
        """Apply a single content change event."""
        change_range = getattr(change, "range", None)
        if change_range is None:
            self.text = change.text
            return

        start = position_to_offset(
            self.text, change_range.start.line, change_range.start.character, encoding
        )
        end = position_to_offset(
            self.text, change_range.end.line, change_range.end.character, encoding
        )
        if end < start:
            start, end = end, start
        self.text = self.text[:start] + change.text + self.text[end:]

    def symbol_at(self, position: types.Position, encoding: str = DEFAULT_POSITION_ENCODING) -> str:
        """
        Return the identifier under the cursor.

        An empty string means the cursor sits on a character that cannot be
        part of an identifier.
        """
        line = self.get_line(position.line)
        column = column_to_index(line, position.character, encoding)

        if column < len(line) and not is_identifier_char(line[column]):
            return ""

        start = column
        while start > 0 and is_identifier_char(line[start - 1]):
            start -= 1

        end = column
        while end < len(line) and is_identifier_char(line[end]):
            end += 1

        return line[start:end]


class DocumentStore:
    """
    Thread-safe map of uri to TextDocument.

    Args:
        position_encoding: Unit of position characters, as negotiated with
            the client; the dispatcher updates it on ``initialize``
    """

    def __init__(self, position_encoding: str = DEFAULT_POSITION_ENCODING):
        self._lock = threading.Lock()
        self._documents: Dict[str, TextDocument] = {}
        self.position_encoding = position_encoding

    def open(self, uri: str, text: str) -> None:
        """Insert a document, replacing any previous copy."""
        with self._lock:
            self._documents[uri] = TextDocument(uri, text)
        logger.debug(f"Opened document: {uri}")

    def change(self, uri: str, changes: Iterable[ContentChange]) -> None:
        """
        Apply content changes strictly in the order given.

        Raises:
            DocumentNotFoundError: If the document is not open
        """
        with self._lock:
            document = self._documents.get(uri)
            if document is None:
                raise DocumentNotFoundError(uri)
            for change in changes:
                document.apply_change(change, self.position_encoding)

    def close(self, uri: str) -> None:
        """Forget a document. Closing an unknown uri is a no-op."""
        with self._lock:
            self._documents.pop(uri, None)
        logger.debug(f"Closed document: {uri}")

    def get_text(self, uri: str) -> str:
        with self._lock:
            return self._get(uri).text

    def extract_symbol_at(self, uri: str, position: types.Position) -> str:
        """
        Return the identifier under the cursor in an open document.

        Args:
            uri: The document uri
            position: Cursor position, character in the store's position encoding

        Returns:
            The identifier, or an empty string if the cursor is on a delimiter

        Raises:
            DocumentNotFoundError: If the document is not open
            InvalidPositionError: If the line does not exist
        """
        with self._lock:
            return self._get(uri).symbol_at(position, self.position_encoding)

    def __contains__(self, uri: str) -> bool:
        with self._lock:
            return uri in self._documents

    def _get(self, uri: str) -> TextDocument:
        document = self._documents.get(uri)
        if document is None:
            raise DocumentNotFoundError(uri)
        return document
