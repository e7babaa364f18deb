"""
Exception types raised by the ctags language server.

Everything derives from CtagsLsError so the dispatcher can catch the whole
family at the request boundary.
"""


class CtagsLsError(Exception):
    """Base exception for the language server."""

    pass


class ExternalToolError(CtagsLsError):
    """Raised when the tag indexer cannot be launched or exits abnormally."""

    pass


class TagDecodeError(CtagsLsError):
    """Raised when the tag indexer output is not valid text."""

    pass


class DocumentNotFoundError(CtagsLsError):
    """Raised when a document uri is not open."""

    def __init__(self, uri: str):
        super().__init__(f"Document not found: {uri}")
        self.uri = uri


class InvalidPositionError(CtagsLsError):
    """Raised when a position points outside the document."""

    pass


class ProtocolDecodeError(CtagsLsError):
    """Raised when an inbound request or notification payload is malformed."""

    pass
