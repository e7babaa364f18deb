"""
Service layer for the ctags language server.

This package contains the services behind the protocol handlers:

- WorkspaceRegistry: workspace roots and their tag files
- DocumentStore: open document text and edits
- TagIndexClient: tag lookups through readtags or the tag file itself
- LocationResolver: exact spans for tag records
- GotoService: the definition / declaration / implementation pipeline

Services own their state and guard it with a lock; they raise the
exceptions in ``ctags_ls.exceptions`` and leave reporting to the dispatcher.
"""

from .document_service import DocumentStore, TextDocument
from .goto_service import KIND_FILTERS, GotoKind, GotoService, filter_records
from .location_service import LocationResolver
from .tag_index_service import TagIndexClient, select_strategy
from .workspace_service import WorkspaceRegistry, WorkspaceRoot

__all__ = [
    "DocumentStore",
    "TextDocument",
    "GotoKind",
    "GotoService",
    "KIND_FILTERS",
    "filter_records",
    "LocationResolver",
    "TagIndexClient",
    "select_strategy",
    "WorkspaceRegistry",
    "WorkspaceRoot",
]
