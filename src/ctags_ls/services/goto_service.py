"""
Goto service for the ctags language server.

Definition, declaration and implementation lookups share one pipeline and
differ only in which tag kinds they accept:

    symbol under cursor -> tag lookup -> kind filter -> location resolution
"""

import logging
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from lsprotocol import types

from ..constants import FUNCTION_KINDS, PROTOTYPE_KINDS
from ..tags import TagRecord
from .document_service import DocumentStore
from .location_service import LocationResolver
from .workspace_service import WorkspaceRegistry, WorkspaceRoot

logger = logging.getLogger(__name__)

TagSource = Callable[[WorkspaceRoot, str], Sequence[TagRecord]]


class GotoKind(Enum):
    """The three goto requests."""
    DEFINITION = "definition"
    DECLARATION = "declaration"
    IMPLEMENTATION = "implementation"


KIND_FILTERS: Dict[GotoKind, Callable[[str], bool]] = {
    GotoKind.DEFINITION: lambda kind: kind not in PROTOTYPE_KINDS,
    GotoKind.DECLARATION: lambda kind: kind in PROTOTYPE_KINDS,
    GotoKind.IMPLEMENTATION: lambda kind: kind in FUNCTION_KINDS,
}


def filter_records(goto_kind: GotoKind, records: Iterable[TagRecord]) -> List[TagRecord]:
    """Keep the records whose tag kind the goto kind accepts."""
    accepts = KIND_FILTERS[goto_kind]
    return [record for record in records if accepts(record.kind)]


class GotoService:
    """
    Answers goto requests from the open documents and the workspace tag index.

    Args:
        documents: Store of open documents
        workspaces: Registry of workspace roots
        tag_source: Callable returning the tag records for (root, symbol),
            normally ``TagIndexClient.query``
        resolver: Location resolver, a fresh one by default
    """

    def __init__(self, documents: DocumentStore, workspaces: WorkspaceRegistry,
                 tag_source: TagSource, resolver: Optional[LocationResolver] = None):
        self.documents = documents
        self.workspaces = workspaces
        self.tag_source = tag_source
        self.resolver = resolver or LocationResolver()

    def goto(self, goto_kind: GotoKind, uri: str, position: types.Position) -> List[types.Location]:
        """
        Resolve the symbol under the cursor to source locations.

        Only the first workspace root with a tag file is queried.

        Args:
            goto_kind: Which kinds of tags to accept
            uri: The document containing the cursor
            position: The cursor position

        Returns:
            Zero or more locations; empty when there is no symbol, no tag
            file, no match, or nothing resolved

        Raises:
            DocumentNotFoundError: If the document is not open
            InvalidPositionError: If the cursor line does not exist
            ExternalToolError: If the tag lookup failed
            TagDecodeError: If the tag lookup output was not text
        """
        symbol = self.documents.extract_symbol_at(uri, position)
        if not symbol:
            logger.info(f"No symbol at {uri}:{position.line}:{position.character}")
            return []

        root = self.workspaces.first_indexed_root()
        if root is None:
            logger.info(f"No workspace with a tag file, cannot look up {symbol!r}")
            return []

        records = filter_records(goto_kind, self.tag_source(root, symbol))
        locations = self.resolver.resolve(records)
        logger.info(f"Found {len(locations)} {goto_kind.value} locations for symbol: {symbol}")
        return locations
