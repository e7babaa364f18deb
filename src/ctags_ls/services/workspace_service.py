"""
Workspace registry for the ctags language server.

Tracks the workspace roots the editor reports and, for each, the tag file
found at the root when it was added.
"""

import logging
import os
import threading
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urlparse

from lsprotocol import types
from pygls import uris

from ..constants import DEFAULT_TAG_PATTERNS

logger = logging.getLogger(__name__)


@dataclass
class WorkspaceRoot:
    """A workspace folder and its resolved tag file."""
    uri: str
    name: str
    path: str
    tag_file_path: Optional[str] = None

    def matches(self, folder: types.WorkspaceFolder) -> bool:
        """Folder identity is the (uri, name) pair."""
        return self.uri == folder.uri and self.name == folder.name


class WorkspaceRegistry:
    """
    Registry of workspace roots, in the order they were added.

    Only the first root with a tag file is ever queried. Other roots keep
    their tag file path but are ignored while an earlier indexed root exists.
    """

    def __init__(self, tag_patterns: Optional[List[str]] = None):
        self._lock = threading.Lock()
        self._roots: List[WorkspaceRoot] = []
        self.tag_patterns = list(tag_patterns if tag_patterns is not None else DEFAULT_TAG_PATTERNS)

    def reset(self, tag_patterns: List[str]) -> None:
        """Drop every root and start over with new tag file patterns."""
        with self._lock:
            self._roots = []
            self.tag_patterns = list(tag_patterns)

    def add(self, folder: types.WorkspaceFolder) -> Optional[WorkspaceRoot]:
        """
        Register a workspace folder.

        Adding a uri that is already registered is a no-op. A folder with no
        tag file is still registered.

        Args:
            folder: The workspace folder reported by the client

        Returns:
            The registered root, or None if the call was a no-op
        """
        with self._lock:
            if any(root.uri == folder.uri for root in self._roots):
                logger.info(f"Workspace already exists: {folder.uri}")
                return None

            if urlparse(folder.uri).scheme != "file":
                logger.warning(f"Skipping workspace with non-file uri: {folder.uri}")
                return None

            path = uris.to_fs_path(folder.uri)
            if not path:
                logger.warning(f"Could not convert workspace uri to a path: {folder.uri}")
                return None
            path = path.rstrip("/\\") or path

            root = WorkspaceRoot(
                uri=folder.uri,
                name=folder.name,
                path=path,
                tag_file_path=self._resolve_tag_file(path),
            )
            logger.info(f"Adding workspace: {root.uri} with tag file: {root.tag_file_path}")
            self._roots.append(root)
            return root

    def remove(self, folder: types.WorkspaceFolder) -> bool:
        """
        Remove every root whose uri and name equal the folder's.

        Returns:
            True if anything was removed
        """
        with self._lock:
            kept = [root for root in self._roots if not root.matches(folder)]
            removed = len(kept) != len(self._roots)
            self._roots = kept
        if removed:
            logger.info(f"Removed workspace: {folder.uri}")
        return removed

    def roots(self) -> List[WorkspaceRoot]:
        """Snapshot of the registered roots."""
        with self._lock:
            return list(self._roots)

    def first_indexed_root(self) -> Optional[WorkspaceRoot]:
        """The first registered root that has a tag file, if any."""
        with self._lock:
            for root in self._roots:
                if root.tag_file_path is not None:
                    return root
        return None

    def _resolve_tag_file(self, path: str) -> Optional[str]:
        """Return ``<path>/<pattern>`` for the first pattern that exists."""
        for pattern in self.tag_patterns:
            candidate = f"{path}/{pattern}"
            if os.path.exists(candidate):
                return candidate
        return None
