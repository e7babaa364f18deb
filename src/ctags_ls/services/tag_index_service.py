"""
Tag index client for the ctags language server.

This service picks a tag index backend, runs a lookup for a symbol against a
workspace root's tag file and parses the result into tag records.
"""

import logging
import subprocess
from typing import List, Optional

from ..exceptions import TagDecodeError
from ..settings import ServerSettings
from ..tags import ReadtagsStrategy, TagFileStrategy, TagIndexStrategy, TagRecord, parse_tags_output
from .workspace_service import WorkspaceRoot

logger = logging.getLogger(__name__)


def select_strategy(settings: ServerSettings) -> TagIndexStrategy:
    """
    Return the first available backend, readtags preferred.

    The pure-Python tag file reader is always available, so this never fails.
    """
    candidates = [ReadtagsStrategy(settings.readtags_command), TagFileStrategy()]
    for strategy in candidates:
        if strategy.is_available():
            return strategy
    return candidates[-1]


class TagIndexClient:
    """Runs exact-name lookups against a workspace root's tag file."""

    def __init__(self, settings: Optional[ServerSettings] = None,
                 strategy: Optional[TagIndexStrategy] = None):
        self.settings = settings or ServerSettings()
        self.strategy = strategy or select_strategy(self.settings)
        logger.info(f"Using tag index backend: {self.strategy.name}")

    def query(self, root: WorkspaceRoot, symbol: str) -> List[TagRecord]:
        """
        Look up every tag named exactly ``symbol`` in the root's tag file.

        Args:
            root: A workspace root with a resolved tag file
            symbol: The exact, case-sensitive symbol name

        Returns:
            The parsed records; empty if the root has no tag file or the
            lookup timed out

        Raises:
            ExternalToolError: If the backend could not run or failed
            TagDecodeError: If the backend output is not valid UTF-8
        """
        if root.tag_file_path is None or not symbol:
            return []

        try:
            raw = self.strategy.query(root.tag_file_path, symbol, timeout=self.settings.readtags_timeout)
        except subprocess.TimeoutExpired:
            logger.warning(
                f"{self.strategy.name} timed out after {self.settings.readtags_timeout}s "
                f"looking up {symbol!r} in {root.tag_file_path}"
            )
            return []

        try:
            output = raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise TagDecodeError(f"Invalid UTF-8 in {self.strategy.name} output: {e}") from e

        records = [
            record for record in parse_tags_output(output, root.path)
            if record.name == symbol
        ]
        logger.debug(f"{self.strategy.name} returned {len(records)} tags for {symbol!r}")
        return records
