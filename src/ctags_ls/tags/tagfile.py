"""
Basic, pure-Python tag index strategy.
"""
from typing import List, Optional

from ..constants import PSEUDO_TAG_PREFIX
from ..exceptions import ExternalToolError
from .base import TagIndexStrategy


def _normalize_fields(fields: List[bytes]) -> List[bytes]:
    """Expand a bare kind letter into ``kind:<letter>`` the way ``readtags -e`` prints it."""
    normalized = fields[:3]
    for extension in fields[3:]:
        if b':' not in extension:
            extension = b'kind:' + extension
        normalized.append(extension)
    return normalized


class TagFileStrategy(TagIndexStrategy):
    """
    A basic, pure-Python tag lookup.

    This strategy reads the tag file itself line by line. It's a fallback for
    when readtags is not installed, and emits the same lines readtags would.
    """

    @property
    def name(self) -> str:
        """The name of the backend."""
        return 'tagfile'

    def is_available(self) -> bool:
        """This basic strategy is always available."""
        return True

    def query(self, tag_file_path: str, symbol: str, timeout: Optional[float] = None) -> bytes:
        """
        Scan the tag file for lines named exactly ``symbol``.

        Note: timeout is ignored, the scan is bounded by the tag file size.
        """
        wanted = symbol.encode('utf-8')
        matches = []
        try:
            with open(tag_file_path, 'rb') as tag_file:
                for raw_line in tag_file:
                    line = raw_line.rstrip(b'\r\n')
                    if not line or line.startswith(PSEUDO_TAG_PREFIX.encode('ascii')):
                        continue
                    fields = line.split(b'\t')
                    if fields[0] != wanted:
                        continue
                    matches.append(b'\t'.join(_normalize_fields(fields)))
        except OSError as e:
            raise ExternalToolError(f"Failed to read tag file {tag_file_path}: {e}") from e

        return b''.join(match + b'\n' for match in matches)
