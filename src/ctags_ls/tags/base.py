"""
Tag Index Strategies

This module defines the tag record type, the parser for ``readtags -e``
style output, and the abstract base class for the backends that produce it.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from ..constants import PATTERN_DELIMITERS


@dataclass(frozen=True)
class TagRecord:
    """One tag index hit for a symbol."""
    name: str
    file: str  # absolute path
    pattern: str
    kind: str


def parse_tag_line(line: str, root_path: str) -> Optional[TagRecord]:
    """
    Parse a single tab-delimited tag line.

    Args:
        line: ``name<TAB>file<TAB>pattern<TAB>kind:x[<TAB>field:value...]``
        root_path: Filesystem path of the workspace root the file is relative to

    Returns:
        A TagRecord, or None if the line is malformed
    """
    parts = line.split('\t')
    if len(parts) < 4:
        return None

    kind_parts = parts[3].split(':')
    if len(kind_parts) < 2:
        return None

    return TagRecord(
        name=parts[0],
        # Joined verbatim; the index decides what the relative path looks like
        file=f"{root_path}/{parts[1]}",
        pattern=parts[2].strip(PATTERN_DELIMITERS),
        kind=kind_parts[1],
    )


def parse_tags_output(output: str, root_path: str) -> List[TagRecord]:
    """
    Parse the output of a tag index query.

    Malformed lines are dropped without error.

    Args:
        output: The raw text output, one tag per line
        root_path: Filesystem path of the workspace root

    Returns:
        The parsed records, in output order
    """
    records = []
    for line in output.split('\n'):
        line = line.rstrip('\r')
        if not line.strip():
            continue
        record = parse_tag_line(line, root_path)
        if record is not None:
            records.append(record)
    return records


class TagIndexStrategy(ABC):
    """
    Abstract base class for a tag index backend.

    Each strategy knows how to look a symbol up in a tag file and returns the
    matching tag lines as bytes, in ``readtags -e`` format.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The name of the backend (e.g., 'readtags')."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if this backend can run on the system.

        Returns:
            True if the backend is available, False otherwise.
        """
        pass

    @abstractmethod
    def query(self, tag_file_path: str, symbol: str, timeout: Optional[float] = None) -> bytes:
        """
        Look up every tag named exactly ``symbol``.

        Args:
            tag_file_path: Path of the tag file to read
            symbol: The exact, case-sensitive symbol name
            timeout: Seconds to allow for the lookup, None for no limit

        Returns:
            Raw tag lines as bytes

        Raises:
            ExternalToolError: If the lookup could not run or failed
            subprocess.TimeoutExpired: If the lookup exceeded the timeout
        """
        pass
