"""
Location resolution for tag records.

A tag record only says which file a symbol lives in and what its defining
line looked like when the index was built. This module scans the current
file contents for that line and reports the exact span of the name on it.

Matching is a literal substring test against the stored pattern, so a
record whose line has since been reformatted no longer resolves and is
dropped.
"""

import logging
from typing import Dict, List

from lsprotocol import types
from pygls import uris

from ..tags import TagRecord
from ..utils import DEFAULT_POSITION_ENCODING, column_length, index_to_column

logger = logging.getLogger(__name__)


def group_by_file(records: List[TagRecord]) -> Dict[str, List[TagRecord]]:
    """Group records by absolute file path, keeping first-seen order."""
    grouped: Dict[str, List[TagRecord]] = {}
    for record in records:
        grouped.setdefault(record.file, []).append(record)
    return grouped


def _make_location(record: TagRecord, line_number: int, line: str, index: int,
                   encoding: str) -> types.Location:
    start = index_to_column(line, index, encoding)
    return types.Location(
        uri=uris.from_fs_path(record.file) or f"file://{record.file}",
        range=types.Range(
            start=types.Position(line=line_number, character=start),
            end=types.Position(line=line_number,
                               character=start + column_length(record.name, encoding)),
        ),
    )


class LocationResolver:
    """
    Turns tag records into exact source locations.

    Args:
        position_encoding: Unit of the reported columns, as negotiated with
            the client
    """

    def __init__(self, position_encoding: str = DEFAULT_POSITION_ENCODING):
        self.position_encoding = position_encoding

    def resolve(self, records: List[TagRecord]) -> List[types.Location]:
        """
        Resolve every record that can still be found in its file.

        Each file is read at most once. Records that match no line, or whose
        file cannot be read, are dropped.

        Args:
            records: Tag records, already narrowed by kind

        Returns:
            One Location per resolved record
        """
        locations: List[types.Location] = []
        for file_path, file_records in group_by_file(records).items():
            try:
                locations.extend(self._resolve_file(file_path, file_records))
            except OSError as e:
                logger.warning(f"Cannot read {file_path} for tag resolution: {e}")
        return locations

    def _resolve_file(self, file_path: str, records: List[TagRecord]) -> List[types.Location]:
        found = [False] * len(records)
        locations = []

        with open(file_path, 'r', encoding='utf-8', errors='replace') as source:
            for line_number, line in enumerate(source):
                line = line.rstrip('\n')
                for idx, record in enumerate(records):
                    if found[idx]:
                        continue
                    if record.pattern in line:
                        index = line.find(record.name)
                        if index != -1:
                            locations.append(_make_location(
                                record, line_number, line, index, self.position_encoding
                            ))
                            found[idx] = True
                            # One record per line; the rest wait for the next line
                            break

                if all(found):
                    break

        unresolved = found.count(False)
        if unresolved:
            logger.debug(f"{unresolved} tag(s) not found in {file_path}")
        return locations
