"""
Tag index backends and the tag record parser.
"""

from .base import TagIndexStrategy, TagRecord, parse_tag_line, parse_tags_output
from .readtags import ReadtagsStrategy
from .tagfile import TagFileStrategy

__all__ = [
    "TagIndexStrategy",
    "TagRecord",
    "parse_tag_line",
    "parse_tags_output",
    "ReadtagsStrategy",
    "TagFileStrategy",
]
