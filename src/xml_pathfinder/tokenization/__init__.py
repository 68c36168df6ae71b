"""Lenient tokenization of raw markup.

This module scans raw XML text with a single regular expression and tracks
the stack of open tags, so the enclosing hierarchy of any offset can be found
without a well-formed parse.

Key Components:
    TagToken: A comment, CDATA section, processing instruction or tag with its span
    TagTokenType: Enumeration of recognised token kinds
    TagPathStack: Open tag names at a scan position
    resolve_path_at: Tag hierarchy enclosing a raw offset
"""

from .tokenizer import (
    TagPathStack,
    TagToken,
    TagTokenType,
    iter_tag_tokens,
    resolve_path_at,
)

__all__ = [
    "TagPathStack",
    "TagToken",
    "TagTokenType",
    "iter_tag_tokens",
    "resolve_path_at",
]
