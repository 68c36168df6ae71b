"""Tree-based path matching and extraction for XML navigation.

This module parses documents with lxml, recovering once from malformed input,
and matches elements against caller-supplied tag paths.

Key Components:
    TreeElement: Read-only element view (tag name, attributes, children, text)
    ParsedDocument: Parse outcome tagged with the ParseMode that produced it
    extract_by_path: Rows of values for every element matching a tag path
    get_unique_keys: Sorted descendant field paths under a tag path
"""

from .document import (
    ParsedDocument,
    ParseMode,
    parse_document,
    parse_tree,
    sanitize_fragment,
)
from .extractor import (
    ExtractionRow,
    extract_by_path,
    extract_from_document,
    get_unique_keys,
    iter_path_matches,
    unique_keys_from_document,
)
from .nodes import TextNode, TreeElement

__all__ = [
    "ExtractionRow",
    "ParsedDocument",
    "ParseMode",
    "TextNode",
    "TreeElement",
    "extract_by_path",
    "extract_from_document",
    "get_unique_keys",
    "iter_path_matches",
    "parse_document",
    "parse_tree",
    "sanitize_fragment",
    "unique_keys_from_document",
]
