"""Offset-reconciling search across XML documents.

Key Components:
    search: Structural substring search of one document with raw offsets
    scan_document: Search of one document that also reports parse failures
    search_documents: Order-preserving fan-out over many documents
    SearchHit: Match with breadcrumb context, raw offset and ordinal
    resolve_highlight: Span to highlight, falling back to the hit ordinal
"""

from .engine import (
    UNRESOLVED_OFFSET,
    ContextLine,
    DocumentScan,
    MatchKind,
    OffsetCursor,
    SearchHit,
    find_occurrences,
    hits_by_file,
    resolve_highlight,
    scan_document,
    scan_documents,
    search,
    search_documents,
)

__all__ = [
    "UNRESOLVED_OFFSET",
    "ContextLine",
    "DocumentScan",
    "MatchKind",
    "OffsetCursor",
    "SearchHit",
    "find_occurrences",
    "hits_by_file",
    "resolve_highlight",
    "scan_document",
    "scan_documents",
    "search",
    "search_documents",
]
