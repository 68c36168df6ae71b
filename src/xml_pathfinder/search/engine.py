"""Substring search over document structure with raw-offset reconciliation.

The search walks a parsed tree, so it knows *which* element, attribute or
text run matched, but the tree's strings are not the raw markup: entities are
decoded, prefixes are resolved and case may differ. Every structural hit is
therefore mapped back to a raw offset with a monotonic cursor that moves
forward through the lower-cased raw text as hits are found in document order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from lxml import etree

from xml_pathfinder.shared.config import SearchConfig
from xml_pathfinder.shared.matching import fold_case
from xml_pathfinder.tree.document import parse_tree
from xml_pathfinder.tree.nodes import TextNode, TreeElement

logger = logging.getLogger(__name__)

# Offset of a hit whose raw position could not be established
UNRESOLVED_OFFSET = -1


class MatchKind(Enum):
    """What part of the document contained the query."""

    TAG = auto()         # Element tag name
    ATTR_NAME = auto()   # Attribute name
    ATTR_VALUE = auto()  # Attribute value
    TEXT = auto()        # Character data


@dataclass(frozen=True)
class ContextLine:
    """One breadcrumb line shown with a hit."""

    text: str
    indent: int
    is_match: bool = False


@dataclass
class SearchHit:
    """A structural match with its reconciled raw offset."""

    context_lines: List[ContextLine]
    start_offset: int
    length: int
    ordinal: int
    kind: MatchKind
    file_id: Optional[str] = None

    @property
    def resolved(self) -> bool:
        """Check whether the hit carries a usable raw offset."""
        return self.start_offset != UNRESOLVED_OFFSET

    @property
    def match_line(self) -> Optional[ContextLine]:
        for line in self.context_lines:
            if line.is_match:
                return line
        return None

    def to_dict(self) -> dict:
        return {
            "file": self.file_id,
            "kind": self.kind.name,
            "start_offset": self.start_offset,
            "length": self.length,
            "ordinal": self.ordinal,
            "context": [
                {"text": line.text, "indent": line.indent, "is_match": line.is_match}
                for line in self.context_lines
            ],
        }


class OffsetCursor:
    """Forward-only position in the case-folded raw text of one document.

    A cursor belongs to a single search call; it is never shared between
    documents or threads.
    """

    def __init__(self, raw: str) -> None:
        self.folded = fold_case(raw)
        self.position = 0

    def locate(self, target: str, query: str) -> int:
        """Find the raw offset of ``query`` for a match whose structural string is ``target``.

        Both arguments must already be case-folded.

        Returns:
            Raw offset of the query, or UNRESOLVED_OFFSET
        """
        block_index = self.folded.find(target or query, self.position)
        if block_index != -1:
            query_index = self.folded.find(query, block_index)
            if query_index != -1:
                self.position = query_index + 1
                return query_index
            self.position = block_index + 1
            return UNRESOLVED_OFFSET

        # Decoded entities or normalized text: fall back to the bare query
        fallback_index = self.folded.find(query, self.position)
        if fallback_index != -1:
            self.position = fallback_index + 1
            return fallback_index
        return UNRESOLVED_OFFSET


@dataclass
class _Match:
    kind: MatchKind
    context: TreeElement
    target: str
    line: str


def _iter_nodes(root: TreeElement) -> Iterator[Union[TreeElement, TextNode]]:
    # Depth-first in document order without recursion, for deeply nested input
    yield root
    stack = [root.child_nodes()]
    while stack:
        node = next(stack[-1], None)
        if node is None:
            stack.pop()
            continue
        yield node
        if isinstance(node, TreeElement):
            stack.append(node.child_nodes())


def _match_element(
    element: TreeElement, query: str, config: SearchConfig
) -> Optional[_Match]:
    tag = element.tag_name
    opening = element.opening_tag()

    if query in fold_case(tag):
        text = element.text_content
        if text and len(text) < config.inline_text_limit and not element.has_children:
            line = f"{opening}{text}</{tag}>"
        else:
            line = opening
        return _Match(MatchKind.TAG, element, "<" + tag, line)

    for name, value in element.attributes:
        if query in fold_case(name):
            return _Match(MatchKind.ATTR_NAME, element, name, opening)
        if query in fold_case(value):
            return _Match(MatchKind.ATTR_VALUE, element, value, opening)
    return None


def _match_text(node: TextNode, query: str) -> Optional[_Match]:
    if query not in fold_case(node.value):
        return None
    parent = node.parent
    line = f"{parent.opening_tag()}{node.value}</{parent.tag_name}>"
    return _Match(MatchKind.TEXT, parent, node.value, line)


def _breadcrumb(match: _Match) -> List[ContextLine]:
    parent = match.context.parent
    grandparent = parent.parent if parent is not None else None

    lines: List[ContextLine] = []
    if grandparent is not None:
        lines.append(ContextLine(grandparent.opening_tag(), 0))
    if parent is not None:
        lines.append(ContextLine(parent.opening_tag(), 1 if grandparent is not None else 0))
    lines.append(ContextLine(match.line, len(lines), is_match=True))
    return lines


@dataclass
class DocumentScan:
    """Hits found in one document, or why the document could not be searched."""

    file_id: Optional[str]
    hits: List[SearchHit]
    error: Optional[str] = None

    @property
    def parsed(self) -> bool:
        return self.error is None


def scan_document(
    raw: str,
    query: str,
    file_id: Optional[str] = None,
    config: Optional[SearchConfig] = None,
) -> DocumentScan:
    """Search one document and report whether it could be parsed.

    Same matching as :func:`search`; a parser failure is returned in
    ``error`` instead of being reduced to an empty hit list.
    """
    config = config or SearchConfig()
    if not query or len(query) < config.min_query_length:
        return DocumentScan(file_id, [])

    try:
        root = parse_tree(raw)
    except (etree.XMLSyntaxError, ValueError) as e:
        logger.debug("Search skipped unparseable document", extra={"file_id": file_id, "error": str(e)})
        return DocumentScan(file_id, [], error=str(e) or type(e).__name__)

    folded_query = fold_case(query)
    cursor = OffsetCursor(raw)
    hits: List[SearchHit] = []

    for node in _iter_nodes(root):
        if isinstance(node, TreeElement):
            match = _match_element(node, folded_query, config)
        else:
            match = _match_text(node, folded_query)
        if match is None:
            continue

        offset = cursor.locate(fold_case(match.target), folded_query)
        hits.append(
            SearchHit(
                context_lines=_breadcrumb(match),
                start_offset=offset,
                length=len(query),
                ordinal=len(hits),
                kind=match.kind,
                file_id=file_id,
            )
        )

    return DocumentScan(file_id, hits)


def search(
    raw: str,
    query: str,
    file_id: Optional[str] = None,
    config: Optional[SearchConfig] = None,
) -> List[SearchHit]:
    """Find every element, attribute and text run containing ``query``.

    Matching is case-insensitive. Each element yields at most one hit: its
    tag name is checked first, then its attributes in order. Each hit carries
    the raw offset of the query, or ``-1`` when it cannot be located, and its
    running ordinal within the document.

    Args:
        raw: Raw document text
        query: Substring to look for
        file_id: Identifier copied onto every hit
        config: Search settings

    Returns:
        Hits in document order; empty for short queries or unparseable text

    Examples:
        >>> [hit.start_offset for hit in search('<a><b>erp_1</b></a>', 'erp_')]
        [6]
    """
    return scan_document(raw, query, file_id, config).hits


def scan_documents(
    sources: Iterable,
    query: str,
    config: Optional[SearchConfig] = None,
) -> List[DocumentScan]:
    """Scan many documents, one :class:`DocumentScan` per selected source.

    Each source needs ``display_name``, ``identifier`` and ``raw_text``
    attributes. Sources whose display name lacks one of
    ``config.file_extensions`` are skipped, and ``identifier`` becomes the
    ``file_id`` of every hit. With ``config.max_workers`` above one,
    documents are scanned in a thread pool; results keep the order of
    ``sources`` either way.
    """
    config = config or SearchConfig()
    if not query or len(query) < config.min_query_length:
        return []

    selected = [
        source for source in sources
        if source.display_name.lower().endswith(config.file_extensions)
    ]

    def _scan(source) -> DocumentScan:
        return scan_document(source.raw_text, query, source.identifier, config)

    if config.max_workers is None or config.max_workers == 1 or len(selected) <= 1:
        return [_scan(source) for source in selected]
    with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
        return list(executor.map(_scan, selected))


def search_documents(
    sources: Iterable,
    query: str,
    config: Optional[SearchConfig] = None,
) -> List[SearchHit]:
    """Search many documents and concatenate their hits in source order."""
    return [hit for scan in scan_documents(sources, query, config) for hit in scan.hits]


def find_occurrences(raw: str, query: str) -> List[int]:
    """Return every case-insensitive start index of ``query`` in ``raw``."""
    if not query:
        return []
    folded = fold_case(raw)
    folded_query = fold_case(query)
    indices: List[int] = []
    index = folded.find(folded_query)
    while index != -1:
        indices.append(index)
        index = folded.find(folded_query, index + 1)
    return indices


def resolve_highlight(
    raw: str, hit: SearchHit, query: str
) -> Optional[Tuple[int, int]]:
    """Choose the span to highlight for a hit.

    A resolved hit is used as-is. For an unresolved one the hit's ordinal
    selects among the raw occurrences of the query, falling back to the
    first occurrence.

    Returns:
        ``(start, length)`` or None when the query does not occur at all
    """
    if hit.resolved:
        return hit.start_offset, hit.length

    occurrences = find_occurrences(raw, query)
    if not occurrences:
        return None
    if hit.ordinal < len(occurrences):
        return occurrences[hit.ordinal], len(query)
    return occurrences[0], len(query)


def hits_by_file(hits: Sequence[SearchHit]) -> dict:
    """Group hits by ``file_id`` preserving first-seen order."""
    grouped: dict = {}
    for hit in hits:
        grouped.setdefault(hit.file_id, []).append(hit)
    return grouped
