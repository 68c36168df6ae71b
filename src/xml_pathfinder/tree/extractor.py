"""Tag-path matching and value extraction over parsed documents.

An element matches a tag path when its own tag matches the last path entry
and its ancestors, read upwards, account for every remaining entry. Matched
elements are turned into flat rows of strings, optionally restricted to a
caller-selected set of descendant fields.
"""

import logging
from typing import Dict, Iterator, List, Optional, Sequence, Set

from xml_pathfinder.shared.config import ExtractionConfig
from xml_pathfinder.shared.matching import tags_match
from xml_pathfinder.tree.document import ParsedDocument, parse_document
from xml_pathfinder.tree.nodes import TreeElement

logger = logging.getLogger(__name__)

ExtractionRow = Dict[str, str]


def _matches_hierarchy(
    document: ParsedDocument, element: TreeElement, path: Sequence[str]
) -> bool:
    remaining = len(path) - 2
    for ancestor in element.ancestors():
        if remaining < 0:
            break
        if document.is_fragment_root(ancestor):
            continue
        if not tags_match(ancestor.tag_name, path[remaining]):
            return False
        remaining -= 1
    return remaining < 0


def iter_path_matches(
    document: ParsedDocument, path: Sequence[str]
) -> Iterator[TreeElement]:
    """Yield elements whose ancestor chain follows ``path``, in document order.

    Args:
        document: Parsed document; a failed parse yields nothing
        path: Tag names from an ancestor down to the target tag (last)

    Yields:
        Each element that matches the full hierarchy
    """
    if not path or not document.success:
        return

    target = path[-1]
    for element in document.iter_elements():
        if document.is_fragment_root(element):
            continue
        if tags_match(element.tag_name, target) and _matches_hierarchy(
            document, element, path
        ):
            yield element


def _enrich(element: TreeElement, config: ExtractionConfig) -> ExtractionRow:
    row: ExtractionRow = {}

    for ancestor in element.ancestors():
        if ancestor.tag_name == config.line_marker_tag:
            line_id = ancestor.get_attribute(config.line_id_attribute)
            if line_id:
                row[config.line_id_key] = line_id
                break

    for ancestor in element.ancestors():
        if ancestor.tag_name == config.authority_marker_tag:
            for child in ancestor.children:
                if child.tag_name == config.authority_child_tag:
                    authority = child.text_content
                    if authority:
                        row[config.authority_key] = authority
                    break
            # Only the nearest marker is consulted
            break

    return row


def _field_value(element: TreeElement, field: str, separator: str) -> str:
    current: Optional[TreeElement] = element
    for part in field.split(separator):
        if current is None:
            return ""
        current = next(
            (child for child in current.children if tags_match(child.tag_name, part)),
            None,
        )

    if current is None:
        return ""
    if not current.has_children:
        return current.text_content

    # Mixed content: keep the element's own text, not its descendants'
    return " ".join(text.strip() for text in current.direct_text if text.strip())


def _row_for(
    element: TreeElement,
    fields: Optional[Sequence[str]],
    config: ExtractionConfig,
) -> ExtractionRow:
    row = _enrich(element, config)

    if fields:
        for field in fields:
            row[field] = _field_value(element, field, config.field_separator)
        return row

    children = element.children
    if children:
        for child in children:
            row[child.tag_name] = child.text_content
    else:
        row[config.value_key] = element.text_content
    return row


def extract_from_document(
    document: ParsedDocument,
    path: Sequence[str],
    fields: Optional[Sequence[str]] = None,
    config: Optional[ExtractionConfig] = None,
) -> List[ExtractionRow]:
    """Extract one row per element of an already parsed document matching ``path``."""
    config = config or ExtractionConfig()
    return [_row_for(element, fields, config) for element in iter_path_matches(document, path)]


def extract_by_path(
    raw: str,
    path: Sequence[str],
    fields: Optional[Sequence[str]] = None,
    config: Optional[ExtractionConfig] = None,
) -> List[ExtractionRow]:
    """Extract values of every element matching a tag path.

    Without ``fields`` a row maps each direct child's tag name to its text,
    or holds the element's own text under ``"Value"`` when it has no child
    elements. With ``fields`` a row maps each requested tag name or
    ``/``-separated descendant path to its value, or to ``""`` when the field
    does not exist. Rows are enriched with ``LINE_ID`` and ``AUTHORITY_NAME``
    when the element sits inside the corresponding marker elements.

    Args:
        raw: Raw document text, possibly malformed
        path: Tag names from an ancestor down to the target tag
        fields: Optional tag names or descendant paths to extract
        config: Extraction settings

    Returns:
        One row per matched element; empty if the document cannot be parsed

    Examples:
        >>> extract_by_path('<A><B>1</B><B>2</B></A>', ['A', 'B'])
        [{'Value': '1'}, {'Value': '2'}]
    """
    config = config or ExtractionConfig()
    document = parse_document(raw, config.enable_recovery, config.fragment_root_tag)
    if not document.success:
        logger.debug("Extraction skipped unparseable document", extra={"error": document.error})
        return []
    return extract_from_document(document, path, fields, config)


def _collect_descendant_paths(
    element: TreeElement, separator: str, keys: Set[str]
) -> None:
    pending = [(element, "")]
    while pending:
        current, prefix = pending.pop()
        for child in current.children:
            child_path = f"{prefix}{separator}{child.tag_name}" if prefix else child.tag_name
            keys.add(child_path)
            pending.append((child, child_path))


def unique_keys_from_document(
    document: ParsedDocument,
    path: Sequence[str],
    config: Optional[ExtractionConfig] = None,
) -> List[str]:
    """Collect sorted descendant tag paths below every element matching ``path``."""
    config = config or ExtractionConfig()
    keys: Set[str] = set()
    for element in iter_path_matches(document, path):
        _collect_descendant_paths(element, config.field_separator, keys)
    return sorted(keys)


def get_unique_keys(
    raw: str,
    path: Sequence[str],
    config: Optional[ExtractionConfig] = None,
) -> List[str]:
    """List the descendant field paths available under a tag path.

    Examples:
        >>> get_unique_keys('<r><i><a>1</a><b><c/></b></i></r>', ['i'])
        ['a', 'b', 'b/c']
    """
    config = config or ExtractionConfig()
    document = parse_document(raw, config.enable_recovery, config.fragment_root_tag)
    return unique_keys_from_document(document, path, config)
