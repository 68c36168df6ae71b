"""Parse boundary with a single recovery pass for malformed input.

lxml is strict: a bare ampersand, a second root element or a declaration in
the middle of a concatenated file all make it reject the document. Instead of
giving up, :func:`parse_document` retries once on a sanitized copy wrapped in
a synthetic root element, and reports which of the two parses succeeded.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional

from lxml import etree

from xml_pathfinder.shared.config import FRAGMENT_ROOT_TAG
from xml_pathfinder.shared.result import DiagnosticEntry, DiagnosticSeverity
from xml_pathfinder.tree.nodes import TreeElement

logger = logging.getLogger(__name__)

_XML_DECLARATION = re.compile(r"<\?xml.*?\?>")
_BARE_AMPERSAND = re.compile(
    r"&(?!(?:amp|lt|gt|quot|apos|#\d+|#x[a-f\d]+);)", re.IGNORECASE
)

_COMPONENT = "parse_boundary"


class ParseMode(Enum):
    """How a document tree was obtained."""

    DIRECT = auto()     # Raw text parsed as-is
    RECOVERED = auto()  # Parsed after sanitizing and wrapping in a fragment root
    FAILED = auto()     # No tree could be built


@dataclass
class ParsedDocument:
    """Outcome of parsing one raw document."""

    mode: ParseMode
    root: Optional[TreeElement] = None
    fragment_root_tag: Optional[str] = None
    error: Optional[str] = None
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.root is not None

    @property
    def recovered(self) -> bool:
        return self.mode is ParseMode.RECOVERED

    def is_fragment_root(self, element: TreeElement) -> bool:
        """Check whether ``element`` is the synthetic wrapper added by recovery."""
        return (
            self.fragment_root_tag is not None
            and element.parent is None
            and element.tag_name == self.fragment_root_tag
        )

    def iter_elements(self):
        """Yield every element in document order, wrapper included."""
        if self.root is None:
            return iter(())
        return self.root.iter_elements()


def _make_parser() -> "etree.XMLParser":
    # No DTD loading, no entity expansion, no network: only what is in the text
    return etree.XMLParser(
        encoding="utf-8",
        resolve_entities=False,
        no_network=True,
        load_dtd=False,
        huge_tree=True,
    )


def parse_tree(raw: str) -> TreeElement:
    """Parse ``raw`` strictly.

    Raises:
        etree.XMLSyntaxError: If the text is not well-formed
        ValueError: If the text cannot be handed to the parser at all
    """
    root = etree.fromstring(raw.encode("utf-8"), _make_parser())
    if root is None:
        raise ValueError("Parser produced no root element")
    return TreeElement(root)


def sanitize_fragment(raw: str, fragment_root_tag: str = FRAGMENT_ROOT_TAG) -> str:
    """Prepare malformed text for a second parse attempt.

    XML declarations are removed, ampersands that do not start a predefined
    entity or a character reference are escaped, and the result is wrapped in
    ``fragment_root_tag`` so that several top-level elements form one tree.

    Examples:
        >>> sanitize_fragment('<?xml version="1.0"?><a>A & B</a>', 'w')
        '<w><a>A &amp; B</a></w>'
    """
    cleaned = _XML_DECLARATION.sub("", raw)
    cleaned = _BARE_AMPERSAND.sub("&amp;", cleaned)
    return f"<{fragment_root_tag}>{cleaned}</{fragment_root_tag}>"


def parse_document(
    raw: str,
    enable_recovery: bool = True,
    fragment_root_tag: str = FRAGMENT_ROOT_TAG,
) -> ParsedDocument:
    """Parse ``raw`` into a tree, recovering once from malformed input.

    Never raises for bad input: parser errors become a ``FAILED`` outcome.

    Args:
        raw: Raw document text
        enable_recovery: Retry on a sanitized, wrapped copy after a failure
        fragment_root_tag: Tag name of the synthetic wrapper element

    Returns:
        ParsedDocument tagged with the parse mode that succeeded
    """
    try:
        return ParsedDocument(ParseMode.DIRECT, root=parse_tree(raw))
    except (etree.XMLSyntaxError, ValueError) as e:
        first_error = str(e)

    diagnostics = [
        DiagnosticEntry(
            severity=DiagnosticSeverity.WARNING,
            message=f"Direct parse failed: {first_error}",
            component=_COMPONENT,
        )
    ]
    if not enable_recovery:
        return ParsedDocument(ParseMode.FAILED, error=first_error, diagnostics=diagnostics)

    logger.debug("Retrying parse with fragment wrapper", extra={"error": first_error})
    try:
        root = parse_tree(sanitize_fragment(raw, fragment_root_tag))
    except (etree.XMLSyntaxError, ValueError) as e:
        diagnostics.append(
            DiagnosticEntry(
                severity=DiagnosticSeverity.ERROR,
                message=f"Recovery parse failed: {e}",
                component=_COMPONENT,
            )
        )
        return ParsedDocument(ParseMode.FAILED, error=str(e), diagnostics=diagnostics)

    return ParsedDocument(
        ParseMode.RECOVERED,
        root=root,
        fragment_root_tag=fragment_root_tag,
        error=first_error,
        diagnostics=diagnostics,
    )
