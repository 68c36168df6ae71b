"""Lenient markup tokenizer and offset-to-path resolver.

This module scans raw markup directly, without building a tree, to answer
"which tag hierarchy encloses offset N?". It never validates well-formedness,
so truncated or unbalanced documents still produce a useful answer.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, List, Optional

from xml_pathfinder.shared.matching import tags_match

logger = logging.getLogger(__name__)

# Alternatives in priority order: comment, CDATA, processing instruction, tag.
# Only the tag alternative fills the named groups.
_MARKUP_PATTERN = re.compile(
    r"<!--[\s\S]*?-->"
    r"|<!\[CDATA\[[\s\S]*?\]\]>"
    r"|<\?[\s\S]*?\?>"
    r"|<(?P<closing>/?)(?P<name>[\w:.-]+)(?P<attributes>[^>]*?)(?P<self_closing>/?)>"
)


class TagTokenType(Enum):
    """Lexical units recognised in raw markup."""

    OPEN_TAG = auto()                # <name ...> or <name .../>
    CLOSE_TAG = auto()               # </name>
    COMMENT = auto()                 # <!-- ... -->
    CDATA = auto()                   # <![CDATA[ ... ]]>
    PROCESSING_INSTRUCTION = auto()  # <? ... ?>


@dataclass(frozen=True)
class TagToken:
    """A token with its half-open ``[start, end)`` span in the raw text."""

    type: TagTokenType
    start: int
    end: int
    name: Optional[str] = None
    self_closing: bool = False

    @property
    def is_tag(self) -> bool:
        """Check whether the token is an opening or closing tag."""
        return self.type in (TagTokenType.OPEN_TAG, TagTokenType.CLOSE_TAG)

    def contains(self, offset: int) -> bool:
        """Check whether ``offset`` lies strictly inside the token's delimiters."""
        return self.start < offset < self.end


def _classify(match: "re.Match[str]") -> TagToken:
    text = match.group(0)
    name = match.group("name")
    if name is None:
        if text.startswith("<!--"):
            token_type = TagTokenType.COMMENT
        elif text.startswith("<![CDATA["):
            token_type = TagTokenType.CDATA
        else:
            token_type = TagTokenType.PROCESSING_INSTRUCTION
        return TagToken(token_type, match.start(), match.end())

    if match.group("closing"):
        return TagToken(TagTokenType.CLOSE_TAG, match.start(), match.end(), name)
    return TagToken(
        TagTokenType.OPEN_TAG,
        match.start(),
        match.end(),
        name,
        self_closing=bool(match.group("self_closing")),
    )


def iter_tag_tokens(raw: str) -> Iterator[TagToken]:
    """Lazily yield markup tokens of ``raw`` in document order.

    Text between tokens and constructs the pattern does not recognise (such
    as DOCTYPE declarations or a stray ``<``) are skipped silently.
    """
    for match in _MARKUP_PATTERN.finditer(raw):
        yield _classify(match)


class TagPathStack:
    """Stack of currently open tag names at a scan position."""

    def __init__(self) -> None:
        self._names: List[str] = []

    def __len__(self) -> int:
        return len(self._names)

    def __bool__(self) -> bool:
        return bool(self._names)

    @property
    def top(self) -> Optional[str]:
        return self._names[-1] if self._names else None

    def push(self, name: str) -> None:
        self._names.append(name)

    def pop_matching(self, name: str) -> bool:
        """Pop the top entry if it matches ``name`` permissively.

        A non-matching close tag leaves the stack untouched, which is how
        unbalanced markup is tolerated.

        Returns:
            True if an entry was popped
        """
        if self._names and tags_match(self._names[-1], name):
            self._names.pop()
            return True
        return False

    def snapshot(self) -> List[str]:
        """Return a copy of the open tag names, outermost first."""
        return list(self._names)


def resolve_path_at(raw: str, offset: int) -> Optional[List[str]]:
    """Resolve the tag hierarchy enclosing ``offset`` in raw markup.

    When the offset falls inside a tag's own ``<...>`` delimiters, the path
    ends with that tag, whether it is an opening or a closing tag.

    Args:
        raw: Raw document text
        offset: Index into ``raw``

    Returns:
        Tag names from the outermost open element down to the innermost, or
        None if no element encloses the offset

    Examples:
        >>> resolve_path_at('<a><b>text</b></a>', 7)
        ['a', 'b']
        >>> resolve_path_at('<a><b>text</b></a>', 100) is None
        True
    """
    stack = TagPathStack()

    for token in iter_tag_tokens(raw):
        if token.start > offset:
            break
        if not token.is_tag:
            continue

        # Offset is within the tag definition itself
        if token.contains(offset):
            return stack.snapshot() + [token.name]

        if token.type is TagTokenType.CLOSE_TAG:
            if not stack.pop_matching(token.name) and stack:
                logger.debug(
                    "Ignoring unbalanced close tag",
                    extra={"tag": token.name, "open": stack.top, "start": token.start},
                )
        elif not token.self_closing:
            stack.push(token.name)

    return stack.snapshot() if stack else None
