"""Permissive tag-name comparison shared by every navigation component.

The raw-text path resolver, the tree path matcher and the key collector all
decide "is this the tag the caller named?" through :func:`tags_match`, so the
three never disagree about what a match is.
"""

from typing import Optional


def local_name(tag: str) -> str:
    """Return the tag name without a namespace prefix.

    Everything up to and including the first colon is dropped, so
    ``"ns:Foo"`` becomes ``"Foo"`` and ``"Foo"`` is returned unchanged.
    """
    prefix, colon, local = tag.partition(":")
    return local if colon else prefix


def namespace_prefix(tag: str) -> Optional[str]:
    """Return the namespace prefix of a qualified tag name, if any."""
    prefix, colon, _ = tag.partition(":")
    return prefix if colon else None


def tags_match(actual: str, expected: str) -> bool:
    """Compare two tag names permissively.

    The names match when they are equal, equal ignoring case, or when their
    local names (namespace prefix stripped) are equal ignoring case. The
    comparison is symmetric.

    Args:
        actual: Tag name as found in the document
        expected: Tag name supplied by the caller

    Returns:
        True if the two names denote the same tag

    Examples:
        >>> tags_match("ns:Foo", "foo")
        True
        >>> tags_match("Foo", "Bar")
        False
    """
    if actual == expected:
        return True
    if actual.lower() == expected.lower():
        return True
    return local_name(actual).lower() == local_name(expected).lower()


def fold_case(text: str) -> str:
    """Lower-case ``text`` without changing its length.

    ``str.lower`` expands a few characters (``"İ"`` becomes two code points),
    which would shift every later index. Such characters are kept as they are
    so that an index into the folded text is also an index into ``text``.
    """
    lowered = text.lower()
    if len(lowered) == len(text):
        return lowered
    return "".join(
        char.lower() if len(char.lower()) == 1 else char
        for char in text
    )
