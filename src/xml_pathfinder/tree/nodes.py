"""Read-only element view over an lxml tree.

The extractor and the search engine only ever need a tag name, the ordered
attributes, the children and the text of an element. :class:`TreeElement`
exposes exactly that over ``lxml.etree`` elements, reporting names the way
they are written in the document (``prefix:local``) rather than in lxml's
``{uri}local`` Clark notation.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, Union

from lxml import etree

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"


def _is_element(node: object) -> bool:
    # Comments and processing instructions carry a callable as their tag
    return isinstance(getattr(node, "tag", None), str)


def _prefix_for(uri: Optional[str], nsmap: dict) -> Optional[str]:
    if uri is None:
        return None
    if uri == XML_NAMESPACE:
        return "xml"
    for prefix, mapped in nsmap.items():
        if mapped == uri and prefix is not None:
            return prefix
    return None


def qualified_name(name: str, nsmap: dict) -> str:
    """Convert a Clark-notation name to the ``prefix:local`` form."""
    qname = etree.QName(name)
    prefix = _prefix_for(qname.namespace, nsmap)
    return f"{prefix}:{qname.localname}" if prefix else qname.localname


@dataclass(frozen=True)
class TextNode:
    """A run of character data and the element that contains it."""

    value: str
    parent: "TreeElement"


class TreeElement:
    """Read-only view of one element of a parsed document."""

    __slots__ = ("_element",)

    def __init__(self, element: "etree._Element") -> None:
        self._element = element

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TreeElement) and other._element is self._element

    def __hash__(self) -> int:
        return id(self._element)

    def __repr__(self) -> str:
        return f"TreeElement({self.tag_name!r})"

    @property
    def tag_name(self) -> str:
        """Tag name as written, including any namespace prefix."""
        element = self._element
        qname = etree.QName(element)
        if element.prefix:
            return f"{element.prefix}:{qname.localname}"
        return qname.localname

    @property
    def attributes(self) -> List[Tuple[str, str]]:
        """Attribute name/value pairs in document order.

        Namespace declarations made on this element follow the ordinary
        attributes, as ``xmlns``/``xmlns:prefix`` pairs. lxml keeps
        declarations apart from attributes, so where they were written
        among the attributes is not known.
        """
        element = self._element
        pairs = [
            (qualified_name(name, element.nsmap), value)
            for name, value in element.attrib.items()
        ]

        parent = element.getparent()
        inherited = parent.nsmap if parent is not None else {}
        for prefix, uri in element.nsmap.items():
            if inherited.get(prefix) != uri:
                pairs.append((f"xmlns:{prefix}" if prefix else "xmlns", uri))
        return pairs

    def get_attribute(self, name: str) -> Optional[str]:
        """Return the value of the attribute named exactly ``name``."""
        for attr_name, value in self.attributes:
            if attr_name == name:
                return value
        return None

    @property
    def parent(self) -> Optional["TreeElement"]:
        parent = self._element.getparent()
        return TreeElement(parent) if parent is not None else None

    def ancestors(self) -> Iterator["TreeElement"]:
        """Yield the parent, grandparent and so on up to the root."""
        for ancestor in self._element.iterancestors():
            yield TreeElement(ancestor)

    @property
    def children(self) -> List["TreeElement"]:
        """Direct child elements in document order."""
        return [TreeElement(child) for child in self._element if _is_element(child)]

    @property
    def has_children(self) -> bool:
        return any(_is_element(child) for child in self._element)

    def child_nodes(self) -> Iterator[Union["TreeElement", TextNode]]:
        """Yield child elements and text runs in document order.

        Comments and processing instructions are not yielded, but the text
        that follows them is.
        """
        element = self._element
        if element.text:
            yield TextNode(element.text, self)
        for child in element:
            if _is_element(child):
                yield TreeElement(child)
            if child.tail:
                yield TextNode(child.tail, self)

    @property
    def text_content(self) -> str:
        """Concatenated text of the element and all its descendants."""
        return "".join(_iter_text(self._element))

    @property
    def direct_text(self) -> List[str]:
        """Text runs that are immediate children of this element."""
        return [node.value for node in self.child_nodes() if isinstance(node, TextNode)]

    def iter_elements(self) -> Iterator["TreeElement"]:
        """Yield this element and every descendant element in document order."""
        for element in self._element.iter():
            if _is_element(element):
                yield TreeElement(element)

    def opening_tag(self) -> str:
        """Display string of the opening tag with its attributes."""
        rendered = "".join(f' {name}="{value}"' for name, value in self.attributes)
        return f"<{self.tag_name}{rendered}>"


def _iter_text(element: "etree._Element") -> Iterator[str]:
    # Explicit stack: documents may nest deeper than the recursion limit
    if element.text:
        yield element.text
    stack = [(iter(element), None)]
    while stack:
        children, owner = stack[-1]
        child = next(children, None)
        if child is None:
            stack.pop()
            # An element's tail follows its whole subtree
            if owner is not None and owner.tail:
                yield owner.tail
            continue
        if _is_element(child):
            if child.text:
                yield child.text
            stack.append((iter(child), child))
        elif child.tail:
            yield child.tail
