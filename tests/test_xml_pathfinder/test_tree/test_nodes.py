"""Tests for the read-only element view."""

from xml_pathfinder.tree.document import parse_tree
from xml_pathfinder.tree.nodes import TextNode, TreeElement


class TestTreeElementNames:
    """Test tag and attribute naming."""

    def test_plain_names(self):
        """Test elements without namespaces."""
        root = parse_tree('<a z="1" b="2" m="3"/>')

        assert root.tag_name == "a"
        assert root.attributes == [("z", "1"), ("b", "2"), ("m", "3")]
        assert root.get_attribute("b") == "2"
        assert root.get_attribute("missing") is None

    def test_prefixed_names(self):
        """Test that prefixes are reported as written."""
        root = parse_tree('<ns:Foo xmlns:ns="urn:x" ns:attr="v"><ns:Bar/></ns:Foo>')

        assert root.tag_name == "ns:Foo"
        assert root.attributes == [("ns:attr", "v"), ("xmlns:ns", "urn:x")]
        assert root.children[0].tag_name == "ns:Bar"
        assert root.children[0].attributes == []

    def test_default_namespace(self):
        """Test that default-namespace elements have bare names."""
        root = parse_tree('<root xmlns="urn:d"><item/></root>')

        assert root.tag_name == "root"
        assert root.attributes == [("xmlns", "urn:d")]
        assert root.children[0].tag_name == "item"

    def test_declarations_follow_attributes(self):
        """Test that namespace declarations are listed after ordinary attributes."""
        root = parse_tree('<a b="zzq" xmlns="urn:zzq"/>')

        assert root.attributes == [("b", "zzq"), ("xmlns", "urn:zzq")]
        assert root.opening_tag() == '<a b="zzq" xmlns="urn:zzq">'

    def test_opening_tag(self):
        """Test display of the opening tag."""
        root = parse_tree("<a k='v' n=\"2\"/>")

        assert root.opening_tag() == '<a k="v" n="2">'
        assert parse_tree("<b/>").opening_tag() == "<b>"


class TestTreeElementContent:
    """Test text and structure access."""

    def test_text_content_skips_comments(self):
        """Test concatenated descendant text."""
        root = parse_tree("<a>x<!-- c -->y<b>z</b>w</a>")

        assert root.text_content == "xyzw"
        assert root.direct_text == ["x", "y", "w"]

    def test_entities_are_decoded(self):
        """Test that text is reported decoded."""
        assert parse_tree("<a>A &amp; B &#67;</a>").text_content == "A & B C"

    def test_child_nodes_order(self):
        """Test interleaving of text runs and elements."""
        root = parse_tree("<a>one<b/>two<c/></a>")

        kinds = [
            node.value if isinstance(node, TextNode) else node.tag_name
            for node in root.child_nodes()
        ]

        assert kinds == ["one", "b", "two", "c"]

    def test_parent_and_ancestors(self):
        """Test upward navigation."""
        root = parse_tree("<a><b><c/></b></a>")
        c = root.children[0].children[0]

        assert c.parent.tag_name == "b"
        assert [ancestor.tag_name for ancestor in c.ancestors()] == ["b", "a"]
        assert root.parent is None

    def test_has_children(self):
        """Test child element detection ignoring comments."""
        assert not parse_tree("<a><!-- c -->text</a>").has_children
        assert parse_tree("<a><b/></a>").has_children

    def test_iter_elements(self):
        """Test document-order traversal."""
        root = parse_tree("<a><b><c/></b><!-- x --><d/></a>")

        assert [element.tag_name for element in root.iter_elements()] == ["a", "b", "c", "d"]

    def test_wrappers_compare_by_element(self):
        """Test equality and hashing of separate wrappers."""
        root = parse_tree("<a><b/></a>")

        assert root.children[0] == root.children[0]
        assert len({root.children[0], root.children[0]}) == 1
        assert root != root.children[0]
        assert isinstance(root.children[0], TreeElement)

    def test_tail_follows_nested_subtree(self):
        """Test that tail text comes after the whole preceding subtree."""
        root = parse_tree("<a>x<b>y<c>z</c>w</b>v</a>")

        assert root.text_content == "xyzwv"
        assert root.children[0].text_content == "yzw"

    def test_text_content_of_deep_nesting(self):
        """Test text collection below the interpreter recursion limit."""
        depth = 1200
        root = parse_tree("<e>" * depth + "erp_x" + "</e>" * depth)

        assert root.text_content == "erp_x"
