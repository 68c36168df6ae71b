"""Tests for structural search and raw-offset reconciliation."""

import pytest

from xml_pathfinder.api.sources import DocumentSource
from xml_pathfinder.search.engine import (
    UNRESOLVED_OFFSET,
    ContextLine,
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
from xml_pathfinder.shared.config import SearchConfig


class TestOffsetCursor:
    """Test monotonic offset location."""

    def test_query_found_within_target(self):
        """Test the primary lookup through the structural string."""
        cursor = OffsetCursor("<a>xx ERP yy</a>")

        assert cursor.locate("xx erp yy", "erp") == 6
        assert cursor.position == 7

    def test_cursor_only_moves_forward(self):
        """Test that repeated lookups find successive occurrences."""
        cursor = OffsetCursor("erp erp")

        assert cursor.locate("erp", "erp") == 0
        assert cursor.locate("erp", "erp") == 4
        assert cursor.locate("erp", "erp") == UNRESOLVED_OFFSET

    def test_fallback_to_query(self):
        """Test lookup when the structural string is not in the raw text."""
        cursor = OffsetCursor("<a>Tom &amp; erp</a>")

        assert cursor.locate("tom & erp", "erp") == 13

    def test_query_missing_after_target(self):
        """Test that the cursor still advances past the target block."""
        cursor = OffsetCursor("<x>abc</x>")

        assert cursor.locate("abc", "zz") == UNRESOLVED_OFFSET
        assert cursor.position == 4


class TestSearch:
    """Test single-document search."""

    def test_text_hit(self):
        """Test a match inside element text."""
        raw = "<a><b>erp_1</b></a>"

        hits = search(raw, "erp_", file_id="doc.xml")

        assert len(hits) == 1
        hit = hits[0]
        assert hit.start_offset == 6
        assert hit.length == 4
        assert raw[hit.start_offset:hit.start_offset + hit.length] == "erp_"
        assert hit.kind is MatchKind.TEXT
        assert hit.ordinal == 0
        assert hit.file_id == "doc.xml"
        assert hit.context_lines == [
            ContextLine("<a>", 0),
            ContextLine("<b>erp_1</b>", 1, is_match=True),
        ]

    def test_tag_hit_with_inline_text(self):
        """Test a tag-name match on a short leaf element."""
        raw = '<root><group id="g"><erpItem>short</erpItem></group></root>'

        hits = search(raw, "erp")

        assert len(hits) == 1
        assert hits[0].kind is MatchKind.TAG
        assert hits[0].start_offset == raw.index("erpItem")
        assert hits[0].context_lines == [
            ContextLine("<root>", 0),
            ContextLine('<group id="g">', 1),
            ContextLine("<erpItem>short</erpItem>", 2, is_match=True),
        ]

    def test_tag_hit_with_long_text_shows_opening_only(self):
        """Test that long element text is not inlined."""
        raw = "<a><erpLong>" + "x" * 60 + "</erpLong></a>"

        hit = search(raw, "erp")[0]

        assert hit.match_line == ContextLine("<erpLong>", 1, is_match=True)

    def test_root_tag_hit(self):
        """Test a match on a root element with children."""
        hit = search("<erp><b>t</b></erp>", "erp")[0]

        assert hit.context_lines == [ContextLine("<erp>", 0, is_match=True)]

    def test_attribute_name_hit(self):
        """Test a match in an attribute name."""
        raw = '<a><b data-erp="x">t</b></a>'

        hit = search(raw, "erp")[0]

        assert hit.kind is MatchKind.ATTR_NAME
        assert hit.start_offset == raw.index("erp")
        assert hit.match_line.text == '<b data-erp="x">'

    def test_attribute_value_hit(self):
        """Test a case-insensitive match in an attribute value."""
        raw = '<a code="ERP_1"/>'

        hit = search(raw, "erp_")[0]

        assert hit.kind is MatchKind.ATTR_VALUE
        assert raw[hit.start_offset:hit.start_offset + 4] == "ERP_"

    def test_attribute_value_before_namespace_declaration(self):
        """Test that an attribute written before xmlns keeps its own offset."""
        hits = search('<a b="zzq" xmlns="urn:zzq"/>', "zzq")

        assert len(hits) == 1
        assert hits[0].kind is MatchKind.ATTR_VALUE
        assert hits[0].start_offset == 6

    def test_one_hit_per_element(self):
        """Test that tag and attribute matches on one element collapse."""
        hits = search('<erp erp="erp">x</erp>', "erp")

        assert [hit.kind for hit in hits] == [MatchKind.TAG]

    def test_element_and_its_text(self):
        """Test that an element and its text are separate hits."""
        hits = search("<erp>erp</erp>", "erp")

        assert [hit.start_offset for hit in hits] == [1, 5]
        assert [hit.ordinal for hit in hits] == [0, 1]
        assert [hit.kind for hit in hits] == [MatchKind.TAG, MatchKind.TEXT]

    def test_deeply_nested_document(self):
        """Test a document nested past the interpreter recursion limit."""
        depth = 1200
        raw = "<e>" * depth + "erp_x" + "</e>" * depth

        hits = search(raw, "erp_")

        assert len(hits) == 1
        assert hits[0].kind is MatchKind.TEXT
        assert hits[0].start_offset == 3 * depth
        assert len(hits[0].context_lines) == 3

    def test_offsets_follow_document_order(self):
        """Test that offsets increase and point at the query."""
        raw = '<r><i n="erp1">erp2</i><erp3/></r>'

        hits = search(raw, "erp")
        offsets = [hit.start_offset for hit in hits]

        assert offsets == sorted(offsets)
        assert len(hits) == 3
        for offset in offsets:
            assert raw[offset:offset + 3] == "erp"

    def test_case_insensitive_text(self):
        """Test mixed-case query against mixed-case text."""
        raw = "<a>Hello World</a>"

        hit = search(raw, "WORLD")[0]

        assert hit.start_offset == raw.index("World")
        assert hit.length == 5

    def test_namespaced_tag(self):
        """Test that prefixed tags are searched as written."""
        raw = '<ns:Root xmlns:ns="urn:x"><ns:Item>v</ns:Item></ns:Root>'

        hits = search(raw, "item")

        assert len(hits) == 1
        assert hits[0].start_offset == raw.index("Item")

    def test_breadcrumb_stops_at_grandparent(self):
        """Test that at most two ancestors are shown."""
        hit = search("<a><b><c><d>erp</d></c></b></a>", "erp")[0]

        assert [(line.text, line.indent) for line in hit.context_lines] == [
            ("<b>", 0), ("<c>", 1), ("<d>erp</d>", 2),
        ]

    def test_entity_in_text_uses_fallback(self):
        """Test lookup when decoded text differs from the markup."""
        raw = "<a>Tom &amp; Jerry erp</a>"

        hit = search(raw, "erp")[0]

        assert hit.start_offset == raw.index("erp")

    @pytest.mark.parametrize("raw,query", [
        ("<a>A&amp;B</a>", "a&b"),
        ("<a>&#101;rp_x</a>", "erp"),
    ])
    def test_unlocatable_hit_is_kept(self, raw, query):
        """Test that hits without a raw position are still reported."""
        hits = search(raw, query)

        assert len(hits) == 1
        assert hits[0].start_offset == UNRESOLVED_OFFSET
        assert not hits[0].resolved

    def test_short_query(self):
        """Test that queries below the minimum length find nothing."""
        assert search("<a>e</a>", "e") == []
        assert search("<a>e</a>", "") == []

    def test_minimum_length_is_configurable(self):
        """Test a one-character minimum."""
        hits = search("<a>e</a>", "e", config=SearchConfig(min_query_length=1))

        assert len(hits) == 1

    def test_unparseable_document(self):
        """Test that search does not attempt recovery."""
        assert search("<a>A & B erp</a>", "erp") == []
        assert search("<a><b></a>", "erp") == []

    def test_to_dict(self):
        """Test plain-data conversion."""
        record = search("<a>erp</a>", "erp", file_id="f.xml")[0].to_dict()

        assert record["file"] == "f.xml"
        assert record["kind"] == "TEXT"
        assert record["start_offset"] == 3
        assert record["context"] == [{"text": "<a>erp</a>", "indent": 0, "is_match": True}]


class TestSearchDocuments:
    """Test multi-document search."""

    @pytest.fixture
    def sources(self):
        return [
            DocumentSource("a.xml", "a.xml", "<a>erp</a>"),
            DocumentSource("b.txt", "b.txt", "<a>erp</a>"),
            DocumentSource("c.XML", "c.XML", "<c><erp/>erp</c>"),
            DocumentSource("d.xml", "d.xml", "<d>none</d>"),
        ]

    def test_hits_in_source_order(self, sources):
        """Test concatenation and extension filtering."""
        hits = search_documents(sources, "erp")

        assert [hit.file_id for hit in hits] == ["a.xml", "c.XML", "c.XML"]
        assert [hit.ordinal for hit in hits] == [0, 0, 1]

    def test_parallel_matches_sequential(self, sources):
        """Test that a thread pool keeps the same result order."""
        sequential = search_documents(sources, "erp")
        parallel = search_documents(sources, "erp", SearchConfig(max_workers=4))

        assert [hit.to_dict() for hit in parallel] == [hit.to_dict() for hit in sequential]

    def test_short_query(self, sources):
        """Test that a short query searches nothing."""
        assert search_documents(sources, "e") == []

    def test_hits_by_file(self, sources):
        """Test grouping in first-seen order."""
        grouped = hits_by_file(search_documents(sources, "erp"))

        assert list(grouped) == ["a.xml", "c.XML"]
        assert len(grouped["c.XML"]) == 2


class TestScanDocument:
    """Test per-document scan results."""

    def test_parsed_document(self):
        """Test hits and file ID of a parsed document."""
        scan = scan_document("<a>erp</a>", "erp", file_id="f.xml")

        assert scan.parsed
        assert scan.error is None
        assert scan.file_id == "f.xml"
        assert [hit.start_offset for hit in scan.hits] == [3]

    def test_unparseable_document_reports_error(self):
        """Test that a parser failure is kept apart from an empty result."""
        scan = scan_document("<a>A & erp_ B</a>", "erp_", file_id="bad.xml")

        assert not scan.parsed
        assert scan.error
        assert scan.hits == []

    def test_short_query_is_not_an_error(self):
        """Test that a short query scans nothing without failing."""
        scan = scan_document("<a>A & B</a>", "e")

        assert scan.parsed
        assert scan.hits == []

    def test_scan_documents_flags_each_source(self):
        """Test one scan per selected source in source order."""
        sources = [
            DocumentSource("good.xml", "good.xml", "<a>erp_1</a>"),
            DocumentSource("bad.xml", "bad.xml", "<a>A & erp_ B</a>"),
        ]

        scans = scan_documents(sources, "erp_")

        assert [scan.file_id for scan in scans] == ["good.xml", "bad.xml"]
        assert [scan.parsed for scan in scans] == [True, False]

    def test_file_id_is_source_identifier(self):
        """Test that same-named archive members stay distinguishable."""
        sources = [
            DocumentSource("x.xml", "a/x.xml", "<r>erp</r>", archive="data.zip"),
            DocumentSource("x.xml", "b/x.xml", "<r>erp</r>", archive="data.zip"),
        ]

        hits = search_documents(sources, "erp")

        assert [hit.file_id for hit in hits] == ["data.zip!a/x.xml", "data.zip!b/x.xml"]


class TestResolveHighlight:
    """Test highlight span selection."""

    def _hit(self, offset, ordinal):
        return SearchHit([], offset, 3, ordinal, MatchKind.TEXT)

    def test_resolved_hit(self):
        """Test that a resolved offset is used as-is."""
        assert resolve_highlight("<a>erp</a>", self._hit(3, 0), "erp") == (3, 3)

    def test_unresolved_uses_ordinal(self):
        """Test ordinal selection among raw occurrences."""
        raw = "xx erp yy ERP"

        assert resolve_highlight(raw, self._hit(UNRESOLVED_OFFSET, 1), "erp") == (10, 3)

    def test_unresolved_ordinal_out_of_range(self):
        """Test fallback to the first occurrence."""
        raw = "xx erp yy ERP"

        assert resolve_highlight(raw, self._hit(UNRESOLVED_OFFSET, 5), "erp") == (3, 3)

    def test_query_absent(self):
        """Test that no span is produced when the query never occurs."""
        assert resolve_highlight("<a/>", self._hit(UNRESOLVED_OFFSET, 0), "erp") is None

    def test_find_occurrences(self):
        """Test overlapping, case-insensitive occurrences."""
        assert find_occurrences("aAaa", "aa") == [0, 1, 2]
        assert find_occurrences("abc", "") == []
