"""Tests for tabular adapters."""

from xml_pathfinder.api.adapters import (
    collect_columns,
    hits_to_dataframe,
    hits_to_records,
    rows_to_csv,
    rows_to_dataframe,
    rows_to_tsv,
)
from xml_pathfinder.search.engine import search


class TestRowAdapters:
    """Test extraction row conversion."""

    def test_collect_columns_first_seen_order(self):
        """Test header order across sparse rows."""
        rows = [{"LINE_ID": "1", "b": "x"}, {"a": "y", "b": "z"}]

        assert collect_columns(rows) == ["LINE_ID", "b", "a"]

    def test_collect_columns_fallback(self):
        """Test the header for rows without keys."""
        assert collect_columns([]) == ["Value"]
        assert collect_columns([{}]) == ["Value"]

    def test_rows_to_tsv(self):
        """Test tab-separated rendering with blank missing cells."""
        rows = [{"a": "1"}, {"b": "2"}]

        assert rows_to_tsv(rows) == "a\tb\n1\t\n\t2"

    def test_rows_to_dataframe(self):
        """Test DataFrame conversion with empty missing cells."""
        frame = rows_to_dataframe([{"a": "1"}, {"a": "2", "b": "x"}])

        assert list(frame.columns) == ["a", "b"]
        assert frame["a"].tolist() == ["1", "2"]
        assert frame["b"].tolist() == ["", "x"]

    def test_rows_to_dataframe_empty(self):
        """Test conversion of no rows."""
        frame = rows_to_dataframe([])

        assert list(frame.columns) == ["Value"]
        assert len(frame) == 0

    def test_rows_to_csv_quotes(self):
        """Test CSV quoting of separators."""
        lines = rows_to_csv([{"a": "1", "b": "x,y"}]).splitlines()

        assert lines == ["a,b", '1,"x,y"']


class TestHitAdapters:
    """Test search hit conversion."""

    def test_hits_to_records(self):
        """Test plain-data records."""
        records = hits_to_records(search("<a>erp</a>", "erp", file_id="f.xml"))

        assert records[0]["file"] == "f.xml"
        assert records[0]["start_offset"] == 3

    def test_hits_to_dataframe(self):
        """Test one row per hit."""
        frame = hits_to_dataframe(search('<a n="erp">erp</a>', "erp", file_id="f.xml"))

        assert frame["kind"].tolist() == ["ATTR_VALUE", "TEXT"]
        assert frame["match"].tolist() == ['<a n="erp">', '<a n="erp">erp</a>']

    def test_hits_to_dataframe_empty(self):
        """Test conversion of no hits."""
        frame = hits_to_dataframe([])

        assert len(frame) == 0
        assert "start_offset" in frame.columns
