"""Tabular and plain-data views of extraction rows and search hits.

Extraction rows are sparse: each row only holds the keys its element had.
These adapters line them up under a shared header so they can be pasted into
a spreadsheet, written as CSV or analysed with pandas.
"""

import csv
import io
from typing import Any, Dict, List, Sequence

from xml_pathfinder.search.engine import SearchHit

DEFAULT_HEADER = "Value"


def collect_columns(rows: Sequence[Dict[str, str]]) -> List[str]:
    """Return the union of row keys in first-seen order.

    Falls back to a single ``Value`` column when there are no keys at all.
    """
    columns: Dict[str, None] = {}
    for row in rows:
        for key in row:
            columns.setdefault(key, None)
    return list(columns) or [DEFAULT_HEADER]


def rows_to_dataframe(rows: Sequence[Dict[str, str]]):
    """Convert extraction rows to a pandas DataFrame.

    Missing cells are empty strings rather than NaN, because every extracted
    value is text.

    Returns:
        pandas.DataFrame with one column per distinct key
    """
    import pandas as pd

    columns = collect_columns(rows)
    return pd.DataFrame(
        [[row.get(column, "") for column in columns] for row in rows],
        columns=columns,
        dtype=object,
    )


def rows_to_tsv(rows: Sequence[Dict[str, str]]) -> str:
    """Render rows as tab-separated text with a header line.

    Examples:
        >>> rows_to_tsv([{'a': '1'}, {'b': '2'}])
        'a\\tb\\n1\\t\\n\\t2'
    """
    columns = collect_columns(rows)
    lines = ["\t".join(columns)]
    for row in rows:
        lines.append("\t".join(row.get(column, "") for column in columns))
    return "\n".join(lines)


def rows_to_csv(rows: Sequence[Dict[str, str]]) -> str:
    """Render rows as CSV through pandas, quoting as needed."""
    buffer = io.StringIO()
    rows_to_dataframe(rows).to_csv(buffer, index=False, quoting=csv.QUOTE_MINIMAL)
    return buffer.getvalue()


def hits_to_records(hits: Sequence[SearchHit]) -> List[Dict[str, Any]]:
    """Convert search hits to plain dictionaries for JSON output."""
    return [hit.to_dict() for hit in hits]


def hits_to_dataframe(hits: Sequence[SearchHit]):
    """Flatten search hits to one DataFrame row per hit."""
    import pandas as pd

    records = []
    for hit in hits:
        match_line = hit.match_line
        records.append({
            "file": hit.file_id,
            "kind": hit.kind.name,
            "start_offset": hit.start_offset,
            "length": hit.length,
            "ordinal": hit.ordinal,
            "match": match_line.text if match_line else "",
        })
    return pd.DataFrame(
        records,
        columns=["file", "kind", "start_offset", "length", "ordinal", "match"],
    )
