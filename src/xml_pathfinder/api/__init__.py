"""Public API for XML navigation, extraction and search.

This module provides the progressive disclosure API: boundary functions for
single documents, the configured XMLNavigator class, document sources and
tabular adapters.
"""

from .adapters import (
    collect_columns,
    hits_to_dataframe,
    hits_to_records,
    rows_to_csv,
    rows_to_dataframe,
    rows_to_tsv,
)
from .navigator import (
    XMLNavigator,
    extract_by_path,
    get_unique_keys,
    resolve_path_at,
    search,
)
from .sources import (
    DocumentSource,
    SourceError,
    iter_sources,
    load_sources,
)

__all__ = [
    "DocumentSource",
    "SourceError",
    "XMLNavigator",
    "collect_columns",
    "extract_by_path",
    "get_unique_keys",
    "hits_to_dataframe",
    "hits_to_records",
    "iter_sources",
    "load_sources",
    "resolve_path_at",
    "rows_to_csv",
    "rows_to_dataframe",
    "rows_to_tsv",
    "search",
]
