"""XML Pathfinder.

Lenient, offset-preserving navigation and search over XML documents: find the
tag hierarchy at any offset of raw markup, extract values along a tag path
from possibly malformed documents, and map structural search hits back to
exact raw offsets for highlighting.

Progressive API Disclosure:
- Level 1: Simple functions - resolve_path_at(), extract_by_path(),
  get_unique_keys(), search()
- Level 2: Configured navigator - XMLNavigator class over many documents
"""

__version__ = "0.1.0"
__author__ = "XML Pathfinder Team"

# Progressive API disclosure - Level 1: Simple functions
# Progressive API disclosure - Level 2: Configured navigator
from .api import (
    DocumentSource,
    XMLNavigator,
    extract_by_path,
    get_unique_keys,
    load_sources,
    resolve_path_at,
    search,
)

# Configuration classes for advanced usage
from .shared.config import ExtractionConfig, NavigatorConfig, SearchConfig

# Core result objects for all API levels
from .search.engine import ContextLine, MatchKind, SearchHit

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions (progressive disclosure entry point)
    "resolve_path_at",
    "extract_by_path",
    "get_unique_keys",
    "search",

    # Level 2: Configured navigator and document sources
    "XMLNavigator",
    "DocumentSource",
    "load_sources",

    # Result objects
    "ContextLine",
    "MatchKind",
    "SearchHit",

    # Configuration classes for advanced usage
    "ExtractionConfig",
    "NavigatorConfig",
    "SearchConfig",
]
