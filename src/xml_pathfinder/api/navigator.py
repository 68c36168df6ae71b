"""Navigator API with progressive disclosure.

Level 1 is the four boundary functions, re-exported from their components.
Level 2 is :class:`XMLNavigator`, which carries a configuration and a
correlation ID, reports unparseable and recovered documents in the log, and
works across many documents at once.
"""

import time
import uuid
from typing import Iterable, List, Optional, Sequence, Tuple

from xml_pathfinder.api.sources import DocumentSource
from xml_pathfinder.search.engine import (
    DocumentScan,
    SearchHit,
    resolve_highlight,
    scan_document,
    scan_documents,
    search,
)
from xml_pathfinder.shared import NavigatorConfig, get_logger
from xml_pathfinder.tokenization import resolve_path_at
from xml_pathfinder.tree import (
    ExtractionRow,
    ParsedDocument,
    extract_by_path,
    extract_from_document,
    get_unique_keys,
    parse_document,
    unique_keys_from_document,
)

# Constants for API operations
MS_PER_SECOND = 1000

__all__ = [
    "XMLNavigator",
    "extract_by_path",
    "get_unique_keys",
    "resolve_path_at",
    "search",
]


class XMLNavigator:
    """Configured navigator over one or many documents.

    Examples:
        >>> navigator = XMLNavigator()
        >>> navigator.extract('<A><B>1</B></A>', ['A', 'B'])
        [{'Value': '1'}]
    """

    def __init__(
        self,
        config: Optional[NavigatorConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the navigator.

        Args:
            config: Navigator configuration; defaults are used when omitted
            correlation_id: ID attached to every log record; generated if omitted
        """
        self.config = config or NavigatorConfig.default()
        self.correlation_id = correlation_id or str(uuid.uuid4())
        self._logger = get_logger(__name__, self.correlation_id, "navigator")

    def _parse(self, raw: str, label: Optional[str]) -> ParsedDocument:
        extraction = self.config.extraction
        document = parse_document(
            raw, extraction.enable_recovery, extraction.fragment_root_tag
        )
        log = self._logger.bind(document=label)
        if not document.success:
            log.warning("Document could not be parsed", extra={"error": document.error})
        elif document.recovered and self.config.global_.log_recovered_parses:
            log.warning("Document parsed after recovery", extra={"error": document.error})
        for entry in document.diagnostics:
            log.debug(entry.message, extra={"severity": entry.severity.name})
        return document

    def path_at(self, raw: str, offset: int) -> Optional[List[str]]:
        """Resolve the tag hierarchy enclosing ``offset``."""
        return resolve_path_at(raw, offset)

    def extract(
        self,
        raw: str,
        path: Sequence[str],
        fields: Optional[Sequence[str]] = None,
        label: Optional[str] = None,
    ) -> List[ExtractionRow]:
        """Extract one row per element matching ``path``."""
        document = self._parse(raw, label)
        rows = extract_from_document(document, path, fields, self.config.extraction)
        self._logger.debug(
            "Extraction complete",
            extra={"document": label, "path": list(path), "row_count": len(rows)},
        )
        return rows

    def unique_keys(
        self, raw: str, path: Sequence[str], label: Optional[str] = None
    ) -> List[str]:
        """List descendant field paths available under ``path``."""
        document = self._parse(raw, label)
        return unique_keys_from_document(document, path, self.config.extraction)

    def _report_scan(self, scan: DocumentScan) -> List[SearchHit]:
        if not scan.parsed:
            self._logger.bind(document=scan.file_id).warning(
                "Document could not be searched", extra={"error": scan.error}
            )
        return scan.hits

    def search(
        self, raw: str, query: str, file_id: Optional[str] = None
    ) -> List[SearchHit]:
        """Search one document."""
        return self._report_scan(scan_document(raw, query, file_id, self.config.search))

    def extract_sources(
        self,
        sources: Iterable[DocumentSource],
        path: Sequence[str],
        fields: Optional[Sequence[str]] = None,
    ) -> List[Tuple[DocumentSource, List[ExtractionRow]]]:
        """Extract from every source, keeping sources that produced no rows."""
        return [
            (source, self.extract(source.raw_text, path, fields, source.identifier))
            for source in sources
        ]

    def unique_keys_sources(
        self, sources: Iterable[DocumentSource], path: Sequence[str]
    ) -> List[str]:
        """Union of available field paths across sources, sorted."""
        keys = set()
        for source in sources:
            keys.update(self.unique_keys(source.raw_text, path, source.identifier))
        return sorted(keys)

    def search_sources(
        self, sources: Sequence[DocumentSource], query: str
    ) -> List[SearchHit]:
        """Search many documents, concatenating hits in source order."""
        start_time = time.time()
        scans = scan_documents(sources, query, self.config.search)
        hits = [hit for scan in scans for hit in self._report_scan(scan)]
        self._logger.info(
            "Search complete",
            extra={
                "query_length": len(query),
                "document_count": len(sources),
                "unparsed_count": sum(1 for scan in scans if not scan.parsed),
                "hit_count": len(hits),
                "unresolved_count": sum(1 for hit in hits if not hit.resolved),
                "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
            },
        )
        return hits

    def highlight(
        self, raw: str, hit: SearchHit, query: str
    ) -> Optional[Tuple[int, int]]:
        """Span to highlight for ``hit`` in ``raw``."""
        return resolve_highlight(raw, hit, query)
