"""Structured logging for navigation passes over many documents.

Every record emitted through :class:`CorrelationLogger` carries the component
that produced it, the correlation ID of the navigator pass and, when bound,
the document being processed, so one extraction or search run can be followed
through interleaved log output.
"""

import logging
import sys
from typing import Any, Dict, MutableMapping, Optional, Tuple

LOG_FORMAT = "%(asctime)s %(levelname)s [%(component)s] %(message)s"


class CorrelationLogger(logging.LoggerAdapter):
    """Logger adapter that stamps component, correlation ID and document onto records."""

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None,
        document: Optional[str] = None,
    ) -> None:
        """Initialize correlation logger.

        Args:
            name: Logger name (typically __name__)
            correlation_id: ID shared by every record of one navigator pass
            component: Component name; defaults to the last part of ``name``
            document: Identifier of the document being processed, if any
        """
        context: Dict[str, Any] = {
            "component": component or name.rsplit(".", 1)[-1],
            "correlation_id": correlation_id,
        }
        if document is not None:
            context["document"] = document
        super().__init__(logging.getLogger(name), context)

    @property
    def correlation_id(self) -> Optional[str]:
        return self.extra["correlation_id"]

    @property
    def component(self) -> str:
        return self.extra["component"]

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        # Call-site extras win over the bound context
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs

    def bind(
        self,
        correlation_id: Optional[str] = None,
        document: Optional[str] = None,
    ) -> "CorrelationLogger":
        """Return a logger with the same name and component and a narrower context.

        Examples:
            >>> log = get_logger("xml_pathfinder.search", "run-1")
            >>> log.bind(document="a.xml").extra["document"]
            'a.xml'
        """
        return CorrelationLogger(
            self.logger.name,
            correlation_id or self.correlation_id,
            self.component,
            document if document is not None else self.extra.get("document"),
        )


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Get a correlation-aware logger instance.

    Args:
        name: Logger name (typically __name__)
        correlation_id: Optional correlation ID for request tracking
        component: Component name for structured logging

    Returns:
        CorrelationLogger instance
    """
    return CorrelationLogger(name, correlation_id, component)


class _ComponentDefault(logging.Filter):
    # Records from plain module loggers have no component field
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "component"):
            record.component = record.name.rsplit(".", 1)[-1]
        return True


class _StderrHandler(logging.StreamHandler):
    # Looks up sys.stderr on every write so a redirected stream is honoured
    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value) -> None:
        pass


def configure_logging(level: str = "INFO") -> None:
    """Send package log records to stderr at ``level``.

    Only the ``xml_pathfinder`` logger is configured; calling this again
    replaces the handler instead of adding another one.
    """
    package_logger = logging.getLogger("xml_pathfinder")
    for handler in list(package_logger.handlers):
        if getattr(handler, "_xml_pathfinder", False):
            package_logger.removeHandler(handler)

    handler = _StderrHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(_ComponentDefault())
    handler._xml_pathfinder = True  # type: ignore[attr-defined]
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
