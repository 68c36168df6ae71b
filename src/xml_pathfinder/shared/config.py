"""Configuration classes for XML navigation, extraction and search.

This module provides validated configuration objects for the extraction and
search components together with an immutable top-level configuration that can
be serialized, overridden and loaded from JSON files.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

# Synthetic element used to wrap fragments during recovery parsing
FRAGMENT_ROOT_TAG = "__XML_Fragment_Root__"

VALID_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class ExtractionConfig:
    """Configuration for path matching and value extraction."""

    enable_recovery: bool = True
    fragment_root_tag: str = FRAGMENT_ROOT_TAG

    # Positional enrichment: identifier attribute of an enclosing line marker
    line_marker_tag: str = "LINE"
    line_id_attribute: str = "ID"
    line_id_key: str = "LINE_ID"

    # Positional enrichment: named child text of an enclosing tax marker
    authority_marker_tag: str = "TAX"
    authority_child_tag: str = "AUTHORITY_NAME"
    authority_key: str = "AUTHORITY_NAME"

    value_key: str = "Value"
    field_separator: str = "/"

    def __post_init__(self) -> None:
        """Validate extraction configuration."""
        if not self.fragment_root_tag:
            raise ValueError("fragment_root_tag cannot be empty")
        if not self.value_key:
            raise ValueError("value_key cannot be empty")
        if not self.field_separator:
            raise ValueError("field_separator cannot be empty")
        if not self.line_id_key or not self.authority_key:
            raise ValueError("enrichment keys cannot be empty")


@dataclass
class SearchConfig:
    """Configuration for the offset-reconciling search engine."""

    min_query_length: int = 2
    inline_text_limit: int = 50
    max_workers: Optional[int] = None
    file_extensions: Tuple[str, ...] = (".xml",)

    def __post_init__(self) -> None:
        """Validate search configuration."""
        if self.min_query_length < 1:
            raise ValueError("min_query_length must be >= 1")
        if self.inline_text_limit < 0:
            raise ValueError("inline_text_limit must be >= 0")
        if self.max_workers is not None and self.max_workers <= 0:
            raise ValueError("max_workers must be > 0 or None")
        if not self.file_extensions:
            raise ValueError("file_extensions cannot be empty")
        self.file_extensions = tuple(ext.lower() for ext in self.file_extensions)


@dataclass
class GlobalConfig:
    """Settings that apply across all components."""

    logging_level: str = "WARNING"
    log_recovered_parses: bool = True

    def __post_init__(self) -> None:
        """Validate global configuration."""
        if self.logging_level not in VALID_LOGGING_LEVELS:
            raise ValueError(f"logging_level must be one of {VALID_LOGGING_LEVELS}")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


_COMPONENTS = ("extraction", "search", "global_")


@dataclass(frozen=True)
class NavigatorConfig:
    """Immutable configuration for all navigator components.

    Thread-safe due to the frozen dataclass, so one instance can be shared by
    every worker of a multi-document search.
    """

    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete configuration."""
        try:
            self.extraction.__post_init__()
            self.search.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        if self.extraction.fragment_root_tag in (
            self.extraction.line_marker_tag,
            self.extraction.authority_marker_tag,
        ):
            raise ConfigValidationError(
                "fragment_root_tag collides with an enrichment marker tag",
                field_name="extraction.fragment_root_tag",
                suggestions=["Use a tag name that cannot occur in documents"],
            )

    def override(self, **kwargs: Any) -> "NavigatorConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override, using ``component__field`` for
                component settings

        Returns:
            New NavigatorConfig instance with overrides applied

        Example:
            >>> config = NavigatorConfig().override(search__min_query_length=3)
            >>> config.search.min_query_length
            3
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=list(_COMPONENTS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        for key, value in nested_overrides.items():
            if key in _COMPONENTS:
                try:
                    new_fields[key] = replace(getattr(self, key), **value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            else:
                new_fields[key] = value

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            if isinstance(obj, (list, tuple, set)):
                return [_dataclass_to_dict(item) for item in obj]
            if isinstance(obj, dict):
                return {key: _dataclass_to_dict(value) for key, value in obj.items()}
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NavigatorConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that a typo in a config file does not
        silently fall back to a default.
        """
        component_types = {
            "extraction": ExtractionConfig,
            "search": SearchConfig,
            "global_": GlobalConfig,
        }
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in component_types:
                component_cls = component_types[key]
                unknown = set(value) - set(component_cls.__dataclass_fields__)
                if unknown:
                    raise ConfigValidationError(
                        f"Unknown {key} settings: {sorted(unknown)}",
                        field_name=key,
                    )
                if "file_extensions" in value:
                    value = dict(value, file_extensions=tuple(value["file_extensions"]))
                try:
                    values[key] = component_cls(**value)
                except ValueError as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            elif key in ("name", "description"):
                values[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration key: {key}", field_name=key
                )
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "NavigatorConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "NavigatorConfig":
        """Load configuration from a JSON file."""
        path = Path(config_path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Could not read config file {path}: {e}") from e
        return cls.from_json(text)

    # Preset factory methods
    @classmethod
    def default(cls) -> "NavigatorConfig":
        """Create the default configuration: recovery on, two-character queries."""
        return cls(name="default")

    @classmethod
    def strict(cls) -> "NavigatorConfig":
        """Create a preset that only accepts documents that parse cleanly."""
        return cls(
            extraction=ExtractionConfig(enable_recovery=False),
            name="strict",
            description="Extraction without recovery parsing of malformed input",
        )

    @classmethod
    def permissive(cls) -> "NavigatorConfig":
        """Create a preset for interactive exploration of large archives."""
        return cls(
            search=SearchConfig(min_query_length=1, inline_text_limit=120),
            global_=GlobalConfig(log_recovered_parses=False),
            name="permissive",
            description="Single-character queries and longer inline match lines",
        )
