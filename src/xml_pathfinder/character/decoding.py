"""Encoding detection for raw document bytes.

Documents arrive as bytes from files and archive members. They are decoded
once, up front, so that every offset produced by the navigator refers to the
same decoded text. Detection cascades from byte order marks to the XML
declaration to a UTF-8 check, and finally falls back to Latin-1, which can
decode any byte sequence.
"""

import codecs
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, List, Optional

# Only the head of a document is inspected for a declaration
DECLARATION_SCAN_BYTES = 1024

FALLBACK_ENCODING = "latin-1"


class DetectionMethod(Enum):
    """Enumeration of encoding detection methods."""
    BOM = "bom"
    XML_DECLARATION = "xml_declaration"
    UTF8_VALIDATION = "utf8_validation"
    FALLBACK = "fallback"


@dataclass
class DecodingResult:
    """Decoded text together with how its encoding was chosen."""
    text: str
    encoding: str
    method: DetectionMethod
    issues: List[str] = field(default_factory=list)


class BOMDetector:
    """Byte Order Mark (BOM) detection for all major encodings."""

    BOM_PATTERNS: ClassVar[Dict[bytes, str]] = {
        b"\xef\xbb\xbf": "utf-8",
        b"\xff\xfe": "utf-16-le",
        b"\xfe\xff": "utf-16-be",
        b"\xff\xfe\x00\x00": "utf-32-le",
        b"\x00\x00\xfe\xff": "utf-32-be",
    }

    def detect(self, data: bytes) -> Optional[str]:
        """Return the encoding announced by a BOM, if any."""
        # Longer patterns first so UTF-32 LE is not mistaken for UTF-16 LE
        for bom_bytes, encoding in sorted(
            self.BOM_PATTERNS.items(), key=lambda item: len(item[0]), reverse=True
        ):
            if data.startswith(bom_bytes):
                return encoding
        return None


class XMLDeclarationParser:
    """Parser for XML encoding declarations."""

    XML_DECLARATION_PATTERN = re.compile(
        rb'<\?xml\s+.*?encoding\s*=\s*["\']([^"\']+)["\'].*?\?>',
        re.IGNORECASE
    )

    def parse_declaration(self, data: bytes) -> Optional[str]:
        """Return the declared encoding if it names a known codec."""
        match = self.XML_DECLARATION_PATTERN.search(data[:DECLARATION_SCAN_BYTES])
        if not match:
            return None

        declared = match.group(1).decode("ascii", errors="ignore").strip().lower()
        try:
            return codecs.lookup(declared).name
        except LookupError:
            return None


class EncodingDetector:
    """Decode document bytes with a never-fail cascade."""

    def __init__(self) -> None:
        self.bom_detector = BOMDetector()
        self.xml_parser = XMLDeclarationParser()

    def decode(self, data: bytes) -> DecodingResult:
        """Decode ``data`` to text.

        Args:
            data: Raw document bytes

        Returns:
            DecodingResult whose ``text`` never starts with a BOM character
        """
        issues: List[str] = []

        bom_encoding = self.bom_detector.detect(data)
        if bom_encoding:
            text = data.decode(bom_encoding, errors="replace")
            return DecodingResult(text.lstrip("\ufeff"), bom_encoding, DetectionMethod.BOM)

        declared = self.xml_parser.parse_declaration(data)
        if declared:
            try:
                return DecodingResult(
                    data.decode(declared), declared, DetectionMethod.XML_DECLARATION
                )
            except UnicodeDecodeError as e:
                issues.append(f"Declared encoding {declared} does not match content: {e}")

        try:
            return DecodingResult(
                data.decode("utf-8"), "utf-8", DetectionMethod.UTF8_VALIDATION, issues
            )
        except UnicodeDecodeError as e:
            issues.append(f"Content is not valid UTF-8: {e}")

        return DecodingResult(
            data.decode(FALLBACK_ENCODING), FALLBACK_ENCODING, DetectionMethod.FALLBACK, issues
        )


def decode_document(data: bytes) -> DecodingResult:
    """Decode raw document bytes with the default detector."""
    return EncodingDetector().decode(data)
