"""Character decoding for raw document bytes.

This module turns file and archive member bytes into the text that all
offsets refer to.
"""

from .decoding import (
    BOMDetector,
    DecodingResult,
    DetectionMethod,
    EncodingDetector,
    XMLDeclarationParser,
    decode_document,
)

__all__ = [
    "BOMDetector",
    "DecodingResult",
    "DetectionMethod",
    "EncodingDetector",
    "XMLDeclarationParser",
    "decode_document",
]
