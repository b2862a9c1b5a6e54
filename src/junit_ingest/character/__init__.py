"""Character processing layer for JUnit report ingestion.

This module provides encoding detection, strict byte decoding and entity
reference decoding.
"""

from .encoding import (
    DecodedDocument,
    DetectionMethod,
    EncodingDetector,
    EncodingResult,
    decode_document,
)
from .entities import (
    PREDEFINED_ENTITIES,
    decode_entities,
    is_valid_xml_char,
)

__all__ = [
    # Modules
    "encoding",
    "entities",
    # Encoding detection
    "DecodedDocument",
    "DetectionMethod",
    "EncodingDetector",
    "EncodingResult",
    "decode_document",
    # Entity decoding
    "PREDEFINED_ENTITIES",
    "decode_entities",
    "is_valid_xml_char",
]
