"""Element content extraction: entity decoding interleaved with CDATA passthrough."""

from .extractor import (
    CDATA_END,
    CDATA_START,
    UNMATCHED_END,
    UNMATCHED_START,
    extract_content,
    extract_text,
)

__all__ = [
    "CDATA_END",
    "CDATA_START",
    "UNMATCHED_END",
    "UNMATCHED_START",
    "extract_content",
    "extract_text",
]
