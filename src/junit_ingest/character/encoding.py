"""Encoding detection and strict decoding of report documents.

Detection runs in sequence: byte order mark, XML declaration, and finally the
UTF-8 default. Unlike a recovering parser, decoding is strict: a report that
is not valid in its detected encoding is rejected with a ParseError.
"""

import codecs
import re
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, Optional

from junit_ingest.shared.errors import ParseError

DEFAULT_ENCODING = "utf-8"

# An XML declaration must appear at the very start of the document
DECLARATION_SCAN_LIMIT = 256

WIDE_ENCODING_PREFIXES = ("utf-16", "utf-32")


class DetectionMethod(Enum):
    """Enumeration of encoding detection methods."""
    BOM = "bom"
    XML_DECLARATION = "xml_declaration"
    CALLER = "caller"
    DEFAULT = "default"


@dataclass
class EncodingResult:
    """Detected encoding of a byte document.

    Attributes:
        encoding: Canonical Python codec name
        method: Detection method used
        bom_length: Number of leading bytes that make up the byte order mark
    """
    encoding: str
    method: DetectionMethod
    bom_length: int = 0


@dataclass
class DecodedDocument:
    """Text of a document together with how it was decoded."""
    text: str
    encoding: str
    method: DetectionMethod


class BOMDetector:
    """Byte Order Mark (BOM) detection for all major encodings."""

    BOM_PATTERNS: ClassVar[Dict[bytes, str]] = {
        codecs.BOM_UTF8: "utf-8",
        codecs.BOM_UTF16_LE: "utf-16-le",
        codecs.BOM_UTF16_BE: "utf-16-be",
        codecs.BOM_UTF32_LE: "utf-32-le",
        codecs.BOM_UTF32_BE: "utf-32-be",
    }

    def detect(self, data: bytes) -> Optional[EncodingResult]:
        """Detect encoding based on BOM.

        Args:
            data: Byte data to analyze

        Returns:
            EncodingResult if BOM detected, None otherwise
        """
        if not data:
            return None

        # UTF-32 LE shares its first two bytes with UTF-16 LE, so the
        # longer patterns are checked first
        for bom_bytes, encoding in sorted(
            self.BOM_PATTERNS.items(), key=lambda x: len(x[0]), reverse=True
        ):
            if data.startswith(bom_bytes):
                return EncodingResult(
                    encoding=encoding,
                    method=DetectionMethod.BOM,
                    bom_length=len(bom_bytes),
                )

        return None


class XMLDeclarationParser:
    """Parser for XML encoding declarations."""

    XML_DECLARATION_PATTERN = re.compile(
        rb'^\s*<\?xml\s[^>]*?encoding\s*=\s*["\']([A-Za-z][A-Za-z0-9._-]*)["\']',
    )

    def parse_declaration(self, data: bytes) -> Optional[EncodingResult]:
        """Parse encoding from XML declaration.

        Args:
            data: Byte data to analyze

        Returns:
            EncodingResult if a declaration names an encoding, None otherwise

        Raises:
            ParseError: If the declared encoding is unknown to Python
        """
        match = self.XML_DECLARATION_PATTERN.match(data[:DECLARATION_SCAN_LIMIT])
        if not match:
            return None

        declared = match.group(1).decode("ascii")
        try:
            encoding = codecs.lookup(declared).name
        except LookupError as e:
            raise ParseError(f"unsupported encoding: {declared}") from e

        # A declaration readable as ASCII cannot be in a 16 or 32-bit encoding
        if encoding.startswith(WIDE_ENCODING_PREFIXES):
            raise ParseError(
                f"declared encoding {declared} does not match the document bytes"
            )

        return EncodingResult(encoding=encoding, method=DetectionMethod.XML_DECLARATION)


class EncodingDetector:
    """Detects the encoding of a report document."""

    def __init__(self) -> None:
        self.bom_detector = BOMDetector()
        self.declaration_parser = XMLDeclarationParser()

    def detect(self, data: bytes, encoding: Optional[str] = None) -> EncodingResult:
        """Detect encoding using BOM, then XML declaration, then the default.

        A caller-supplied ``encoding`` replaces the declaration lookup.
        """
        bom_result = self.bom_detector.detect(data)
        if bom_result:
            return bom_result
        if encoding:
            try:
                name = codecs.lookup(encoding).name
            except LookupError as e:
                raise ParseError(f"unsupported encoding: {encoding}") from e
            return EncodingResult(encoding=name, method=DetectionMethod.CALLER)
        return (
            self.declaration_parser.parse_declaration(data)
            or EncodingResult(encoding=DEFAULT_ENCODING, method=DetectionMethod.DEFAULT)
        )


def decode_document(data: bytes, encoding: Optional[str] = None) -> DecodedDocument:
    """Decode raw document bytes into text.

    Args:
        data: Raw document bytes
        encoding: Known encoding of ``data``; the XML declaration is then ignored

    Returns:
        DecodedDocument with the BOM stripped

    Raises:
        ParseError: If the bytes are not valid in the detected encoding
    """
    result = EncodingDetector().detect(data, encoding)
    payload = data[result.bom_length:]

    try:
        text = payload.decode(result.encoding)
    except UnicodeDecodeError as e:
        raise ParseError(
            f"invalid byte encoding: {result.encoding} cannot decode "
            f"byte 0x{payload[e.start]:02x}",
            offset=e.start + result.bom_length,
        ) from e

    return DecodedDocument(text=text, encoding=result.encoding, method=result.method)
