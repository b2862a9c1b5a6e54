"""Entity reference decoding for text and attribute values.

Only the five predefined XML entities and numeric character references are
supported. There is no DTD processing, so any other named entity is an error.
"""

import re
from typing import Dict, List, Tuple

from junit_ingest.shared.errors import EntityError

PREDEFINED_ENTITIES: Dict[str, str] = {
    "lt": "<",
    "gt": ">",
    "amp": "&",
    "apos": "'",
    "quot": '"',
}

# XML 1.0 valid character ranges
XML_VALID_RANGES: List[Tuple[int, int]] = [
    (0x0009, 0x0009),  # Tab
    (0x000A, 0x000A),  # Line Feed
    (0x000D, 0x000D),  # Carriage Return
    (0x0020, 0xD7FF),  # Basic Multilingual Plane excluding surrogates
    (0xE000, 0xFFFD),
    (0x10000, 0x10FFFF),  # Supplementary planes
]

ENTITY_PATTERN = re.compile(r"&(#[xX][0-9a-fA-F]+|#[0-9]+|[A-Za-z_][A-Za-z0-9._-]*);")


def is_valid_xml_char(char_code: int) -> bool:
    """Check if a code point may appear in an XML 1.0 document."""
    return any(start <= char_code <= end for start, end in XML_VALID_RANGES)


def _resolve(reference: str, index: int) -> str:
    if reference.startswith("#"):
        digits = reference[1:]
        if digits[:1] in ("x", "X"):
            char_code = int(digits[1:], 16)
        else:
            char_code = int(digits, 10)
        if not is_valid_xml_char(char_code):
            raise EntityError(
                f"invalid character reference: &{reference};", index
            )
        return chr(char_code)

    try:
        return PREDEFINED_ENTITIES[reference]
    except KeyError:
        raise EntityError(f"unknown entity reference: &{reference};", index) from None


def decode_entities(text: str) -> str:
    """Decode entity and character references in ``text``.

    Args:
        text: Raw text as it appears in the document

    Returns:
        Text with every reference replaced by the character it stands for

    Raises:
        EntityError: For unknown entities, invalid character references or
            an ``&`` that does not start a well-formed reference
    """
    if "&" not in text:
        return text

    parts: List[str] = []
    position = 0
    while True:
        amp = text.find("&", position)
        if amp == -1:
            parts.append(text[position:])
            break

        parts.append(text[position:amp])
        match = ENTITY_PATTERN.match(text, amp)
        if not match:
            raise EntityError("invalid entity reference: missing name or ';'", amp)

        parts.append(_resolve(match.group(1), amp))
        position = match.end()

    return "".join(parts)
