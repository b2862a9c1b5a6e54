"""Decoding of raw element content.

Element content in report documents is a mixture of entity-escaped text and
CDATA sections, e.g. ``I &lt;/3 XML <![CDATA[a lot]]>``. Plain runs are entity
decoded, CDATA runs are copied verbatim, and the runs are concatenated in
document order.
"""

from typing import Optional

from junit_ingest.character.entities import decode_entities
from junit_ingest.shared.errors import ContentError, EntityError

CDATA_START = b"<![CDATA["
CDATA_END = b"]]>"

UNMATCHED_START = "unmatched CDATA start tag"
UNMATCHED_END = "unmatched CDATA end tag"


def _decode_plain(span: bytes) -> bytes:
    if CDATA_END in span:
        raise ContentError(UNMATCHED_END)
    if b"&" not in span:
        return span

    try:
        return decode_entities(span.decode("utf-8")).encode("utf-8")
    except UnicodeDecodeError as e:
        raise ContentError(f"invalid UTF-8 in element content: {e.reason}") from e
    except EntityError as e:
        raise ContentError(str(e)) from e


def extract_content(raw: Optional[bytes]) -> bytes:
    """Decode raw element content.

    Args:
        raw: Undecoded inner content of an element, UTF-8 encoded

    Returns:
        Decoded content; ``b""`` for empty input

    Raises:
        ContentError: For an unmatched CDATA start or end marker, or a
            malformed entity reference in a plain run

    Examples:
        >>> extract_content(b"I want to say that <![CDATA[I </3 XML]]>")
        b'I want to say that I </3 XML'
    """
    if not raw:
        return b""

    output = bytearray()
    position = 0
    length = len(raw)

    while position < length:
        start = raw.find(CDATA_START, position)
        if start == -1:
            output += _decode_plain(raw[position:])
            break

        output += _decode_plain(raw[position:start])

        body_start = start + len(CDATA_START)
        end = raw.find(CDATA_END, body_start)
        if end == -1:
            raise ContentError(UNMATCHED_START)

        output += raw[body_start:end]
        position = end + len(CDATA_END)

    return bytes(output)


def extract_text(raw: Optional[bytes]) -> str:
    """Decode raw element content into a string."""
    content = extract_content(raw)
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ContentError(f"invalid UTF-8 in element content: {e.reason}") from e
