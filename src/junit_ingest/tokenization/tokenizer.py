"""Strict XML tokenization for report documents.

This module converts decoded document text into a flat stream of markup
tokens. The tokenizer is strict: the first syntax error raises a ParseError
carrying the line and column of the offending markup. Entity references are
validated here, decoded in attribute values and left untouched in text so
that the tree builder can hand raw content to the content extractor.
"""

import re
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional

from junit_ingest.character.entities import decode_entities
from junit_ingest.shared.errors import EntityError, ParseError
from junit_ingest.shared.logging import get_logger

# Markup delimiters
COMMENT_START = "<!--"
COMMENT_END = "-->"
CDATA_START = "<![CDATA["
CDATA_END = "]]>"
PI_START = "<?"
PI_END = "?>"
DOCTYPE_START = "<!DOCTYPE"

XML_WHITESPACE = " \t\r\n"

NAME_PATTERN = re.compile(
    r"[A-Za-z_:\u0080-\U0010FFFF][A-Za-z0-9._:\-\u0080-\U0010FFFF]*"
)


class TokenType(Enum):
    """XML token types produced by the tokenizer."""

    START_TAG = auto()               # <name attr="value">
    END_TAG = auto()                 # </name>
    EMPTY_TAG = auto()               # <name attr="value"/>
    TEXT = auto()                    # Character content between tags
    CDATA = auto()                   # <![CDATA[ ... ]]>
    COMMENT = auto()                 # <!-- ... -->
    PROCESSING_INSTRUCTION = auto()  # <?target ... ?>
    DOCTYPE = auto()                 # <!DOCTYPE ...>


@dataclass
class TokenPosition:
    """Position information for XML tokens."""

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")


@dataclass
class Token:
    """A single XML token.

    Attributes:
        type: Kind of token
        value: Qualified name for tags, inner text for everything else
        position: Where the token starts in the caller's input
        raw: Exact source text of the token
        attributes: Entity-decoded attribute values (tags only)
    """

    type: TokenType
    value: str
    position: TokenPosition
    raw: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)

    @property
    def is_tag(self) -> bool:
        """Check if this token opens or closes an element."""
        return self.type in (TokenType.START_TAG, TokenType.END_TAG, TokenType.EMPTY_TAG)


@dataclass
class TokenizationResult:
    """Result of tokenization with basic statistics."""

    tokens: List[Token]
    processing_time: float = 0.0
    character_count: int = 0

    @property
    def token_count(self) -> int:
        """Get the total number of tokens."""
        return len(self.tokens)

    def count(self, token_type: TokenType) -> int:
        """Count tokens of the given type."""
        return sum(1 for token in self.tokens if token.type == token_type)


class XMLTokenizer:
    """Strict XML tokenizer.

    The tokenizer scans the text left to right, dispatching on the markup
    that starts at the current index. Positions reported in tokens and errors
    are relative to ``origin``, which lets callers tokenize text that has been
    wrapped in a synthetic prefix without exposing that prefix in diagnostics.
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        """Initialize the XML tokenizer.

        Args:
            correlation_id: Optional correlation ID for tracking requests
        """
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "xml_tokenizer")
        self._reset_state("", 0, 0)

    def _reset_state(self, text: str, origin: int, end: int) -> None:
        self.text = text
        self.origin = origin
        self.end = end
        self.index = 0
        self.tokens: List[Token] = []
        # Incremental line tracking, positions are requested in increasing order
        self._line = 1
        self._line_start = origin
        self._scanned = origin

    def tokenize(
        self, text: str, origin: int = 0, end: Optional[int] = None
    ) -> TokenizationResult:
        """Tokenize document text into XML tokens.

        Args:
            text: Decoded document text
            origin: Index in ``text`` that corresponds to line 1, column 1
            end: Index in ``text`` where the caller's input ends; a tag still
                open there is reported as unterminated

        Returns:
            TokenizationResult with tokens in document order

        Raises:
            ParseError: On the first syntax error
        """
        start_time = time.time()
        self._reset_state(text, origin, len(text) if end is None else end)

        self.logger.debug(
            "Starting tokenization", extra={"char_count": len(text)}
        )

        length = len(text)
        while self.index < length:
            if text[self.index] == "<":
                self._scan_markup()
            else:
                self._scan_text()

        result = TokenizationResult(
            tokens=self.tokens,
            processing_time=time.time() - start_time,
            character_count=length,
        )

        self.logger.debug(
            "Tokenization completed",
            extra={
                "token_count": result.token_count,
                "processing_time": result.processing_time,
            }
        )
        return result

    def position(self, index: int) -> TokenPosition:
        """Translate an index in the scanned text into a caller-relative position."""
        # Anything before the origin is reported as the start of the input
        index = max(index, self.origin)
        if index < self._scanned:
            # Out-of-order request, recount from the origin
            self._line, self._line_start, self._scanned = 1, self.origin, self.origin

        newlines = self.text.count("\n", self._scanned, index)
        if newlines:
            self._line += newlines
            self._line_start = self.text.rfind("\n", self._scanned, index) + 1
        self._scanned = index

        return TokenPosition(
            line=self._line,
            column=index - self._line_start + 1,
            offset=index - self.origin,
        )

    def _error(self, message: str, index: int) -> ParseError:
        position = self.position(index)
        return ParseError(
            message, line=position.line, column=position.column, offset=position.offset
        )

    def _emit(
        self,
        token_type: TokenType,
        value: str,
        start: int,
        end: int,
        attributes: Optional[Dict[str, str]] = None,
    ) -> None:
        self.tokens.append(Token(
            type=token_type,
            value=value,
            position=self.position(start),
            raw=self.text[start:end],
            attributes=attributes or {},
        ))
        self.index = end

    def _scan_text(self) -> None:
        start = self.index
        end = self.text.find("<", start)
        if end == -1:
            end = len(self.text)

        value = self.text[start:end]
        try:
            decode_entities(value)
        except EntityError as e:
            raise self._error(str(e), start + e.index) from e

        self._emit(TokenType.TEXT, value, start, end)

    def _scan_markup(self) -> None:
        text, start = self.text, self.index

        if text.startswith(COMMENT_START, start):
            self._scan_delimited(TokenType.COMMENT, COMMENT_START, COMMENT_END, "comment")
        elif text.startswith(CDATA_START, start):
            self._scan_delimited(TokenType.CDATA, CDATA_START, CDATA_END, "CDATA section")
        elif text.startswith(DOCTYPE_START, start):
            self._scan_doctype()
        elif text.startswith("<!", start):
            raise self._error("invalid markup declaration", start)
        elif text.startswith(PI_START, start):
            self._scan_processing_instruction()
        elif text.startswith("</", start):
            self._scan_end_tag()
        else:
            self._scan_start_tag()

    def _scan_delimited(
        self, token_type: TokenType, opener: str, closer: str, description: str
    ) -> None:
        start = self.index
        body_start = start + len(opener)
        body_end = self.text.find(closer, body_start)
        if body_end == -1:
            raise self._error(f"unterminated {description}", start)

        self._emit(
            token_type, self.text[body_start:body_end], start, body_end + len(closer)
        )

    def _scan_processing_instruction(self) -> None:
        start = self.index
        target = NAME_PATTERN.match(self.text, start + len(PI_START))
        if not target:
            raise self._error("invalid processing instruction target", start)

        body_end = self.text.find(PI_END, target.end())
        if body_end == -1:
            raise self._error("unterminated processing instruction", start)

        self._emit(
            TokenType.PROCESSING_INSTRUCTION,
            self.text[start + len(PI_START):body_end],
            start,
            body_end + len(PI_END),
        )

    def _scan_doctype(self) -> None:
        start = self.index
        depth = 0
        quote: Optional[str] = None

        for index in range(start + len(DOCTYPE_START), len(self.text)):
            char = self.text[index]
            if quote:
                if char == quote:
                    quote = None
            elif char in ('"', "'"):
                quote = char
            elif char == "[":
                depth += 1
            elif char == "]":
                depth -= 1
            elif char == ">" and depth <= 0:
                self._emit(
                    TokenType.DOCTYPE,
                    self.text[start + len(DOCTYPE_START):index].strip(),
                    start,
                    index + 1,
                )
                return

        raise self._error("unterminated DOCTYPE declaration", start)

    def _scan_end_tag(self) -> None:
        start = self.index
        name = NAME_PATTERN.match(self.text, start + 2)
        if not name:
            raise self._error("invalid close tag: expected element name after '</'", start)

        index = self._skip_whitespace(name.end())
        if index >= self.end:
            raise self._error(f"unterminated close tag </{name.group()}>", start)
        if self.text[index] != ">":
            raise self._error(
                f"invalid character {self.text[index]!r} in close tag </{name.group()}>",
                index,
            )

        self._emit(TokenType.END_TAG, name.group(), start, index + 1)

    def _scan_start_tag(self) -> None:
        start = self.index
        name = NAME_PATTERN.match(self.text, start + 1)
        if not name:
            found = self.text[start + 1] if start + 1 < self.end else "end of input"
            raise self._error(f"invalid tag start: unexpected {found!r} after '<'", start)

        tag = name.group()
        attributes: Dict[str, str] = {}
        index = name.end()

        while True:
            after_name = index
            index = self._skip_whitespace(index)
            if index >= self.end:
                raise self._error(f"unterminated tag <{tag}>", start)

            char = self.text[index]
            if char == ">":
                self._emit(TokenType.START_TAG, tag, start, index + 1, attributes)
                return
            if char == "/":
                if not self.text.startswith("/>", index):
                    raise self._error(f"expected '/>' to close tag <{tag}>", index)
                self._emit(TokenType.EMPTY_TAG, tag, start, index + 2, attributes)
                return
            if index == after_name:
                raise self._error(
                    f"invalid character {char!r} in tag <{tag}>", index
                )

            index = self._scan_attribute(tag, index, attributes)

    def _scan_attribute(self, tag: str, index: int, attributes: Dict[str, str]) -> int:
        """Scan one ``name="value"`` pair and return the index after it."""
        name = NAME_PATTERN.match(self.text, index)
        if not name:
            raise self._error(
                f"invalid attribute name in tag <{tag}>", index
            )

        attribute = name.group()
        index = self._skip_whitespace(name.end())
        if not self.text.startswith("=", index):
            raise self._error(f"attribute {attribute!r} has no value", index)

        index = self._skip_whitespace(index + 1)
        quote = self.text[index:index + 1]
        if quote not in ('"', "'"):
            raise self._error(f"value of attribute {attribute!r} must be quoted", index)

        value_start = index + 1
        value_end = self.text.find(quote, value_start)
        if value_end == -1:
            raise self._error(f"unterminated value for attribute {attribute!r}", index)

        raw_value = self.text[value_start:value_end]
        if "<" in raw_value:
            raise self._error(
                f"'<' is not allowed in value of attribute {attribute!r}",
                value_start + raw_value.index("<"),
            )

        try:
            # Duplicate names resolve last-write-wins
            attributes[attribute] = decode_entities(raw_value)
        except EntityError as e:
            raise self._error(str(e), value_start + e.index) from e

        return value_end + 1

    def _skip_whitespace(self, index: int) -> int:
        length = len(self.text)
        while index < length and self.text[index] in XML_WHITESPACE:
            index += 1
        return index
