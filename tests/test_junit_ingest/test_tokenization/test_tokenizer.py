"""Tests for the strict XML tokenizer."""

from typing import List

import pytest

from junit_ingest.shared.errors import ParseError
from junit_ingest.tokenization import (
    Token,
    TokenPosition,
    TokenType,
    XMLTokenizer,
)


def _tokens(text: str) -> List[Token]:
    return XMLTokenizer().tokenize(text).tokens


def _types(text: str) -> List[TokenType]:
    return [token.type for token in _tokens(text)]


class TestTokenPosition:
    """Test position validation."""

    def test_valid_position(self) -> None:
        """Test creating a valid position."""
        position = TokenPosition(line=1, column=1, offset=0)

        assert (position.line, position.column, position.offset) == (1, 1, 0)

    @pytest.mark.parametrize(
        "line, column, offset, message",
        [
            (0, 1, 0, "Line number must be >= 1"),
            (1, 0, 0, "Column number must be >= 1"),
            (1, 1, -1, "Offset must be >= 0"),
        ],
    )
    def test_invalid_position(self, line: int, column: int, offset: int, message: str) -> None:
        """Test that out-of-range values are rejected."""
        with pytest.raises(ValueError, match=message):
            TokenPosition(line=line, column=column, offset=offset)


class TestXMLTokenizer:
    """Test token production for well-formed input."""

    def test_empty_input(self) -> None:
        """Test that empty text has no tokens."""
        result = XMLTokenizer().tokenize("")

        assert result.tokens == []
        assert result.token_count == 0

    def test_plain_text(self) -> None:
        """Test input without markup."""
        tokens = _tokens("just some text")

        assert len(tokens) == 1
        assert tokens[0].type == TokenType.TEXT
        assert tokens[0].value == "just some text"

    def test_element_with_text(self) -> None:
        """Test start tag, text and end tag."""
        tokens = _tokens("<testcase>hello</testcase>")

        assert [token.type for token in tokens] == [
            TokenType.START_TAG, TokenType.TEXT, TokenType.END_TAG,
        ]
        assert tokens[0].value == "testcase"
        assert tokens[1].value == "hello"
        assert tokens[2].value == "testcase"

    def test_empty_element(self) -> None:
        """Test self-closing tags with and without whitespace."""
        assert _types("<a/><b />") == [TokenType.EMPTY_TAG, TokenType.EMPTY_TAG]

    def test_attributes_are_decoded(self) -> None:
        """Test quoting styles and entity decoding in attribute values."""
        token = _tokens("""<testcase name='a &lt;b&gt;' classname="x.Y" time = "1.5"/>""")[0]

        assert token.attributes == {"name": "a <b>", "classname": "x.Y", "time": "1.5"}

    def test_duplicate_attribute_last_wins(self) -> None:
        """Test that a repeated attribute keeps the last value."""
        token = _tokens('<a x="1" x="2"/>')[0]

        assert token.attributes == {"x": "2"}

    def test_text_keeps_entities_raw(self) -> None:
        """Test that text tokens are not decoded."""
        token = _tokens("<a>&lt;b&gt;</a>")[1]

        assert token.value == "&lt;b&gt;"
        assert token.raw == "&lt;b&gt;"

    def test_cdata(self) -> None:
        """Test that CDATA keeps markers in raw and strips them in value."""
        token = _tokens("<a><![CDATA[x < y]]></a>")[1]

        assert token.type == TokenType.CDATA
        assert token.value == "x < y"
        assert token.raw == "<![CDATA[x < y]]>"

    def test_comment_pi_and_doctype(self) -> None:
        """Test non-element markup."""
        text = (
            '<?xml version="1.0"?>'
            '<!DOCTYPE testsuite [<!ENTITY x "y">]>'
            "<!-- generated -->"
            "<a/>"
        )

        assert _types(text) == [
            TokenType.PROCESSING_INSTRUCTION,
            TokenType.DOCTYPE,
            TokenType.COMMENT,
            TokenType.EMPTY_TAG,
        ]

    def test_qualified_names_are_kept(self) -> None:
        """Test that namespace prefixes survive tokenization."""
        token = _tokens('<ns:testsuite xmlns:ns="urn:x" ns:name="n"/>')[0]

        assert token.value == "ns:testsuite"
        assert token.attributes == {"xmlns:ns": "urn:x", "ns:name": "n"}

    def test_positions(self) -> None:
        """Test line and column tracking across newlines."""
        tokens = _tokens("<a>\n  <b/>\n</a>")

        end_tag = tokens[-1]
        empty_tag = tokens[2]
        assert empty_tag.position == TokenPosition(line=2, column=3, offset=6)
        assert end_tag.position == TokenPosition(line=3, column=1, offset=11)

    def test_origin_shifts_positions(self) -> None:
        """Test that positions are relative to the origin."""
        tokens = XMLTokenizer().tokenize("<r><a/></r>", origin=3).tokens

        assert tokens[1].position == TokenPosition(line=1, column=1, offset=0)

    def test_result_counts(self) -> None:
        """Test token counting helpers."""
        result = XMLTokenizer().tokenize("<a><b/><b/></a>")

        assert result.count(TokenType.EMPTY_TAG) == 2
        assert result.character_count == len("<a><b/><b/></a>")


class TestXMLTokenizerErrors:
    """Test that malformed markup raises positioned ParseErrors."""

    @pytest.mark.parametrize(
        "text, message",
        [
            ("<a", "unterminated tag <a>"),
            ('<a x="1"', "unterminated tag <a>"),
            ("<a x>", "attribute 'x' has no value"),
            ("<a x=1>", "value of attribute 'x' must be quoted"),
            ('<a x="1>', "unterminated value for attribute 'x'"),
            ('<a x="<">', "'<' is not allowed in value of attribute 'x'"),
            ('<a x="1"y="2">', "invalid character 'y' in tag <a>"),
            ("<a / >", "expected '/>' to close tag <a>"),
            ("< a>", "invalid tag start"),
            ("<1a/>", "invalid tag start"),
            ("</>", "invalid close tag"),
            ("</a", "unterminated close tag </a>"),
            ("</a x>", "invalid character 'x' in close tag </a>"),
            ("<!-- open", "unterminated comment"),
            ("<![CDATA[ open", "unterminated CDATA section"),
            ("<?xml version='1.0'", "unterminated processing instruction"),
            ("<? x?>", "invalid processing instruction target"),
            ("<!DOCTYPE a [", "unterminated DOCTYPE declaration"),
            ("<!ELEMENT a>", "invalid markup declaration"),
            ("<a>AT&T</a>", "invalid entity reference"),
            ('<a x="&bogus;"/>', "unknown entity reference: &bogus;"),
        ],
    )
    def test_syntax_errors(self, text: str, message: str) -> None:
        """Test syntax error table."""
        with pytest.raises(ParseError, match=message):
            XMLTokenizer().tokenize(text)

    def test_error_position(self) -> None:
        """Test that errors carry line and column of the offending markup."""
        with pytest.raises(ParseError) as exc_info:
            XMLTokenizer().tokenize("<a>\n  <b x=1/>\n</a>")

        error = exc_info.value
        assert (error.line, error.column) == (2, 8)
        assert error.offset == 11

    def test_end_bounds_open_tag(self) -> None:
        """Test that a tag still open at the end boundary is unterminated."""
        with pytest.raises(ParseError, match="unterminated tag <a>") as exc_info:
            XMLTokenizer().tokenize("<a</r>", end=2)

        assert exc_info.value.column == 1

    def test_end_bounds_close_tag(self) -> None:
        """Test that a close tag cut by the end boundary is unterminated."""
        with pytest.raises(ParseError, match="unterminated close tag </a>"):
            XMLTokenizer().tokenize("</a</r>", end=3)

    def test_entity_error_position(self) -> None:
        """Test that text entity errors point at the ampersand."""
        with pytest.raises(ParseError) as exc_info:
            XMLTokenizer().tokenize("<a>\nx &nope; y</a>")

        assert (exc_info.value.line, exc_info.value.column) == (2, 3)
