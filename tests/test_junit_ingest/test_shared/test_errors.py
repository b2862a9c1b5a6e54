"""Tests for the ingestion exception hierarchy."""

import pytest

from junit_ingest.shared.errors import (
    ContentError,
    DurationError,
    EntityError,
    IngestError,
    ParseError,
)


class TestIngestErrors:
    """Test exception attributes and string forms."""

    @pytest.mark.parametrize(
        "error, stage",
        [
            (IngestError("boom"), "ingest"),
            (ParseError("bad markup"), "parse"),
            (ContentError("unmatched CDATA start tag"), "content"),
            (DurationError("invalid duration: 'x'", value="x"), "mapping"),
        ],
    )
    def test_default_stage(self, error: IngestError, stage: str) -> None:
        """Test that each subclass reports its pipeline stage."""
        assert isinstance(error, IngestError)
        assert error.stage == stage

    def test_explicit_stage_overrides_default(self) -> None:
        """Test that a wrapping error can carry the inner stage."""
        assert IngestError("wrapped", stage="content").stage == "content"

    def test_content_error_string_is_bare_message(self) -> None:
        """Test that content errors render without decoration."""
        assert str(ContentError("unmatched CDATA end tag")) == "unmatched CDATA end tag"

    def test_parse_error_with_position(self) -> None:
        """Test that positioned parse errors mention line and column."""
        error = ParseError("unterminated tag <a>", line=3, column=7, offset=40)

        assert str(error) == "unterminated tag <a> (line 3, column 7)"
        assert error.message == "unterminated tag <a>"
        assert (error.line, error.column, error.offset) == (3, 7, 40)

    def test_parse_error_without_position(self) -> None:
        """Test that unpositioned parse errors render the bare message."""
        assert str(ParseError("unsupported encoding: klingon")) == (
            "unsupported encoding: klingon"
        )

    def test_duration_error_keeps_value(self) -> None:
        """Test that the offending value is available to callers."""
        assert DurationError("invalid duration", value="soon").value == "soon"

    def test_entity_error_is_value_error(self) -> None:
        """Test that entity errors integrate with ValueError handling."""
        error = EntityError("unknown entity reference: &nbsp;", 5)

        assert isinstance(error, ValueError)
        assert error.index == 5
