"""Exception hierarchy for JUnit report ingestion.

Every stage of the pipeline raises a subclass of :class:`IngestError` so that
callers can handle all ingestion failures with a single ``except`` clause,
while still being able to tell a syntax error from a content error.
"""

from typing import Optional


class IngestError(Exception):
    """Base exception for all ingestion failures.

    Attributes:
        stage: Pipeline stage that failed ("parse", "content", "mapping")
    """

    default_stage = "ingest"

    def __init__(self, message: str, stage: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage or self.default_stage


class ParseError(IngestError):
    """Raised when the raw document is not well-formed markup.

    Position information is relative to the caller's input, not to the
    synthetic root the parser wraps it in. It is ``None`` for failures that
    happen before tokenization (invalid byte encodings).
    """

    default_stage = "parse"

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.line = line
        self.column = column
        self.offset = offset

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} (line {self.line}, column {self.column})"


class ContentError(IngestError):
    """Raised when element content cannot be extracted.

    The string form is the bare diagnostic, e.g. ``"unmatched CDATA start tag"``.
    """

    default_stage = "content"


class DurationError(IngestError):
    """Raised for an unparsable duration when the strict policy is active."""

    default_stage = "mapping"

    def __init__(self, message: str, value: str) -> None:
        super().__init__(message)
        self.value = value


class EntityError(ValueError):
    """Raised by entity decoding for unknown or malformed references.

    Attributes:
        index: Offset of the offending ``&`` in the decoded string
    """

    def __init__(self, message: str, index: int = 0) -> None:
        super().__init__(message)
        self.index = index
