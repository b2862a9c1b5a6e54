"""Ingest API composing the parsing pipeline.

This module provides the single entry point from raw report bytes to
aggregated suites, as a module-level function for one-off use and as a
configured, reusable ingester class.
"""

import time
from typing import List, Optional, Union

from junit_ingest.report import Suite, aggregate, map_suites
from junit_ingest.shared import (
    IngestConfig,
    IngestError,
    ParseError,
    get_logger,
)
from junit_ingest.tree import parse

InputType = Union[bytes, bytearray, str]

MS_PER_SECOND = 1000

TEXT_ENCODING = "utf-8"


def _as_bytes(data: Optional[InputType]) -> bytes:
    if data is None:
        return b""
    if isinstance(data, str):
        return data.encode(TEXT_ENCODING)
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"Cannot ingest {type(data).__name__}, expected bytes or str")


def ingest(
    data: Optional[InputType],
    correlation_id: Optional[str] = None,
    config: Optional[IngestConfig] = None,
) -> List[Suite]:
    """Ingest a JUnit-dialect report into aggregated suites.

    Args:
        data: Report document as bytes, or as text which is encoded as UTF-8
        correlation_id: Optional correlation ID for request tracking
        config: Optional ingest configuration

    Returns:
        Top-level suites in document order, with totals aggregated

    Raises:
        IngestError: If any stage fails; ``stage`` names the failing stage and
            the original exception is chained as ``__cause__``

    Examples:
        >>> suites = ingest(b'<testsuite name="unit"><testcase name="a"/></testsuite>')
        >>> suites[0].totals.passed
        1
    """
    return JUnitIngester(config=config, correlation_id=correlation_id).ingest(data)


class JUnitIngester:
    """Configured report ingester that can be reused across documents.

    Attributes:
        config: Ingest configuration
        correlation_id: Correlation ID for request tracking

    Examples:
        >>> ingester = JUnitIngester(IngestConfig.strict())
        >>> results = [ingester.ingest(report) for report in reports]
        >>> ingester.ingest_count == len(reports)
        True
    """

    def __init__(
        self,
        config: Optional[IngestConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the ingester.

        Args:
            config: Ingest configuration (defaults to lenient)
            correlation_id: Optional correlation ID, overrides config.correlation_id
        """
        self.config = config or IngestConfig.lenient()
        self.correlation_id = correlation_id or self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "ingest")

        self._ingest_count = 0
        self._failed_ingests = 0

    @property
    def ingest_count(self) -> int:
        """Number of ingest calls made with this instance."""
        return self._ingest_count

    @property
    def failed_ingests(self) -> int:
        """Number of ingest calls that raised IngestError."""
        return self._failed_ingests

    def ingest(self, data: Optional[InputType]) -> List[Suite]:
        """Parse, map and aggregate one report document.

        Raises:
            IngestError: If parsing, content extraction or mapping fails
        """
        start_time = time.time()
        raw = _as_bytes(data)
        # Text was encoded as UTF-8 above, whatever its XML declaration says
        encoding = TEXT_ENCODING if isinstance(data, str) else None
        self._ingest_count += 1

        self.logger.info(
            "Starting ingest", extra={"input_bytes": len(raw)}
        )

        try:
            suites = self._run(raw, encoding)
        except IngestError as e:
            self._failed_ingests += 1
            self.logger.error(
                "Ingest failed",
                extra={"stage": e.stage, "error": str(e)},
            )
            raise IngestError(f"{e.stage} stage failed: {e}", stage=e.stage) from e

        self.logger.info(
            "Ingest completed",
            extra={
                "suite_count": len(suites),
                "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
            }
        )
        return suites

    def _run(self, raw: bytes, encoding: Optional[str] = None) -> List[Suite]:
        limit = self.config.max_input_size_bytes
        if limit is not None and len(raw) > limit:
            raise ParseError(f"input of {len(raw)} bytes exceeds limit of {limit} bytes")

        nodes = parse(raw, correlation_id=self.correlation_id, encoding=encoding)
        suites = map_suites(nodes, self.config.mapping, self.correlation_id)

        if self.config.aggregate:
            for suite in suites:
                aggregate(suite)
        return suites
