"""Typed report model: suites, tests, error details and totals.

These are plain mutable dataclasses owned by the caller. ``Suite.totals`` is a
cached snapshot and is only refreshed by :func:`junit_ingest.report.aggregate`.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Dict, List, Optional


class Status(Enum):
    """Outcome of a single test."""

    PASSED = "passed"
    SKIPPED = "skipped"
    FAILED = "failed"
    ERROR = "error"


class ErrorKind(Enum):
    """Discriminates assertion failures from unexpected errors."""

    FAILURE = "failure"  # A violated expectation, e.g. a failed assertion
    ERROR = "error"      # An unexpected problem, e.g. an uncaught exception

    @property
    def status(self) -> Status:
        """Test status implied by this kind of error detail."""
        return Status.FAILED if self is ErrorKind.FAILURE else Status.ERROR


@dataclass
class Error:
    """Failure or error detail of a test.

    The body (usually a stack trace) doubles as the display text.
    """

    kind: ErrorKind
    message: str = ""
    type: str = ""
    body: str = ""

    def __str__(self) -> str:
        return self.body


@dataclass
class Test:
    """A single reported test outcome."""

    __test__ = False

    name: str = ""
    classname: str = ""
    duration: timedelta = field(default_factory=timedelta)
    status: Status = Status.PASSED
    error: Optional[Error] = None
    properties: Dict[str, str] = field(default_factory=dict)
    system_out: str = ""
    system_err: str = ""

    def __post_init__(self) -> None:
        """Validate test values."""
        if self.duration < timedelta(0):
            raise ValueError("Test duration cannot be negative")
        if self.status in (Status.FAILED, Status.ERROR) and self.error is None:
            raise ValueError(f"A {self.status.value} test requires error detail")
        if self.status in (Status.PASSED, Status.SKIPPED) and self.error is not None:
            raise ValueError(f"A {self.status.value} test cannot carry error detail")


@dataclass
class Totals:
    """Rolled-up counts and duration of a suite."""

    tests: int = 0
    passed: int = 0
    skipped: int = 0
    failed: int = 0
    error: int = 0
    duration: timedelta = field(default_factory=timedelta)

    @property
    def is_consistent(self) -> bool:
        """Check that every test is counted under exactly one status."""
        return self.tests == self.passed + self.skipped + self.failed + self.error

    def add_test(self, test: Test) -> None:
        """Count a single test."""
        self.tests += 1
        self.duration += test.duration
        if test.status is Status.PASSED:
            self.passed += 1
        elif test.status is Status.SKIPPED:
            self.skipped += 1
        elif test.status is Status.FAILED:
            self.failed += 1
        else:
            self.error += 1

    def add(self, other: "Totals") -> None:
        """Add another set of totals field-wise."""
        self.tests += other.tests
        self.passed += other.passed
        self.skipped += other.skipped
        self.failed += other.failed
        self.error += other.error
        self.duration += other.duration


@dataclass
class Suite:
    """A named collection of tests, optionally containing nested suites."""

    name: str = ""
    package: str = ""
    properties: Dict[str, str] = field(default_factory=dict)
    tests: List[Test] = field(default_factory=list)
    suites: List["Suite"] = field(default_factory=list)
    system_out: str = ""
    system_err: str = ""
    totals: Totals = field(default_factory=Totals)
