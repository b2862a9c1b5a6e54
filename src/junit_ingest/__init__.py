"""JUnit report ingestion.

Parses JUnit-dialect XML test reports, produced by many tools with
inconsistent conventions, into a typed tree of suites, tests and totals.

Progressive API Disclosure:
- Level 1: Simple function - ingest()
- Level 2: Configured ingester - JUnitIngester with IngestConfig
- Level 3: Individual stages - parse(), extract_content(), map_suites(), aggregate()
"""

__version__ = "0.1.0"
__author__ = "JUnit Ingest Team"

# Level 1 and 2: Ingest entry points
from .api import JUnitIngester, ingest

# Level 3: Individual pipeline stages
from .content import extract_content
from .report import (
    Error,
    ErrorKind,
    Status,
    Suite,
    Test,
    Totals,
    aggregate,
    map_suites,
)
from .shared import (
    ContentError,
    DurationError,
    DurationPolicy,
    IngestConfig,
    IngestError,
    MappingConfig,
    ParseError,
)
from .tree import GenericNode, parse

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Ingest entry points
    "ingest",
    "JUnitIngester",

    # Pipeline stages
    "parse",
    "extract_content",
    "map_suites",
    "aggregate",

    # Data structures
    "GenericNode",
    "Suite",
    "Test",
    "Error",
    "ErrorKind",
    "Status",
    "Totals",

    # Configuration
    "IngestConfig",
    "MappingConfig",
    "DurationPolicy",

    # Errors
    "IngestError",
    "ParseError",
    "ContentError",
    "DurationError",
]
