"""Typed report model, domain mapping and aggregation.

Key Components:
    Suite, Test, Error, Totals, Status, ErrorKind: The report model
    map_suites: Generic node tree to list of Suite objects
    aggregate: Recompute a suite's Totals from its tests and nested suites
"""

from .aggregate import aggregate, aggregate_all
from .mapper import SuiteMapper, map_suites, parse_duration
from .models import Error, ErrorKind, Status, Suite, Test, Totals

__all__ = [
    "Error",
    "ErrorKind",
    "Status",
    "Suite",
    "SuiteMapper",
    "Test",
    "Totals",
    "aggregate",
    "aggregate_all",
    "map_suites",
    "parse_duration",
]
