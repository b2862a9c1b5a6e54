"""Roll-up of suite statistics."""

from typing import Iterable

from .models import Suite, Totals


def aggregate(suite: Suite) -> Totals:
    """Recompute ``suite.totals`` from its tests and nested suites.

    Nested suites are aggregated first, so the whole subtree is refreshed in
    post-order. Totals are a snapshot: call this again after adding or
    removing tests or suites.

    Args:
        suite: Suite to aggregate in place

    Returns:
        The suite's new totals
    """
    totals = Totals()
    for test in suite.tests:
        totals.add_test(test)
    for nested in suite.suites:
        totals.add(aggregate(nested))

    suite.totals = totals
    return totals


def aggregate_all(suites: Iterable[Suite]) -> Totals:
    """Aggregate every suite and return the sum of their totals."""
    grand_total = Totals()
    for suite in suites:
        grand_total.add(aggregate(suite))
    return grand_total
