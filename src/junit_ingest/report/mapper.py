"""Mapping of the generic node tree onto the typed report model.

Report dialects disagree on almost everything beyond the core element names,
so the mapper matches the tags it knows and ignores everything else. Unknown
elements and attributes are never an error.
"""

from datetime import timedelta
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Dict, List, Optional, Sequence, Tuple

from junit_ingest.content import extract_text
from junit_ingest.shared.config import DurationPolicy, MappingConfig
from junit_ingest.shared.errors import DurationError
from junit_ingest.shared.logging import get_logger
from junit_ingest.tree import GenericNode

from .models import Error, ErrorKind, Status, Suite, Test

MICROSECONDS_PER_SECOND = Decimal(1_000_000)

# Grouping separators some tools emit in durations, e.g. "1,234.56"
_GROUPING_SEPARATORS = (",", "_")

SUITE_FIELD_ATTRIBUTES = ("name", "package")
TEST_FIELD_ATTRIBUTES = ("name", "classname")


def parse_duration(value: str) -> timedelta:
    """Parse a decimal-seconds duration attribute.

    Args:
        value: Attribute value such as ``"0.003"`` or ``"1,234.56"``

    Returns:
        Duration rounded to the nearest microsecond

    Raises:
        ValueError: If the value is not a finite, non-negative number
    """
    cleaned = value.strip()
    for separator in _GROUPING_SEPARATORS:
        cleaned = cleaned.replace(separator, "")

    try:
        seconds = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"invalid duration: {value!r}") from None

    if not seconds.is_finite() or seconds < 0:
        raise ValueError(f"invalid duration: {value!r}")

    try:
        microseconds = (seconds * MICROSECONDS_PER_SECOND).quantize(
            Decimal(1), rounding=ROUND_HALF_EVEN
        )
        return timedelta(microseconds=int(microseconds))
    except ArithmeticError:
        raise ValueError(f"duration out of range: {value!r}") from None


class SuiteMapper:
    """Maps generic nodes to Suite, Test and Error objects."""

    def __init__(
        self,
        config: Optional[MappingConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the mapper.

        Args:
            config: Tag names and duration policy (defaults to MappingConfig())
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or MappingConfig()
        self.logger = get_logger(__name__, correlation_id, "suite_mapper")

    def map(self, nodes: Sequence[GenericNode]) -> List[Suite]:
        """Map top-level nodes to suites in encounter order.

        A top-level node that is not a suite (typically the ``<testsuites>``
        wrapper) is searched for suites, which are returned as independent
        entries.

        Raises:
            ContentError: If element content cannot be extracted
            DurationError: For an invalid duration under the strict policy
        """
        suites: List[Suite] = []
        for node in nodes:
            self._collect_suites(node, suites)

        self.logger.debug(
            "Mapped suites",
            extra={"node_count": len(nodes), "suite_count": len(suites)}
        )
        return suites

    def _collect_suites(self, node: GenericNode, suites: List[Suite]) -> None:
        if node.tag in self.config.suite_tags:
            suites.append(self.map_suite(node))
            return
        for child in node.children:
            self._collect_suites(child, suites)

    def map_suite(self, node: GenericNode) -> Suite:
        """Map a suite node and, recursively, its nested suites."""
        suite = Suite(
            name=node.attributes.get("name", ""),
            package=node.attributes.get("package", ""),
            properties=_other_attributes(node, SUITE_FIELD_ATTRIBUTES),
        )

        config = self.config
        for child in node.children:
            if child.tag in config.suite_tags:
                suite.suites.append(self.map_suite(child))
            elif child.tag in config.testcase_tags:
                suite.tests.append(self.map_test(child))
            elif child.tag in (config.properties_tag, config.property_tag):
                self._merge_properties(suite.properties, child)
            elif child.tag == config.system_out_tag:
                suite.system_out = extract_text(child.content)
            elif child.tag == config.system_err_tag:
                suite.system_err = extract_text(child.content)

        return suite

    def map_test(self, node: GenericNode) -> Test:
        """Map a testcase node."""
        duration_attribute, duration = self._duration(node)
        status, error = self._status(node)

        test = Test(
            name=node.attributes.get("name", ""),
            classname=node.attributes.get("classname", ""),
            duration=duration,
            status=status,
            error=error,
            properties=_other_attributes(
                node, TEST_FIELD_ATTRIBUTES + duration_attribute
            ),
        )

        config = self.config
        for child in node.children:
            if child.tag in (config.properties_tag, config.property_tag):
                self._merge_properties(test.properties, child)
            elif child.tag == config.system_out_tag:
                test.system_out = extract_text(child.content)
            elif child.tag == config.system_err_tag:
                test.system_err = extract_text(child.content)

        return test

    def _status(self, node: GenericNode) -> Tuple[Status, Optional[Error]]:
        # Fixed precedence: skipped, then failure, then error
        if node.find_child(self.config.skipped_tag) is not None:
            return Status.SKIPPED, None

        for tag, kind in (
            (self.config.failure_tag, ErrorKind.FAILURE),
            (self.config.error_tag, ErrorKind.ERROR),
        ):
            child = node.find_child(tag)
            if child is not None:
                return kind.status, Error(
                    kind=kind,
                    message=child.attributes.get("message", ""),
                    type=child.attributes.get("type", ""),
                    body=extract_text(child.content),
                )

        return Status.PASSED, None

    def _duration(self, node: GenericNode) -> Tuple[Tuple[str, ...], timedelta]:
        """Return the consumed attribute name (if any) and the parsed duration."""
        for attribute in self.config.duration_attributes:
            if attribute not in node.attributes:
                continue

            value = node.attributes[attribute]
            if not value.strip():
                return (attribute,), timedelta(0)
            try:
                return (attribute,), parse_duration(value)
            except ValueError as e:
                if self.config.duration_policy is DurationPolicy.STRICT:
                    raise DurationError(str(e), value=value) from e
                self.logger.warning(
                    "Unparsable test duration, using zero",
                    extra={
                        "test_name": node.attributes.get("name", ""),
                        "attribute": attribute,
                        "value": value,
                    }
                )
                return (attribute,), timedelta(0)

        return (), timedelta(0)

    def _merge_properties(self, properties: Dict[str, str], node: GenericNode) -> None:
        """Merge ``<properties>`` or a bare ``<property>`` into ``properties``.

        Explicit declarations override attribute-derived values of the same name.
        """
        if node.tag == self.config.property_tag:
            declarations = [node]
        else:
            declarations = node.find_children(self.config.property_tag)

        for declaration in declarations:
            name = declaration.attributes.get("name")
            if not name:
                continue
            if "value" in declaration.attributes:
                properties[name] = declaration.attributes["value"]
            else:
                properties[name] = extract_text(declaration.content)


def _other_attributes(node: GenericNode, consumed: Tuple[str, ...]) -> Dict[str, str]:
    return {
        name: value
        for name, value in node.attributes.items()
        if name not in consumed
    }


def map_suites(
    nodes: Sequence[GenericNode],
    config: Optional[MappingConfig] = None,
    correlation_id: Optional[str] = None,
) -> List[Suite]:
    """Map generic nodes to the typed report model.

    Args:
        nodes: Top-level nodes as returned by :func:`junit_ingest.tree.parse`
        config: Optional mapping configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        Suites in encounter order, with totals not yet aggregated

    Raises:
        ContentError: If element content cannot be extracted
        DurationError: For an invalid duration under the strict policy
    """
    return SuiteMapper(config, correlation_id).map(nodes)
