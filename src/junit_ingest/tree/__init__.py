"""Node tree construction for JUnit report ingestion.

This module builds a generic, dialect-agnostic tree of tagged nodes from raw
report bytes. Mapping that tree to suites and tests is the report layer's job.

Key Components:
    parse: Raw bytes to list of top-level GenericNode objects
    GenericNode: Tag, attributes, children and raw content of one element
    NodeTreeBuilder: Stack-based tree construction from a token stream
"""

from .builder import (
    SYNTHETIC_ROOT_TAG,
    GenericNode,
    NodeTreeBuilder,
    local_name,
    parse,
    reparent,
)

__all__ = [
    "SYNTHETIC_ROOT_TAG",
    "GenericNode",
    "NodeTreeBuilder",
    "local_name",
    "parse",
    "reparent",
]
