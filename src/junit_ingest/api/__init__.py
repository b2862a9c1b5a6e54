"""Public ingest API."""

from .ingest import InputType, JUnitIngester, ingest

__all__ = [
    "InputType",
    "JUnitIngester",
    "ingest",
]
