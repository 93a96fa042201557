"""Storage-facing view of query requests."""

from .schema import metadata, zipkin_spans
from .window import MICROS_PER_MILLI, QueryWindow

__all__ = ["MICROS_PER_MILLI", "QueryWindow", "metadata", "zipkin_spans"]
