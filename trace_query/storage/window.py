"""Conversion of query requests to the storage time grain.

Query requests express ``end_ts`` and ``lookback`` in milliseconds, while
stored span ``start_ts`` and ``duration`` are microseconds. A query engine
converts once, here, before comparing against stored spans.
"""

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import Table, and_
from sqlalchemy.sql.elements import ColumnElement

from .schema import zipkin_spans

if TYPE_CHECKING:
    from ..query_request import QueryRequest

MICROS_PER_MILLI = 1000


class QueryWindow(BaseModel):
    """Span timestamp and duration bounds of a query, in microseconds."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    start_ts: int = Field(description="Earliest span timestamp, epoch micros")
    end_ts: int = Field(description="Latest span timestamp, epoch micros")
    min_duration: int | None = Field(
        default=None, description="Minimum span duration in micros"
    )
    max_duration: int | None = Field(
        default=None, description="Maximum span duration in micros"
    )

    @classmethod
    def from_request(cls, request: "QueryRequest") -> "QueryWindow":
        """Converts a request's millisecond window to microseconds."""
        return cls(
            start_ts=(request.end_ts - request.lookback) * MICROS_PER_MILLI,
            end_ts=request.end_ts * MICROS_PER_MILLI,
            min_duration=request.min_duration,
            max_duration=request.max_duration,
        )

    def contains(self, timestamp: int) -> bool:
        """Whether a span timestamp in micros falls inside the window."""
        return self.start_ts <= timestamp <= self.end_ts

    def accepts_duration(self, duration: int) -> bool:
        """Whether a span duration in micros satisfies the duration bounds."""
        if self.min_duration is not None and duration < self.min_duration:
            return False
        if self.max_duration is not None and duration > self.max_duration:
            return False
        return True

    def span_predicate(self, table: Table = zipkin_spans) -> ColumnElement[bool]:
        """Builds the timestamp and duration clause over a spans table."""
        clauses = [table.c.start_ts.between(self.start_ts, self.end_ts)]
        if self.min_duration is not None:
            clauses.append(table.c.duration >= self.min_duration)
        if self.max_duration is not None:
            clauses.append(table.c.duration <= self.max_duration)
        return and_(*clauses)
