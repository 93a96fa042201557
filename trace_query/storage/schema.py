"""Span storage schema read by query engines.

Only the columns a query request is evaluated against are described here;
writing spans is the storage layer's concern.
"""

from sqlalchemy import BigInteger, Boolean, Column, MetaData, String, Table
from sqlalchemy.sql.schema import UniqueConstraint

metadata = MetaData()

zipkin_spans = Table(
    "zipkin_spans",
    metadata,
    Column("trace_id", BigInteger, nullable=False),
    Column("id", BigInteger, nullable=False),
    Column("name", String(255), nullable=False),
    Column("parent_id", BigInteger, nullable=True),
    Column("debug", Boolean, nullable=True),
    Column(
        "start_ts",
        BigInteger,
        nullable=True,
        comment="Span.timestamp(): epoch micros used for end_ts query and to implement TTL",
    ),
    Column(
        "duration",
        BigInteger,
        nullable=True,
        comment="Span.duration(): micros used for min_duration and max_duration query",
    ),
    UniqueConstraint("trace_id", "id", name="zipkin_spans_trace_id_id_uc"),
)
