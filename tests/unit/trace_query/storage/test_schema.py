"""Tests for the span storage schema."""

from sqlalchemy import BigInteger, Boolean, String, UniqueConstraint

from trace_query.storage.schema import metadata, zipkin_spans


def test_table_registered():
    assert metadata.tables["zipkin_spans"] is zipkin_spans


def test_columns():
    assert [c.name for c in zipkin_spans.columns] == [
        "trace_id",
        "id",
        "name",
        "parent_id",
        "debug",
        "start_ts",
        "duration",
    ]


def test_column_types_and_nullability():
    c = zipkin_spans.c
    assert isinstance(c.trace_id.type, BigInteger) and not c.trace_id.nullable
    assert isinstance(c.id.type, BigInteger) and not c.id.nullable
    assert isinstance(c.name.type, String) and not c.name.nullable
    assert c.parent_id.nullable
    assert isinstance(c.debug.type, Boolean)
    assert isinstance(c.start_ts.type, BigInteger)
    assert isinstance(c.duration.type, BigInteger)


def test_start_ts_and_duration_documented_as_micros():
    assert "micros" in zipkin_spans.c.start_ts.comment
    assert "micros" in zipkin_spans.c.duration.comment


def test_trace_id_and_id_unique():
    constraints = [
        c for c in zipkin_spans.constraints if isinstance(c, UniqueConstraint)
    ]
    assert len(constraints) == 1
    assert [col.name for col in constraints[0].columns] == ["trace_id", "id"]
