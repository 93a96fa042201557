"""Tests for converting query requests to the storage time grain."""

import pytest
from pydantic import ValidationError

from trace_query.query_request import QueryRequestBuilder
from trace_query.storage.window import MICROS_PER_MILLI, QueryWindow


def compile_literal(clause) -> str:
    return str(clause.compile(compile_kwargs={"literal_binds": True}))


@pytest.fixture
def request_with_durations():
    return (
        QueryRequestBuilder()
        .service_name("api")
        .end_ts(1_000_000)
        .lookback(500_000)
        .min_duration(100)
        .max_duration(900)
        .build()
    )


def test_from_request_converts_millis_to_micros(request_with_durations):
    window = QueryWindow.from_request(request_with_durations)

    assert MICROS_PER_MILLI == 1000
    assert window.start_ts == 500_000_000
    assert window.end_ts == 1_000_000_000
    assert window.min_duration == 100
    assert window.max_duration == 900


def test_full_lookback_starts_at_epoch():
    request = QueryRequestBuilder().service_name("api").end_ts(1_000).build()
    window = QueryWindow.from_request(request)

    assert window.start_ts == 0
    assert window.end_ts == 1_000_000


def test_contains_is_inclusive(request_with_durations):
    window = QueryWindow.from_request(request_with_durations)

    assert window.contains(500_000_000)
    assert window.contains(1_000_000_000)
    assert not window.contains(499_999_999)
    assert not window.contains(1_000_000_001)


def test_accepts_duration(request_with_durations):
    window = QueryWindow.from_request(request_with_durations)

    assert window.accepts_duration(100)
    assert window.accepts_duration(900)
    assert not window.accepts_duration(99)
    assert not window.accepts_duration(901)


def test_accepts_any_duration_without_bounds():
    window = QueryWindow(start_ts=0, end_ts=10)
    assert window.accepts_duration(0)
    assert window.accepts_duration(10**9)


def test_span_predicate_with_durations(request_with_durations):
    sql = compile_literal(
        QueryWindow.from_request(request_with_durations).span_predicate()
    )

    assert "zipkin_spans.start_ts BETWEEN 500000000 AND 1000000000" in sql
    assert "zipkin_spans.duration >= 100" in sql
    assert "zipkin_spans.duration <= 900" in sql


def test_span_predicate_without_durations():
    sql = compile_literal(QueryWindow(start_ts=1, end_ts=2).span_predicate())

    assert "zipkin_spans.start_ts BETWEEN 1 AND 2" in sql
    assert "duration" not in sql


def test_window_frozen():
    window = QueryWindow(start_ts=0, end_ts=1)
    with pytest.raises(ValidationError):
        window.end_ts = 2
