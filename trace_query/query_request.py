"""Trace query requests.

A :class:`QueryRequest` retrieves traces matching its filters. Results should
be filtered against ``end_ts``, subject to ``limit`` and ``lookback``. For
example, if ``end_ts`` is 10:20 today, ``limit`` is 10 and ``lookback`` is 7
days, the traces returned should be those nearest to 10:20 today, not 10:20 a
week ago.

``end_ts`` and ``lookback`` are milliseconds, as opposed to microseconds, the
grain of stored span timestamps and durations. Milliseconds is a more familiar
granularity for query, index and windowing functions; see
:mod:`trace_query.storage.window` for the conversion applied against storage.

Requests are assembled with :class:`QueryRequestBuilder`, which applies the
time window and limit defaults before handing off to the validating
constructor.
"""

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .config import EndTsDefault, load_settings
from .exceptions import InvalidArgumentError
from .telemetry import get_meter, log_call

logger = logging.getLogger(__name__)

meter = get_meter(__name__)

built_count = meter.create_counter(
    name="trace_query.request.built",
    description="Query requests successfully built",
    unit="1",
)
rejected_count = meter.create_counter(
    name="trace_query.request.rejected",
    description="Query requests rejected by validation",
    unit="1",
)


def _current_time_millis() -> int:
    return int(time.time() * 1000)


def _is_int(value: Any) -> bool:
    # bool is an int subclass but never a timestamp or count.
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True, eq=False, kw_only=True)
class QueryRequest:
    """Retrieves traces matching the below filters.

    Attributes:
        service_name: Mandatory service name, stored lower-cased.
        span_name: When present, only include traces with this span name.
            Stored lower-cased.
        annotations: Include traces whose span annotations include every
            value in this sequence. This is an AND condition against the
            sequence, as well as against ``binary_annotations``.
        binary_annotations: Include traces whose span binary annotations
            include every key and value in this mapping. This is an AND
            condition against the mapping, as well as against ``annotations``.
        min_duration: Only return traces whose span duration is greater than
            or equal to this many microseconds.
        max_duration: Only return traces whose span duration is less than or
            equal to this many microseconds. Only valid with ``min_duration``.
        end_ts: Only return traces where all span timestamps are at or before
            this time in epoch milliseconds.
        lookback: Only return traces where all span timestamps are at or after
            ``end_ts - lookback`` in milliseconds. Must not be negative.
        limit: Maximum number of traces to return.
    """

    service_name: str
    span_name: str | None = None
    annotations: tuple[str, ...] = ()
    binary_annotations: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )
    min_duration: int | None = None
    max_duration: int | None = None
    end_ts: int
    lookback: int
    limit: int

    def __post_init__(self) -> None:
        annotations = tuple(self.annotations or ())
        binary_annotations = dict(self.binary_annotations or {})

        if not self.service_name:
            raise InvalidArgumentError(
                "service_name was empty", "service_name", self.service_name
            )
        if self.span_name is not None and not self.span_name:
            raise InvalidArgumentError("span_name was empty", "span_name", self.span_name)
        if not _is_int(self.end_ts) or self.end_ts <= 0:
            raise InvalidArgumentError(
                f"end_ts should be positive, in epoch milliseconds: was {self.end_ts}",
                "end_ts",
                self.end_ts,
            )
        if not _is_int(self.limit) or self.limit <= 0:
            raise InvalidArgumentError(
                f"limit should be positive: was {self.limit}", "limit", self.limit
            )
        for annotation in annotations:
            if not annotation:
                raise InvalidArgumentError("annotation was empty", "annotations", annotation)
        for key, value in binary_annotations.items():
            if not key:
                raise InvalidArgumentError(
                    "binary annotation key was empty", "binary_annotations", key
                )
            if not value:
                raise InvalidArgumentError(
                    "binary annotation value was empty", "binary_annotations", value
                )
        if self.max_duration is not None and self.min_duration is None:
            raise InvalidArgumentError(
                f"max_duration requires min_duration: was {self.max_duration}",
                "max_duration",
                self.max_duration,
            )
        if not _is_int(self.lookback) or self.lookback < 0:
            raise InvalidArgumentError(
                f"lookback should not be negative: was {self.lookback}",
                "lookback",
                self.lookback,
            )

        # Frozen dataclass: normalized values are assigned through object.
        object.__setattr__(self, "service_name", self.service_name.lower())
        if self.span_name is not None:
            object.__setattr__(self, "span_name", self.span_name.lower())
        object.__setattr__(self, "annotations", annotations)
        object.__setattr__(self, "binary_annotations", MappingProxyType(binary_annotations))

    def _identity(self) -> tuple[Any, ...]:
        return (
            self.service_name,
            self.span_name,
            self.annotations,
            frozenset(self.binary_annotations.items()),
            self.min_duration,
            self.max_duration,
            self.end_ts,
            self.lookback,
            self.limit,
        )

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if not isinstance(other, QueryRequest):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    def __str__(self) -> str:
        return (
            "QueryRequest{"
            f"service_name={self.service_name}, "
            f"span_name={self.span_name}, "
            f"annotations={list(self.annotations)}, "
            f"binary_annotations={dict(self.binary_annotations)}, "
            f"min_duration={self.min_duration}, "
            f"max_duration={self.max_duration}, "
            f"end_ts={self.end_ts}, "
            f"lookback={self.lookback}, "
            f"limit={self.limit}"
            "}"
        )

    def to_builder(self) -> "QueryRequestBuilder":
        """Returns a builder seeded with this request's fields."""
        return QueryRequestBuilder(self)


class QueryRequestBuilder:
    """Mutable accumulator for :class:`QueryRequest`.

    Setters never validate; every check is deferred to :meth:`build`. Passing
    ``None`` to a setter unsets the field so that its default applies again.
    """

    def __init__(self, source: QueryRequest | None = None) -> None:
        self.clear()
        if source is not None:
            self._service_name = source.service_name
            self._span_name = source.span_name
            self._annotations = list(source.annotations)
            self._binary_annotations = dict(source.binary_annotations)
            self._min_duration = source.min_duration
            self._max_duration = source.max_duration
            self._end_ts = source.end_ts
            self._lookback = source.lookback
            self._limit = source.limit

    def service_name(self, service_name: str | None) -> "QueryRequestBuilder":
        self._service_name = service_name
        return self

    def span_name(self, span_name: str | None) -> "QueryRequestBuilder":
        self._span_name = span_name
        return self

    def add_annotation(self, annotation: str) -> "QueryRequestBuilder":
        self._annotations.append(annotation)
        return self

    def add_binary_annotation(self, key: str, value: str) -> "QueryRequestBuilder":
        """Adds a key/value tag filter; a repeated key replaces its value."""
        self._binary_annotations[key] = value
        return self

    def min_duration(self, min_duration: int | None) -> "QueryRequestBuilder":
        self._min_duration = min_duration
        return self

    def max_duration(self, max_duration: int | None) -> "QueryRequestBuilder":
        self._max_duration = max_duration
        return self

    def end_ts(self, end_ts: int | None) -> "QueryRequestBuilder":
        self._end_ts = end_ts
        return self

    def lookback(self, lookback: int | None) -> "QueryRequestBuilder":
        self._lookback = lookback
        return self

    def limit(self, limit: int | None) -> "QueryRequestBuilder":
        self._limit = limit
        return self

    def clear(self) -> "QueryRequestBuilder":
        """Resets every field to unset."""
        self._service_name: str | None = None
        self._span_name: str | None = None
        self._annotations: list[str] = []
        self._binary_annotations: dict[str, str] = {}
        self._min_duration: int | None = None
        self._max_duration: int | None = None
        self._end_ts: int | None = None
        self._lookback: int | None = None
        self._limit: int | None = None
        return self

    def build(self) -> QueryRequest:
        """Applies defaults and constructs the request.

        Defaults, in order:

        1. ``end_ts`` falls back to the wall clock. Under the default
           ``legacy_micros`` policy this is current milliseconds * 1000, a
           value kept for engines tuned to it; ``millis`` uses the current
           time in milliseconds.
        2. ``lookback`` falls back to ``end_ts``.
        3. ``lookback`` is clamped so it never exceeds ``end_ts``.
        4. ``limit`` falls back to the configured default (10).

        Settings are only read when a default is needed, so a request with
        explicit ``end_ts`` and ``limit`` never depends on the environment.

        Raises:
            InvalidArgumentError: If the assembled request is invalid.
            pydantic.ValidationError: If a default is needed and its
                environment setting is malformed.
        """
        settings = None
        if self._end_ts is None or self._limit is None:
            settings = load_settings()

        end_ts = self._end_ts
        if end_ts is None:
            end_ts = _current_time_millis()
            if settings.end_ts_default == EndTsDefault.LEGACY_MICROS:
                end_ts *= 1000
        lookback = min(end_ts if self._lookback is None else self._lookback, end_ts)
        limit = settings.default_limit if self._limit is None else self._limit

        log_call(
            logger,
            "QueryRequestBuilder.build",
            service_name=self._service_name,
            end_ts=end_ts,
            lookback=lookback,
            limit=limit,
        )
        try:
            request = QueryRequest(
                service_name=self._service_name,
                span_name=self._span_name,
                annotations=tuple(self._annotations),
                binary_annotations=dict(self._binary_annotations),
                min_duration=self._min_duration,
                max_duration=self._max_duration,
                end_ts=end_ts,
                lookback=lookback,
                limit=limit,
            )
        except InvalidArgumentError as e:
            rejected_count.add(1, {"field": e.field})
            logger.warning(f"Rejected query request: {e}")
            raise

        built_count.add(1)
        logger.debug(f"Built {request}")
        return request
