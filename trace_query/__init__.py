"""Trace query filter model: validated requests for finding traces in span storage."""

from .exceptions import InvalidArgumentError, TraceQueryError, UserFacingError
from .query_request import QueryRequest, QueryRequestBuilder

__all__ = [
    "InvalidArgumentError",
    "QueryRequest",
    "QueryRequestBuilder",
    "TraceQueryError",
    "UserFacingError",
]
