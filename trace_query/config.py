"""Query defaults configuration.

Settings are read from environment variables each time they are loaded, so a
process can change its defaults without rebuilding anything:

- ``TRACE_QUERY_END_TS_DEFAULT``: how ``end_ts`` is defaulted when a builder
  leaves it unset. ``legacy_micros`` (the default) keeps the historical value
  of current milliseconds multiplied by 1000, which existing query engines
  are tuned to. ``millis`` uses the current time in milliseconds.
- ``TRACE_QUERY_DEFAULT_LIMIT``: the number of traces returned when a builder
  leaves ``limit`` unset.
"""

import logging
import os
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

END_TS_DEFAULT_ENV_VAR = "TRACE_QUERY_END_TS_DEFAULT"
DEFAULT_LIMIT_ENV_VAR = "TRACE_QUERY_DEFAULT_LIMIT"

DEFAULT_LIMIT = 10


class EndTsDefault(str, Enum):
    """Policy for defaulting an unset end timestamp."""

    LEGACY_MICROS = "legacy_micros"  # current millis * 1000
    MILLIS = "millis"


class QuerySettings(BaseModel):
    """Defaults applied by the query request builder."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    end_ts_default: EndTsDefault = Field(
        default=EndTsDefault.LEGACY_MICROS,
        description="How an unset end_ts is derived from the wall clock",
    )
    default_limit: int = Field(
        default=DEFAULT_LIMIT, description="Limit used when none is given"
    )

    @field_validator("end_ts_default", mode="before")
    @classmethod
    def validate_end_ts_default(cls, v: Any) -> Any:
        """Accept the policy name in any letter case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("default_limit", mode="before")
    @classmethod
    def validate_default_limit(cls, v: Any) -> int:
        """Ensure the default limit is positive."""
        v = int(v)
        if v < 1:
            raise ValueError("default_limit must be >= 1")
        return v


def load_settings() -> QuerySettings:
    """Load query settings from the environment.

    Raises:
        pydantic.ValidationError: If an environment value is malformed.
    """
    values: dict[str, Any] = {}
    end_ts_default = os.environ.get(END_TS_DEFAULT_ENV_VAR)
    if end_ts_default:
        values["end_ts_default"] = end_ts_default
    default_limit = os.environ.get(DEFAULT_LIMIT_ENV_VAR)
    if default_limit:
        values["default_limit"] = default_limit

    settings = QuerySettings(**values)
    if values:
        logger.debug(f"Loaded query settings from environment: {settings}")
    return settings
