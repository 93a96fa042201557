"""Telemetry helpers for trace queries leveraging OpenTelemetry."""

import logging
from typing import Any

from opentelemetry import metrics

_MAX_ARG_LENGTH = 200


def get_meter(name: str) -> metrics.Meter:
    """Returns a meter for the given module name."""
    return metrics.get_meter(name)


def truncate_args(**kwargs: Any) -> dict[str, str]:
    """Render argument values as strings, truncating long values."""
    safe_args = {}
    for k, v in kwargs.items():
        val_str = str(v)
        if len(val_str) > _MAX_ARG_LENGTH:
            safe_args[k] = val_str[:_MAX_ARG_LENGTH] + "... (truncated)"
        else:
            safe_args[k] = val_str
    return safe_args


def log_call(logger: logging.Logger, func_name: str, **kwargs: Any) -> None:
    """Logs a call with arguments, truncating long values."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug(f"Call: {func_name} | Args: {truncate_args(**kwargs)}")
