import logging
from unittest import mock

from trace_query.telemetry import get_meter, log_call, truncate_args


def test_get_meter():
    with mock.patch("trace_query.telemetry.metrics.get_meter") as mock_get_meter:
        mock_meter = mock.Mock()
        mock_get_meter.return_value = mock_meter

        meter = get_meter("test_module")

        mock_get_meter.assert_called_with("test_module")
        assert meter == mock_meter


def test_truncate_args():
    args = truncate_args(short="abc", long="x" * 300, number=5)

    assert args["short"] == "abc"
    assert args["number"] == "5"
    assert args["long"] == "x" * 200 + "... (truncated)"


def test_log_call(caplog):
    logger = logging.getLogger("test_log_call")
    caplog.set_level(logging.DEBUG, logger="test_log_call")

    log_call(logger, "build", service_name="api")

    assert "Call: build | Args: {'service_name': 'api'}" in caplog.text


def test_log_call_skipped_above_debug(caplog):
    logger = logging.getLogger("test_log_call_quiet")
    caplog.set_level(logging.INFO, logger="test_log_call_quiet")

    with mock.patch("trace_query.telemetry.truncate_args") as mock_truncate:
        log_call(logger, "build", service_name="api")

    mock_truncate.assert_not_called()
    assert caplog.text == ""
