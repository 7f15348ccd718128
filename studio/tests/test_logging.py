"""
Tests for the two log outputs: the JSON stdlib handler and the loguru console sink.
"""

import json
import logging
from unittest.mock import patch

import logger as console_logging
import logging_setup


def test_console_file_sink_does_not_reuse_json_log_file(monkeypatch):
    monkeypatch.setenv("LOG_TO_FILE", "true")
    monkeypatch.delenv("LOG_FILE_PATH", raising=False)
    monkeypatch.delenv("CONSOLE_LOG_FILE_PATH", raising=False)

    with patch("logger.logger") as mock_loguru:
        console_logging.ConsoleLogger()

    sinks = [call.args[0] for call in mock_loguru.add.call_args_list]
    assert console_logging.DEFAULT_CONSOLE_LOG_FILE in sinks
    assert logging_setup.DEFAULT_LOG_FILE not in sinks
    assert console_logging.DEFAULT_CONSOLE_LOG_FILE != logging_setup.DEFAULT_LOG_FILE


def test_json_formatter_merges_dict_messages_and_request_id():
    record = logging.LogRecord("tryon.relay", logging.INFO, __file__, 10, {"event": "generate:start"}, None, None)
    token = logging_setup.request_id_var.set("req-42")
    try:
        logging_setup.RequestIdFilter().filter(record)
    finally:
        logging_setup.request_id_var.reset(token)

    payload = json.loads(logging_setup.JsonFormatter().format(record))

    assert payload["event"] == "generate:start"
    assert payload["request_id"] == "req-42"
    assert payload["level"] == "INFO"
