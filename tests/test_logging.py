"""Tests for logging helpers."""

import json
import logging

from chatdesk.core.logging import (
    JsonFormatter,
    SensitiveDataFilter,
    clear_request_id,
    set_request_id,
)


def make_record(msg, args=None, **extra) -> logging.LogRecord:
    record = logging.LogRecord("chatdesk.test", logging.INFO, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestSensitiveDataFilter:
    def test_redacts_key_value_strings(self):
        record = make_record("api_key=abc123")
        SensitiveDataFilter().filter(record)
        assert record.msg == "api_key=***REDACTED***"

    def test_redacts_dict_arguments(self):
        record = make_record("headers: %s", ({"api-key": "abc123", "Content-Type": "json"},))
        SensitiveDataFilter().filter(record)
        assert record.getMessage() == "headers: {'api-key': '***REDACTED***', 'Content-Type': 'json'}"

    def test_leaves_plain_messages_alone(self):
        record = make_record("Chat message saved: ID 3")
        SensitiveDataFilter().filter(record)
        assert record.msg == "Chat message saved: ID 3"


class TestJsonFormatter:
    def test_includes_request_id_and_extra(self):
        set_request_id("req-9")
        try:
            line = JsonFormatter().format(make_record("hello", event_type="startup", path="/x"))
        finally:
            clear_request_id()

        data = json.loads(line)
        assert data["message"] == "hello"
        assert data["request_id"] == "req-9"
        assert data["event_type"] == "startup"
        assert data["path"] == "/x"
