#!/usr/bin/env python3
"""Tests for the API logging setup."""

import json
import logging
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src'))

from api.logging_config import JSONFormatter, setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    saved = (list(root.handlers), root.level)
    levels = {name: logging.getLogger(name).level for name in ("calculator", "api", "uvicorn.access")}
    yield
    root.handlers, root.level = saved
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


def make_record(**extra):
    record = logging.LogRecord("calculator.formatting", logging.WARNING, __file__, 10,
                               "Cannot format currency %r", ("QQQ",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_line_carries_service_and_context():
    entry = json.loads(JSONFormatter().format(make_record(requested_currency="QQQ")))
    assert entry["service"] == "quickquote"
    assert entry["level"] == "WARNING"
    assert entry["logger"] == "calculator.formatting"
    assert entry["message"] == "Cannot format currency 'QQQ'"
    assert entry["requested_currency"] == "QQQ"
    assert "data_file" not in entry


def test_json_line_includes_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        record = make_record()
        record.exc_info = sys.exc_info()
    entry = json.loads(JSONFormatter().format(record))
    assert "ValueError: boom" in entry["exception"]


def test_setup_logging_levels(restore_logging):
    handler = setup_logging("debug", json_output=True)
    root = logging.getLogger()
    assert root.handlers == [handler]
    assert isinstance(handler.formatter, JSONFormatter)
    assert root.level == logging.WARNING
    assert logging.getLogger("calculator").level == logging.DEBUG
    assert logging.getLogger("api").level == logging.DEBUG
    assert logging.getLogger("uvicorn.access").level == logging.WARNING


def test_setup_logging_plain_text(restore_logging):
    handler = setup_logging("nonsense")
    assert not isinstance(handler.formatter, JSONFormatter)
    assert logging.getLogger("calculator").level == logging.INFO
