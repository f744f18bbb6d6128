"""
Unit tests for JSON logging with correlation ids.
"""

import io
import json
import logging
from miniapp_shared.logging_config import (
    CorrelationIdFilter,
    correlation_scope,
    setup_logging,
    set_correlation_id,
    get_correlation_id,
)


def test_filter_adds_correlation_id():
    """Every record gets the current correlation id"""
    set_correlation_id("run-42")
    record = logging.LogRecord("test", logging.INFO, __file__, 1, "hello", None, None)

    try:
        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "run-42"
        assert get_correlation_id() == "run-42"
    finally:
        set_correlation_id("")


def test_setup_logging_emits_json():
    """Records are rendered as JSON with renamed fields and extras"""
    root = logging.getLogger()
    previous_handlers, previous_level = root.handlers[:], root.level
    setup_logging("flows")
    stream = io.StringIO()
    root.handlers[0].setStream(stream)

    try:
        set_correlation_id("corr-1")
        logging.info("Dispatching action", extra={"node_id": "signup"})
    finally:
        set_correlation_id("")
        root.handlers = previous_handlers
        root.setLevel(previous_level)

    line = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert line["message"] == "Dispatching action"
    assert line["level"] == "INFO"
    assert line["correlation_id"] == "corr-1"
    assert line["node_id"] == "signup"


def test_correlation_scope_binds_and_restores():
    """The scope binds its id for the block and clears it afterwards"""
    with correlation_scope("run-7") as bound:
        assert bound == "run-7"
        assert get_correlation_id() == "run-7"

    assert get_correlation_id() == ""


def test_correlation_scope_keeps_caller_id():
    """An id set by the caller is not replaced"""
    set_correlation_id("request-9")
    try:
        with correlation_scope("run-7") as bound:
            assert bound == "request-9"
            assert get_correlation_id() == "request-9"
        assert get_correlation_id() == "request-9"
    finally:
        set_correlation_id("")
