import json
import logging

from psychocalc.core.logging import (
    JsonFormatter,
    correlation_context,
    get_correlation_id,
    get_logger,
)


def _record(message, **structured):
    record = logging.LogRecord("psychocalc.tests", logging.INFO, __file__, 1, message, None, None)
    record.structured_data = structured
    return record


def test_json_formatter_merges_structured_data():
    line = JsonFormatter().format(_record("aiken_computed", items=5, valid=4))
    payload = json.loads(line)
    assert payload["event"] == "aiken_computed"
    assert payload["level"] == "INFO"
    assert payload["items"] == 5
    assert payload["valid"] == 4
    assert "correlation_id" not in payload


def test_structured_fields_never_override_base_keys():
    payload = json.loads(JsonFormatter().format(_record("real_event", event="spoofed")))
    assert payload["event"] == "real_event"


def test_correlation_context_binds_and_resets():
    assert get_correlation_id() is None
    with correlation_context("abc-123") as cid:
        assert cid == "abc-123"
        payload = json.loads(JsonFormatter().format(_record("inside")))
        assert payload["correlation_id"] == "abc-123"
    assert get_correlation_id() is None


def test_correlation_context_generates_an_id():
    with correlation_context() as cid:
        assert cid
        assert get_correlation_id() == cid


def test_logger_defaults_are_stamped(caplog):
    logger = get_logger("psychocalc.tests.defaults", component="tests")
    with caplog.at_level(logging.INFO, logger="psychocalc.tests.defaults"):
        logger.info("event_name", extra={"structured_data": {"rows": 3}})
    record = caplog.records[-1]
    assert record.structured_data == {"component": "tests", "rows": 3}
