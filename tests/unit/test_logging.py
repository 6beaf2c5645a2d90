from __future__ import annotations

import json
import logging

from visit_counter.utils.logging import _json_formatter, configure_logging

EXPECTED_LATITUDE = 52.1672


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.path = "/"
    record.latitude = EXPECTED_LATITUDE

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["path"] == "/"
    assert payload["latitude"] == EXPECTED_LATITUDE
    assert "lineno" not in payload


def test_json_formatter_stringifies_unserializable_values() -> None:
    record = _record()
    record.coordinates = (52.1672, 20.9679)
    record.facts = object()

    payload = json.loads(_json_formatter(record))

    assert payload["coordinates"] == [52.1672, 20.9679]
    assert payload["facts"].startswith("<object object")


def test_configure_logging_sets_root_level() -> None:
    configure_logging(level="warning", json_logs=True)

    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert any(
        type(handler.formatter).__name__ == "JsonFormatter" for handler in root.handlers
    )

    configure_logging(level="INFO")


def test_console_format_is_default(capsys) -> None:
    configure_logging(level="info")

    logging.getLogger("visit_counter.test").info("visit recorded", extra={"city": "Warsaw"})

    line = capsys.readouterr().err.strip()
    assert line.endswith("| INFO | visit_counter.test | visit recorded")
    assert "Warsaw" not in line
