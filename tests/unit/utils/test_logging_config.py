"""Unit tests for logging setup and the exception hierarchy."""

from __future__ import annotations

import json
import logging

import pytest

pytestmark = [pytest.mark.unit]

from bencodec.models import LogLevel, ObservabilityConfig
from bencodec.utils.exceptions import (
    BencodecError,
    BencodeDecodeError,
    BencodeError,
    ConfigurationError,
    LeadingZeroError,
    ValidationError,
)
from bencodec.utils.logging_config import (
    CorrelationFilter,
    LoggingContext,
    StructuredFormatter,
    get_correlation_id,
    get_logger,
    log_exception,
    set_correlation_id,
    setup_logging,
)
from bencodec.utils.rich_logging import (
    CorrelationRichHandler,
    FileFormatter,
    strip_rich_markup,
)


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("bencodec.test", logging.INFO, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatting:
    def test_structured_formatter(self):
        record = _record(source="a.torrent")
        CorrelationFilter().filter(record)
        entry = json.loads(StructuredFormatter().format(record))
        assert entry["message"] == "hello"
        assert entry["level"] == "INFO"
        assert entry["source"] == "a.torrent"
        assert "correlation_id" in entry

    def test_correlation_id(self):
        corr = set_correlation_id("abc")
        assert corr == "abc"
        assert get_correlation_id() == "abc"
        record = _record()
        CorrelationFilter().filter(record)
        assert record.correlation_id == "abc"

    def test_strip_rich_markup(self):
        assert strip_rich_markup("[bold]x[/bold] y") == "x y"


class TestSetupLogging:
    def test_rich_console_by_default(self):
        setup_logging(ObservabilityConfig(log_level=LogLevel.INFO))
        logger = logging.getLogger("bencodec")
        assert logger.level == logging.INFO
        assert logger.propagate is False
        assert any(isinstance(h, CorrelationRichHandler) for h in logger.handlers)

    def test_structured_console(self):
        setup_logging(ObservabilityConfig(structured_logging=True))
        handlers = logging.getLogger("bencodec").handlers
        assert any(isinstance(h.formatter, StructuredFormatter) for h in handlers)
        assert not any(isinstance(h, CorrelationRichHandler) for h in handlers)

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "bencodec.log"
        setup_logging(ObservabilityConfig(log_level=LogLevel.DEBUG, log_file=str(log_file)))
        get_logger("test").debug("[bold]written[/bold]")
        for handler in logging.getLogger("bencodec").handlers:
            handler.flush()
        content = log_file.read_text(encoding="utf-8")
        assert "written" in content
        assert "[bold]" not in content

    def test_log_file_keeps_brackets_in_arguments(self, tmp_path):
        log_file = tmp_path / "bencodec.log"
        setup_logging(ObservabilityConfig(log_level=LogLevel.DEBUG, log_file=str(log_file)))
        get_logger("core.decoder").debug("Duplicate dictionary key %r", b"[tag]")
        for handler in logging.getLogger("bencodec").handlers:
            handler.flush()
        assert "Duplicate dictionary key b'[tag]'" in log_file.read_text(encoding="utf-8")

    def test_file_formatter_leaves_record_untouched(self):
        record = _record("[bold]%s[/bold]")
        record.args = ("[x]",)
        assert FileFormatter("%(message)s").format(record) == "[x]"
        assert record.msg == "[bold]%s[/bold]"

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging(ObservabilityConfig())
        setup_logging(ObservabilityConfig())
        handlers = logging.getLogger("bencodec").handlers
        assert sum(isinstance(h, CorrelationRichHandler) for h in handlers) == 1


class TestLoggingContext:
    def test_logs_completion(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="bencodec.operations"):
            with LoggingContext("decode", source="x"):
                pass
        assert "Starting decode" in caplog.text
        assert "Completed decode" in caplog.text

    def test_logs_failure_and_reraises(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="bencodec.operations"):
            with pytest.raises(ValueError):
                with LoggingContext("decode"):
                    raise ValueError("boom")
        assert "Failed decode" in caplog.text

    def test_log_exception(self, caplog):
        logger = get_logger("test")
        with caplog.at_level(logging.ERROR, logger="bencodec.test"):
            log_exception(logger, LeadingZeroError("invalid leading zero", 3), "decoding")
        assert "invalid leading zero at offset 0x3" in caplog.text


class TestExceptions:
    def test_hierarchy(self):
        assert issubclass(LeadingZeroError, BencodeDecodeError)
        assert issubclass(BencodeDecodeError, BencodeError)
        assert issubclass(BencodeError, ValidationError)
        assert issubclass(ConfigurationError, BencodecError)

    def test_details_in_str(self):
        err = BencodecError("broken", {"key": "value"})
        assert str(err) == "broken (Details: {'key': 'value'})"
        assert str(BencodecError("plain")) == "plain"
