"""Tests for the OpenTelemetry bridge.

Covers:
- severity mapping onto the level scale
- conversion of OTel log records into slacklog records
- SlackLogRecordExporter export results
- configure_slack_logging() end to end
"""

import time
from unittest.mock import MagicMock

import pytest

from opentelemetry._logs import LogRecord, SeverityNumber
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import LogRecordExportResult

from slacklog.formatter import SlackMessageFormatterOptions
from slacklog.handler import SlackHandler, new_slack_handler
from slacklog.levels import Level, level_from_severity, level_name, severity_from_level
from slacklog.mechanism import ConfigurationError
from slacklog.telemetry import SlackLogRecordExporter, configure_slack_logging, otel_to_record

URL = "https://hooks.slack.test/services/T000/B000/XXXX"


class MockReadableLogRecord:
    def __init__(self, log_record):
        self.log_record = log_record


def otel_record(body="Test message", severity=SeverityNumber.INFO, **attributes):
    return LogRecord(
        timestamp=time.time_ns(),
        body=body,
        severity_text=severity.name,
        severity_number=severity,
        attributes=attributes,
    )


class TestLevels:
    @pytest.mark.parametrize(
        "severity, level",
        [
            (SeverityNumber.TRACE, Level.TRACE),
            (SeverityNumber.DEBUG3, Level.DEBUG),
            (SeverityNumber.INFO, Level.INFO),
            (SeverityNumber.INFO2, Level.NOTICE),
            (SeverityNumber.WARN, Level.WARN),
            (SeverityNumber.ERROR4, Level.ERROR),
            (SeverityNumber.FATAL, Level.FATAL),
            (SeverityNumber.FATAL3, Level.PANIC),
            (SeverityNumber.UNSPECIFIED, Level.INFO),
            (None, Level.INFO),
        ],
    )
    def test_severity_mapping(self, severity, level):
        assert level_from_severity(severity) == level

    def test_parse_names(self):
        assert Level.parse("warning") == Level.WARN
        assert Level.parse(" Error ") == Level.ERROR
        assert Level.parse("CRITICAL") == Level.FATAL
        with pytest.raises(ValueError):
            Level.parse("verbose")

    def test_level_name_offsets(self):
        assert level_name(Level.NOTICE) == "NOTICE"
        assert level_name(5) == "WARN+1"
        assert level_name(-6) == "TRACE+2"
        assert level_name(-10) == "TRACE-2"

    def test_severity_from_level_round_trips_named_levels(self):
        for level in Level:
            assert level_from_severity(severity_from_level(level)) == level
        assert severity_from_level(Level.WARN + 1) == SeverityNumber.WARN
        assert severity_from_level(-20) == SeverityNumber.TRACE


class TestOtelToRecord:
    def test_fields_converted(self):
        record = otel_to_record(
            otel_record(
                body="Connection lost",
                severity=SeverityNumber.ERROR,
                peer="abc123",
                port=8765,
            )
        )
        assert record.message == "Connection lost"
        assert record.level == Level.ERROR
        assert [(a.key, a.value) for a in record.attrs] == [("peer", "abc123"), ("port", 8765)]
        assert record.time.tzinfo is not None

    def test_code_attributes_become_call_site(self):
        record = otel_to_record(
            otel_record(
                **{"code.filepath": "app/jobs.py", "code.lineno": 42, "code.function": "run"}
            )
        )
        assert record.call_site.file == "app/jobs.py"
        assert record.call_site.line == 42
        assert record.call_site.function == "run"
        assert record.attrs == []

    def test_missing_timestamp_falls_back(self):
        log_record = otel_record()
        log_record.timestamp = None
        before = time.time()
        record = otel_to_record(log_record)
        assert record.time.timestamp() >= before - 1


class TestSlackLogRecordExporter:
    def test_export_hands_records_to_handler(self, transport):
        exporter = SlackLogRecordExporter(new_slack_handler(URL, transport=transport))
        result = exporter.export([MockReadableLogRecord(otel_record(user="frodo"))])

        assert result == LogRecordExportResult.SUCCESS
        (_, message), = transport.sent
        assert message.blocks[4].text.text == "Test message"
        assert message.blocks[5].text == "*user*: `frodo`"

    def test_records_below_level_skipped(self, transport):
        handler = new_slack_handler(URL, transport=transport, level=Level.WARN)
        exporter = SlackLogRecordExporter(handler)
        result = exporter.export([MockReadableLogRecord(otel_record(severity=SeverityNumber.INFO))])

        assert result == LogRecordExportResult.SUCCESS
        assert transport.sent == []

    def test_handler_failure_reported(self, make_transport):
        failing = make_transport(fail_with=ConnectionError("down"))
        exporter = SlackLogRecordExporter(new_slack_handler(URL, transport=failing))
        result = exporter.export([MockReadableLogRecord(otel_record())])
        assert result == LogRecordExportResult.FAILURE

    def test_export_handles_empty_batch(self):
        handler = MagicMock(spec=SlackHandler)
        assert SlackLogRecordExporter(handler).export([]) == LogRecordExportResult.SUCCESS
        handler.handle.assert_not_called()

    def test_shutdown_and_flush_drain_handler(self):
        handler = MagicMock(spec=SlackHandler)
        exporter = SlackLogRecordExporter(handler)
        assert exporter.force_flush() is True
        exporter.shutdown()
        assert handler.shutdown.call_count == 2


class TestConfigureSlackLogging:
    def test_returns_provider(self, transport):
        provider = configure_slack_logging(URL, service_name="test-app", transport=transport)
        assert isinstance(provider, LoggerProvider)

    def test_empty_url_rejected(self):
        with pytest.raises(ConfigurationError):
            configure_slack_logging("")

    def test_end_to_end(self, transport):
        provider = configure_slack_logging(
            URL,
            service_name="billing",
            transport=transport,
            enable_async=True,
        )
        provider.get_logger("billing").emit(
            otel_record("Invoice run failed", SeverityNumber.ERROR, invoices=12)
        )
        provider.force_flush()

        (url, message), = transport.sent
        assert url == URL
        app_elements = message.blocks[1].elements
        assert app_elements[0].text == "billing"
        assert app_elements[1].text == ":no_entry: error"
        assert message.blocks[5].text == "*invoices*: `12`"
        provider.shutdown()

    def test_force_flush_waits_for_slow_async_delivery(self, make_transport):
        slow = make_transport(delay=0.05)
        provider = configure_slack_logging(URL, transport=slow, enable_async=True)
        logger = provider.get_logger("jobs")
        for i in range(3):
            logger.emit(otel_record("Job failed", SeverityNumber.ERROR, attempt=i))

        assert provider.force_flush() is True
        assert slow.completed == 3
        provider.shutdown()

    def test_caller_formatter_options_not_modified(self, transport):
        options = SlackMessageFormatterOptions()
        provider = configure_slack_logging(
            URL, service_name="billing", formatter_options=options, transport=transport
        )
        provider.get_logger("billing").emit(otel_record("Paid", SeverityNumber.WARN))

        assert options.application_name == ""
        assert transport.sent[0][1].blocks[1].elements[0].text == "billing"
        provider.shutdown()
