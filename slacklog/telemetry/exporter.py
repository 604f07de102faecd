"""OTel log-record exporter that delivers records through a SlackHandler.

Lets applications already instrumented with the OpenTelemetry logs API send
their records to Slack: plug :class:`SlackLogRecordExporter` into a
``LoggerProvider`` through a Simple or Batch processor.
"""

import time
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from opentelemetry._logs import LogRecord
from opentelemetry.sdk._logs.export import (
    LogRecordExporter,
    LogRecordExportResult,
)

from ..attrs import Attr, Group
from ..handler import SlackHandler
from ..levels import level_from_severity
from ..record import CallSite, Record

# Source-location attributes, current semantic convention names first.
_FILE_KEYS = ("code.file.path", "code.filepath")
_LINE_KEYS = ("code.line.number", "code.lineno")
_FUNCTION_KEYS = ("code.function.name", "code.function")


def _pop_first(attrs: dict[str, Any], keys: Sequence[str]) -> Any:
    found = None
    for key in keys:
        value = attrs.pop(key, None)
        if found is None:
            found = value
    return found


def _convert_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return Group(Attr(str(k), _convert_value(v)) for k, v in value.items())
    if isinstance(value, list):
        return tuple(_convert_value(v) for v in value)
    return value


def otel_to_record(log_record: LogRecord) -> Record:
    """Convert an OTel log record into a :class:`~slacklog.record.Record`.

    The timestamp falls back to the observed timestamp, then to now. The
    ``code.*`` attributes become the call site; the remaining attributes
    keep their order.
    """
    timestamp_ns = log_record.timestamp or log_record.observed_timestamp or time.time_ns()
    attrs = dict(log_record.attributes or {})

    file = _pop_first(attrs, _FILE_KEYS)
    line = _pop_first(attrs, _LINE_KEYS)
    function = _pop_first(attrs, _FUNCTION_KEYS)
    call_site = None
    if file is not None:
        call_site = CallSite(file=str(file), line=int(line or 0), function=str(function or ""))

    body = log_record.body
    return Record(
        time=datetime.fromtimestamp(timestamp_ns / 1e9, tz=UTC),
        level=level_from_severity(log_record.severity_number),
        message="" if body is None else str(body),
        attrs=[Attr(k, _convert_value(v)) for k, v in attrs.items()],
        call_site=call_site,
    )


class SlackLogRecordExporter(LogRecordExporter):
    """OTel LogRecordExporter that posts each record to Slack.

    Records below the handler's level are skipped. With an asynchronous
    handler ``export`` only schedules delivery; ``force_flush`` and
    ``shutdown`` wait for it.

    Example:
        >>> from opentelemetry.sdk._logs import LoggerProvider
        >>> from opentelemetry.sdk._logs.export import SimpleLogRecordProcessor
        >>>
        >>> exporter = SlackLogRecordExporter(new_slack_handler(url))
        >>> provider = LoggerProvider()
        >>> provider.add_log_record_processor(SimpleLogRecordProcessor(exporter))
    """

    def __init__(self, handler: SlackHandler):
        self._handler = handler

    @property
    def handler(self) -> SlackHandler:
        return self._handler

    def export(self, batch: Sequence[Any]) -> LogRecordExportResult:
        """Deliver a batch of log records.

        Args:
            batch: Sequence of ReadableLogRecord objects to export.

        Returns:
            LogRecordExportResult.SUCCESS when every record was handled,
            LogRecordExportResult.FAILURE if any of them raised.
        """
        result = LogRecordExportResult.SUCCESS
        for readable_record in batch:
            record = otel_to_record(readable_record.log_record)
            if not self._handler.enabled(record.level):
                continue
            try:
                self._handler.handle(record)
            except Exception:
                result = LogRecordExportResult.FAILURE
        return result

    def shutdown(self) -> None:
        """Wait for pending deliveries and release the handler's resources."""
        self._handler.shutdown(continue_on_error=True)

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        """Wait for pending asynchronous deliveries.

        Returns:
            True once nothing is left in flight.
        """
        self._handler.shutdown(continue_on_error=True)
        return True
