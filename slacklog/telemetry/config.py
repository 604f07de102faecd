"""One-call configuration of an OTel LoggerProvider that logs to Slack."""

from dataclasses import replace

from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import (
    BatchLogRecordProcessor,
    SimpleLogRecordProcessor,
)
from opentelemetry.sdk.resources import Resource

from ..formatter import SlackMessageFormatter, SlackMessageFormatterOptions
from ..handler import SlackHandler, SlackHandlerOptions
from ..levels import Level
from ..transport import WebhookTransport
from .exporter import SlackLogRecordExporter


class FlushingLogRecordProcessor(SimpleLogRecordProcessor):
    """Immediate export whose ``force_flush`` also reaches the exporter.

    ``SimpleLogRecordProcessor.force_flush`` returns without calling the
    exporter, which would leave asynchronous Slack deliveries pending.
    """

    def __init__(self, exporter: SlackLogRecordExporter):
        super().__init__(exporter)
        self._slack_exporter = exporter

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return self._slack_exporter.force_flush(timeout_millis)


def configure_slack_logging(
    webhook_url: str,
    service_name: str = "slacklog",
    service_version: str = "",
    level: int = Level.INFO,
    enable_async: bool = False,
    formatter_options: SlackMessageFormatterOptions | None = None,
    transport: WebhookTransport | None = None,
    batch_logs: bool = False,
) -> LoggerProvider:
    """
    Configure a LoggerProvider whose records are posted to Slack.

    Args:
        webhook_url: Slack incoming webhook URL.
        service_name: Service identifier for resource attributes. Also used
            as the application name when ``formatter_options`` does not set
            one.
        service_version: Service version for resource attributes.
        level: Minimum level delivered to Slack.
        enable_async: Deliver on the handler's background loop.
        formatter_options: Options for the message formatter.
        transport: Transport override, e.g. for tests.
        batch_logs: If True, use BatchLogRecordProcessor. If False, export immediately
            and make ``force_flush`` wait for asynchronous deliveries.

    Returns:
        LoggerProvider ready for ``get_logger()``.

    Raises:
        ConfigurationError: ``webhook_url`` is empty.

    Example:
        >>> provider = configure_slack_logging(
        ...     os.environ["SLACK_WEBHOOK_URL"],
        ...     service_name="billing",
        ...     level=Level.WARN,
        ...     enable_async=True,
        ... )
        >>> provider.get_logger("billing").emit(
        ...     LogRecord(body="Invoice run failed", severity_number=SeverityNumber.ERROR)
        ... )
    """
    options = replace(formatter_options) if formatter_options is not None else SlackMessageFormatterOptions()
    if not options.application_name:
        options.application_name = service_name

    handler = SlackHandler(
        SlackHandlerOptions(
            webhook_url=webhook_url,
            level=level,
            enable_async=enable_async,
            transport=transport,
            record_formatter=SlackMessageFormatter(options),
        )
    )

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.version": service_version,
        }
    )
    logger_provider = LoggerProvider(resource=resource)
    exporter = SlackLogRecordExporter(handler)
    if batch_logs:
        logger_provider.add_log_record_processor(BatchLogRecordProcessor(exporter))
    else:
        logger_provider.add_log_record_processor(FlushingLogRecordProcessor(exporter))
    return logger_provider
