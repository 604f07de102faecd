"""OpenTelemetry bridge for slacklog.

Exports :class:`SlackLogRecordExporter`, which feeds OTel log records into a
:class:`~slacklog.handler.SlackHandler`, and :func:`configure_slack_logging`,
which builds a ``LoggerProvider`` wired to it.
"""

from .config import configure_slack_logging
from .exporter import SlackLogRecordExporter, otel_to_record

__all__ = [
    "configure_slack_logging",
    "SlackLogRecordExporter",
    "otel_to_record",
]
