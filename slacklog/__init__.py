"""Convenience exports for the :mod:`slacklog` package."""

from .attrs import (  # noqa: F401
    Attr,
    Group,
    Kind,
    LogValuer,
    TextMarshaler,
    Uint64,
    consolidate_attrs,
    dedupe_attrs,
    flatten_attrs,
    group,
    group_value,
    resolve,
    sort_attrs,
)
from .blocks import (  # noqa: F401
    ContextBlock,
    DividerBlock,
    ImageElement,
    SectionBlock,
    SlackMessage,
    TextObject,
)
from .formatter import (  # noqa: F401
    FormatContext,
    RecordFormatter,
    SlackMessageFormatter,
    SlackMessageFormatterOptions,
    default_formatter_options,
    default_slack_message_formatter,
)
from .handler import SlackHandler, SlackHandlerOptions, new_slack_handler  # noqa: F401
from .levels import Level, level_from_severity, level_name, severity_from_level  # noqa: F401
from .logger import StructuredLogger  # noqa: F401
from .mechanism import ConfigurationError, FormattingError, SlackLogException  # noqa: F401
from .record import CallSite, Record  # noqa: F401
from .telemetry import SlackLogRecordExporter, configure_slack_logging  # noqa: F401
from .transport import HttpxWebhookTransport, WebhookTransport  # noqa: F401
from .values import ErrorValue, Masked, err  # noqa: F401

__all__ = [
    "SlackLogException",
    "FormattingError",
    "ConfigurationError",

    # attributes
    "Attr",
    "Group",
    "Kind",
    "LogValuer",
    "TextMarshaler",
    "Uint64",
    "group",
    "group_value",
    "resolve",
    "flatten_attrs",
    "sort_attrs",
    "dedupe_attrs",
    "consolidate_attrs",
    "ErrorValue",
    "Masked",
    "err",

    # levels and records
    "Level",
    "level_name",
    "level_from_severity",
    "severity_from_level",
    "CallSite",
    "Record",

    # message
    "SlackMessage",
    "DividerBlock",
    "ContextBlock",
    "SectionBlock",
    "TextObject",
    "ImageElement",

    # formatter
    "FormatContext",
    "RecordFormatter",
    "SlackMessageFormatter",
    "SlackMessageFormatterOptions",
    "default_formatter_options",
    "default_slack_message_formatter",

    # delivery
    "WebhookTransport",
    "HttpxWebhookTransport",
    "SlackHandler",
    "SlackHandlerOptions",
    "new_slack_handler",
    "StructuredLogger",

    # OpenTelemetry
    "SlackLogRecordExporter",
    "configure_slack_logging",
]
