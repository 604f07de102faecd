"""Render log records as Slack webhook messages.

A rendered message is laid out as::

    divider
    context   [icon] [application name] level
    context   time prefix + time  (+ newline + source prefix + source)
    divider
    section   message text
    context   *key*: `value`      (one per attribute, when enabled)

Every part except the message text can be customised with a rendering hook.
Hooks receive a :class:`FormatContext` as their first argument, carrying the
formatter options and the level of the record being rendered.
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from .attrs import GROUP_SEPARATOR, Attr, Kind, TextMarshaler, flatten_attrs, kind_of, resolve
from .attrs import sort_attrs as sort_attr_list
from .blocks import (
    ContextElement,
    DividerBlock,
    ImageElement,
    SectionBlock,
    SlackMessage,
    TextObject,
    context_block,
    markdown,
)
from .levels import Level, level_name
from .mechanism import FormattingError
from .record import CallSite
from .utils import format_duration, format_rfc3339

SOURCE_PREFIX = "Source:\t\t\t"
TIME_PREFIX = "Occurred at:\t"
TIME_LAYOUT = "%I:%M:%S%p %Z"

_LEVEL_LABELS: dict[int, str] = {
    Level.TRACE: ":eyes: trace",
    Level.DEBUG: ":ladybug: debug",
    Level.INFO: ":information_source: info",
    Level.NOTICE: ":grey_exclamation: notice",
    Level.WARN: ":warning: warn",
    Level.ERROR: ":no_entry: error",
    Level.FATAL: ":rotating_light: fatal",
    Level.PANIC: ":sos: panic",
}


@dataclass(frozen=True)
class FormatContext:
    """Per-record parameters passed to every rendering hook."""

    options: "SlackMessageFormatterOptions"
    level: int


AttrFormatter = Callable[[FormatContext, str, str, Any], tuple[str, Any]]
LevelFormatter = Callable[[FormatContext, int], str]
TimeFormatter = Callable[[FormatContext, datetime], str]
SourceFormatter = Callable[[FormatContext, CallSite | None], str]


def format_level_default(ctx: FormatContext, level: int) -> str:
    """Emoji-prefixed lowercase level name; unknown levels use their plain name."""
    label = _LEVEL_LABELS.get(level)
    if label is not None:
        return label
    return level_name(level)


def format_time_default(ctx: FormatContext, timestamp: datetime) -> str:
    return timestamp.astimezone().strftime(TIME_LAYOUT)


def format_source_default(ctx: FormatContext, call_site: CallSite | None) -> str:
    if call_site is None:
        return ""
    return f"{call_site.file}:{call_site.line}"


@dataclass
class SlackMessageFormatterOptions:
    """Options for :class:`SlackMessageFormatter`.

    Attributes:
        application_icon_url: Icon shown next to the application name. Omitted
            when empty.
        application_name: Name shown above the message. Omitted when empty.
        attr_formatter: Hook applied to every attribute that has no entry in
            ``specific_attr_formatter``. When ``None`` attributes are rendered
            unchanged.
        ignore_attrs: Regular expressions matched against the flattened
            attribute key; matching attributes are dropped. Patterns that do
            not compile are skipped.
        include_attrs: Whether attributes are added to the message.
        include_source: Whether the call site is added below the time.
        level_formatter: Hook rendering the level.
        sort_attrs: Whether attributes are sorted by key before flattening.
        source_prefix: Text placed before the call site.
        source_formatter: Hook rendering the call site.
        specific_attr_formatter: Hooks keyed by flattened attribute key
            (``group.subgroup.attr``); these take precedence over
            ``attr_formatter``.
        time_prefix: Text placed before the time.
        time_formatter: Hook rendering the record time.
    """

    application_icon_url: str = ""
    application_name: str = ""
    attr_formatter: AttrFormatter | None = None
    ignore_attrs: list[str] = field(default_factory=list)
    include_attrs: bool = True
    include_source: bool = False
    level_formatter: LevelFormatter | None = None
    sort_attrs: bool = True
    source_prefix: str = SOURCE_PREFIX
    source_formatter: SourceFormatter | None = None
    specific_attr_formatter: dict[str, AttrFormatter] = field(default_factory=dict)
    time_prefix: str = TIME_PREFIX
    time_formatter: TimeFormatter | None = None


def default_formatter_options() -> SlackMessageFormatterOptions:
    """Options with every default hook filled in explicitly."""
    return SlackMessageFormatterOptions(
        level_formatter=format_level_default,
        source_formatter=format_source_default,
        time_formatter=format_time_default,
    )


class RecordFormatter(ABC):
    """Turns the parts of a log record into a Slack message."""

    @abstractmethod
    def format_record(
        self,
        timestamp: datetime,
        level: int,
        call_site: CallSite | None,
        message: str,
        attrs: Sequence[Attr],
    ) -> SlackMessage:
        """Build the message; raise instead of returning a partial message."""
        ...


class SlackMessageFormatter(RecordFormatter):
    """Formats records as Slack block messages.

    The formatter keeps no per-call state, so one instance can serve many
    handlers and threads at once.
    """

    def __init__(self, options: SlackMessageFormatterOptions | None = None):
        opts = replace(options) if options is not None else SlackMessageFormatterOptions()
        if not opts.time_prefix:
            opts.time_prefix = TIME_PREFIX
        if opts.include_source and not opts.source_prefix:
            opts.source_prefix = SOURCE_PREFIX
        self.options = opts

        self._ignored_attr_patterns: list[re.Pattern[str]] = []
        for pattern in opts.ignore_attrs:
            try:
                self._ignored_attr_patterns.append(re.compile(pattern))
            except re.error:
                continue

    def format_record(
        self,
        timestamp: datetime,
        level: int,
        call_site: CallSite | None,
        message: str,
        attrs: Sequence[Attr],
    ) -> SlackMessage:
        """Render one record.

        Duration attribute values are written in compact unit form (``5s``)
        and time values in UTC RFC 3339 form.

        Raises:
            FormattingError: A rendering hook raised; no message is produced.
        """
        opts = self.options
        ctx = FormatContext(options=opts, level=level)
        slack_message = SlackMessage(blocks=[DividerBlock()])

        # application name and level
        elements: list[ContextElement] = []
        if opts.application_icon_url:
            elements.append(
                ImageElement(image_url=opts.application_icon_url, alt_text=opts.application_name)
            )
        if opts.application_name:
            elements.append(markdown(opts.application_name))
        level_formatter = opts.level_formatter or format_level_default
        elements.append(markdown(self._call_hook("level", level_formatter, ctx, level)))
        slack_message.append(context_block(*elements))

        # time and source
        time_formatter = opts.time_formatter or format_time_default
        text = opts.time_prefix + self._call_hook("time", time_formatter, ctx, timestamp)
        if opts.include_source:
            source_formatter = opts.source_formatter or format_source_default
            source = self._call_hook("source", source_formatter, ctx, call_site)
            text = f"{text}\n{opts.source_prefix}{source}"
        slack_message.append(context_block(markdown(text)))

        slack_message.append(DividerBlock(), SectionBlock(text=markdown(message)))

        if opts.include_attrs:
            if opts.sort_attrs:
                attrs = sort_attr_list(attrs)
            for attr in flatten_attrs(attrs):
                element = self._attr_to_element(ctx, attr.key, attr.value)
                if element is not None:
                    slack_message.append(context_block(element))
        return slack_message

    def is_ignored(self, key: str) -> bool:
        return any(p.search(key) for p in self._ignored_attr_patterns)

    def _attr_to_element(self, ctx: FormatContext, key: str, value: Any) -> TextObject | None:
        if self.is_ignored(key):
            return None

        group, _, attr_key = key.rpartition(GROUP_SEPARATOR)

        hook = self.options.specific_attr_formatter.get(key) or self.options.attr_formatter
        if hook is not None:
            key, value = self._call_hook(f"attribute '{key}'", hook, ctx, group, attr_key, value)
        value = resolve(value)

        try:
            text = render_value(value)
        except Exception as e:
            raise FormattingError(e, source=type(self).__name__, note=f"attribute '{key}'") from e
        return markdown(f"*{key}*: `{text}`")

    def _call_hook(self, what: str, hook: Callable[..., Any], *args: Any) -> Any:
        try:
            return hook(*args)
        except FormattingError:
            raise
        except Exception as e:
            raise FormattingError(e, source=type(self).__name__, note=f"{what} formatter") from e


def render_value(value: Any) -> str:
    """Default textual form of a resolved attribute value."""
    kind = kind_of(value)
    if kind == Kind.BOOL:
        return "true" if value else "false"
    if kind == Kind.STRING:
        return value
    if kind == Kind.DURATION:
        return format_duration(value)
    if kind == Kind.TIME:
        return format_rfc3339(value)
    if kind == Kind.FLOAT64:
        return f"{value:f}"
    if kind in (Kind.INT64, Kind.UINT64):
        return str(int(value))
    if kind == Kind.GROUP:
        # flattened attributes never carry groups
        return repr(value)
    if isinstance(value, TextMarshaler):
        output = value.marshal_text()
        if isinstance(output, bytes):
            return output.decode("utf-8")
        return str(output)
    return repr(value)


def default_slack_message_formatter() -> SlackMessageFormatter:
    """A formatter with typical defaults."""
    return SlackMessageFormatter(default_formatter_options())
