"""Handler that delivers log records to a Slack incoming webhook."""

from collections.abc import Callable, Iterable
from concurrent.futures import CancelledError, Future
from dataclasses import dataclass, field, replace
from typing import Any

from opentelemetry._logs import LoggerProvider

from ._otel_mixin import OTelLoggingMixin
from .attrs import Attr, Group, consolidate_attrs, resolve_attrs
from .blocks import SlackMessage
from .dispatch import BackgroundLoop, OutstandingWork
from .formatter import RecordFormatter, default_slack_message_formatter
from .levels import Level
from .mechanism import ConfigurationError
from .record import Record
from .transport import HttpxWebhookTransport, WebhookTransport
from .utils import get_short_error_info

ErrorCallback = Callable[[BaseException, Record], None]


@dataclass
class SlackHandlerOptions:
    """Options for :class:`SlackHandler`.

    Attributes:
        webhook_url: Slack incoming webhook URL. Required.
        level: Minimum level passed by :meth:`SlackHandler.enabled`.
        enable_async: Deliver on a background event loop. Call
            :meth:`SlackHandler.shutdown` before exiting so pending records
            are sent.
        transport: Transport used to post messages. Defaults to
            :class:`~slacklog.transport.HttpxWebhookTransport`.
        record_formatter: Formatter used to build messages. Defaults to
            :func:`~slacklog.formatter.default_slack_message_formatter`.
        error_callback: Called with ``(exception, record)`` when an
            asynchronous dispatch fails.
        logger_provider: OpenTelemetry provider for the handler's own
            diagnostics. It must not route back into this handler.
    """

    webhook_url: str = ""
    level: int = Level.INFO
    enable_async: bool = False
    transport: WebhookTransport | None = None
    record_formatter: RecordFormatter | None = None
    error_callback: ErrorCallback | None = None
    logger_provider: LoggerProvider | None = None


@dataclass
class _Shared:
    """State shared by a root handler and every handler derived from it."""

    options: SlackHandlerOptions
    loop: BackgroundLoop = field(default_factory=BackgroundLoop)
    outstanding: OutstandingWork = field(default_factory=OutstandingWork)


class SlackHandler(OTelLoggingMixin):
    """Formats records and posts them to Slack.

    Handlers are immutable from the outside: :meth:`with_attrs` and
    :meth:`with_group` return new handlers and leave the receiver as it was,
    so one parent can be derived from concurrently. Derived handlers share
    the parent's options, background loop and outstanding work, and any of
    them can drain it with :meth:`shutdown`.

    Attributes attached to a handler and attributes of a record may repeat
    keys, including inside groups. The value seen last wins.

    Raises
    ------
    ConfigurationError
        ``webhook_url`` is empty.
    """

    def __init__(self, options: SlackHandlerOptions):
        if not options.webhook_url:
            raise ConfigurationError("webhook URL is required and cannot be empty")

        opts = replace(options)
        if opts.transport is None:
            opts.transport = HttpxWebhookTransport()
        if opts.record_formatter is None:
            opts.record_formatter = default_slack_message_formatter()

        self._shared = _Shared(options=opts)
        self._attrs: tuple[Attr, ...] = ()
        self._groups: tuple[str, ...] = ()
        self._active_group = ""

        self._name = "SlackHandler"
        self._logger = (
            opts.logger_provider.get_logger("slacklog.handler") if opts.logger_provider else None
        )

    @property
    def options(self) -> SlackHandlerOptions:
        return self._shared.options

    @property
    def attrs(self) -> tuple[Attr, ...]:
        """Attributes inherited by every record handled here."""
        return self._attrs

    @property
    def groups(self) -> tuple[str, ...]:
        """Open groups, outermost first."""
        return self._groups

    @property
    def active_group(self) -> str:
        return self._active_group

    def enabled(self, level: int) -> bool:
        return level >= self._shared.options.level

    def with_attrs(self, attrs: Iterable[Attr]) -> "SlackHandler":
        """Return a handler that adds ``attrs`` to every record.

        When a group is open the attributes are nested under it.
        """
        attrs = resolve_attrs(attrs)
        derived = self._derive()
        if not self._active_group:
            derived._attrs = self._attrs + tuple(attrs)
        else:
            derived._attrs = self._attrs + (Attr(self._active_group, Group(attrs)),)
        return derived

    def with_group(self, name: str) -> "SlackHandler":
        """Return a handler whose later attributes are nested under ``name``.

        An empty name returns an equivalent handler.
        """
        derived = self._derive()
        if name:
            derived._groups = self._groups + (name,)
            derived._active_group = name
        return derived

    def handle(self, record: Record) -> None:
        """Format ``record`` and deliver it.

        In synchronous mode formatting and delivery errors are raised here.
        In asynchronous mode the call returns at once; failures go to the
        diagnostic logger and the ``error_callback``.
        """
        opts = self._shared.options
        attrs = consolidate_attrs(self._attrs, record.attrs)
        if not opts.enable_async:
            self._send(self._format(record, attrs))
            return

        future = self._shared.loop.submit(self._dispatch(record, attrs))
        self._shared.outstanding.add(future)

    def shutdown(self, continue_on_error: bool = True) -> None:
        """Wait for every outstanding asynchronous dispatch to complete.

        All dispatches are awaited regardless of ``continue_on_error``. When
        it is ``False`` the first failure found is raised afterwards.

        Called from the background loop itself, e.g. by an
        ``error_callback``, only dispatches that already finished are
        collected; the rest are completed by the loop as it stops.
        """
        shared = self._shared
        failures: list[BaseException] = []
        on_loop = shared.loop.in_loop_thread()
        if on_loop:
            for future in shared.outstanding.drain():
                if future.done():
                    self._collect(future, failures)
                else:
                    shared.outstanding.add(future)
        else:
            self._wait_outstanding(failures)

        transport = shared.options.transport
        assert transport is not None
        shared.loop.stop(cleanup=transport.aclose)
        if not on_loop:
            # dispatches submitted while the loop was stopping
            self._wait_outstanding(failures)
        transport.close()

        if failures and not continue_on_error:
            raise failures[0]

    def _wait_outstanding(self, failures: list[BaseException]) -> None:
        while True:
            futures = self._shared.outstanding.drain()
            if not futures:
                return
            for future in futures:
                self._collect(future, failures)

    @staticmethod
    def _collect(future: Future, failures: list[BaseException]) -> None:
        try:
            future.result()
        except (Exception, CancelledError) as e:
            failures.append(e)

    def _derive(self) -> "SlackHandler":
        derived = object.__new__(type(self))
        derived.__dict__.update(self.__dict__)
        return derived

    def _format(self, record: Record, attrs: list[Attr]) -> SlackMessage:
        formatter = self._shared.options.record_formatter
        assert formatter is not None
        return formatter.format_record(
            record.time, record.level, record.call_site, record.message, attrs
        )

    def _send(self, message: SlackMessage) -> None:
        opts = self._shared.options
        assert opts.transport is not None
        opts.transport.post(opts.webhook_url, message)

    async def _dispatch(self, record: Record, attrs: list[Attr]) -> None:
        opts = self._shared.options
        assert opts.transport is not None
        try:
            message = self._format(record, attrs)
            await opts.transport.apost(opts.webhook_url, message)
        except Exception as e:
            self._log(
                f"Failed to deliver record: {get_short_error_info(e)}",
                Level.ERROR,
                error=e,
                record_message=record.message,
            )
            if opts.error_callback is not None:
                opts.error_callback(e, record)
            raise

    def __repr__(self) -> str:
        return f"SlackHandler(level={self._shared.options.level!r}, groups={list(self._groups)!r})"


def new_slack_handler(webhook_url: str, **options: Any) -> SlackHandler:
    """Shorthand for ``SlackHandler(SlackHandlerOptions(webhook_url, ...))``."""
    return SlackHandler(SlackHandlerOptions(webhook_url=webhook_url, **options))
