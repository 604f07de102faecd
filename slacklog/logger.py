"""Structured logger front-end for :class:`~slacklog.handler.SlackHandler`."""

from datetime import datetime
from typing import Any

from .attrs import Attr, to_attrs
from .handler import SlackHandler
from .levels import Level
from .record import CallSite, Record


class StructuredLogger:
    """Thin logger that builds records and hands them to a handler.

    Provides one method per level plus :meth:`with_attrs` and
    :meth:`with_group`, which derive child loggers bound to derived handlers.
    Attributes are given as positional ``Attr`` objects or keyword pairs.

    Example:
        >>> handler = new_slack_handler(url, enable_async=True)
        >>> logger = StructuredLogger(handler)
        >>> logger.info("Deployed", version="1.4.2")
        >>> job_logger = logger.with_group("job").with_attrs(id=42)
        >>> job_logger.error("Job failed", err("error", exc))
        >>> logger.shutdown()
    """

    def __init__(self, handler: SlackHandler):
        self._handler = handler

    @property
    def handler(self) -> SlackHandler:
        return self._handler

    def enabled(self, level: int) -> bool:
        return self._handler.enabled(level)

    def log(self, level: int, message: str, *attrs: Attr, **kwattrs: Any) -> None:
        self._emit(level, message, attrs, kwattrs)

    def trace(self, message: str, *attrs: Attr, **kwattrs: Any) -> None:
        self._emit(Level.TRACE, message, attrs, kwattrs)

    def debug(self, message: str, *attrs: Attr, **kwattrs: Any) -> None:
        self._emit(Level.DEBUG, message, attrs, kwattrs)

    def info(self, message: str, *attrs: Attr, **kwattrs: Any) -> None:
        self._emit(Level.INFO, message, attrs, kwattrs)

    def notice(self, message: str, *attrs: Attr, **kwattrs: Any) -> None:
        self._emit(Level.NOTICE, message, attrs, kwattrs)

    def warning(self, message: str, *attrs: Attr, **kwattrs: Any) -> None:
        self._emit(Level.WARN, message, attrs, kwattrs)

    def error(self, message: str, *attrs: Attr, **kwattrs: Any) -> None:
        self._emit(Level.ERROR, message, attrs, kwattrs)

    def fatal(self, message: str, *attrs: Attr, **kwattrs: Any) -> None:
        """Log at FATAL. Does not exit the process."""
        self._emit(Level.FATAL, message, attrs, kwattrs)

    def panic(self, message: str, *attrs: Attr, **kwattrs: Any) -> None:
        """Log at PANIC. Does not raise."""
        self._emit(Level.PANIC, message, attrs, kwattrs)

    def with_attrs(self, *attrs: Attr, **kwattrs: Any) -> "StructuredLogger":
        """Derive a child logger whose records carry the given attributes."""
        return StructuredLogger(self._handler.with_attrs(to_attrs(attrs, kwattrs)))

    def with_group(self, name: str) -> "StructuredLogger":
        """Derive a child logger that nests later attributes under ``name``."""
        return StructuredLogger(self._handler.with_group(name))

    def shutdown(self, continue_on_error: bool = True) -> None:
        self._handler.shutdown(continue_on_error)

    def _emit(self, level: int, message: str, attrs: tuple, kwattrs: dict) -> None:
        if not self._handler.enabled(level):
            return
        record = Record(
            time=datetime.now().astimezone(),
            level=level,
            message=message,
            attrs=to_attrs(attrs, kwattrs),
            # skip _emit and the public level method
            call_site=CallSite.capture(depth=2),
        )
        self._handler.handle(record)
