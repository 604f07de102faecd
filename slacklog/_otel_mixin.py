"""OTel diagnostics for the handler's own failures."""

import time

from opentelemetry._logs import Logger
from opentelemetry._logs import LogRecord as OTelLogRecord

from .levels import Level, severity_from_level
from .utils import get_full_error_info


class OTelLoggingMixin:
    """Mixin providing _log() to components holding an optional OTel logger.

    Records are dropped when no logger is configured. Diagnostics never go
    through a Slack handler, so a failing webhook cannot feed back on itself.
    """

    _logger: Logger | None
    _name: str

    def _log(
        self,
        body: str,
        level: Level = Level.INFO,
        error: BaseException | None = None,
        **attrs: str | int,
    ) -> None:
        if self._logger is None:
            return
        attributes: dict[str, str | int] = {"component": self._name, **attrs}
        if error is not None:
            # OTel semantic convention names
            attributes["exception.type"] = type(error).__name__
            attributes["exception.message"] = str(error)
            attributes["exception.stacktrace"] = get_full_error_info(error)
        record = OTelLogRecord(
            timestamp=time.time_ns(),
            body=body,
            severity_text=level.name,
            severity_number=severity_from_level(level),
            attributes=attributes,
        )
        self._logger.emit(record)
