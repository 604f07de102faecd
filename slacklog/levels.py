"""The ordered severity scale used by handlers and formatters."""

from enum import IntEnum

from opentelemetry._logs import SeverityNumber


class Level(IntEnum):
    TRACE = -8
    DEBUG = -4
    INFO = 0
    NOTICE = 2
    WARN = 4
    ERROR = 8
    FATAL = 12
    PANIC = 16

    @classmethod
    def parse(cls, name: str) -> "Level":
        """Look up a level by name, case-insensitively.

        ``WARNING`` and ``CRITICAL`` are accepted as aliases so names coming
        from the standard library resolve too.
        """
        key = name.strip().upper()
        key = _ALIASES.get(key, key)
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown level '{name}'.") from None


_ALIASES = {"WARNING": "WARN", "CRITICAL": "FATAL"}


def level_name(level: int) -> str:
    """Return the textual form of an arbitrary integer level.

    Named levels render as their name. Other values render as the nearest
    named level below them plus a signed offset, e.g. ``INFO+1`` or
    ``TRACE-3``.
    """
    try:
        return Level(level).name
    except ValueError:
        pass
    base = Level.TRACE
    for candidate in Level:
        if candidate <= level:
            base = candidate
    offset = int(level) - int(base)
    return f"{base.name}{offset:+d}"


def level_from_severity(severity: SeverityNumber | None) -> Level:
    """Map an OpenTelemetry severity number onto the level scale."""
    if severity is None or severity == SeverityNumber.UNSPECIFIED:
        return Level.INFO
    value = severity.value
    if value <= SeverityNumber.TRACE4.value:
        return Level.TRACE
    if value <= SeverityNumber.DEBUG4.value:
        return Level.DEBUG
    if value == SeverityNumber.INFO.value:
        return Level.INFO
    if value <= SeverityNumber.INFO4.value:
        return Level.NOTICE
    if value <= SeverityNumber.WARN4.value:
        return Level.WARN
    if value <= SeverityNumber.ERROR4.value:
        return Level.ERROR
    if value == SeverityNumber.FATAL.value:
        return Level.FATAL
    return Level.PANIC


_SEVERITIES = {
    Level.TRACE: SeverityNumber.TRACE,
    Level.DEBUG: SeverityNumber.DEBUG,
    Level.INFO: SeverityNumber.INFO,
    Level.NOTICE: SeverityNumber.INFO2,
    Level.WARN: SeverityNumber.WARN,
    Level.ERROR: SeverityNumber.ERROR,
    Level.FATAL: SeverityNumber.FATAL,
    Level.PANIC: SeverityNumber.FATAL4,
}


def severity_from_level(level: int) -> SeverityNumber:
    """Map a level onto the OpenTelemetry severity of the named level at or below it."""
    base = Level.TRACE
    for candidate in Level:
        if candidate <= level:
            base = candidate
    return _SEVERITIES[base]
