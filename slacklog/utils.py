"""Utility helpers used across ``slacklog`` modules."""

import traceback
from datetime import datetime, timedelta, timezone


def get_short_error_info(e: BaseException) -> str:
    """
    Get a short error information from an exception.

    Args:
        e (BaseException): The exception to get the error information from.

    Returns:
        str: A short error information.
    """
    return f"{type(e).__name__}: {str(e)}"


# the function to get the full error information from an exception.
def get_full_error_info(e: BaseException) -> str:
    """
    Get the full error information from an exception.

    Args:
        e (BaseException): The exception to get the error information from.

    Returns:
        str: The full error information.
    """
    return "".join(traceback.format_exception(type(e), e, e.__traceback__))


def format_duration(d: timedelta) -> str:
    """Render a duration in compact unit form: ``5s``, ``1m30s``, ``250ms``.

    Hours and minutes are only written when non-zero or when a larger unit
    precedes them (``1h0m0s``). Sub-second durations use ``ms`` or ``µs``.
    """
    micros = d // timedelta(microseconds=1)
    if micros == 0:
        return "0s"
    sign = "-" if micros < 0 else ""
    micros = abs(micros)
    if micros < 1_000:
        return f"{sign}{micros}µs"
    if micros < 1_000_000:
        return f"{sign}{_with_fraction(micros, 1_000)}ms"

    hours, rem = divmod(micros, 3_600_000_000)
    minutes, rem = divmod(rem, 60_000_000)
    text = ""
    if hours:
        text += f"{hours}h"
    if hours or minutes:
        text += f"{minutes}m"
    return f"{sign}{text}{_with_fraction(rem, 1_000_000)}s"


def _with_fraction(value: int, unit: int) -> str:
    whole, frac = divmod(value, unit)
    if not frac:
        return str(whole)
    digits = len(str(unit)) - 1
    return f"{whole}.{frac:0{digits}d}".rstrip("0")


def format_rfc3339(t: datetime) -> str:
    """Render a timestamp in UTC as ``YYYY-MM-DDTHH:MM:SSZ``.

    Naive datetimes are taken to already be in UTC.
    """
    if t.tzinfo is None:
        t = t.replace(tzinfo=timezone.utc)
    return t.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
