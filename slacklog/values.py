"""Self-describing values for common domain objects.

Both classes implement :class:`~slacklog.attrs.LogValuer`, so they are
reduced to plain strings or groups as soon as they are attached to a
record or handler.
"""

from typing import Any

from .attrs import Attr, Group

MASK = "********"

# Deepest cause chain rendered by ErrorValue.
MAX_ERROR_DEPTH = 16


class Masked:
    """Wraps a sensitive value so that only a fixed placeholder is ever logged."""

    __slots__ = ("_value", "_placeholder")

    def __init__(self, value: Any, placeholder: str = MASK):
        self._value = value
        self._placeholder = placeholder

    @property
    def value(self) -> Any:
        return self._value

    def log_value(self) -> str:
        return self._placeholder

    def __repr__(self) -> str:
        return self._placeholder

    __str__ = __repr__


class ErrorValue:
    """Renders an exception, its cause chain and any nested exceptions as a group.

    The group holds ``message`` and ``type``, then ``code`` when the
    exception carries an integer ``code`` attribute, ``attrs`` when it
    exposes a ``log_attrs()`` mapping, ``cause`` for the explicit or implicit
    cause, and ``nested`` (entries ``000``, ``001``, ...) for the members of
    an exception group.
    """

    def __init__(self, error: BaseException, _depth: int = 0):
        self.error = error
        self._depth = _depth

    def log_value(self) -> Group:
        e = self.error
        members = [Attr("message", str(e)), Attr("type", type(e).__name__)]

        code = getattr(e, "code", None)
        if isinstance(code, int) and not isinstance(code, bool):
            members.append(Attr("code", code))

        log_attrs = getattr(e, "log_attrs", None)
        if callable(log_attrs):
            members.append(
                Attr("attrs", Group(Attr(str(k), v) for k, v in log_attrs().items()))
            )

        if self._depth + 1 < MAX_ERROR_DEPTH:
            cause = e.__cause__
            if cause is None and not e.__suppress_context__:
                cause = e.__context__
            if cause is not None:
                members.append(Attr("cause", ErrorValue(cause, self._depth + 1)))

            if isinstance(e, BaseExceptionGroup):
                nested = [
                    Attr(f"{i:03d}", ErrorValue(inner, self._depth + 1))
                    for i, inner in enumerate(e.exceptions)
                ]
                members.append(Attr("nested", Group(nested)))

        return Group(members)

    def __repr__(self) -> str:
        return f"ErrorValue({self.error!r})"


def err(key: str, error: BaseException) -> Attr:
    """Attach an exception as a structured attribute."""
    return Attr(key, ErrorValue(error))
