"""Log records handed from loggers to handlers."""

import sys
from dataclasses import dataclass, field
from datetime import datetime
from types import FrameType
from typing import Any

from .attrs import Attr, to_attrs
from .levels import Level


@dataclass(frozen=True)
class CallSite:
    """Source location where a record was created."""

    file: str
    line: int
    function: str = ""

    @classmethod
    def from_frame(cls, frame: FrameType) -> "CallSite":
        code = frame.f_code
        return cls(file=code.co_filename, line=frame.f_lineno, function=code.co_name)

    @classmethod
    def capture(cls, depth: int = 1) -> "CallSite | None":
        """Capture the call site ``depth`` frames above the caller."""
        try:
            frame = sys._getframe(depth + 1)
        except ValueError:
            return None
        return cls.from_frame(frame)

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


@dataclass
class Record:
    """A single log event.

    Attributes given at construction or through :meth:`add_attrs` are
    resolved immediately, so self-describing values are reduced before any
    handler sees them.
    """

    time: datetime
    level: int
    message: str
    attrs: list[Attr] = field(default_factory=list)
    call_site: CallSite | None = None

    def __post_init__(self) -> None:
        self.attrs = to_attrs(self.attrs, {})

    @classmethod
    def now(cls, level: int = Level.INFO, message: str = "", *attrs: Attr, **kwattrs: Any) -> "Record":
        return cls(
            time=datetime.now().astimezone(),
            level=level,
            message=message,
            attrs=to_attrs(attrs, kwattrs),
        )

    def add_attrs(self, *attrs: Attr, **kwattrs: Any) -> None:
        self.attrs.extend(to_attrs(attrs, kwattrs))
