"""Structured attributes and the helpers that operate on them.

An :class:`Attr` is a key paired with a plain Python value. The kind of the
value (string, duration, nested group, ...) is inferred from its type by
:func:`kind_of`. Values may describe themselves through the
:class:`LogValuer` protocol; :func:`resolve` reduces such values to one of
the primitive kinds before they reach a formatter.

The helpers in this module never mutate their inputs.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from .utils import get_short_error_info

GROUP_SEPARATOR = "."

# Upper bound on chained log_value() calls before giving up.
MAX_RESOLVE_DEPTH = 100


class Kind(Enum):
    ANY = "any"
    BOOL = "bool"
    DURATION = "duration"
    FLOAT64 = "float64"
    INT64 = "int64"
    STRING = "string"
    TIME = "time"
    UINT64 = "uint64"
    GROUP = "group"


class Uint64(int):
    """An integer that renders as an unsigned value."""

    def __new__(cls, value: int = 0):
        if value < 0:
            raise ValueError(f"Uint64 cannot hold a negative value: {value}")
        return super().__new__(cls, value)


@runtime_checkable
class LogValuer(Protocol):
    """A value that supplies its own structured representation."""

    def log_value(self) -> Any: ...


@runtime_checkable
class TextMarshaler(Protocol):
    """A value that knows how to render itself as text."""

    def marshal_text(self) -> bytes | str: ...


@dataclass(frozen=True)
class Attr:
    """A key/value pair attached to a log record or a handler."""

    key: str
    value: Any

    @property
    def kind(self) -> Kind:
        return kind_of(self.value)

    def resolved(self) -> "Attr":
        """Return a copy whose value (and nested values) are fully resolved."""
        return Attr(self.key, resolve(self.value))

    def __str__(self) -> str:
        return f"{self.key}={self.value!r}"


class Group(tuple):
    """An ordered sequence of attributes used as the value of a group attribute."""

    def __new__(cls, attrs: Iterable[Attr] = ()):
        items = tuple(attrs)
        for item in items:
            if not isinstance(item, Attr):
                raise TypeError(f"Group members must be Attr, got {type(item).__name__}")
        return super().__new__(cls, items)

    def __repr__(self) -> str:
        return "[" + " ".join(str(a) for a in self) + "]"


def group(key: str, *attrs: Attr, **kwattrs: Any) -> Attr:
    """Build a group attribute from positional ``Attr``s and keyword pairs."""
    return Attr(key, group_value(*attrs, **kwattrs))


def group_value(*attrs: Attr, **kwattrs: Any) -> Group:
    """Build a group value, e.g. as the result of ``log_value()``."""
    members = list(attrs)
    members.extend(Attr(k, v) for k, v in kwattrs.items())
    return Group(members)


def kind_of(value: Any) -> Kind:
    # bool is an int subclass, so it must be checked first
    if isinstance(value, bool):
        return Kind.BOOL
    if isinstance(value, str):
        return Kind.STRING
    if isinstance(value, Uint64):
        return Kind.UINT64
    if isinstance(value, int):
        return Kind.INT64
    if isinstance(value, float):
        return Kind.FLOAT64
    if isinstance(value, timedelta):
        return Kind.DURATION
    if isinstance(value, datetime):
        return Kind.TIME
    if isinstance(value, Group):
        return Kind.GROUP
    return Kind.ANY


def resolve(value: Any) -> Any:
    """Reduce ``value`` through repeated ``log_value()`` calls.

    Group members are resolved recursively. A ``log_value()`` that raises,
    or a chain longer than :data:`MAX_RESOLVE_DEPTH`, yields an error string
    in place of the value instead of propagating.
    """
    for _ in range(MAX_RESOLVE_DEPTH):
        if isinstance(value, Group):
            return Group(a.resolved() for a in value)
        if not isinstance(value, LogValuer):
            return value
        try:
            value = value.log_value()
        except Exception as e:
            return f"!ERROR:log_value failed: {get_short_error_info(e)}"
    return f"!ERROR:log_value chain exceeded {MAX_RESOLVE_DEPTH} calls"


def resolve_attrs(attrs: Iterable[Attr]) -> list[Attr]:
    return [a.resolved() for a in attrs]


def to_attrs(args: Sequence[Any], kwargs: dict[str, Any]) -> list[Attr]:
    """Turn the variadic arguments of a logging call into resolved attributes.

    Positional arguments must already be ``Attr``s; keyword arguments become
    attributes in the order they were given.
    """
    attrs: list[Attr] = []
    for arg in args:
        if not isinstance(arg, Attr):
            raise TypeError(
                f"Positional attributes must be Attr instances, got {type(arg).__name__}"
            )
        attrs.append(arg)
    attrs.extend(Attr(k, v) for k, v in kwargs.items())
    return resolve_attrs(attrs)


def flatten_attrs(attrs: Iterable[Attr], separator: str = GROUP_SEPARATOR) -> list[Attr]:
    """Flatten nested groups into leaf attributes keyed by dotted paths.

    Group attributes never appear in the output and empty groups contribute
    nothing. A group with an empty key is inlined into its parent. Keys in
    the result are unique: a repeated path keeps the value of its last
    occurrence at the position of its first one.
    """
    flat: list[Attr] = []

    def walk(prefix: tuple[str, ...], items: Iterable[Attr]) -> None:
        for attr in items:
            value = resolve(attr.value)
            if isinstance(value, Group):
                walk(prefix + (attr.key,) if attr.key else prefix, value)
            else:
                flat.append(Attr(separator.join(prefix + (attr.key,)), value))

    walk((), attrs)
    return dedupe_attrs(flat)


def dedupe_attrs(attrs: Iterable[Attr]) -> list[Attr]:
    """Keep one attribute per key; the last value wins, the first position stays."""
    result: list[Attr] = []
    positions: dict[str, int] = {}
    for attr in attrs:
        if attr.key in positions:
            result[positions[attr.key]] = attr
        else:
            positions[attr.key] = len(result)
            result.append(attr)
    return result


def sort_attrs(attrs: Iterable[Attr]) -> list[Attr]:
    """Stable sort by key, applied recursively inside groups."""
    ordered = []
    for attr in attrs:
        if isinstance(attr.value, Group):
            attr = Attr(attr.key, Group(sort_attrs(attr.value)))
        ordered.append(attr)
    return sorted(ordered, key=lambda a: a.key)


def consolidate_attrs(inherited: Sequence[Attr], record_attrs: Iterable[Attr]) -> list[Attr]:
    """Merge a handler's inherited attributes with one record's attributes.

    Inherited attributes come first, already nested under whichever groups
    were open when they were attached; the record's own attributes follow.
    Duplicates are kept here: flattening resolves them, and this order is
    what makes the record's values win.
    """
    attrs = list(inherited)
    attrs.extend(record_attrs)
    return attrs
