"""Log events, and handlers that write them as text lines or as GCP JSON."""

from __future__ import annotations

import json
import math
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Protocol, TextIO

LOG_KIND = "log"
"""The kind of event that carries a log message."""


class _Severity(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _format_float(f: float) -> str:
    """Format f as the shortest %g representation."""
    if math.isnan(f):
        return "NaN"
    if math.isinf(f):
        return "+Inf" if f > 0 else "-Inf"
    if f == 0:
        return "-0" if math.copysign(1.0, f) < 0 else "0"
    sign, digit_tuple, exponent = Decimal(repr(f)).as_tuple()
    digits = list(digit_tuple)
    while len(digits) > 1 and digits[-1] == 0:
        digits.pop()
        exponent += 1
    nd = len(digits)
    dp = nd + exponent
    ds = "".join(str(d) for d in digits)
    neg = "-" if sign else ""
    exp = dp - 1
    if exp < -4 or exp >= 6:
        mantissa = ds[0] + ("." + ds[1:] if nd > 1 else "")
        esign = "-" if exp < 0 else "+"
        return f"{neg}{mantissa}e{esign}{abs(exp):02d}"
    if dp <= 0:
        return f"{neg}0.{'0' * -dp}{ds}"
    if dp >= nd:
        return f"{neg}{ds}{'0' * (dp - nd)}"
    return f"{neg}{ds[:dp]}.{ds[dp:]}"


def _frac(n: int, unit: int) -> str:
    whole, rest = divmod(n, unit)
    if not rest:
        return str(whole)
    width = len(str(unit)) - 1
    return f"{whole}.{str(rest).rjust(width, '0').rstrip('0')}"


def _format_duration(d: timedelta) -> str:
    ns = (d.days * 86400 + d.seconds) * 10**9 + d.microseconds * 1000
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    ns = abs(ns)
    if ns < 10**3:
        return f"{sign}{ns}ns"
    if ns < 10**6:
        return f"{sign}{_frac(ns, 10**3)}µs"
    if ns < 10**9:
        return f"{sign}{_frac(ns, 10**6)}ms"
    hours, rest = divmod(ns, 3600 * 10**9)
    minutes, rest = divmod(rest, 60 * 10**9)
    text = f"{_frac(rest, 10**9)}s"
    if hours:
        text = f"{hours}h{minutes}m{text}"
    elif minutes:
        text = f"{minutes}m{text}"
    return sign + text


@dataclass(frozen=True)
class Label:
    """A named value attached to an event. A value of None means no value."""

    name: str
    value: Any = None

    def __str__(self) -> str:
        v = self.value
        if v is None:
            return ""
        if isinstance(v, bool):
            return "true" if v else "false"
        if isinstance(v, Enum):
            return str(v.value)
        if isinstance(v, int):
            return str(v)
        if isinstance(v, float):
            return _format_float(v)
        if isinstance(v, timedelta):
            return _format_duration(v)
        return str(v)


def _now() -> datetime:
    return datetime.now().astimezone()


@dataclass
class Event:
    """Something that happened, with the time it happened and its labels."""

    at: datetime = field(default_factory=_now)
    labels: list[Label] = field(default_factory=list)
    kind: str = LOG_KIND


class _Handler(Protocol):
    def event(self, ev: Event) -> None: ...


def _quote(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


class LineHandler:
    """Writes log events one per line: time level message name=value ..."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._lock = threading.Lock()

    def event(self, ev: Event) -> None:
        """Write ev if it is a log event; ignore other events."""
        if ev.kind != LOG_KIND:
            return
        msg = level = ""
        others = []
        for lab in ev.labels:
            if lab.name == "msg":
                msg = str(lab)
            elif lab.name == "level":
                level = str(lab).upper()
            else:
                others.append(f"{lab.name}={lab}")
        suffix = " " + " ".join(others) if others else ""
        if level:
            level = " " + level
        line = f"{ev.at:%Y/%m/%d %H:%M:%S}{level} {msg}{suffix}\n"
        with self._lock:
            self._stream.write(line)


def _rfc3339(at: datetime) -> str:
    if at.tzinfo is None:
        at = at.astimezone()
    base = at.strftime("%Y-%m-%dT%H:%M:%S")
    offset = at.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return base + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{base}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _json_value(lab: Label) -> str:
    v = lab.value
    if v is None:
        return "null"
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, int) and not isinstance(v, Enum):
        return str(v)
    if isinstance(v, float):
        return _format_float(v)
    return _quote(str(lab))


class GCPJSONHandler:
    """Writes log events as JSON lines understood by Google Cloud logging."""

    def __init__(self, stream: TextIO, trace_id: str = "") -> None:
        self._stream = stream
        self.trace_id = trace_id
        self._lock = threading.Lock()

    def event(self, ev: Event) -> None:
        """Write ev if it is a log event; ignore other events."""
        if ev.kind != LOG_KIND:
            return
        parts = [f'{{"time": {_quote(_rfc3339(ev.at))}']
        if self.trace_id:
            parts.append(f', "logging.googleapis.com/trace": {_quote(self.trace_id)}')
        extra: dict[str, str] = {}
        for lab in ev.labels:
            if lab.name == "msg":
                key = "message"
            elif lab.name == "level":
                key = "severity"
            else:
                extra[lab.name] = str(lab)
                continue
            parts.append(f", {_quote(key)}: {_json_value(lab)}")
        if extra:
            body = ", ".join(f"{_quote(k)}: {_quote(v)}" for k, v in extra.items())
            parts.append(f', "logging.googleapis.com/labels": {{{body}}}')
        parts.append("}\n")
        with self._lock:
            self._stream.write("".join(parts))


_handler_lock = threading.Lock()
_handler: _Handler | None = None


def set_handler(handler: _Handler | None) -> _Handler | None:
    """Install the handler that receives log events; return the previous one.

    With no handler installed, log events are discarded.
    """
    global _handler
    with _handler_lock:
        previous, _handler = _handler, handler
    return previous


def _pair_to_label(name: Any, value: Any) -> Label:
    if not isinstance(name, str):
        raise TypeError(f"label name must be a string, not {type(name).__name__}")
    return Label(name, value)


class Labels(tuple):
    """An immutable sequence of labels to attach to log events."""

    def __new__(cls, labels: Any = ()) -> Labels:
        return super().__new__(cls, labels)

    def with_(self, *args: Any) -> Labels:
        """Return these labels extended by the given name, value pairs."""
        if len(args) % 2:
            raise ValueError("args must be key-value pairs")
        added = (_pair_to_label(k, v) for k, v in zip(args[::2], args[1::2]))
        return Labels((*self, *added))

    def _log(self, level: _Severity, fmt: str, args: tuple) -> None:
        handler = _handler
        if handler is None:
            return
        message = fmt % args if args else fmt
        labels = [*self, Label("level", level.value), Label("msg", message)]
        handler.event(Event(at=_now(), labels=labels))

    def debug(self, fmt: str, *args: Any) -> None:
        """Log a debug message with these labels."""
        self._log(_Severity.DEBUG, fmt, args)

    def info(self, fmt: str, *args: Any) -> None:
        """Log an informational message with these labels."""
        self._log(_Severity.INFO, fmt, args)

    def warning(self, fmt: str, *args: Any) -> None:
        """Log a warning with these labels."""
        self._log(_Severity.WARNING, fmt, args)

    def error(self, fmt: str, *args: Any) -> None:
        """Log an error with these labels."""
        self._log(_Severity.ERROR, fmt, args)


def with_labels(*args: Any) -> Labels:
    """Return labels built from name, value pairs."""
    return Labels().with_(*args)


def debug(fmt: str, *args: Any) -> None:
    """Log a debug message."""
    Labels().debug(fmt, *args)


def info(fmt: str, *args: Any) -> None:
    """Log an informational message."""
    Labels().info(fmt, *args)


def warning(fmt: str, *args: Any) -> None:
    """Log a warning."""
    Labels().warning(fmt, *args)


def error(fmt: str, *args: Any) -> None:
    """Log an error."""
    Labels().error(fmt, *args)