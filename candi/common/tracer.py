"""Optional tracing of function entry and exit.

The core table and CSV functions are decorated with ``@traced``. While no
tracer is active the decorator is a plain call; inside a tracer context each
call reports a start and an end event.

Usage::

    from candi.common.tracer import TraceRecorder

    with TraceRecorder() as recorder:
        records = table_to_records(table, headers)

    for event in recorder.events:
        print(event.phase, event.name, event.summary)

LoggingTracer writes the same events to the ``candi.trace`` logger at the
TRACE level, which the CLI routes to ``--trace-file``.
"""

from __future__ import annotations

import contextvars
import logging
import reprlib
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from typing import Any, Protocol, TypeVar

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

trace_logger = logging.getLogger("candi.trace")

F = TypeVar("F", bound=Callable[..., Any])

_active_tracer: contextvars.ContextVar[Tracer | None] = contextvars.ContextVar(
    "candi_tracer", default=None
)

_summarizer = reprlib.Repr()
_summarizer.maxstring = 80
_summarizer.maxother = 80
_summarizer.maxlist = 5
_summarizer.maxdict = 5


def summarize(value: Any) -> str:
    """Short repr of a traced argument or return value."""
    return _summarizer.repr(value)


class Tracer(Protocol):
    """Receives entry and exit events from ``@traced`` functions."""

    def on_start(self, name: str, args: tuple[Any, ...]) -> None: ...

    def on_end(self, name: str, result: Any) -> None: ...


def get_active_tracer() -> Tracer | None:
    """Get the tracer active in the current context, if any."""
    return _active_tracer.get()


class _TracerContext:
    """Context manager installing ``self`` as the active tracer."""

    _token: contextvars.Token[Tracer | None] | None = None

    def __enter__(self):
        self._token = _active_tracer.set(self)  # type: ignore[arg-type]
        return self

    def __exit__(self, *args: Any) -> None:
        if self._token is not None:
            _active_tracer.reset(self._token)
            self._token = None


@dataclass(frozen=True)
class TraceEvent:
    """A single start or end event."""

    phase: str  # "start" or "end"
    name: str
    summary: str


class TraceRecorder(_TracerContext):
    """Tracer that keeps every event in memory."""

    def __init__(self) -> None:
        self.events: list[TraceEvent] = []

    def on_start(self, name: str, args: tuple[Any, ...]) -> None:
        summary = ", ".join(summarize(arg) for arg in args)
        self.events.append(TraceEvent("start", name, summary))

    def on_end(self, name: str, result: Any) -> None:
        self.events.append(TraceEvent("end", name, summarize(result)))

    def names(self, phase: str = "start") -> list[str]:
        """Names of the traced calls, in call order."""
        return [e.name for e in self.events if e.phase == phase]


class LoggingTracer(_TracerContext):
    """Tracer that logs ``Begin``/``End`` lines at TRACE level."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or trace_logger

    def on_start(self, name: str, args: tuple[Any, ...]) -> None:
        if self.logger.isEnabledFor(TRACE):
            rendered = ", ".join(summarize(arg) for arg in args)
            self.logger.log(TRACE, "Begin %s(%s)", name, rendered)

    def on_end(self, name: str, result: Any) -> None:
        if self.logger.isEnabledFor(TRACE):
            self.logger.log(TRACE, "End %s: %s", name, summarize(result))


def traced(fn: F) -> F:
    """Report calls of ``fn`` to the active tracer.

    Exceptions propagate untouched and produce no end event.
    """
    name = fn.__qualname__

    @wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        tracer = _active_tracer.get()
        if tracer is None:
            return fn(*args, **kwargs)

        tracer.on_start(name, args + tuple(kwargs.values()))
        result = fn(*args, **kwargs)
        tracer.on_end(name, result)
        return result

    return wrapper  # type: ignore[return-value]
