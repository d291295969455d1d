"""Signals, a millisecond event loop and timers used by the observers."""

from __future__ import annotations

import heapq
import itertools
import time
from dataclasses import dataclass
from typing import Any, Callable


class Signal:
    """A list of callables that are invoked, in connection order, on emit."""

    def __init__(self) -> None:
        self._slots: list[Callable[..., Any]] = []

    def connect(self, slot: Callable[..., Any]) -> None:
        self._slots.append(slot)

    def disconnect(self, slot: Callable[..., Any]) -> None:
        try:
            self._slots.remove(slot)
        except ValueError:
            raise ValueError("slot is not connected to this signal") from None

    def emit(self, *args: Any) -> None:
        for slot in list(self._slots):
            slot(*args)


@dataclass(eq=False)
class _Call:
    due: float
    callback: Callable[[], Any]
    cancelled: bool = False


class EventLoop:
    """Runs scheduled callbacks against a clock measured in milliseconds.

    The clock only moves through ``advance`` (instantly) or ``run_for``
    (sleeping in real time between deadlines).
    """

    def __init__(self) -> None:
        self._now: float = 0
        self._queue: list[tuple[float, int, _Call]] = []
        self._counter = itertools.count()
        self._stopped = False

    @property
    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[[], Any]) -> _Call:
        if delay_ms < 0:
            raise ValueError("delay must not be negative")
        call = _Call(self._now + delay_ms, callback)
        heapq.heappush(self._queue, (call.due, next(self._counter), call))
        return call

    def cancel(self, handle: _Call) -> None:
        handle.cancelled = True

    def stop(self) -> None:
        """Make a running ``run_for`` return after the current callback."""
        self._stopped = True

    def _next_due(self) -> float | None:
        while self._queue and self._queue[0][2].cancelled:
            heapq.heappop(self._queue)
        return self._queue[0][0] if self._queue else None

    def _run_due(self, until: float) -> None:
        while not self._stopped:
            due = self._next_due()
            if due is None or due > until:
                return
            _, _, call = heapq.heappop(self._queue)
            self._now = due
            call.cancelled = True
            call.callback()

    def advance(self, ms: float) -> None:
        if ms < 0:
            raise ValueError("cannot move the clock backwards")
        self._stopped = False
        target = self._now + ms
        self._run_due(target)
        self._now = target

    def run_for(self, duration_ms: float) -> None:
        if duration_ms < 0:
            raise ValueError("duration must not be negative")
        self._stopped = False
        origin = self._now
        target = origin + duration_ms
        started = time.monotonic()
        while True:
            due = self._next_due()
            wake = target if due is None or due > target else due
            remaining = (wake - origin) / 1000 - (time.monotonic() - started)
            if remaining > 0:
                time.sleep(remaining)
            self._run_due(wake)
            if self._stopped:
                return
            if wake >= target:
                break
        self._now = target


class Timer:
    """A restartable timer that emits ``timeout`` on an event loop."""

    def __init__(self, loop: EventLoop, interval_ms: float = 0, single_shot: bool = False) -> None:
        self.timeout = Signal()
        self.interval = interval_ms
        self.single_shot = single_shot
        self._loop = loop
        self._handle: _Call | None = None

    @property
    def is_active(self) -> bool:
        return self._handle is not None

    def start(self, interval_ms: float | None = None) -> None:
        if interval_ms is not None:
            self.interval = interval_ms
        self.stop()
        self._schedule()

    def stop(self) -> None:
        if self._handle is not None:
            self._loop.cancel(self._handle)
            self._handle = None

    def _schedule(self) -> None:
        self._handle = self._loop.call_later(self.interval, self._fire)

    def _fire(self) -> None:
        if self.single_shot:
            self._handle = None
        else:
            self._schedule()
        self.timeout.emit()