"""Timer and rendering-frame scheduling for the shield.

Every suspension point of the shield goes through a ``Clock``: the debounce
window, the paste/cut/drop settle delay, the startup sweep and the
frame-coalesced position sync. Two implementations are provided:

- ``VirtualClock``: deterministic virtual time advanced explicitly by the
  host (tests, headless batch runs).
- ``AsyncioClock``: maps timers and frames onto a running asyncio loop.

All times are milliseconds.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import math
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable

__all__ = [
    "AsyncioClock",
    "Clock",
    "Handle",
    "VirtualClock",
]

DEFAULT_FRAME_INTERVAL_MS = 16.0


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class Handle(Protocol):
    """Cancellable reference to a queued callback."""

    def cancel(self) -> None:
        """Drop the callback; calling twice is a no-op."""
        ...


@runtime_checkable
class Clock(Protocol):
    """Source of time, delayed callbacks and rendering frames."""

    def now(self) -> float:
        """Current time in milliseconds."""
        ...

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> Handle:
        """Run *callback* once after *delay_ms*."""
        ...

    def request_frame(self, callback: Callable[[], None]) -> Handle:
        """Run *callback* before the next rendered frame."""
        ...


# ---------------------------------------------------------------------------
# VirtualClock
# ---------------------------------------------------------------------------


class _VirtualHandle:
    __slots__ = ("callback", "cancelled", "due")

    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualClock:
    """Deterministic clock driven by :meth:`advance`.

    Timers fire in due order (ties in scheduling order). Frame callbacks run
    in batches on frame boundaries, which fall on multiples of
    ``frame_interval_ms``; callbacks requested while a batch runs wait for
    the next boundary.

    Not thread-safe: the shield is single-threaded by design.
    """

    __slots__ = ("_frame_interval", "_frames", "_now", "_seq", "_timers")

    def __init__(self, *, frame_interval_ms: float = DEFAULT_FRAME_INTERVAL_MS) -> None:
        if frame_interval_ms <= 0:
            raise ValueError(f"frame_interval_ms must be positive, got {frame_interval_ms}")
        self._frame_interval = float(frame_interval_ms)
        self._now = 0.0
        self._seq = itertools.count()
        self._timers: list[tuple[float, int, _VirtualHandle]] = []
        self._frames: list[_VirtualHandle] = []

    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> Handle:
        handle = _VirtualHandle(self._now + max(0.0, float(delay_ms)), callback)
        heapq.heappush(self._timers, (handle.due, next(self._seq), handle))
        return handle

    def request_frame(self, callback: Callable[[], None]) -> Handle:
        handle = _VirtualHandle(self._next_frame_boundary(), callback)
        self._frames.append(handle)
        return handle

    @property
    def pending_timers(self) -> int:
        """Number of live (uncancelled) timers."""
        return sum(1 for _, _, handle in self._timers if not handle.cancelled)

    @property
    def pending_frames(self) -> int:
        """Number of live frame callbacks waiting for the next boundary."""
        return sum(1 for handle in self._frames if not handle.cancelled)

    def advance(self, ms: float) -> int:
        """Move time forward by *ms*, running everything that falls due.

        Returns
        -------
        int
            Number of callbacks executed.
        """
        if ms < 0:
            raise ValueError(f"cannot move time backwards ({ms} ms)")
        target = self._now + ms
        executed = 0
        while True:
            self._drop_cancelled_timers()
            timer_due = self._timers[0][0] if self._timers else math.inf
            frame_due = self._earliest_frame_due()
            if min(timer_due, frame_due) > target:
                break
            if timer_due <= frame_due:
                _, _, handle = heapq.heappop(self._timers)
                self._now = max(self._now, handle.due)
                handle.cancelled = True
                handle.callback()
                executed += 1
            else:
                self._now = max(self._now, frame_due)
                executed += self._run_frame_batch(due_by=self._now)
        self._now = target
        return executed

    def run_frame(self) -> int:
        """Run every pending frame callback immediately, without moving time."""
        return self._run_frame_batch(due_by=math.inf)

    def run_all(self, *, limit_ms: float = 60_000.0) -> int:
        """Advance until nothing is pending or *limit_ms* has elapsed."""
        executed = 0
        deadline = self._now + limit_ms
        while (self.pending_timers or self.pending_frames) and self._now < deadline:
            self._drop_cancelled_timers()
            next_due = min(
                self._timers[0][0] if self._timers else math.inf,
                self._earliest_frame_due(),
            )
            executed += self.advance(max(0.0, min(next_due, deadline) - self._now))
        return executed

    def _run_frame_batch(self, *, due_by: float) -> int:
        batch = [handle for handle in self._frames if handle.due <= due_by]
        self._frames = [handle for handle in self._frames if handle.due > due_by]
        executed = 0
        for handle in batch:
            if handle.cancelled:
                continue
            handle.cancelled = True
            handle.callback()
            executed += 1
        return executed

    def _earliest_frame_due(self) -> float:
        live = [handle.due for handle in self._frames if not handle.cancelled]
        return min(live) if live else math.inf

    def _next_frame_boundary(self) -> float:
        return (math.floor(self._now / self._frame_interval) + 1) * self._frame_interval

    def _drop_cancelled_timers(self) -> None:
        while self._timers and self._timers[0][2].cancelled:
            heapq.heappop(self._timers)


# ---------------------------------------------------------------------------
# AsyncioClock
# ---------------------------------------------------------------------------


class AsyncioClock:
    """Clock backed by an asyncio event loop.

    Frames are emulated as timers aligned to ``frame_interval_ms`` boundaries
    of the loop clock. When *loop* is omitted the running loop is looked up
    on each call, so the clock can be built before the loop starts.
    """

    __slots__ = ("_frame_interval", "_loop")

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        *,
        frame_interval_ms: float = 1000.0 / 60.0,
    ) -> None:
        if frame_interval_ms <= 0:
            raise ValueError(f"frame_interval_ms must be positive, got {frame_interval_ms}")
        self._loop = loop
        self._frame_interval = float(frame_interval_ms)

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop if self._loop is not None else asyncio.get_running_loop()

    def now(self) -> float:
        return self.loop.time() * 1000.0

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> Handle:
        return self.loop.call_later(max(0.0, delay_ms) / 1000.0, callback)

    def request_frame(self, callback: Callable[[], None]) -> Handle:
        now = self.now()
        boundary = (math.floor(now / self._frame_interval) + 1) * self._frame_interval
        return self.loop.call_later((boundary - now) / 1000.0, callback)
