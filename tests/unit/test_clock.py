"""Tests for privacy_shield.clock - virtual and asyncio-backed clocks."""

from __future__ import annotations

import asyncio

import pytest

from privacy_shield.clock import AsyncioClock, Clock, VirtualClock


class TestVirtualTimers:
    """Timers fire in due order as time advances."""

    def test_timer_fires_when_due(self, clock: VirtualClock) -> None:
        """A 300 ms timer fires at 300 ms, not before."""
        fired: list[float] = []
        clock.call_later(300, lambda: fired.append(clock.now()))
        clock.advance(299)
        assert fired == []
        clock.advance(1)
        assert fired == [300]

    def test_due_order_and_fifo_ties(self, clock: VirtualClock) -> None:
        """Earlier deadlines first, scheduling order on ties."""
        order: list[str] = []
        clock.call_later(20, lambda: order.append("late"))
        clock.call_later(10, lambda: order.append("a"))
        clock.call_later(10, lambda: order.append("b"))
        clock.advance(50)
        assert order == ["a", "b", "late"]

    def test_cancelled_timer_never_runs(self, clock: VirtualClock) -> None:
        """cancel() is final and idempotent."""
        fired: list[int] = []
        handle = clock.call_later(5, lambda: fired.append(1))
        handle.cancel()
        handle.cancel()
        assert clock.advance(10) == 0
        assert fired == []
        assert clock.pending_timers == 0

    def test_timer_scheduled_by_timer_runs_in_same_advance(self, clock: VirtualClock) -> None:
        """Chained timers inside the window fire during one advance."""
        fired: list[float] = []
        clock.call_later(100, lambda: clock.call_later(100, lambda: fired.append(clock.now())))
        clock.advance(250)
        assert fired == [200]
        assert clock.now() == 250

    def test_negative_advance_rejected(self, clock: VirtualClock) -> None:
        """Time never moves backwards."""
        with pytest.raises(ValueError):
            clock.advance(-1)


class TestVirtualFrames:
    """Frame callbacks run on frame boundaries."""

    def test_frame_runs_on_next_boundary(self, clock: VirtualClock) -> None:
        """A frame requested at t=0 runs at t=16."""
        ran: list[float] = []
        clock.request_frame(lambda: ran.append(clock.now()))
        clock.advance(15)
        assert ran == []
        clock.advance(1)
        assert ran == [16]

    def test_run_frame_flushes_without_moving_time(self, clock: VirtualClock) -> None:
        """run_frame executes pending frames immediately."""
        ran: list[int] = []
        clock.request_frame(lambda: ran.append(1))
        assert clock.run_frame() == 1
        assert ran == [1]
        assert clock.now() == 0

    def test_frame_requested_during_frame_waits(self, clock: VirtualClock) -> None:
        """Requests made inside a batch go to the next boundary."""
        ran: list[float] = []

        def first() -> None:
            ran.append(clock.now())
            clock.request_frame(lambda: ran.append(clock.now()))

        clock.request_frame(first)
        clock.advance(16)
        assert ran == [16]
        clock.advance(16)
        assert ran == [16, 32]

    def test_run_all_drains_everything(self, clock: VirtualClock) -> None:
        """run_all advances until no timers or frames remain."""
        ran: list[str] = []
        clock.call_later(1000, lambda: ran.append("timer"))
        clock.request_frame(lambda: ran.append("frame"))
        clock.run_all()
        assert ran == ["frame", "timer"]
        assert clock.pending_timers == 0
        assert clock.pending_frames == 0


class TestAsyncioClock:
    """Timers mapped onto the running loop."""

    def test_protocol_conformance(self) -> None:
        """Both clocks satisfy the Clock protocol."""
        assert isinstance(VirtualClock(), Clock)
        assert isinstance(AsyncioClock(), Clock)

    @pytest.mark.asyncio
    async def test_call_later_and_frame(self) -> None:
        """Callbacks run on the loop after their delay."""
        clock = AsyncioClock()
        done = asyncio.Event()
        order: list[str] = []
        clock.request_frame(lambda: order.append("frame"))
        clock.call_later(40, lambda: (order.append("timer"), done.set()))
        await asyncio.wait_for(done.wait(), timeout=2)
        assert order == ["frame", "timer"]

    @pytest.mark.asyncio
    async def test_cancelled_callback_does_not_run(self) -> None:
        """Handles returned by the loop cancel cleanly."""
        clock = AsyncioClock()
        fired: list[int] = []
        clock.call_later(10, lambda: fired.append(1)).cancel()
        await asyncio.sleep(0.05)
        assert fired == []
