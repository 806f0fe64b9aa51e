"""Tests for dispatch pacing."""

import asyncio

import pytest

from bni_scraper.orchestration.rate_limiter import Pacer, PauseKind

from fakes import FakeClock, FakeSleep


def make_pacer(sleep, clock, **overrides):
    return Pacer(sleep=sleep, clock=clock, **overrides)


class TestPauseKind:
    """Which pause precedes a dispatch group."""

    def test_first_group_never_pauses(self, fake_sleep, fake_clock):
        pacer = make_pacer(fake_sleep, fake_clock)
        assert pacer.pause_kind(0) is PauseKind.NONE

    def test_short_and_long_pauses(self, fake_sleep, fake_clock):
        pacer = make_pacer(fake_sleep, fake_clock)

        assert pacer.pause_kind(1) is PauseKind.SHORT
        assert pacer.pause_kind(14) is PauseKind.SHORT
        assert pacer.pause_kind(15) is PauseKind.LONG
        assert pacer.pause_kind(16) is PauseKind.SHORT
        assert pacer.pause_kind(30) is PauseKind.LONG

    def test_custom_long_pause_interval(self, fake_sleep, fake_clock):
        pacer = make_pacer(fake_sleep, fake_clock, long_pause_every=2)

        assert [pacer.pause_kind(g) for g in range(5)] == [
            PauseKind.NONE,
            PauseKind.SHORT,
            PauseKind.LONG,
            PauseKind.SHORT,
            PauseKind.LONG,
        ]

    def test_rejects_zero_interval(self, fake_sleep, fake_clock):
        with pytest.raises(ValueError):
            make_pacer(fake_sleep, fake_clock, long_pause_every=0)


class TestWaitGroup:
    """Pauses between dispatch groups."""

    @pytest.mark.asyncio
    async def test_group_delays(self, fake_sleep, fake_clock):
        pacer = make_pacer(fake_sleep, fake_clock)

        assert await pacer.wait_group(0) is PauseKind.NONE
        assert await pacer.wait_group(1) is PauseKind.SHORT
        assert await pacer.wait_group(15) is PauseKind.LONG

        assert fake_sleep.calls == [3.0, 15.0]
        stats = pacer.get_stats()
        assert stats["short_pauses"] == 1
        assert stats["long_pauses"] == 1
        assert stats["total_wait_seconds"] == 18.0

    @pytest.mark.asyncio
    async def test_zero_delay_does_not_sleep(self, fake_sleep, fake_clock):
        pacer = make_pacer(fake_sleep, fake_clock, group_delay=0.0)

        await pacer.wait_group(1)

        assert fake_sleep.calls == []
        assert pacer.get_stats()["short_pauses"] == 1


class TestWaitSlot:
    """Spacing between consecutive dispatches."""

    @pytest.mark.asyncio
    async def test_sequential_dispatches_are_spaced(self, fake_clock):
        sleep = FakeSleep(clock=fake_clock)
        pacer = make_pacer(sleep, fake_clock)

        waits = [await pacer.wait_slot(i) for i in range(3)]

        assert waits == [0.0, 2.0, 2.0]
        assert pacer.get_stats()["dispatches"] == 3

    @pytest.mark.asyncio
    async def test_concurrent_dispatches_queue_up(self, fake_sleep, fake_clock):
        """Callers waiting together get consecutive slots."""
        pacer = make_pacer(fake_sleep, fake_clock)

        waits = await asyncio.gather(*(pacer.wait_slot(i) for i in range(4)))

        assert sorted(waits) == [0.0, 2.0, 4.0, 6.0]
        assert sorted(fake_sleep.calls) == [2.0, 4.0, 6.0]

    @pytest.mark.asyncio
    async def test_no_wait_once_spacing_elapsed(self, fake_sleep, fake_clock):
        pacer = make_pacer(fake_sleep, fake_clock)

        await pacer.wait_slot(0)
        fake_clock.now += 5.0
        waited = await pacer.wait_slot(1)

        assert waited == 0.0
        assert fake_sleep.calls == []

    @pytest.mark.asyncio
    async def test_group_pause_restarts_spacing(self, fake_sleep, fake_clock):
        pacer = make_pacer(fake_sleep, fake_clock)

        await pacer.wait_slot(0)
        await pacer.wait_group(1)
        waited = await pacer.wait_slot(1)

        assert waited == 0.0
        assert fake_sleep.calls == [3.0]


class TestPacerStats:
    """Counters and reset."""

    @pytest.mark.asyncio
    async def test_reset_clears_state(self, fake_sleep, fake_clock):
        pacer = make_pacer(fake_sleep, fake_clock)
        await pacer.wait_slot(0)
        await pacer.wait_slot(1)
        await pacer.wait_group(1)

        pacer.reset()

        stats = pacer.get_stats()
        assert stats["dispatches"] == 0
        assert stats["short_pauses"] == 0
        assert stats["total_wait_seconds"] == 0.0
        assert await pacer.wait_slot(2) == 0.0

    def test_stats_include_settings(self, fake_sleep, fake_clock):
        stats = make_pacer(fake_sleep, fake_clock).get_stats()

        assert stats["dispatch_spacing"] == 2.0
        assert stats["group_delay"] == 3.0
        assert stats["long_pause_every"] == 15
        assert stats["long_pause"] == 15.0
