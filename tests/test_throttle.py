import asyncio

import pytest

from cargotrack.geo.throttle import RateLimiter


def test_first_call_never_waits(fake_clock):
    limiter = RateLimiter(1.0, clock=fake_clock, sleep=fake_clock.sleep)
    assert asyncio.run(limiter.wait()) == 0.0
    assert fake_clock.sleeps == []


def test_consecutive_calls_are_spaced(fake_clock):
    limiter = RateLimiter(0.5, clock=fake_clock, sleep=fake_clock.sleep)

    async def _run():
        await limiter.wait()
        fake_clock.now += 0.2
        await limiter.wait()
        fake_clock.now += 2.0
        await limiter.wait()

    asyncio.run(_run())
    assert fake_clock.sleeps == [pytest.approx(0.3)]


def test_concurrent_waiters_share_the_cap(fake_clock):
    limiter = RateLimiter(0.1, clock=fake_clock, sleep=fake_clock.sleep)

    async def _run():
        await asyncio.gather(*(limiter.wait() for _ in range(3)))

    asyncio.run(_run())
    assert fake_clock.sleeps == [pytest.approx(0.1), pytest.approx(0.1)]


def test_negative_interval_rejected():
    with pytest.raises(ValueError):
        RateLimiter(-1)
