"""Tests for the sliding-window rate limiter."""
from app.services.rate_limiter import SlidingWindowRateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_allows_up_to_limit_then_blocks():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(3, 60, clock=clock)
    results = [limiter.is_allowed("1.2.3.4") for _ in range(4)]
    assert [r[0] for r in results] == [True, True, True, False]
    assert [r[1] for r in results[:3]] == [2, 1, 0]
    assert results[3][2] == 61


def test_window_slides():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(1, 60, clock=clock)
    assert limiter.is_allowed("ip")[0]
    clock.now += 30
    allowed, _, retry_after = limiter.is_allowed("ip")
    assert not allowed
    assert retry_after == 31
    clock.now += 30
    assert limiter.is_allowed("ip")[0]


def test_keys_are_independent():
    limiter = SlidingWindowRateLimiter(1, 60, clock=FakeClock())
    assert limiter.is_allowed("a")[0]
    assert limiter.is_allowed("b")[0]
    assert not limiter.is_allowed("a")[0]


def test_reset():
    limiter = SlidingWindowRateLimiter(1, 60, clock=FakeClock())
    limiter.is_allowed("a")
    limiter.reset()
    assert limiter.is_allowed("a")[0]


def test_idle_clients_are_forgotten():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(5, 60, clock=clock)
    for i in range(100):
        limiter.is_allowed(f"10.0.0.{i}")
    assert limiter.tracked_keys == 100
    clock.now += 61
    limiter.is_allowed("10.0.1.1")
    assert limiter.tracked_keys == 1


def test_active_clients_survive_sweep():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(5, 60, clock=clock)
    limiter.is_allowed("idle")
    clock.now += 40
    limiter.is_allowed("busy")
    clock.now += 30
    limiter.is_allowed("busy")
    assert limiter.tracked_keys == 1
    allowed, remaining, _ = limiter.is_allowed("busy")
    assert allowed and remaining == 2
