"""Unit tests for per-origin sliding-window rate limiting."""

import pytest

from intentbus.enums import EnumIntentOrigin
from intentbus.settings import ModelRateLimits
from intentbus.validators import OriginRateLimiter


class _FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _make_limiter(ai: int = 2, user: int = 3, window: float = 60.0):
    clock = _FakeClock()
    limits = ModelRateLimits(
        window_seconds=window,
        budgets={
            EnumIntentOrigin.AI: ai,
            EnumIntentOrigin.USER: user,
            EnumIntentOrigin.SYSTEM: 0,
        },
    )
    return OriginRateLimiter(limits, clock=clock), clock


@pytest.mark.unit
class TestOriginRateLimiter:
    def test_budget_exhaustion(self) -> None:
        limiter, _ = _make_limiter(ai=2)
        assert limiter.try_acquire(EnumIntentOrigin.AI)
        assert limiter.try_acquire(EnumIntentOrigin.AI)
        assert not limiter.try_acquire(EnumIntentOrigin.AI)
        assert limiter.remaining(EnumIntentOrigin.AI) == 0

    def test_origins_have_independent_budgets(self) -> None:
        limiter, _ = _make_limiter(ai=1, user=1)
        assert limiter.try_acquire(EnumIntentOrigin.AI)
        assert not limiter.try_acquire(EnumIntentOrigin.AI)
        assert limiter.try_acquire(EnumIntentOrigin.USER)

    def test_window_slides(self) -> None:
        limiter, clock = _make_limiter(ai=1, window=10.0)
        assert limiter.try_acquire(EnumIntentOrigin.AI)
        clock.now += 5
        assert not limiter.try_acquire(EnumIntentOrigin.AI)
        clock.now += 5
        assert limiter.try_acquire(EnumIntentOrigin.AI)

    def test_refusal_consumes_nothing(self) -> None:
        limiter, clock = _make_limiter(ai=1, window=10.0)
        limiter.try_acquire(EnumIntentOrigin.AI)
        clock.now += 9
        limiter.try_acquire(EnumIntentOrigin.AI)
        clock.now += 1
        assert limiter.remaining(EnumIntentOrigin.AI) == 1

    def test_zero_budget_always_refuses(self) -> None:
        limiter, _ = _make_limiter()
        assert not limiter.try_acquire(EnumIntentOrigin.SYSTEM)

    def test_reset(self) -> None:
        limiter, _ = _make_limiter(user=1)
        limiter.try_acquire(EnumIntentOrigin.USER)
        limiter.reset()
        assert limiter.remaining(EnumIntentOrigin.USER) == 1

    def test_release_returns_last_unit(self) -> None:
        limiter, _ = _make_limiter(ai=1, user=1)
        assert limiter.try_acquire(EnumIntentOrigin.AI)
        limiter.release(EnumIntentOrigin.AI)
        assert limiter.remaining(EnumIntentOrigin.AI) == 1
        assert limiter.try_acquire(EnumIntentOrigin.AI)

    def test_release_without_admissions_is_noop(self) -> None:
        limiter, _ = _make_limiter(user=1)
        limiter.release(EnumIntentOrigin.USER)
        assert limiter.remaining(EnumIntentOrigin.USER) == 1
