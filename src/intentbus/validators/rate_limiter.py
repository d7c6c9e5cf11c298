# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Per-origin sliding-window rate limiting for the security stage.

AI, USER and SYSTEM intents draw from independent budgets: a burst of AI
tool calls never starves user clicks. The clock is injected so tests can
advance time deterministically.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable

from intentbus.enums import EnumIntentOrigin
from intentbus.settings import ModelRateLimits

logger = logging.getLogger(__name__)


class OriginRateLimiter:
    """Sliding-window admission counter, one window per origin.

    Args:
        limits: Window length and per-origin budgets.
        clock: Monotonic clock in seconds. Defaults to ``time.monotonic``.
    """

    def __init__(
        self,
        limits: ModelRateLimits | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._limits = limits or ModelRateLimits()
        self._clock = clock
        self._windows: dict[EnumIntentOrigin, deque[float]] = {
            origin: deque() for origin in EnumIntentOrigin
        }

    @property
    def limits(self) -> ModelRateLimits:
        return self._limits

    def remaining(self, origin: EnumIntentOrigin) -> int:
        """Return how many more intents ``origin`` may submit right now."""
        window = self._evict(origin, self._clock())
        return max(0, self._limits.budget_for(origin) - len(window))

    def try_acquire(self, origin: EnumIntentOrigin) -> bool:
        """Consume one unit of ``origin``'s budget.

        Returns:
            True if admitted, False if the budget for the current window is
            exhausted (nothing is consumed).
        """
        now = self._clock()
        window = self._evict(origin, now)
        if len(window) >= self._limits.budget_for(origin):
            logger.info(
                "Rate limit reached for origin=%s (%d per %.0fs)",
                origin.value,
                self._limits.budget_for(origin),
                self._limits.window_seconds,
            )
            return False
        window.append(now)
        return True

    def release(self, origin: EnumIntentOrigin) -> None:
        """Return the most recent unit of ``origin``'s budget.

        Used when an intent that passed validation is refused admission,
        so a rejected intent never costs its origin budget.
        """
        window = self._windows[origin]
        if window:
            window.pop()

    def reset(self) -> None:
        """Forget all recorded admissions."""
        for window in self._windows.values():
            window.clear()

    def _evict(self, origin: EnumIntentOrigin, now: float) -> deque[float]:
        window = self._windows[origin]
        cutoff = now - self._limits.window_seconds
        while window and window[0] <= cutoff:
            window.popleft()
        return window


__all__ = ["OriginRateLimiter"]
