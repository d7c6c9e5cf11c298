# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Bounded automatic retry for conditionally rejected intents.

Immediate rejections (bad schema, hard denials, unsupported types) are final.
Conditional rejections (rate limit, table not loaded, parent not mounted,
conflict, preemption) and recoverable execution failures may clear on their
own, so a caller can resubmit through ``RetryingIntentSubmitter``: it waits
out the backoff schedule and stops at the attempt cap, appending a
MAX_RETRIES_EXCEEDED summary entry when the cap is hit.

Every attempt is a full pass through the bus and gets its own log entry and
sequence number.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum, unique
from typing import TYPE_CHECKING

from intentbus.enums import EnumIntentErrorCode, EnumIntentStatus, is_conditional_code
from intentbus.settings import DEFAULT_BACKOFF_MS, ModelRetryConfig

if TYPE_CHECKING:
    from intentbus.bus import IntentBus
    from intentbus.models import ModelIntentEnvelope, ModelIntentLogEntry

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


@unique
class EnumRetryDecision(str, Enum):
    """How an outcome should be handled by a retrying caller."""

    DONE = "done"
    RETRY = "retry"
    FINAL = "final"


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt cap and backoff schedule.

    ``backoff_ms[i]`` is the wait after attempt ``i + 1``; attempts beyond
    the schedule reuse its last step.
    """

    max_attempts: int = 5
    backoff_ms: tuple[int, ...] = DEFAULT_BACKOFF_MS

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            msg = f"max_attempts must be >= 1, got {self.max_attempts}"
            raise ValueError(msg)
        if not self.backoff_ms or any(step < 0 for step in self.backoff_ms):
            msg = "backoff_ms must be a non-empty sequence of non-negative ints"
            raise ValueError(msg)

    @classmethod
    def from_config(cls, config: ModelRetryConfig) -> RetryPolicy:
        return cls(max_attempts=config.max_attempts, backoff_ms=config.backoff_ms)

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after ``attempt`` (1-based) before the next one."""
        index = min(max(attempt, 1), len(self.backoff_ms)) - 1
        return self.backoff_ms[index] / 1000

    @staticmethod
    def classify(entry: ModelIntentLogEntry) -> EnumRetryDecision:
        """Decide whether a terminal entry is worth resubmitting."""
        if entry.status is EnumIntentStatus.COMPLETED:
            return EnumRetryDecision.DONE
        error = entry.error
        if error is None or not error.recoverable:
            return EnumRetryDecision.FINAL
        if (
            is_conditional_code(error.error_code)
            or error.error_code == EnumIntentErrorCode.INTENT_EXECUTION_FAILED
        ):
            return EnumRetryDecision.RETRY
        return EnumRetryDecision.FINAL


class RetryingIntentSubmitter:
    """Submits an intent to the bus, retrying conditional outcomes.

    Args:
        bus: The bus to submit through.
        policy: Attempt cap and backoff. Defaults to the bus settings.
        sleep: Awaitable delay function (injectable for tests).
    """

    def __init__(
        self,
        bus: IntentBus,
        policy: RetryPolicy | None = None,
        *,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._bus = bus
        self._policy = policy or RetryPolicy.from_config(
            bus.settings.to_retry_config()
        )
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def submit(self, envelope: ModelIntentEnvelope) -> ModelIntentLogEntry:
        """Process ``envelope`` until it completes, fails finally, or hits the cap.

        Returns:
            The last attempt's entry, or the MAX_RETRIES_EXCEEDED summary
            entry when every attempt was retryable.
        """
        attempt = 1
        while True:
            entry = await self._bus.process_intent(envelope, attempt=attempt)
            if self._policy.classify(entry) is not EnumRetryDecision.RETRY:
                return entry
            if attempt >= self._policy.max_attempts:
                return await self._bus.record_retries_exhausted(
                    envelope, entry, attempts=attempt
                )

            delay = self._policy.delay_for(attempt)
            logger.info(
                "Retrying intent %s after %s (attempt %d/%d, waiting %.3fs)",
                envelope.intent_id,
                entry.error_code,
                attempt,
                self._policy.max_attempts,
                delay,
                extra={"correlation_id": envelope.correlation_id},
            )
            await self._sleep(delay)
            attempt += 1


__all__ = [
    "EnumRetryDecision",
    "RetryPolicy",
    "RetryingIntentSubmitter",
]
