# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Executor base class.

Executors are the only components allowed to perform externally visible
side effects, and they do so exclusively through the UI-state port. Each one
enforces its own timeout and reports every side-effect category it
triggered, including those triggered before a failure.

Error handling:
    - Collaborator exceptions and timeouts become ``success=False`` with the
      underlying message.
    - Cancellation (preemption) propagates unchanged.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import ClassVar, Generic, TypeVar

from intentbus.enums import EnumIntentType, EnumSideEffect
from intentbus.models import ModelExecutionResult
from intentbus.protocols import ProtocolUIState

logger = logging.getLogger(__name__)

DEFAULT_EXECUTOR_TIMEOUT_SECONDS = 5.0

IntentT = TypeVar("IntentT")


class IntentExecutor(ABC, Generic[IntentT]):
    """Runs one intent type against the UI-state port.

    Args:
        ui: The UI collaborator to mutate.
        timeout_seconds: Upper bound on the whole execution.
    """

    intent_type: ClassVar[EnumIntentType]

    def __init__(
        self,
        ui: ProtocolUIState,
        *,
        timeout_seconds: float = DEFAULT_EXECUTOR_TIMEOUT_SECONDS,
    ) -> None:
        self._ui = ui
        self._timeout_seconds = timeout_seconds

    async def execute(self, intent: IntentT) -> ModelExecutionResult:
        """Perform ``intent`` and report what happened."""
        started = time.perf_counter()
        side_effects: list[EnumSideEffect] = []
        try:
            await asyncio.wait_for(
                self.perform(intent, side_effects),
                timeout=self._timeout_seconds,
            )
        except TimeoutError:
            return self._failure(
                started,
                side_effects,
                f"{type(self).__name__} timed out after {self._timeout_seconds:g}s",
            )
        except Exception as exc:
            logger.warning(
                "%s failed: %s",
                type(self).__name__,
                exc,
                exc_info=True,
            )
            return self._failure(started, side_effects, str(exc) or type(exc).__name__)

        return ModelExecutionResult(
            success=True,
            duration_ms=_elapsed_ms(started),
            side_effects=side_effects,
        )

    @abstractmethod
    async def perform(
        self, intent: IntentT, side_effects: list[EnumSideEffect]
    ) -> None:
        """Apply ``intent``, appending each side effect once it has happened."""

    @staticmethod
    def _failure(
        started: float,
        side_effects: list[EnumSideEffect],
        message: str,
    ) -> ModelExecutionResult:
        return ModelExecutionResult(
            success=False,
            duration_ms=_elapsed_ms(started),
            side_effects=side_effects,
            error=message,
        )


def _elapsed_ms(since: float) -> float:
    return (time.perf_counter() - since) * 1000


__all__ = [
    "DEFAULT_EXECUTOR_TIMEOUT_SECONDS",
    "IntentExecutor",
]
