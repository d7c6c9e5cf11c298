# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Executor selection over the typed intent union.

The queue hands every admitted intent to ``ExecutorDispatch.execute``. The
``match`` covers each variant; the fallback branch exists only for intents
that somehow bypassed the validator registry, and it performs nothing.
"""

from __future__ import annotations

import logging

from intentbus.executors.base import DEFAULT_EXECUTOR_TIMEOUT_SECONDS
from intentbus.executors.executor_client_action import ClientActionExecutor
from intentbus.executors.executor_navigate import NavigateExecutor
from intentbus.executors.executor_open_panel import OpenPanelExecutor
from intentbus.executors.executor_table_state import TableStateExecutor
from intentbus.executors.executor_theme import ThemeExecutor
from intentbus.models import (
    ModelExecutionResult,
    ModelIntent,
    ModelNavigateIntent,
    ModelOpenModalIntent,
    ModelRunClientActionIntent,
    ModelSetTableStateIntent,
    ModelSetThemeIntent,
)
from intentbus.protocols import ProtocolUIState

logger = logging.getLogger(__name__)


class ExecutorDispatch:
    """Routes each typed intent to its executor.

    Args:
        ui: The UI collaborator every executor mutates.
        timeout_seconds: Per-executor timeout.
    """

    def __init__(
        self,
        ui: ProtocolUIState,
        *,
        timeout_seconds: float = DEFAULT_EXECUTOR_TIMEOUT_SECONDS,
    ) -> None:
        self._navigate = NavigateExecutor(ui, timeout_seconds=timeout_seconds)
        self._table_state = TableStateExecutor(ui, timeout_seconds=timeout_seconds)
        self._open_panel = OpenPanelExecutor(ui, timeout_seconds=timeout_seconds)
        self._theme = ThemeExecutor(ui, timeout_seconds=timeout_seconds)
        self._client_action = ClientActionExecutor(ui, timeout_seconds=timeout_seconds)

    async def execute(self, intent: ModelIntent) -> ModelExecutionResult:
        """Run ``intent`` with the executor for its variant."""
        match intent:
            case ModelNavigateIntent():
                return await self._navigate.execute(intent)
            case ModelSetTableStateIntent():
                return await self._table_state.execute(intent)
            case ModelOpenModalIntent():
                return await self._open_panel.execute(intent)
            case ModelSetThemeIntent():
                return await self._theme.execute(intent)
            case ModelRunClientActionIntent():
                return await self._client_action.execute(intent)
            case _:
                intent_type = getattr(intent, "type", type(intent).__name__)
                logger.error("No executor registered for intent type %s", intent_type)
                return ModelExecutionResult(
                    success=False,
                    error=f"No executor registered for intent type {intent_type}",
                )


__all__ = ["ExecutorDispatch"]
