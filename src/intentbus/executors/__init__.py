# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Per-type executors: the only components that mutate the UI.

Usage:
    from intentbus.executors import ExecutorDispatch

    dispatch = ExecutorDispatch(ui, timeout_seconds=5.0)
    result = await dispatch.execute(intent)
"""

from intentbus.executors.base import DEFAULT_EXECUTOR_TIMEOUT_SECONDS, IntentExecutor
from intentbus.executors.dispatch import ExecutorDispatch
from intentbus.executors.executor_client_action import (
    SIDE_EFFECTS_BY_ACTION,
    ClientActionExecutor,
)
from intentbus.executors.executor_navigate import NavigateExecutor, build_url
from intentbus.executors.executor_open_panel import OpenPanelExecutor
from intentbus.executors.executor_table_state import TableStateExecutor
from intentbus.executors.executor_theme import ThemeExecutor

__all__ = [
    "DEFAULT_EXECUTOR_TIMEOUT_SECONDS",
    "SIDE_EFFECTS_BY_ACTION",
    "ClientActionExecutor",
    "ExecutorDispatch",
    "IntentExecutor",
    "NavigateExecutor",
    "OpenPanelExecutor",
    "TableStateExecutor",
    "ThemeExecutor",
    "build_url",
]
