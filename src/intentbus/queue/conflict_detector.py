# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Resource and UI-state collision rules between intents.

Rules (all symmetric):
    - SET_TABLE_STATE vs SET_TABLE_STATE on the same table_id
    - OPEN_MODAL vs OPEN_MODAL on the same panel_id
    - NAVIGATE vs NAVIGATE (only one navigation at a time)
    - SET_THEME vs any UI-modifying intent
    - NAVIGATE vs OPEN_MODAL (navigation unmounts panels)

Every intent type is UI-modifying except client actions that leave the view
untouched (clipboard, cache, export, screenshot).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from intentbus.models import (
    ModelIntent,
    ModelNavigateIntent,
    ModelOpenModalIntent,
    ModelRunClientActionIntent,
    ModelSetTableStateIntent,
    ModelSetThemeIntent,
)

if TYPE_CHECKING:
    from intentbus.queue.priority_queue import IntentTicket

UI_MODIFYING_CLIENT_ACTIONS: frozenset[str] = frozenset(
    {"show_toast", "refresh_data", "open_external_link", "print_page"}
)


def is_ui_modifying(intent: ModelIntent) -> bool:
    """True if executing ``intent`` changes what the user sees."""
    match intent:
        case ModelRunClientActionIntent():
            return intent.payload.action in UI_MODIFYING_CLIENT_ACTIONS
        case _:
            return True


def conflict_reason(first: ModelIntent, second: ModelIntent) -> str | None:
    """Return why two intents conflict, or None if they can coexist."""
    match (first, second):
        case (ModelSetTableStateIntent(), ModelSetTableStateIntent()):
            if first.payload.table_id == second.payload.table_id:
                return f"both target table {first.payload.table_id!r}"
            return None
        case (ModelOpenModalIntent(), ModelOpenModalIntent()):
            if first.payload.panel_id == second.payload.panel_id:
                return f"both target panel {first.payload.panel_id!r}"
            return None
        case (ModelNavigateIntent(), ModelNavigateIntent()):
            return "only one navigation may be in flight"
        case (ModelSetThemeIntent(), other) | (other, ModelSetThemeIntent()):
            if is_ui_modifying(other):
                return "theme changes conflict with UI-modifying intents"
            return None
        case (ModelNavigateIntent(), ModelOpenModalIntent()) | (
            ModelOpenModalIntent(),
            ModelNavigateIntent(),
        ):
            return "navigation invalidates open panels"
        case _:
            return None


class ConflictDetector:
    """Checks a candidate intent against active tickets."""

    def conflicts(self, first: ModelIntent, second: ModelIntent) -> bool:
        return conflict_reason(first, second) is not None

    def find_conflicts(
        self,
        candidate: ModelIntent,
        tickets: Iterable[IntentTicket],
    ) -> list[IntentTicket]:
        """Return the tickets ``candidate`` conflicts with, in input order."""
        return [t for t in tickets if self.conflicts(candidate, t.intent)]


__all__ = [
    "UI_MODIFYING_CLIENT_ACTIONS",
    "ConflictDetector",
    "conflict_reason",
    "is_ui_modifying",
]
