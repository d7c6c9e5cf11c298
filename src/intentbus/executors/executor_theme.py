# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""SET_THEME execution.

Only the attributes present in ``theme_updates`` are sent. User- and
device-scoped changes are persisted by the collaborator, which is reported
as a storage operation.
"""

from __future__ import annotations

from intentbus.enums import EnumIntentType, EnumSideEffect
from intentbus.executors.base import IntentExecutor
from intentbus.models import ModelSetThemeIntent


class ThemeExecutor(IntentExecutor[ModelSetThemeIntent]):
    """Executor for SET_THEME intents."""

    intent_type = EnumIntentType.SET_THEME

    async def perform(
        self, intent: ModelSetThemeIntent, side_effects: list[EnumSideEffect]
    ) -> None:
        payload = intent.payload
        await self._ui.apply_theme(
            payload.theme_updates.model_dump(exclude_none=True),
            payload.scope,
        )
        if payload.apply_immediately:
            side_effects.append(EnumSideEffect.THEME_CHANGE)
            side_effects.append(EnumSideEffect.DOM_MUTATION)
        if payload.scope != "session":
            side_effects.append(EnumSideEffect.STORAGE_OPERATION)


__all__ = ["ThemeExecutor"]
