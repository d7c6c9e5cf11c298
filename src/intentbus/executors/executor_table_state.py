# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""SET_TABLE_STATE execution."""

from __future__ import annotations

from intentbus.enums import EnumIntentType, EnumSideEffect
from intentbus.executors.base import IntentExecutor
from intentbus.models import ModelSetTableStateIntent


class TableStateExecutor(IntentExecutor[ModelSetTableStateIntent]):
    """Executor for SET_TABLE_STATE intents."""

    intent_type = EnumIntentType.SET_TABLE_STATE

    async def perform(
        self, intent: ModelSetTableStateIntent, side_effects: list[EnumSideEffect]
    ) -> None:
        payload = intent.payload
        await self._ui.apply_table_state(
            payload.table_id,
            payload.state_update.model_dump(exclude_none=True),
            payload.merge_strategy,
        )
        side_effects.append(EnumSideEffect.STATE_UPDATE)
        side_effects.append(EnumSideEffect.DOM_MUTATION)


__all__ = ["TableStateExecutor"]
