# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""OPEN_MODAL execution: mounts an inline panel element."""

from __future__ import annotations

from intentbus.enums import EnumIntentType, EnumSideEffect
from intentbus.executors.base import IntentExecutor
from intentbus.models import ModelOpenModalIntent


class OpenPanelExecutor(IntentExecutor[ModelOpenModalIntent]):
    """Executor for OPEN_MODAL intents."""

    intent_type = EnumIntentType.OPEN_MODAL

    async def perform(
        self, intent: ModelOpenModalIntent, side_effects: list[EnumSideEffect]
    ) -> None:
        payload = intent.payload
        config = (
            payload.panel_config.model_dump(exclude_none=True)
            if payload.panel_config
            else {}
        )
        context = (
            payload.context.model_dump(exclude_none=True) if payload.context else {}
        )
        await self._ui.mount_panel(
            payload.panel_id,
            payload.panel_type,
            payload.content_type,
            config,
            context,
        )
        side_effects.append(EnumSideEffect.PANEL_MOUNT)
        side_effects.append(EnumSideEffect.DOM_MUTATION)


__all__ = ["OpenPanelExecutor"]
