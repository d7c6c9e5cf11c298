# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""RUN_CLIENT_ACTION execution."""

from __future__ import annotations

from intentbus.enums import EnumIntentType, EnumSideEffect
from intentbus.executors.base import IntentExecutor
from intentbus.models import ModelRunClientActionIntent

# Side-effect categories each action triggers, in order
SIDE_EFFECTS_BY_ACTION: dict[str, tuple[EnumSideEffect, ...]] = {
    "show_toast": (EnumSideEffect.NOTIFICATION, EnumSideEffect.DOM_MUTATION),
    "copy_to_clipboard": (EnumSideEffect.CLIPBOARD_WRITE,),
    "refresh_data": (EnumSideEffect.API_CALL, EnumSideEffect.STATE_UPDATE),
    "clear_cache": (EnumSideEffect.CACHE_CLEAR, EnumSideEffect.STORAGE_OPERATION),
    "open_external_link": (EnumSideEffect.EXTERNAL_NAVIGATION,),
    "export_data": (EnumSideEffect.FILE_DOWNLOAD,),
    "take_screenshot": (EnumSideEffect.SCREEN_CAPTURE,),
    "print_page": (EnumSideEffect.DOM_MUTATION,),
}


class ClientActionExecutor(IntentExecutor[ModelRunClientActionIntent]):
    """Executor for RUN_CLIENT_ACTION intents."""

    intent_type = EnumIntentType.RUN_CLIENT_ACTION

    async def perform(
        self, intent: ModelRunClientActionIntent, side_effects: list[EnumSideEffect]
    ) -> None:
        action = intent.payload.action
        effects = SIDE_EFFECTS_BY_ACTION.get(action)
        if effects is None:
            msg = f"Unsupported client action: {action}"
            raise ValueError(msg)
        await self._ui.perform_client_action(
            action,
            intent.payload.parameters.model_dump(exclude_none=True),
        )
        side_effects.extend(effects)


__all__ = ["SIDE_EFFECTS_BY_ACTION", "ClientActionExecutor"]
