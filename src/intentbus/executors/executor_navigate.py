# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""NAVIGATE execution.

Internal navigation unmounts every open panel first: panels belong to the
view being left. Route params and query values are both sent as search
parameters, query values winning on a name clash.
"""

from __future__ import annotations

from urllib.parse import urlencode

from intentbus.enums import EnumIntentType, EnumSideEffect
from intentbus.executors.base import IntentExecutor
from intentbus.models import ModelNavigateIntent, ModelNavigatePayload


def build_url(payload: ModelNavigatePayload) -> str:
    """Return the navigation target with params and query appended."""
    search = {**payload.params, **payload.query}
    if not search:
        return payload.route
    separator = "&" if "?" in payload.route else "?"
    return f"{payload.route}{separator}{urlencode(search)}"


class NavigateExecutor(IntentExecutor[ModelNavigateIntent]):
    """Executor for NAVIGATE intents."""

    intent_type = EnumIntentType.NAVIGATE

    async def perform(
        self, intent: ModelNavigateIntent, side_effects: list[EnumSideEffect]
    ) -> None:
        payload = intent.payload
        if payload.external:
            await self._ui.navigate(build_url(payload), replace=False, external=True)
            side_effects.append(EnumSideEffect.EXTERNAL_NAVIGATION)
            return

        open_panels = await self._ui.list_open_panels()
        for panel_id in open_panels:
            await self._ui.unmount_panel(panel_id)
        if open_panels:
            side_effects.append(EnumSideEffect.PANEL_UNMOUNT)

        await self._ui.navigate(
            build_url(payload), replace=payload.replace, external=False
        )
        side_effects.append(EnumSideEffect.NAVIGATION)
        side_effects.append(EnumSideEffect.HISTORY_CHANGE)


__all__ = ["NavigateExecutor", "build_url"]
