# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""SET_THEME validation.

Accessibility settings are protected from automated disablement: AI origin
may never turn high contrast off. That denial is checked on the raw
envelope, so it holds even when the rest of the payload is malformed. A
full-motion request while the user prefers reduced motion is only a warning.
"""

from __future__ import annotations

from intentbus.enums import (
    EnumErrorSeverity,
    EnumIntentErrorCode,
    EnumIntentOrigin,
    EnumIntentType,
)
from intentbus.models import ModelIntentEnvelope, ModelSetThemeIntent
from intentbus.validators.base import (
    IntentValidator,
    ValidationContext,
    ValidationFinding,
)


class ThemeValidator(IntentValidator):
    """Validator for SET_THEME intents."""

    intent_type = EnumIntentType.SET_THEME

    def check_envelope(self, envelope: ModelIntentEnvelope) -> list[ValidationFinding]:
        updates = envelope.payload.get("theme_updates")
        if (
            envelope.origin is EnumIntentOrigin.AI
            and isinstance(updates, dict)
            and updates.get("high_contrast") is False
        ):
            return [
                ValidationFinding(
                    code=EnumIntentErrorCode.AI_ACCESSIBILITY_DENIED,
                    message="AI cannot disable accessibility features",
                    field="payload.theme_updates.high_contrast",
                )
            ]
        return []

    async def check_business(
        self, intent: ModelSetThemeIntent, context: ValidationContext
    ) -> list[ValidationFinding]:
        updates = intent.payload.theme_updates
        findings: list[ValidationFinding] = []

        if updates.motion == "full" and await context.ui.prefers_reduced_motion():
            findings.append(
                ValidationFinding(
                    code=EnumIntentErrorCode.MOTION_ACCESSIBILITY_CONFLICT,
                    message="User prefers reduced motion but full motion was requested",
                    field="payload.theme_updates.motion",
                    severity=EnumErrorSeverity.WARNING,
                )
            )
        return findings


__all__ = ["ThemeValidator"]
