# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""RUN_CLIENT_ACTION validation.

Screenshots from AI origin are refused in the schema stage on the raw
envelope, so the denial holds whatever the rest of the payload contains.
"""

from __future__ import annotations

import re

from intentbus.enums import EnumIntentErrorCode, EnumIntentOrigin, EnumIntentType
from intentbus.models import ModelIntentEnvelope, ModelRunClientActionIntent
from intentbus.validators.base import (
    IntentValidator,
    ValidationContext,
    ValidationFinding,
)

SUPPORTED_CLIENT_ACTIONS: frozenset[str] = frozenset(
    {
        "show_toast",
        "copy_to_clipboard",
        "refresh_data",
        "clear_cache",
        "open_external_link",
        "export_data",
        "take_screenshot",
        "print_page",
    }
)

# Actions whose ``parameters.target`` names a component that must be mounted
TARGETED_ACTIONS: frozenset[str] = frozenset({"refresh_data", "clear_cache"})

SAFE_FILENAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+\.[A-Za-z0-9]+$")
EXTERNAL_URL_PATTERN = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)


def is_safe_filename(filename: str) -> bool:
    """True if ``filename`` is a plain name with an extension and no traversal."""
    return bool(SAFE_FILENAME_PATTERN.match(filename)) and ".." not in filename


class ClientActionValidator(IntentValidator):
    """Validator for RUN_CLIENT_ACTION intents."""

    intent_type = EnumIntentType.RUN_CLIENT_ACTION

    def check_envelope(self, envelope: ModelIntentEnvelope) -> list[ValidationFinding]:
        if (
            envelope.origin is EnumIntentOrigin.AI
            and envelope.payload.get("action") == "take_screenshot"
        ):
            return [
                ValidationFinding(
                    code=EnumIntentErrorCode.AI_SCREENSHOT_DENIED,
                    message="AI cannot take screenshots",
                    field="payload.action",
                )
            ]
        return []

    async def check_business(
        self, intent: ModelRunClientActionIntent, context: ValidationContext
    ) -> list[ValidationFinding]:
        payload = intent.payload
        action = payload.action
        if action not in SUPPORTED_CLIENT_ACTIONS:
            return [
                ValidationFinding(
                    code=EnumIntentErrorCode.CLIENT_ACTION_UNSUPPORTED,
                    message=f"Client action {action!r} is not supported",
                    field="payload.action",
                )
            ]

        findings: list[ValidationFinding] = []
        parameters = payload.parameters
        safety = payload.safety_checks

        if action == "open_external_link":
            if (
                intent.origin is EnumIntentOrigin.AI
                and not safety.requires_user_consent
            ):
                findings.append(
                    ValidationFinding(
                        code=EnumIntentErrorCode.AI_EXTERNAL_LINK_CONSENT_REQUIRED,
                        message="AI-initiated external links require user consent",
                        field="payload.safety_checks.requires_user_consent",
                    )
                )
            if parameters.target is None or not EXTERNAL_URL_PATTERN.match(
                parameters.target
            ):
                findings.append(
                    ValidationFinding(
                        code=EnumIntentErrorCode.INVALID_EXTERNAL_URL,
                        message="External link target must be an http(s) URL",
                        field="payload.parameters.target",
                    )
                )

        if "filename" in parameters.options:
            filename = parameters.options["filename"]
            if not isinstance(filename, str) or not is_safe_filename(filename):
                findings.append(
                    ValidationFinding(
                        code=EnumIntentErrorCode.UNSAFE_FILENAME,
                        message="Filename contains invalid or unsafe characters",
                        field="payload.parameters.options.filename",
                    )
                )

        if action == "export_data":
            level = safety.data_access_level
            if level == "none" or not await context.permissions.has_permission(
                f"data_access.{level}"
            ):
                findings.append(
                    ValidationFinding(
                        code=EnumIntentErrorCode.DATA_ACCESS_DENIED,
                        message=(
                            "Export requires an explicit data access level "
                            f"with permission (requested {level!r})"
                        ),
                        field="payload.safety_checks.data_access_level",
                    )
                )

        return findings

    async def check_contextual(
        self, intent: ModelRunClientActionIntent, context: ValidationContext
    ) -> list[ValidationFinding]:
        payload = intent.payload
        target = payload.parameters.target
        if payload.action not in TARGETED_ACTIONS or target is None:
            return []
        if await context.ui.is_component_mounted(target):
            return []
        return [
            ValidationFinding(
                code=EnumIntentErrorCode.CLIENT_ACTION_TARGET_NOT_MOUNTED,
                message=f"Target component {target!r} is not mounted",
                field="payload.parameters.target",
                recoverable=True,
            )
        ]


__all__ = [
    "SUPPORTED_CLIENT_ACTIONS",
    "ClientActionValidator",
    "is_safe_filename",
]
