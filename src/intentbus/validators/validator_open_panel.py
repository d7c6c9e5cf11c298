# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""OPEN_MODAL validation.

Despite the intent name, only inline panel styles can be opened. Overlay
styles are refused in the schema stage, before the payload is even parsed,
so no malformed payload can slip one through.
"""

from __future__ import annotations

from intentbus.enums import EnumIntentErrorCode, EnumIntentType
from intentbus.models import ModelIntentEnvelope, ModelOpenModalIntent
from intentbus.validators.base import (
    IntentValidator,
    ValidationContext,
    ValidationFinding,
)

ALLOWED_PANEL_TYPES: frozenset[str] = frozenset(
    {
        "sidebar",
        "inline_form",
        "section_expand",
        "detail_panel",
        "filter_panel",
        "action_panel",
    }
)

FORBIDDEN_PANEL_TYPES: frozenset[str] = frozenset(
    {"overlay", "popup", "dialog", "modal"}
)


class OpenPanelValidator(IntentValidator):
    """Validator for OPEN_MODAL intents."""

    intent_type = EnumIntentType.OPEN_MODAL

    def check_envelope(self, envelope: ModelIntentEnvelope) -> list[ValidationFinding]:
        panel_type = envelope.payload.get("panel_type")
        if isinstance(panel_type, str) and (
            panel_type.strip().lower() in FORBIDDEN_PANEL_TYPES
        ):
            return [
                ValidationFinding(
                    code=EnumIntentErrorCode.OVERLAY_MODAL_FORBIDDEN,
                    message=(
                        f"Panel type {panel_type!r} is an overlay style; only "
                        "inline panels may be opened"
                    ),
                    field="payload.panel_type",
                )
            ]
        return []

    def check_schema(self, intent: ModelOpenModalIntent) -> list[ValidationFinding]:
        panel_context = intent.payload.context
        if (
            panel_context is not None
            and panel_context.entity_id is not None
            and panel_context.entity_type is None
        ):
            return [
                ValidationFinding(
                    code=EnumIntentErrorCode.INTENT_VALIDATION_FAILED,
                    message="context.entity_id requires context.entity_type",
                    field="payload.context.entity_type",
                )
            ]
        return []

    async def check_business(
        self, intent: ModelOpenModalIntent, context: ValidationContext
    ) -> list[ValidationFinding]:
        payload = intent.payload
        if payload.panel_type not in ALLOWED_PANEL_TYPES:
            return [
                ValidationFinding(
                    code=EnumIntentErrorCode.PANEL_TYPE_NOT_ALLOWED,
                    message=(
                        f"Panel type {payload.panel_type!r} is not allowed "
                        f"(allowed: {', '.join(sorted(ALLOWED_PANEL_TYPES))})"
                    ),
                    field="payload.panel_type",
                )
            ]

        findings: list[ValidationFinding] = []
        if await context.ui.is_panel_open(payload.panel_id):
            findings.append(
                ValidationFinding(
                    code=EnumIntentErrorCode.PANEL_ALREADY_OPEN,
                    message=f"Panel {payload.panel_id!r} is already open",
                    field="payload.panel_id",
                    recoverable=True,
                )
            )

        panel_context = payload.context
        if panel_context is None or panel_context.entity_type is None:
            return findings

        entity_type = panel_context.entity_type
        if panel_context.entity_id is not None and not await context.ui.entity_exists(
            entity_type, panel_context.entity_id
        ):
            findings.append(
                ValidationFinding(
                    code=EnumIntentErrorCode.ENTITY_NOT_FOUND,
                    message=(
                        f"{entity_type} {panel_context.entity_id!r} does not exist"
                    ),
                    field="payload.context.entity_id",
                    recoverable=True,
                )
            )
        if (
            panel_context.action is not None
            and not await context.permissions.has_entity_permission(
                entity_type, panel_context.action
            )
        ):
            findings.append(
                ValidationFinding(
                    code=EnumIntentErrorCode.ENTITY_PERMISSION_DENIED,
                    message=(
                        f"Action {panel_context.action!r} is not permitted on "
                        f"{entity_type} entities"
                    ),
                    field="payload.context.action",
                )
            )
        return findings

    async def check_contextual(
        self, intent: ModelOpenModalIntent, context: ValidationContext
    ) -> list[ValidationFinding]:
        panel_context = intent.payload.context
        if panel_context is None or panel_context.parent_context is None:
            return []
        if await context.ui.is_component_mounted(panel_context.parent_context):
            return []
        return [
            ValidationFinding(
                code=EnumIntentErrorCode.PARENT_CONTEXT_NOT_MOUNTED,
                message=(
                    f"Parent component {panel_context.parent_context!r} is not mounted"
                ),
                field="payload.context.parent_context",
                recoverable=True,
            )
        ]

    async def check_security(
        self, intent: ModelOpenModalIntent, context: ValidationContext
    ) -> list[ValidationFinding]:
        panel_context = intent.payload.context
        if (
            panel_context is None
            or panel_context.entity_id is None
            or panel_context.entity_type is None
        ):
            return []
        # The entity may have disappeared while the earlier stages awaited
        if await context.ui.entity_exists(
            panel_context.entity_type, panel_context.entity_id
        ):
            return []
        return [
            ValidationFinding(
                code=EnumIntentErrorCode.UNVERIFIED_ENTITY_REFERENCE,
                message=(
                    f"{panel_context.entity_type} {panel_context.entity_id!r} "
                    "could not be re-verified"
                ),
                field="payload.context.entity_id",
            )
        ]


__all__ = [
    "ALLOWED_PANEL_TYPES",
    "FORBIDDEN_PANEL_TYPES",
    "OpenPanelValidator",
]
