# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""NAVIGATE validation.

Internal routes have the shape ``/<industry>/<app|auth>/...`` where the
industry is one of ``hs``, ``rest``, ``auto`` or ``ret``. External targets
(``external=true``) must be an http(s) URL or an ``external:<target>``
reference and are never allowed from AI origin.
"""

from __future__ import annotations

import re

from intentbus.enums import EnumIntentErrorCode, EnumIntentOrigin, EnumIntentType
from intentbus.models import ModelIntentEnvelope, ModelNavigateIntent
from intentbus.validators.base import (
    IntentValidator,
    ValidationContext,
    ValidationFinding,
)

ROUTE_PATTERN = re.compile(r"^/(hs|rest|auto|ret)/(app|auth)(/[A-Za-z0-9/_-]*)?$")
EXTERNAL_TARGET_PATTERN = re.compile(r"^(https?://[^\s/$.?#][^\s]*|external:[^\s]+)$")

CROSS_INDUSTRY_PERMISSION = "navigation.cross_industry"


def route_industry(route: str) -> str | None:
    """Return the industry segment of an internal route, or None."""
    match = ROUTE_PATTERN.match(route)
    return match.group(1) if match else None


class NavigateValidator(IntentValidator):
    """Validator for NAVIGATE intents."""

    intent_type = EnumIntentType.NAVIGATE

    def check_envelope(self, envelope: ModelIntentEnvelope) -> list[ValidationFinding]:
        if (
            envelope.origin is EnumIntentOrigin.AI
            and envelope.payload.get("external") is True
        ):
            return [
                ValidationFinding(
                    code=EnumIntentErrorCode.AI_EXTERNAL_NAV_DENIED,
                    message="AI cannot navigate outside the application",
                    field="payload.external",
                )
            ]
        return []

    def check_schema(self, intent: ModelNavigateIntent) -> list[ValidationFinding]:
        payload = intent.payload
        if payload.external:
            if not EXTERNAL_TARGET_PATTERN.match(payload.route):
                return [
                    ValidationFinding(
                        code=EnumIntentErrorCode.INTENT_VALIDATION_FAILED,
                        message=(
                            "External route must be an http(s) URL or "
                            "'external:<target>'"
                        ),
                        field="payload.route",
                    )
                ]
        elif not ROUTE_PATTERN.match(payload.route):
            return [
                ValidationFinding(
                    code=EnumIntentErrorCode.INTENT_VALIDATION_FAILED,
                    message=(
                        f"Route {payload.route!r} does not match "
                        "/<industry>/<app|auth>/..."
                    ),
                    field="payload.route",
                )
            ]
        return []

    async def check_business(
        self, intent: ModelNavigateIntent, context: ValidationContext
    ) -> list[ValidationFinding]:
        payload = intent.payload
        findings: list[ValidationFinding] = []

        # AI external navigation is denied in stage 1
        if payload.external:
            return findings

        target_industry = route_industry(payload.route)
        current_industry = route_industry(await context.ui.current_route())
        if (
            current_industry is not None
            and target_industry != current_industry
            and not await context.permissions.has_permission(CROSS_INDUSTRY_PERMISSION)
        ):
            findings.append(
                ValidationFinding(
                    code=EnumIntentErrorCode.CROSS_INDUSTRY_NAV_DENIED,
                    message=(
                        f"Navigating from {current_industry} to {target_industry} "
                        f"requires {CROSS_INDUSTRY_PERMISSION}"
                    ),
                    field="payload.route",
                )
            )

        findings.extend(await self._check_tenant_boundary(intent, context))
        return findings

    async def check_security(
        self, intent: ModelNavigateIntent, context: ValidationContext
    ) -> list[ValidationFinding]:
        # Tenancy may have changed while earlier stages awaited
        if intent.payload.external:
            return []
        return await self._check_tenant_boundary(intent, context)

    async def _check_tenant_boundary(
        self, intent: ModelNavigateIntent, context: ValidationContext
    ) -> list[ValidationFinding]:
        tenant_id = intent.metadata.tenant_id
        if await context.permissions.is_route_in_tenant_boundary(
            intent.payload.route, tenant_id
        ):
            return []
        return [
            ValidationFinding(
                code=EnumIntentErrorCode.TENANT_BOUNDARY_VIOLATION,
                message=(
                    f"Route {intent.payload.route!r} is outside tenant {tenant_id!r}"
                ),
                field="payload.route",
            )
        ]


__all__ = [
    "CROSS_INDUSTRY_PERMISSION",
    "ROUTE_PATTERN",
    "NavigateValidator",
    "route_industry",
]
