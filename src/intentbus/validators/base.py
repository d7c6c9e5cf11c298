# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Four-stage intent validation.

Each intent type has one ``IntentValidator`` subclass. ``validate`` runs
the stages in a fixed order and stops after the first stage that reports an
error; warnings from every stage that ran are kept.

Stages:
    1. SCHEMA: envelope parsed into its typed variant (``parse_intent``),
       plus format checks pydantic cannot express. Hard origin-policy
       denials are evaluated here on the raw envelope, so they hold no
       matter what else is wrong with the payload.
    2. BUSINESS: type-specific rules against the UI and permission ports.
    3. CONTEXTUAL: the intent is not already in flight, plus type-specific
       UI readiness checks.
    4. SECURITY: type-specific re-verification, then the per-origin rate
       limit. Budget is only consumed by intents that pass every other check.

Subclasses override the ``check_*`` hooks; each returns a list of
``ValidationFinding``. The base class attaches stage and intent context.
"""

from __future__ import annotations

import logging
import time
from abc import ABC
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import ClassVar

from pydantic import ValidationError

from intentbus.enums import (
    EnumErrorSeverity,
    EnumIntentErrorCode,
    EnumIntentType,
    EnumValidationStage,
)
from intentbus.models import (
    ModelIntent,
    ModelIntentEnvelope,
    ModelValidationError,
    ModelValidationErrorContext,
    ModelValidationResult,
    parse_intent,
)
from intentbus.protocols import ProtocolPermissionService, ProtocolUIState
from intentbus.validators.rate_limiter import OriginRateLimiter

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _nothing_in_flight(_intent_id: str) -> bool:
    return False


# ---------------------------------------------------------------------------
# Context and findings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationContext:
    """Collaborators and state a validator may consult.

    Attributes:
        ui: Read access to the running UI.
        permissions: Permission and tenancy lookups.
        rate_limiter: Per-origin budgets for the security stage. None
            disables rate limiting.
        is_in_flight: Returns True if an intent id is currently queued or
            executing.
        clock: Timestamp source for finding context.
    """

    ui: ProtocolUIState
    permissions: ProtocolPermissionService
    rate_limiter: OriginRateLimiter | None = None
    is_in_flight: Callable[[str], bool] = _nothing_in_flight
    clock: Callable[[], datetime] = _utcnow


@dataclass(frozen=True)
class ValidationFinding:
    """A stage-local finding, converted to ``ModelValidationError`` by the base."""

    code: str
    message: str
    field: str | None = None
    recoverable: bool = False
    severity: EnumErrorSeverity = EnumErrorSeverity.ERROR


_StageCheck = Callable[
    [ModelIntent, ValidationContext], Awaitable[list[ValidationFinding]]
]


def schema_findings(exc: ValidationError, intent_type: str) -> list[ValidationFinding]:
    """Convert a pydantic error into one INTENT_VALIDATION_FAILED per location.

    Discriminated-union locations start with the variant tag; it is dropped
    so the field path reads ``payload.<field>``.
    """
    findings: list[ValidationFinding] = []
    for error in exc.errors(include_url=False):
        loc = list(error["loc"])
        if loc and loc[0] == intent_type:
            loc = loc[1:]
        findings.append(
            ValidationFinding(
                code=EnumIntentErrorCode.INTENT_VALIDATION_FAILED,
                message=error["msg"],
                field=".".join(str(part) for part in loc) or None,
            )
        )
    return findings


# ---------------------------------------------------------------------------
# IntentValidator
# ---------------------------------------------------------------------------


class IntentValidator(ABC):
    """Base class for per-type validators."""

    intent_type: ClassVar[EnumIntentType]

    async def validate(
        self,
        envelope: ModelIntentEnvelope,
        context: ValidationContext,
    ) -> ModelValidationResult:
        """Run the four stages over ``envelope``.

        Args:
            envelope: The submitted intent.
            context: Collaborators consulted by stages 2-4.

        Returns:
            ModelValidationResult; ``failed_stage`` names the stage that
            stopped the pipeline.
        """
        started = time.perf_counter()
        warnings: list[ModelValidationError] = []

        findings = self.check_envelope(envelope)
        intent: ModelIntent | None = None
        try:
            intent = parse_intent(envelope)
        except ValidationError as exc:
            findings.extend(schema_findings(exc, envelope.type))
        else:
            if intent.type != self.intent_type:
                findings.append(
                    ValidationFinding(
                        code=EnumIntentErrorCode.INTENT_VALIDATION_FAILED,
                        message=(
                            f"{type(self).__name__} cannot validate "
                            f"{intent.type} intents"
                        ),
                        field="type",
                    )
                )
            else:
                findings.extend(self.check_schema(intent))

        errors = self._collect(
            findings, envelope, EnumValidationStage.SCHEMA, context, warnings
        )
        if errors or intent is None:
            return self._result(errors, warnings, started, EnumValidationStage.SCHEMA)

        stages: tuple[tuple[EnumValidationStage, _StageCheck], ...] = (
            (EnumValidationStage.BUSINESS, self.check_business),
            (EnumValidationStage.CONTEXTUAL, self._run_contextual),
            (EnumValidationStage.SECURITY, self._run_security),
        )
        for stage, check in stages:
            findings = await check(intent, context)
            errors = self._collect(findings, envelope, stage, context, warnings)
            if errors:
                return self._result(errors, warnings, started, stage)

        return self._result([], warnings, started, None)

    # ------------------------------------------------------------------
    # Stage hooks
    # ------------------------------------------------------------------

    def check_envelope(self, envelope: ModelIntentEnvelope) -> list[ValidationFinding]:
        """Hard denials evaluated on the raw envelope (stage 1)."""
        return []

    def check_schema(self, intent: ModelIntent) -> list[ValidationFinding]:
        """Format checks on the parsed intent (stage 1)."""
        return []

    async def check_business(
        self, intent: ModelIntent, context: ValidationContext
    ) -> list[ValidationFinding]:
        """Type-specific business rules (stage 2)."""
        return []

    async def check_contextual(
        self, intent: ModelIntent, context: ValidationContext
    ) -> list[ValidationFinding]:
        """Type-specific UI readiness checks (stage 3)."""
        return []

    async def check_security(
        self, intent: ModelIntent, context: ValidationContext
    ) -> list[ValidationFinding]:
        """Type-specific re-verification (stage 4)."""
        return []

    # ------------------------------------------------------------------
    # Shared stage logic
    # ------------------------------------------------------------------

    async def _run_contextual(
        self, intent: ModelIntent, context: ValidationContext
    ) -> list[ValidationFinding]:
        if context.is_in_flight(intent.intent_id):
            return [
                ValidationFinding(
                    code=EnumIntentErrorCode.INTENT_ALREADY_IN_FLIGHT,
                    message=f"Intent {intent.intent_id} is already queued or executing",
                    field="intent_id",
                    recoverable=True,
                )
            ]
        return await self.check_contextual(intent, context)

    async def _run_security(
        self, intent: ModelIntent, context: ValidationContext
    ) -> list[ValidationFinding]:
        findings = await self.check_security(intent, context)
        if any(f.severity is EnumErrorSeverity.ERROR for f in findings):
            return findings
        limiter = context.rate_limiter
        if limiter is not None and not limiter.try_acquire(intent.origin):
            findings.append(
                ValidationFinding(
                    code=EnumIntentErrorCode.RATE_LIMIT_EXCEEDED,
                    message=(
                        f"Rate limit for {intent.origin.value} intents exceeded "
                        f"({limiter.limits.budget_for(intent.origin)} per "
                        f"{limiter.limits.window_seconds:.0f}s)"
                    ),
                    field="origin",
                    recoverable=True,
                )
            )
        return findings

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _collect(
        self,
        findings: list[ValidationFinding],
        envelope: ModelIntentEnvelope,
        stage: EnumValidationStage,
        context: ValidationContext,
        warnings: list[ModelValidationError],
    ) -> list[ModelValidationError]:
        errors: list[ModelValidationError] = []
        if not findings:
            return errors
        error_context = ModelValidationErrorContext(
            intent_id=envelope.intent_id,
            intent_type=envelope.type,
            validation_stage=stage,
            timestamp=context.clock(),
        )
        for finding in findings:
            converted = ModelValidationError(
                code=finding.code,
                message=finding.message,
                field=finding.field,
                severity=finding.severity,
                recoverable=finding.recoverable,
                context=error_context,
            )
            if finding.severity is EnumErrorSeverity.ERROR:
                errors.append(converted)
            else:
                warnings.append(converted)
        if errors:
            logger.debug(
                "Validation stage %s failed for intent_id=%s codes=%s",
                stage.name,
                envelope.intent_id,
                [e.code for e in errors],
                extra={"correlation_id": envelope.correlation_id},
            )
        return errors

    @staticmethod
    def _result(
        errors: list[ModelValidationError],
        warnings: list[ModelValidationError],
        started: float,
        failed_stage: EnumValidationStage | None,
    ) -> ModelValidationResult:
        return ModelValidationResult(
            valid=not errors,
            errors=errors,
            warnings=warnings,
            performance_ms=(time.perf_counter() - started) * 1000,
            failed_stage=failed_stage if errors else None,
        )


__all__ = [
    "IntentValidator",
    "ValidationContext",
    "ValidationFinding",
    "schema_findings",
]
