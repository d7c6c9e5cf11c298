# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Validation findings and the per-intent validation result."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from intentbus.enums import EnumErrorSeverity, EnumValidationStage


class ModelValidationErrorContext(BaseModel):
    """Where a validation finding was produced."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    intent_id: str
    intent_type: str
    validation_stage: EnumValidationStage
    timestamp: datetime


class ModelValidationError(BaseModel):
    """A single validation finding (error or warning).

    Attributes:
        code: Stable error code from ``EnumIntentErrorCode``.
        message: Human-readable explanation.
        field: Dotted path of the offending field (e.g. ``payload.route``).
        severity: ``error`` blocks the intent; ``warning`` and ``info`` do not.
        recoverable: True if the condition may clear on its own, making the
            intent eligible for retry.
        context: Intent and stage that produced the finding.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    code: str = Field(..., min_length=1)
    message: str
    field: str | None = None
    severity: EnumErrorSeverity = EnumErrorSeverity.ERROR
    recoverable: bool = False
    context: ModelValidationErrorContext


class ModelValidationResult(BaseModel):
    """Outcome of running the validator pipeline over one intent.

    Attributes:
        valid: True if no stage reported an error.
        errors: Blocking findings from the first failing stage.
        warnings: Non-blocking findings from every stage that ran.
        performance_ms: Wall time spent validating.
        failed_stage: The stage that short-circuited the pipeline, if any.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    valid: bool
    errors: list[ModelValidationError] = Field(default_factory=list)
    warnings: list[ModelValidationError] = Field(default_factory=list)
    performance_ms: float = Field(default=0.0, ge=0.0)
    failed_stage: EnumValidationStage | None = None

    @property
    def primary_error(self) -> ModelValidationError | None:
        """The blocking finding used as the log-entry error code.

        A non-recoverable finding outranks recoverable ones, so the logged
        code agrees with ``recoverable``. Otherwise the first finding wins.
        """
        if not self.errors:
            return None
        return next((e for e in self.errors if not e.recoverable), self.errors[0])

    @property
    def recoverable(self) -> bool:
        """True only if every blocking finding is recoverable."""
        return bool(self.errors) and all(e.recoverable for e in self.errors)


__all__ = [
    "ModelValidationError",
    "ModelValidationErrorContext",
    "ModelValidationResult",
]
