# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Durable audit record for a processed intent.

Lifecycle:
    Created at intake with ``status=pending``. Moves to ``rejected``
    (terminal) on validation failure or conflict, or through ``executing``
    to ``completed`` / ``failed`` (terminal). Each transition produces a new
    frozen instance; terminal entries are only ever appended, never changed.

Invariants enforced here:
    - A ``rejected`` entry never carries an ``execution_result``.
    - ``rejected`` and ``failed`` entries carry an ``error`` block;
      ``completed`` entries never do.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from intentbus.enums import EnumErrorType, EnumIntentOrigin, EnumIntentStatus
from intentbus.models.model_execution import ModelExecutionResult
from intentbus.models.model_origin import ModelOriginDetails
from intentbus.models.model_snapshot import ModelUIStateSnapshot
from intentbus.models.model_validation import ModelValidationResult


class ModelLogError(BaseModel):
    """Error block of a rejected or failed entry."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_code: str = Field(..., min_length=1)
    error_message: str
    error_type: EnumErrorType
    recoverable: bool


class ModelLogMetadata(BaseModel):
    """Identifiers copied from the intent metadata (provenance excluded)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    session_id: str | None = None
    tenant_id: str | None = None
    user_id: str | None = None


class ModelPerformanceMetrics(BaseModel):
    """Per-phase timings of one processing run, in milliseconds."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    validation_duration_ms: float = Field(default=0.0, ge=0.0)
    queue_wait_ms: float = Field(default=0.0, ge=0.0)
    execution_duration_ms: float = Field(default=0.0, ge=0.0)
    total_duration_ms: float = Field(default=0.0, ge=0.0)


class ModelIntentLogEntry(BaseModel):
    """Audit record of one intent's validation and execution outcome.

    Attributes:
        log_id: Unique identifier of this record.
        intent_id: Identifier of the processed intent.
        correlation_id: Logical flow the intent belongs to.
        sequence_number: Position within the correlation group (1-based,
            gap-free, assigned at intake).
        timestamp: Intent creation time as supplied by the caller.
        execution_start: When the bus picked the intent up.
        execution_end: When processing finished.
        duration_ms: Total processing time.
        intent_type: Intent type name (may be an unsupported type).
        origin: AI, USER or SYSTEM.
        status: Lifecycle status.
        validation_result: Outcome of the validator pipeline.
        execution_result: Outcome of the executor, if one ran.
        context: UI state captured at intake.
        payload: Sanitized payload (secrets and PII stripped).
        metadata: Session, tenant and user identifiers.
        origin_details: Provenance produced by the origin tagger.
        performance: Per-phase timings.
        error: Error block for rejected and failed entries.
        attempt: 1-based submission attempt when retried automatically.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    log_id: str = Field(..., min_length=1)
    intent_id: str
    correlation_id: str
    sequence_number: int = Field(..., ge=1)
    timestamp: datetime
    execution_start: datetime | None = None
    execution_end: datetime | None = None
    duration_ms: float | None = Field(default=None, ge=0.0)
    intent_type: str
    origin: EnumIntentOrigin
    status: EnumIntentStatus
    validation_result: ModelValidationResult
    execution_result: ModelExecutionResult | None = None
    context: ModelUIStateSnapshot | None = None
    payload: dict[str, Any] = Field(default_factory=dict)
    metadata: ModelLogMetadata = Field(default_factory=ModelLogMetadata)
    origin_details: ModelOriginDetails | None = None
    performance: ModelPerformanceMetrics = Field(
        default_factory=ModelPerformanceMetrics
    )
    error: ModelLogError | None = None
    attempt: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _check_status_invariants(self) -> ModelIntentLogEntry:
        if (
            self.status is EnumIntentStatus.REJECTED
            and self.execution_result is not None
        ):
            msg = "a rejected entry never carries an execution_result"
            raise ValueError(msg)
        if (
            self.status in (EnumIntentStatus.REJECTED, EnumIntentStatus.FAILED)
            and self.error is None
        ):
            msg = f"a {self.status.value} entry must carry an error block"
            raise ValueError(msg)
        if self.status is EnumIntentStatus.COMPLETED and self.error is not None:
            msg = "a completed entry never carries an error block"
            raise ValueError(msg)
        return self

    @property
    def is_terminal(self) -> bool:
        """True once the entry has reached a terminal status."""
        return self.status.is_terminal

    @property
    def is_retry_summary(self) -> bool:
        """True for the synthetic entry appended when retries are exhausted."""
        return self.error is not None and self.error.error_type is EnumErrorType.RETRY

    @property
    def error_code(self) -> str | None:
        """Shortcut for ``error.error_code``."""
        return self.error.error_code if self.error else None

    @property
    def side_effects(self) -> list[str]:
        """Side-effect tag values reported by the executor (empty if none ran)."""
        if self.execution_result is None:
            return []
        return [tag.value for tag in self.execution_result.side_effects]


__all__ = [
    "ModelIntentLogEntry",
    "ModelLogError",
    "ModelLogMetadata",
    "ModelPerformanceMetrics",
]
