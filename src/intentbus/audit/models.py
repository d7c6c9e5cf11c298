# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Query, summary and issue models for the intent audit log."""

from __future__ import annotations

from datetime import datetime
from enum import Enum, unique

from pydantic import BaseModel, ConfigDict, Field

from intentbus.enums import EnumIntentOrigin, EnumIntentStatus

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500


# ---------------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------------


class ModelIntentLogCursor(BaseModel):
    """Cursor for paginated queries: position of the last entry returned."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    last_position: int = Field(..., ge=0)


class ModelIntentLogQuery(BaseModel):
    """Filter for ``IntentLogRepository.query``.

    Every field is optional; unset fields do not filter. ``text`` matches
    case-insensitively against the intent id, type, correlation id, error
    code, error message and the serialized sanitized payload.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    since: datetime | None = None
    until: datetime | None = None
    intent_type: str | None = None
    origin: EnumIntentOrigin | None = None
    status: EnumIntentStatus | None = None
    error_code: str | None = None
    correlation_id: str | None = None
    text: str | None = Field(default=None, min_length=1)
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    cursor: ModelIntentLogCursor | None = None


# ---------------------------------------------------------------------------
# Monitoring
# ---------------------------------------------------------------------------


class ModelIntentLogSummary(BaseModel):
    """Aggregate view over a set of terminal log entries.

    Attributes:
        total: Number of entries summarized.
        by_status: Count per status value.
        by_origin: Count per origin value.
        by_type: Count per intent type.
        error_codes: Count per error code (rejected and failed entries).
        success_rate: Fraction of entries that completed.
        average_duration_ms: Mean total processing time.
        p95_duration_ms: 95th percentile total processing time.
        average_validation_ms: Mean validation time.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    total: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
    by_origin: dict[str, int] = Field(default_factory=dict)
    by_type: dict[str, int] = Field(default_factory=dict)
    error_codes: dict[str, int] = Field(default_factory=dict)
    success_rate: float = 0.0
    average_duration_ms: float = 0.0
    p95_duration_ms: float = 0.0
    average_validation_ms: float = 0.0


@unique
class EnumIntentIssueType(str, Enum):
    """Classification of a detected operational issue."""

    HIGH_REJECTION_RATE = "high_rejection_rate"
    """An origin's rejection ratio exceeds the configured threshold."""

    UNSUPPORTED_INTENT_TYPE = "unsupported_intent_type"
    """Callers repeatedly submit a type with no registered validator."""

    SLOW_VALIDATION = "slow_validation"
    """Validation exceeded the configured time budget."""

    PREEMPTION_CHURN = "preemption_churn"
    """Intents in one flow keep being preempted."""

    RETRIES_EXHAUSTED = "retries_exhausted"
    """An intent hit the retry cap."""


@unique
class EnumIntentIssueSeverity(str, Enum):
    """Severity of a detected issue."""

    WARNING = "warning"
    CRITICAL = "critical"


class ModelIntentIssue(BaseModel):
    """A single operational issue found in the audit log.

    Attributes:
        issue_type: Classification of the issue.
        severity: WARNING or CRITICAL.
        description: Human-readable explanation.
        affected_log_ids: Entries that triggered the issue.
        origin: Origin the issue concerns, if any.
        detected_at: When the issue was detected (injected by caller).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    issue_type: EnumIntentIssueType
    severity: EnumIntentIssueSeverity
    description: str
    affected_log_ids: list[str] = Field(default_factory=list)
    origin: EnumIntentOrigin | None = None
    detected_at: datetime


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "EnumIntentIssueSeverity",
    "EnumIntentIssueType",
    "ModelIntentIssue",
    "ModelIntentLogCursor",
    "ModelIntentLogQuery",
    "ModelIntentLogSummary",
]
