# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Summary statistics and issue detection over intent log entries.

Implements summarize_entries() and detect_issues(), both pure functions over
a list of terminal entries (typically ``IntentLogRepository.all_entries()``
or one page of a query).

Issue Types Detected:
    HIGH_REJECTION_RATE: An origin's rejection ratio exceeds the threshold.
    UNSUPPORTED_INTENT_TYPE: The same unsupported type keeps being submitted.
    SLOW_VALIDATION: Validation exceeded the time budget.
    PREEMPTION_CHURN: One correlation group keeps getting preempted.
    RETRIES_EXHAUSTED: An intent hit the retry cap.
"""

from __future__ import annotations

import logging
import math
from collections import Counter, defaultdict
from collections.abc import Sequence
from datetime import UTC, datetime

from intentbus.audit.models import (
    EnumIntentIssueSeverity,
    EnumIntentIssueType,
    ModelIntentIssue,
    ModelIntentLogSummary,
)
from intentbus.enums import EnumIntentErrorCode, EnumIntentOrigin, EnumIntentStatus
from intentbus.models import ModelIntentLogEntry
from intentbus.settings import IntentBusSettings

logger = logging.getLogger(__name__)

# Origins with fewer processed intents than this are not rated
MIN_REJECTION_SAMPLE = 5

# Rejection ratio at or above which the issue is CRITICAL
CRITICAL_REJECTION_RATE = 0.9

UNSUPPORTED_REPEAT_THRESHOLD = 3
PREEMPTION_CHURN_THRESHOLD = 3


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


def summarize_entries(entries: Sequence[ModelIntentLogEntry]) -> ModelIntentLogSummary:
    """Aggregate counts and timings over ``entries``.

    Synthetic retry summaries are excluded: they describe a retry loop,
    not a processing run.

    Args:
        entries: Terminal log entries.

    Returns:
        ModelIntentLogSummary (all zero for an empty input).
    """
    runs = [e for e in entries if not e.is_retry_summary]
    if not runs:
        return ModelIntentLogSummary()

    by_status = Counter(e.status.value for e in runs)
    by_origin = Counter(e.origin.value for e in runs)
    by_type = Counter(e.intent_type for e in runs)
    error_codes = Counter(e.error_code for e in runs if e.error_code is not None)

    durations = sorted(e.duration_ms for e in runs if e.duration_ms is not None)
    validation_times = [e.validation_result.performance_ms for e in runs]

    return ModelIntentLogSummary(
        total=len(runs),
        by_status=dict(by_status),
        by_origin=dict(by_origin),
        by_type=dict(by_type),
        error_codes=dict(error_codes),
        success_rate=by_status.get(EnumIntentStatus.COMPLETED.value, 0) / len(runs),
        average_duration_ms=sum(durations) / len(durations) if durations else 0.0,
        p95_duration_ms=_percentile(durations, 0.95),
        average_validation_ms=sum(validation_times) / len(validation_times),
    )


def _percentile(sorted_values: Sequence[float], fraction: float) -> float:
    """Nearest-rank percentile of an ascending sequence."""
    if not sorted_values:
        return 0.0
    rank = max(1, math.ceil(fraction * len(sorted_values)))
    return sorted_values[rank - 1]


# ---------------------------------------------------------------------------
# Issue detection
# ---------------------------------------------------------------------------


def detect_issues(
    entries: Sequence[ModelIntentLogEntry],
    *,
    settings: IntentBusSettings | None = None,
    rejection_rate_threshold: float | None = None,
    validation_budget_ms: float | None = None,
    detected_at: datetime | None = None,
) -> list[ModelIntentIssue]:
    """Scan ``entries`` for operational problems.

    Runs five detection passes (see module docstring). A clean log returns
    an empty list.

    Args:
        entries: Terminal log entries.
        settings: Source of the thresholds not passed explicitly. Defaults
            to ``IntentBusSettings()``.
        rejection_rate_threshold: Per-origin rejection ratio above which an
            issue is raised. Overrides ``settings.rejection_rate_threshold``.
        validation_budget_ms: Validation time above which an entry is slow.
            Overrides ``settings.validation_budget_ms``.
        detected_at: Timestamp for the issues. If None, uses current UTC time.

    Returns:
        List of ModelIntentIssue instances.
    """
    if detected_at is None:
        detected_at = datetime.now(UTC)
    if rejection_rate_threshold is None or validation_budget_ms is None:
        settings = settings or IntentBusSettings()
        if rejection_rate_threshold is None:
            rejection_rate_threshold = settings.rejection_rate_threshold
        if validation_budget_ms is None:
            validation_budget_ms = settings.validation_budget_ms

    runs = [e for e in entries if not e.is_retry_summary]
    issues: list[ModelIntentIssue] = []

    issues.extend(_detect_rejection_rates(runs, rejection_rate_threshold, detected_at))
    issues.extend(_detect_unsupported_types(runs, detected_at))
    issues.extend(_detect_slow_validation(runs, validation_budget_ms, detected_at))
    issues.extend(_detect_preemption_churn(runs, detected_at))
    issues.extend(_detect_exhausted_retries(entries, detected_at))

    if issues:
        logger.info(
            "Issue detection found %d issue(s) across %d entries",
            len(issues),
            len(entries),
        )
    return issues


def _detect_rejection_rates(
    runs: Sequence[ModelIntentLogEntry],
    threshold: float,
    detected_at: datetime,
) -> list[ModelIntentIssue]:
    per_origin: dict[EnumIntentOrigin, list[ModelIntentLogEntry]] = defaultdict(list)
    for entry in runs:
        per_origin[entry.origin].append(entry)

    issues: list[ModelIntentIssue] = []
    for origin, origin_entries in per_origin.items():
        if len(origin_entries) < MIN_REJECTION_SAMPLE:
            continue
        rejected = [
            e for e in origin_entries if e.status is EnumIntentStatus.REJECTED
        ]
        rate = len(rejected) / len(origin_entries)
        if rate <= threshold:
            continue
        issues.append(
            ModelIntentIssue(
                issue_type=EnumIntentIssueType.HIGH_REJECTION_RATE,
                severity=(
                    EnumIntentIssueSeverity.CRITICAL
                    if rate >= CRITICAL_REJECTION_RATE
                    else EnumIntentIssueSeverity.WARNING
                ),
                description=(
                    f"{origin.value} intents rejected at {rate:.0%} "
                    f"({len(rejected)}/{len(origin_entries)})"
                ),
                affected_log_ids=[e.log_id for e in rejected],
                origin=origin,
                detected_at=detected_at,
            )
        )
    return issues


def _detect_unsupported_types(
    runs: Sequence[ModelIntentLogEntry],
    detected_at: datetime,
) -> list[ModelIntentIssue]:
    per_type: dict[str, list[ModelIntentLogEntry]] = defaultdict(list)
    for entry in runs:
        if entry.error_code == EnumIntentErrorCode.INTENT_TYPE_UNSUPPORTED:
            per_type[entry.intent_type].append(entry)

    return [
        ModelIntentIssue(
            issue_type=EnumIntentIssueType.UNSUPPORTED_INTENT_TYPE,
            severity=EnumIntentIssueSeverity.WARNING,
            description=(
                f"Unsupported intent type {intent_type!r} submitted "
                f"{len(type_entries)} times"
            ),
            affected_log_ids=[e.log_id for e in type_entries],
            detected_at=detected_at,
        )
        for intent_type, type_entries in per_type.items()
        if len(type_entries) >= UNSUPPORTED_REPEAT_THRESHOLD
    ]


def _detect_slow_validation(
    runs: Sequence[ModelIntentLogEntry],
    budget_ms: float,
    detected_at: datetime,
) -> list[ModelIntentIssue]:
    slow = [e for e in runs if e.validation_result.performance_ms > budget_ms]
    if not slow:
        return []
    worst = max(e.validation_result.performance_ms for e in slow)
    return [
        ModelIntentIssue(
            issue_type=EnumIntentIssueType.SLOW_VALIDATION,
            severity=EnumIntentIssueSeverity.WARNING,
            description=(
                f"{len(slow)} intent(s) exceeded the {budget_ms:.0f}ms validation "
                f"budget (worst {worst:.1f}ms)"
            ),
            affected_log_ids=[e.log_id for e in slow],
            detected_at=detected_at,
        )
    ]


def _detect_preemption_churn(
    runs: Sequence[ModelIntentLogEntry],
    detected_at: datetime,
) -> list[ModelIntentIssue]:
    per_flow: dict[str, list[ModelIntentLogEntry]] = defaultdict(list)
    for entry in runs:
        if entry.error_code == EnumIntentErrorCode.PREEMPTED:
            per_flow[entry.correlation_id].append(entry)

    return [
        ModelIntentIssue(
            issue_type=EnumIntentIssueType.PREEMPTION_CHURN,
            severity=EnumIntentIssueSeverity.WARNING,
            description=(
                f"Correlation {correlation_id!r} preempted {len(flow)} times"
            ),
            affected_log_ids=[e.log_id for e in flow],
            detected_at=detected_at,
        )
        for correlation_id, flow in per_flow.items()
        if len(flow) >= PREEMPTION_CHURN_THRESHOLD
    ]


def _detect_exhausted_retries(
    entries: Sequence[ModelIntentLogEntry],
    detected_at: datetime,
) -> list[ModelIntentIssue]:
    return [
        ModelIntentIssue(
            issue_type=EnumIntentIssueType.RETRIES_EXHAUSTED,
            severity=EnumIntentIssueSeverity.CRITICAL,
            description=(
                f"Intent {entry.intent_id!r} gave up after {entry.attempt} attempts"
            ),
            affected_log_ids=[entry.log_id],
            origin=entry.origin,
            detected_at=detected_at,
        )
        for entry in entries
        if entry.error_code == EnumIntentErrorCode.MAX_RETRIES_EXCEEDED
    ]


__all__ = [
    "detect_issues",
    "summarize_entries",
]
