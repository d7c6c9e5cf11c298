# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Intent audit log: storage, querying, sanitization and monitoring.

Every processed intent produces exactly one terminal ``ModelIntentLogEntry``.
This package stores those entries append-only, assigns per-correlation
sequence numbers, strips secrets and PII from payloads before they are
persisted, and derives summaries and operational issues from the log.

Usage:
    from intentbus.audit import IntentLogRepository, ModelIntentLogQuery

    repo = IntentLogRepository()
    entries, cursor = repo.query(ModelIntentLogQuery(origin=EnumIntentOrigin.AI))
"""

from intentbus.audit.metrics import detect_issues, summarize_entries
from intentbus.audit.models import (
    EnumIntentIssueSeverity,
    EnumIntentIssueType,
    ModelIntentIssue,
    ModelIntentLogCursor,
    ModelIntentLogQuery,
    ModelIntentLogSummary,
)
from intentbus.audit.protocols import ProtocolIntentLogRepository
from intentbus.audit.repository import IntentLogRepository
from intentbus.audit.sanitizer import (
    PayloadSanitizer,
    get_payload_sanitizer,
    redact_pii,
    sanitize_payload,
)

__all__ = [
    "EnumIntentIssueSeverity",
    "EnumIntentIssueType",
    "IntentLogRepository",
    "ModelIntentIssue",
    "ModelIntentLogCursor",
    "ModelIntentLogQuery",
    "ModelIntentLogSummary",
    "PayloadSanitizer",
    "ProtocolIntentLogRepository",
    "detect_issues",
    "get_payload_sanitizer",
    "redact_pii",
    "sanitize_payload",
]
