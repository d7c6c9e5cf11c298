# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Stable error-code taxonomy for the intent bus.

Every rejection or failure recorded in the audit log carries one of these
codes. Downstream tooling and tests assert on the exact string values, so
values must never be renamed.
"""

from __future__ import annotations

from enum import Enum, StrEnum, unique


@unique
class EnumIntentErrorCode(StrEnum):
    """Error codes attached to validation errors and log entries."""

    # Bus-level
    INTENT_TYPE_UNSUPPORTED = "INTENT_TYPE_UNSUPPORTED"
    INTENT_VALIDATION_FAILED = "INTENT_VALIDATION_FAILED"
    INTENT_CONFLICT = "INTENT_CONFLICT"
    PREEMPTED = "PREEMPTED"
    INTENT_EXECUTION_FAILED = "INTENT_EXECUTION_FAILED"
    INTENT_PROCESSING_ERROR = "INTENT_PROCESSING_ERROR"
    MAX_RETRIES_EXCEEDED = "MAX_RETRIES_EXCEEDED"

    # Navigate
    AI_EXTERNAL_NAV_DENIED = "AI_EXTERNAL_NAV_DENIED"
    CROSS_INDUSTRY_NAV_DENIED = "CROSS_INDUSTRY_NAV_DENIED"
    TENANT_BOUNDARY_VIOLATION = "TENANT_BOUNDARY_VIOLATION"

    # Table state
    TABLE_NOT_FOUND = "TABLE_NOT_FOUND"
    UNKNOWN_TABLE_FIELD = "UNKNOWN_TABLE_FIELD"
    UNSUPPORTED_OPERATOR = "UNSUPPORTED_OPERATOR"
    FILTER_TYPE_MISMATCH = "FILTER_TYPE_MISMATCH"
    ROW_NOT_FOUND = "ROW_NOT_FOUND"
    TABLE_DATA_NOT_LOADED = "TABLE_DATA_NOT_LOADED"

    # Open panel
    OVERLAY_MODAL_FORBIDDEN = "OVERLAY_MODAL_FORBIDDEN"
    PANEL_TYPE_NOT_ALLOWED = "PANEL_TYPE_NOT_ALLOWED"
    PANEL_ALREADY_OPEN = "PANEL_ALREADY_OPEN"
    ENTITY_NOT_FOUND = "ENTITY_NOT_FOUND"
    ENTITY_PERMISSION_DENIED = "ENTITY_PERMISSION_DENIED"
    PARENT_CONTEXT_NOT_MOUNTED = "PARENT_CONTEXT_NOT_MOUNTED"

    # Theme
    AI_ACCESSIBILITY_DENIED = "AI_ACCESSIBILITY_DENIED"
    MOTION_ACCESSIBILITY_CONFLICT = "MOTION_ACCESSIBILITY_CONFLICT"

    # Client action
    CLIENT_ACTION_UNSUPPORTED = "CLIENT_ACTION_UNSUPPORTED"
    AI_EXTERNAL_LINK_CONSENT_REQUIRED = "AI_EXTERNAL_LINK_CONSENT_REQUIRED"
    AI_SCREENSHOT_DENIED = "AI_SCREENSHOT_DENIED"
    INVALID_EXTERNAL_URL = "INVALID_EXTERNAL_URL"
    UNSAFE_FILENAME = "UNSAFE_FILENAME"
    DATA_ACCESS_DENIED = "DATA_ACCESS_DENIED"
    CLIENT_ACTION_TARGET_NOT_MOUNTED = "CLIENT_ACTION_TARGET_NOT_MOUNTED"

    # Contextual / security stages
    INTENT_ALREADY_IN_FLIGHT = "INTENT_ALREADY_IN_FLIGHT"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    UNVERIFIED_ENTITY_REFERENCE = "UNVERIFIED_ENTITY_REFERENCE"


@unique
class EnumErrorSeverity(str, Enum):
    """Severity of a single validation finding."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@unique
class EnumErrorType(str, Enum):
    """Which part of the pipeline produced a log-entry error."""

    VALIDATION = "validation"
    CONFLICT = "conflict"
    PREEMPTION = "preemption"
    EXECUTION = "execution"
    SYSTEM = "system"
    RETRY = "retry"


# Codes eligible for bounded automatic retry. The condition that caused them
# (UI still mounting, conflicting intent still running, budget exhausted) can
# clear on its own.
CONDITIONAL_REJECTION_CODES: frozenset[EnumIntentErrorCode] = frozenset(
    {
        EnumIntentErrorCode.TABLE_NOT_FOUND,
        EnumIntentErrorCode.ENTITY_NOT_FOUND,
        EnumIntentErrorCode.INTENT_CONFLICT,
        EnumIntentErrorCode.PANEL_ALREADY_OPEN,
        EnumIntentErrorCode.RATE_LIMIT_EXCEEDED,
        EnumIntentErrorCode.TABLE_DATA_NOT_LOADED,
        EnumIntentErrorCode.PARENT_CONTEXT_NOT_MOUNTED,
        EnumIntentErrorCode.CLIENT_ACTION_TARGET_NOT_MOUNTED,
        EnumIntentErrorCode.INTENT_ALREADY_IN_FLIGHT,
        EnumIntentErrorCode.PREEMPTED,
    }
)

# Codes that are never retried: schema failures, permission denials, design
# constraints and origin security policy.
IMMEDIATE_REJECTION_CODES: frozenset[EnumIntentErrorCode] = frozenset(
    code
    for code in EnumIntentErrorCode
    if code not in CONDITIONAL_REJECTION_CODES
    and code
    not in (
        EnumIntentErrorCode.INTENT_EXECUTION_FAILED,
        EnumIntentErrorCode.MOTION_ACCESSIBILITY_CONFLICT,
        EnumIntentErrorCode.MAX_RETRIES_EXCEEDED,
    )
)


def is_conditional_code(code: str) -> bool:
    """Return True if ``code`` is retry-eligible.

    Unknown codes are not retry-eligible.
    """
    try:
        return EnumIntentErrorCode(code) in CONDITIONAL_REJECTION_CODES
    except ValueError:
        return False


__all__ = [
    "CONDITIONAL_REJECTION_CODES",
    "IMMEDIATE_REJECTION_CODES",
    "EnumErrorSeverity",
    "EnumErrorType",
    "EnumIntentErrorCode",
    "is_conditional_code",
]
