# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""
Intent Bus Enums Package.

Single import location for every enum used across the bus:

    from intentbus.enums import (
        EnumIntentErrorCode,
        EnumIntentOrigin,
        EnumIntentStatus,
        EnumIntentType,
    )

Exports:
    Intent Enums:
        - EnumIntentType: Supported intent types
        - EnumIntentOrigin: AI / USER / SYSTEM provenance
        - EnumIntentStatus: Log-entry lifecycle status
        - EnumPriorityClass: Queue priority classes
        - EnumValidationStage: The four validation stages

    Error Enums:
        - EnumIntentErrorCode: Stable error-code taxonomy
        - EnumErrorSeverity: Validation finding severity
        - EnumErrorType: Pipeline part that produced a log-entry error
        - CONDITIONAL_REJECTION_CODES / IMMEDIATE_REJECTION_CODES

    Execution Enums:
        - EnumSideEffect: Side-effect tag vocabulary
"""

from intentbus.enums.enum_error_code import (
    CONDITIONAL_REJECTION_CODES,
    IMMEDIATE_REJECTION_CODES,
    EnumErrorSeverity,
    EnumErrorType,
    EnumIntentErrorCode,
    is_conditional_code,
)
from intentbus.enums.enum_intent import (
    EnumIntentOrigin,
    EnumIntentStatus,
    EnumIntentType,
    EnumPriorityClass,
    EnumValidationStage,
)
from intentbus.enums.enum_side_effect import EnumSideEffect

__all__ = [
    "CONDITIONAL_REJECTION_CODES",
    "IMMEDIATE_REJECTION_CODES",
    "EnumErrorSeverity",
    "EnumErrorType",
    "EnumIntentErrorCode",
    "EnumIntentOrigin",
    "EnumIntentStatus",
    "EnumIntentType",
    "EnumPriorityClass",
    "EnumSideEffect",
    "EnumValidationStage",
    "is_conditional_code",
]
