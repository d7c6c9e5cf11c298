# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Intent classification enums.

Contains the intent types accepted by the bus, the origins an intent can
come from, the log-entry lifecycle statuses, and the queue priority classes.
"""

from __future__ import annotations

from enum import Enum, IntEnum, StrEnum, unique


@unique
class EnumIntentType(StrEnum):
    """Intent types with a registered validator and executor."""

    NAVIGATE = "NAVIGATE"
    SET_TABLE_STATE = "SET_TABLE_STATE"
    OPEN_MODAL = "OPEN_MODAL"
    SET_THEME = "SET_THEME"
    RUN_CLIENT_ACTION = "RUN_CLIENT_ACTION"


@unique
class EnumIntentOrigin(str, Enum):
    """Provenance of an intent."""

    AI = "AI"
    """Issued by an AI agent through the tool layer."""

    USER = "USER"
    """Issued by a human through a UI event handler."""

    SYSTEM = "SYSTEM"
    """Issued by a scheduled job or automated process."""


@unique
class EnumIntentStatus(str, Enum):
    """Lifecycle status of an IntentLogEntry.

    ``pending`` -> ``rejected`` (terminal), or
    ``pending`` -> ``executing`` -> ``completed`` / ``failed`` (terminal).
    """

    PENDING = "pending"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        """True for statuses an entry can never leave."""
        return self in (
            EnumIntentStatus.COMPLETED,
            EnumIntentStatus.FAILED,
            EnumIntentStatus.REJECTED,
        )


class EnumPriorityClass(IntEnum):
    """Queue priority classes. Lower value drains first."""

    CRITICAL = 0
    HIGH = 1
    MEDIUM = 2
    LOW = 3


@unique
class EnumValidationStage(IntEnum):
    """The four validation stages, in their fixed execution order."""

    SCHEMA = 1
    BUSINESS = 2
    CONTEXTUAL = 3
    SECURITY = 4


__all__ = [
    "EnumIntentOrigin",
    "EnumIntentStatus",
    "EnumIntentType",
    "EnumPriorityClass",
    "EnumValidationStage",
]
