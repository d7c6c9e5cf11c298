# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Priority classes, conflict rules and the single-executor intent queue.

Usage:
    from intentbus.queue import PriorityIntentQueue

    queue = PriorityIntentQueue(dispatch.execute)
    admission = queue.admit(intent)
    if admission.admitted:
        outcome = await admission.ticket.future
"""

from intentbus.queue.conflict_detector import (
    UI_MODIFYING_CLIENT_ACTIONS,
    ConflictDetector,
    conflict_reason,
    is_ui_modifying,
)
from intentbus.queue.priority import PRIORITY_BY_TYPE, priority_for
from intentbus.queue.priority_queue import (
    AdmissionResult,
    EnumTicketOutcome,
    IntentTicket,
    PriorityIntentQueue,
    TicketOutcome,
)

__all__ = [
    "PRIORITY_BY_TYPE",
    "UI_MODIFYING_CLIENT_ACTIONS",
    "AdmissionResult",
    "ConflictDetector",
    "EnumTicketOutcome",
    "IntentTicket",
    "PriorityIntentQueue",
    "TicketOutcome",
    "conflict_reason",
    "is_ui_modifying",
    "priority_for",
]
