# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Fixed priority class per intent type.

Theme changes are CRITICAL: they can invalidate DOM assumptions every other
operation relies on, so they run first and may preempt.
"""

from __future__ import annotations

from intentbus.enums import EnumIntentType, EnumPriorityClass

PRIORITY_BY_TYPE: dict[str, EnumPriorityClass] = {
    EnumIntentType.SET_THEME: EnumPriorityClass.CRITICAL,
    EnumIntentType.NAVIGATE: EnumPriorityClass.HIGH,
    EnumIntentType.RUN_CLIENT_ACTION: EnumPriorityClass.HIGH,
    EnumIntentType.OPEN_MODAL: EnumPriorityClass.MEDIUM,
    EnumIntentType.SET_TABLE_STATE: EnumPriorityClass.MEDIUM,
}


def priority_for(intent_type: str) -> EnumPriorityClass:
    """Return the priority class of ``intent_type`` (LOW if unknown)."""
    return PRIORITY_BY_TYPE.get(intent_type, EnumPriorityClass.LOW)


__all__ = ["PRIORITY_BY_TYPE", "priority_for"]
