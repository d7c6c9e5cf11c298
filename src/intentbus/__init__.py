# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Intent Bus - validated, ordered, auditable UI-change requests.

Intents from an AI agent, a human user or automated system processes pass
through a four-stage validator, a priority queue with conflict detection and
preemption, per-type executors and an append-only audit log.

Quick Start:
    >>> from intentbus import IntentBus
    >>> from intentbus.testing import MockPermissionService, MockUIState, create_intent
    >>> bus = IntentBus(MockUIState(), MockPermissionService())
    >>> entry = await bus.process_intent(
    ...     create_intent("NAVIGATE", {"route": "/hs/app/work-orders"})
    ... )
    >>> entry.status
    <EnumIntentStatus.COMPLETED: 'completed'>
"""

from intentbus.bus import IntentBus
from intentbus.enums import (
    EnumIntentErrorCode,
    EnumIntentOrigin,
    EnumIntentStatus,
    EnumIntentType,
)
from intentbus.models import ModelIntentEnvelope, ModelIntentLogEntry
from intentbus.replay import IntentReplayEngine, ModelReplayOptions
from intentbus.retry import RetryingIntentSubmitter, RetryPolicy
from intentbus.settings import IntentBusSettings

__version__ = "0.1.0"

__all__ = [
    # Enums
    "EnumIntentErrorCode",
    "EnumIntentOrigin",
    "EnumIntentStatus",
    "EnumIntentType",
    # Main API
    "IntentBus",
    "IntentBusSettings",
    "IntentReplayEngine",
    # Models
    "ModelIntentEnvelope",
    "ModelIntentLogEntry",
    "ModelReplayOptions",
    "RetryPolicy",
    "RetryingIntentSubmitter",
]
