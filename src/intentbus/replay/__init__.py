# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Replay of logged correlation sequences.

Usage:
    from intentbus.replay import IntentReplayEngine, ModelReplayOptions

    engine = IntentReplayEngine(bus)
    report = await engine.replay_sequence(
        correlation_id, ModelReplayOptions(restore_snapshots=True, strict=True)
    )
"""

from intentbus.replay.engine import (
    IntentReplayEngine,
    describe_divergence,
    provenance_from_details,
    rebuild_envelope,
)
from intentbus.replay.models import (
    ModelReplayOptions,
    ModelReplayReport,
    ModelReplayStep,
)

__all__ = [
    "IntentReplayEngine",
    "ModelReplayOptions",
    "ModelReplayReport",
    "ModelReplayStep",
    "describe_divergence",
    "provenance_from_details",
    "rebuild_envelope",
]
