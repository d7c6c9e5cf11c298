# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Replay options and reports."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from intentbus.enums import EnumIntentStatus


class ModelReplayOptions(BaseModel):
    """How a correlation sequence is replayed.

    Attributes:
        restore_snapshots: Restore each entry's captured UI snapshot before
            re-submitting it.
        verify: Compare status and side-effect tags with the original entry.
        strict: Stop at the first divergence. Implies ``verify``.
        replay_correlation_id: Correlation id for the replayed intents.
            Generated when omitted, so replayed entries never extend the
            original sequence.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    restore_snapshots: bool = False
    verify: bool = True
    strict: bool = False
    replay_correlation_id: str | None = Field(default=None, min_length=1)

    @property
    def compares(self) -> bool:
        return self.verify or self.strict


class ModelReplayStep(BaseModel):
    """Outcome of replaying one original log entry."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    sequence_number: int = Field(..., ge=1)
    intent_type: str
    original_log_id: str
    original_intent_id: str
    original_status: EnumIntentStatus
    original_side_effects: list[str] = Field(default_factory=list)
    replay_log_id: str
    replay_intent_id: str
    replay_status: EnumIntentStatus
    replay_side_effects: list[str] = Field(default_factory=list)
    replay_error_code: str | None = None
    snapshot_restored: bool = False
    matched: bool | None = Field(
        default=None, description="None when verification was off"
    )
    divergence: str | None = None


class ModelReplayReport(BaseModel):
    """Result of replaying a correlation sequence."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    correlation_id: str
    replay_correlation_id: str
    steps: list[ModelReplayStep] = Field(default_factory=list)
    skipped_retry_summaries: int = Field(default=0, ge=0)
    aborted: bool = False
    aborted_at_sequence: int | None = None

    @property
    def mismatches(self) -> list[ModelReplayStep]:
        return [step for step in self.steps if step.matched is False]

    @property
    def all_matched(self) -> bool:
        """True if nothing diverged and the replay ran to the end."""
        return not self.aborted and not self.mismatches


__all__ = [
    "ModelReplayOptions",
    "ModelReplayReport",
    "ModelReplayStep",
]
