# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Executor result model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from intentbus.enums import EnumSideEffect


class ModelExecutionResult(BaseModel):
    """What an executor did.

    Attributes:
        success: True if the UI mutation completed.
        duration_ms: Time spent in the executor.
        side_effects: Every side-effect category triggered, in order.
        error: Underlying failure message when ``success`` is False.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    success: bool
    duration_ms: float = Field(default=0.0, ge=0.0)
    side_effects: list[EnumSideEffect] = Field(default_factory=list)
    error: str | None = None


__all__ = ["ModelExecutionResult"]
