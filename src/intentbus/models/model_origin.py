# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Origin provenance attached to audit-log entries.

These models are advisory and audit-only. Validators never read them.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from intentbus.enums import EnumIntentOrigin


class ModelAIContext(BaseModel):
    """Provenance of an AI-originated intent.

    Attributes:
        model_id: Identifier of the model that issued the intent.
        conversation_id: Conversation the tool call belongs to.
        prompt_hash: sha256 hex digest of the triggering prompt. The prompt
            itself is never stored.
        confidence_score: Model-reported confidence in [0, 1].
        reasoning: Model reasoning with PII patterns redacted.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", protected_namespaces=())

    model_id: str | None = None
    conversation_id: str | None = None
    prompt_hash: str | None = Field(default=None, pattern=r"^[0-9a-f]{64}$")
    confidence_score: float | None = Field(default=None, ge=0.0, le=1.0)
    reasoning: str | None = None


class ModelUserContext(BaseModel):
    """Provenance of a USER-originated intent."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    interaction_type: Literal[
        "click", "keyboard", "touch", "voice", "shortcut", "unknown"
    ] = "unknown"
    ui_element: str | None = None
    accessibility_mode: bool = False


class ModelSystemContext(BaseModel):
    """Provenance of a SYSTEM-originated intent."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    trigger_type: Literal["scheduled", "event", "automated", "recovery"] = "automated"
    process_name: str | None = None


class ModelOriginDetails(BaseModel):
    """Exactly one origin context, matching ``origin``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    origin: EnumIntentOrigin
    ai_context: ModelAIContext | None = None
    user_context: ModelUserContext | None = None
    system_context: ModelSystemContext | None = None

    @model_validator(mode="after")
    def _context_matches_origin(self) -> ModelOriginDetails:
        expected = {
            EnumIntentOrigin.AI: self.ai_context,
            EnumIntentOrigin.USER: self.user_context,
            EnumIntentOrigin.SYSTEM: self.system_context,
        }
        present = [ctx for ctx in expected.values() if ctx is not None]
        if len(present) != 1 or expected[self.origin] is None:
            msg = f"origin details must carry exactly the {self.origin.value} context"
            raise ValueError(msg)
        return self


__all__ = [
    "ModelAIContext",
    "ModelOriginDetails",
    "ModelSystemContext",
    "ModelUserContext",
]
