# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Origin tagging: provenance enrichment for audit-log entries.

The tagger turns the raw hints a caller places in
``metadata.provenance`` into a typed ``ModelOriginDetails``. It is a pure
function of the envelope: it performs no I/O and its output is stored on the
log entry only. Validators never see it.

Recognized provenance keys:
    AI:     model_id, conversation_id, prompt (hashed, never stored),
            prompt_hash, confidence_score, reasoning (PII redacted)
    USER:   interaction_type, ui_element, accessibility_mode
    SYSTEM: trigger_type, process_name

Malformed hints are dropped (or replaced with the field default) rather than
raised; provenance is advisory and must never block an intent.
"""

from __future__ import annotations

import hashlib
import logging
import re
from typing import Any, get_args

from intentbus.audit.sanitizer import PayloadSanitizer, get_payload_sanitizer
from intentbus.enums import EnumIntentOrigin
from intentbus.models import (
    ModelAIContext,
    ModelIntentEnvelope,
    ModelOriginDetails,
    ModelSystemContext,
    ModelUserContext,
)

logger = logging.getLogger(__name__)

# Stored reasoning is cut to this many characters after redaction
MAX_REASONING_CHARS = 2000

_SHA256_HEX = re.compile(r"^[0-9a-f]{64}$")

_INTERACTION_TYPES: frozenset[str] = frozenset(
    get_args(ModelUserContext.model_fields["interaction_type"].annotation)
)
_TRIGGER_TYPES: frozenset[str] = frozenset(
    get_args(ModelSystemContext.model_fields["trigger_type"].annotation)
)


def hash_prompt(prompt: str) -> str:
    """Return the sha256 hex digest of ``prompt``."""
    return hashlib.sha256(prompt.encode("utf-8")).hexdigest()


class OriginTagger:
    """Builds origin details from an envelope's provenance hints.

    Args:
        sanitizer: Used to redact PII from AI reasoning. Defaults to the
            process-wide sanitizer.
    """

    def __init__(self, sanitizer: PayloadSanitizer | None = None) -> None:
        self._sanitizer = sanitizer or get_payload_sanitizer()

    def tag(self, envelope: ModelIntentEnvelope) -> ModelOriginDetails:
        """Return the origin details for ``envelope``."""
        hints = envelope.metadata.provenance
        match envelope.origin:
            case EnumIntentOrigin.AI:
                return ModelOriginDetails(
                    origin=envelope.origin,
                    ai_context=self._ai_context(hints),
                )
            case EnumIntentOrigin.USER:
                return ModelOriginDetails(
                    origin=envelope.origin,
                    user_context=self._user_context(hints),
                )
            case _:
                return ModelOriginDetails(
                    origin=EnumIntentOrigin.SYSTEM,
                    system_context=self._system_context(hints),
                )

    # ------------------------------------------------------------------
    # Per-origin builders
    # ------------------------------------------------------------------

    def _ai_context(self, hints: dict[str, Any]) -> ModelAIContext:
        prompt = hints.get("prompt")
        prompt_hash: str | None = None
        if isinstance(prompt, str) and prompt:
            prompt_hash = hash_prompt(prompt)
        elif isinstance(hints.get("prompt_hash"), str) and _SHA256_HEX.match(
            hints["prompt_hash"]
        ):
            prompt_hash = hints["prompt_hash"]

        reasoning = hints.get("reasoning")
        if isinstance(reasoning, str):
            reasoning = self._sanitizer.redact_text(reasoning)[:MAX_REASONING_CHARS]
        else:
            reasoning = None

        return ModelAIContext(
            model_id=_opt_str(hints.get("model_id")),
            conversation_id=_opt_str(hints.get("conversation_id")),
            prompt_hash=prompt_hash,
            confidence_score=_confidence(hints.get("confidence_score")),
            reasoning=reasoning,
        )

    def _user_context(self, hints: dict[str, Any]) -> ModelUserContext:
        interaction = hints.get("interaction_type")
        if not isinstance(interaction, str) or interaction not in _INTERACTION_TYPES:
            interaction = "unknown"
        return ModelUserContext(
            interaction_type=interaction,
            ui_element=_opt_str(hints.get("ui_element")),
            accessibility_mode=hints.get("accessibility_mode") is True,
        )

    def _system_context(self, hints: dict[str, Any]) -> ModelSystemContext:
        trigger = hints.get("trigger_type")
        if not isinstance(trigger, str) or trigger not in _TRIGGER_TYPES:
            trigger = "automated"
        return ModelSystemContext(
            trigger_type=trigger,
            process_name=_opt_str(hints.get("process_name")),
        )


def _opt_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _confidence(value: Any) -> float | None:
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if not 0.0 <= value <= 1.0:
        logger.debug("Dropping out-of-range confidence_score=%r", value)
        return None
    return float(value)


__all__ = [
    "MAX_REASONING_CHARS",
    "OriginTagger",
    "hash_prompt",
]
