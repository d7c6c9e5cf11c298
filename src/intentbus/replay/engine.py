# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Replay of a logged correlation sequence through the bus.

Given a correlation id, the replay engine loads the terminal entries in
sequence order and re-submits each one to the bus, optionally restoring the
UI snapshot captured at the original intake first.

Design Decisions:
    - Replay never bypasses validation. A replayed intent is revalidated
      against current state and may legitimately be rejected.
    - Replayed intents get fresh intent ids and a separate correlation id;
      the original sequence is never extended.
    - Retry-exhausted summary entries are skipped; each retry attempt has
      its own entry and is replayed as logged.
    - Payloads are replayed as persisted, i.e. sanitized. Redacted values
      stay redacted.

Replay Algorithm:
    1. Load the sequence from the repository.
    2. For each entry: restore its snapshot (if requested), rebuild the
       envelope, process it through the bus.
    3. Verify mode: compare status and side-effect tags. Divergence is
       logged and recorded on the step.
    4. Strict mode: stop at the first divergence.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any

from intentbus.models import (
    ModelIntentEnvelope,
    ModelIntentLogEntry,
    ModelIntentMetadata,
    ModelOriginDetails,
)
from intentbus.replay.models import (
    ModelReplayOptions,
    ModelReplayReport,
    ModelReplayStep,
)

if TYPE_CHECKING:
    from intentbus.audit.protocols import ProtocolIntentLogRepository
    from intentbus.bus import IntentBus
    from intentbus.protocols import ProtocolUIState

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Envelope reconstruction
# ---------------------------------------------------------------------------


def provenance_from_details(details: ModelOriginDetails | None) -> dict[str, Any]:
    """Turn recorded origin details back into provenance hints for the tagger."""
    if details is None:
        return {}
    context = details.ai_context or details.user_context or details.system_context
    if context is None:
        return {}
    return context.model_dump(exclude_none=True)


def rebuild_envelope(
    entry: ModelIntentLogEntry,
    *,
    correlation_id: str,
) -> ModelIntentEnvelope:
    """Reconstruct a submittable envelope from a logged entry.

    Args:
        entry: The original terminal entry.
        correlation_id: Correlation id to file the replayed intent under.

    Returns:
        A new envelope with a fresh intent id and the entry's type, origin,
        timestamp, sanitized payload and identifiers.
    """
    return ModelIntentEnvelope(
        type=entry.intent_type,
        intent_id=f"{entry.intent_id}:replay:{uuid.uuid4().hex[:12]}",
        timestamp=entry.timestamp,
        origin=entry.origin,
        payload=entry.payload,
        metadata=ModelIntentMetadata(
            session_id=entry.metadata.session_id,
            tenant_id=entry.metadata.tenant_id,
            user_id=entry.metadata.user_id,
            correlation_id=correlation_id,
            provenance=provenance_from_details(entry.origin_details),
        ),
    )


def describe_divergence(
    original: ModelIntentLogEntry, replayed: ModelIntentLogEntry
) -> str | None:
    """Return a description of how ``replayed`` differs, or None if it matches."""
    differences: list[str] = []
    if replayed.status is not original.status:
        differences.append(
            f"status {original.status.value} -> {replayed.status.value}"
        )
    if replayed.side_effects != original.side_effects:
        differences.append(
            f"side effects {original.side_effects} -> {replayed.side_effects}"
        )
    return "; ".join(differences) or None


# ---------------------------------------------------------------------------
# IntentReplayEngine
# ---------------------------------------------------------------------------


class IntentReplayEngine:
    """Re-executes logged correlation sequences.

    Args:
        bus: The bus to re-submit through.
        repository: Log to read sequences from. Defaults to the bus's.
        ui: Collaborator used to restore snapshots. Defaults to the bus's.
    """

    def __init__(
        self,
        bus: IntentBus,
        repository: ProtocolIntentLogRepository | None = None,
        ui: ProtocolUIState | None = None,
    ) -> None:
        self._bus = bus
        self._repository = repository if repository is not None else bus.repository
        self._ui = ui if ui is not None else bus.ui

    async def replay_sequence(
        self,
        correlation_id: str,
        options: ModelReplayOptions | None = None,
    ) -> ModelReplayReport:
        """Replay every logged intent of ``correlation_id`` in sequence order.

        Args:
            correlation_id: The original correlation group.
            options: Replay behavior. Defaults to verify without restore.

        Returns:
            ModelReplayReport with one step per replayed entry.
        """
        options = options or ModelReplayOptions()
        replay_correlation_id = (
            options.replay_correlation_id
            or f"replay:{correlation_id}:{uuid.uuid4().hex[:8]}"
        )
        entries = self._repository.get_sequence(correlation_id)
        if not entries:
            logger.warning(
                "Replay found no logged entries for correlation_id=%s",
                correlation_id,
                extra={"correlation_id": correlation_id},
            )

        steps: list[ModelReplayStep] = []
        skipped = 0
        for original in entries:
            if original.is_retry_summary:
                skipped += 1
                continue

            step = await self._replay_entry(
                original, replay_correlation_id, options
            )
            steps.append(step)

            if step.matched is False and options.strict:
                logger.warning(
                    "Strict replay aborted at sequence %d of correlation_id=%s: %s",
                    original.sequence_number,
                    correlation_id,
                    step.divergence,
                    extra={"correlation_id": correlation_id},
                )
                return ModelReplayReport(
                    correlation_id=correlation_id,
                    replay_correlation_id=replay_correlation_id,
                    steps=steps,
                    skipped_retry_summaries=skipped,
                    aborted=True,
                    aborted_at_sequence=original.sequence_number,
                )

        report = ModelReplayReport(
            correlation_id=correlation_id,
            replay_correlation_id=replay_correlation_id,
            steps=steps,
            skipped_retry_summaries=skipped,
        )
        logger.info(
            "Replayed %d intents of correlation_id=%s (%d divergent)",
            len(steps),
            correlation_id,
            len(report.mismatches),
            extra={"correlation_id": correlation_id},
        )
        return report

    async def _replay_entry(
        self,
        original: ModelIntentLogEntry,
        replay_correlation_id: str,
        options: ModelReplayOptions,
    ) -> ModelReplayStep:
        restored = False
        if options.restore_snapshots and original.context is not None:
            await self._ui.restore(original.context)
            restored = True

        envelope = rebuild_envelope(original, correlation_id=replay_correlation_id)
        replayed = await self._bus.process_intent(envelope)

        matched: bool | None = None
        divergence: str | None = None
        if options.compares:
            divergence = describe_divergence(original, replayed)
            matched = divergence is None
            if divergence is not None:
                logger.warning(
                    "Replay divergence for log_id=%s (seq %d): %s",
                    original.log_id,
                    original.sequence_number,
                    divergence,
                    extra={"correlation_id": original.correlation_id},
                )

        return ModelReplayStep(
            sequence_number=original.sequence_number,
            intent_type=original.intent_type,
            original_log_id=original.log_id,
            original_intent_id=original.intent_id,
            original_status=original.status,
            original_side_effects=original.side_effects,
            replay_log_id=replayed.log_id,
            replay_intent_id=replayed.intent_id,
            replay_status=replayed.status,
            replay_side_effects=replayed.side_effects,
            replay_error_code=replayed.error_code,
            snapshot_restored=restored,
            matched=matched,
            divergence=divergence,
        )


__all__ = [
    "IntentReplayEngine",
    "describe_divergence",
    "provenance_from_details",
    "rebuild_envelope",
]
