"""Unit tests for replay envelope reconstruction and divergence checks."""

from datetime import UTC, datetime

import pytest

from intentbus.enums import (
    EnumErrorType,
    EnumIntentErrorCode,
    EnumIntentOrigin,
    EnumIntentStatus,
    EnumSideEffect,
)
from intentbus.models import (
    ModelAIContext,
    ModelExecutionResult,
    ModelIntentLogEntry,
    ModelLogError,
    ModelLogMetadata,
    ModelOriginDetails,
    ModelSystemContext,
    ModelValidationResult,
)
from intentbus.origin_tagger import OriginTagger
from intentbus.replay import (
    ModelReplayOptions,
    ModelReplayReport,
    ModelReplayStep,
    describe_divergence,
    provenance_from_details,
    rebuild_envelope,
)

PROMPT_HASH = "a" * 64


def _make_entry(
    status: EnumIntentStatus = EnumIntentStatus.COMPLETED,
    side_effects: tuple[EnumSideEffect, ...] = (EnumSideEffect.THEME_CHANGE,),
) -> ModelIntentLogEntry:
    error = None
    execution_result = ModelExecutionResult(
        success=True, side_effects=list(side_effects)
    )
    if status is not EnumIntentStatus.COMPLETED:
        execution_result = None
        error = ModelLogError(
            error_code=EnumIntentErrorCode.AI_ACCESSIBILITY_DENIED,
            error_message="denied",
            error_type=EnumErrorType.VALIDATION,
            recoverable=False,
        )
    return ModelIntentLogEntry(
        log_id="log-1",
        intent_id="intent-1",
        correlation_id="corr-1",
        sequence_number=2,
        timestamp=datetime(2026, 3, 1, 12, tzinfo=UTC),
        intent_type="SET_THEME",
        origin=EnumIntentOrigin.AI,
        status=status,
        validation_result=ModelValidationResult(valid=True),
        execution_result=execution_result,
        payload={"theme_updates": {"color_scheme": "dark"}},
        metadata=ModelLogMetadata(
            session_id="session-1", tenant_id="tenant-a", user_id="user-1"
        ),
        origin_details=ModelOriginDetails(
            origin=EnumIntentOrigin.AI,
            ai_context=ModelAIContext(
                model_id="assistant-v2",
                prompt_hash=PROMPT_HASH,
                confidence_score=0.8,
            ),
        ),
        error=error,
    )


@pytest.mark.unit
class TestProvenanceFromDetails:
    def test_none(self) -> None:
        assert provenance_from_details(None) == {}

    def test_ai_context(self) -> None:
        details = _make_entry().origin_details
        assert provenance_from_details(details) == {
            "model_id": "assistant-v2",
            "prompt_hash": PROMPT_HASH,
            "confidence_score": 0.8,
        }

    def test_system_context(self) -> None:
        details = ModelOriginDetails(
            origin=EnumIntentOrigin.SYSTEM,
            system_context=ModelSystemContext(trigger_type="recovery"),
        )
        assert provenance_from_details(details) == {"trigger_type": "recovery"}


@pytest.mark.unit
class TestRebuildEnvelope:
    def test_fields_carried_over(self) -> None:
        entry = _make_entry()
        envelope = rebuild_envelope(entry, correlation_id="replay:corr-1:abc")

        assert envelope.type == "SET_THEME"
        assert envelope.origin is EnumIntentOrigin.AI
        assert envelope.timestamp == entry.timestamp
        assert envelope.payload == entry.payload
        assert envelope.correlation_id == "replay:corr-1:abc"
        assert envelope.metadata.tenant_id == "tenant-a"
        assert envelope.intent_id.startswith("intent-1:replay:")

    def test_fresh_intent_id_each_time(self) -> None:
        entry = _make_entry()
        first = rebuild_envelope(entry, correlation_id="c")
        second = rebuild_envelope(entry, correlation_id="c")
        assert first.intent_id != second.intent_id

    def test_origin_details_survive_retagging(self) -> None:
        entry = _make_entry()
        envelope = rebuild_envelope(entry, correlation_id="c")
        assert OriginTagger().tag(envelope) == entry.origin_details


@pytest.mark.unit
class TestDivergence:
    def test_identical_outcome(self) -> None:
        assert describe_divergence(_make_entry(), _make_entry()) is None

    def test_status_change(self) -> None:
        divergence = describe_divergence(
            _make_entry(), _make_entry(EnumIntentStatus.REJECTED)
        )
        assert "status completed -> rejected" in divergence
        assert "side effects" in divergence

    def test_side_effect_change(self) -> None:
        divergence = describe_divergence(
            _make_entry(),
            _make_entry(side_effects=(EnumSideEffect.STORAGE_OPERATION,)),
        )
        assert divergence.startswith("side effects")


@pytest.mark.unit
class TestReplayModels:
    def test_strict_implies_comparison(self) -> None:
        assert ModelReplayOptions().compares
        assert not ModelReplayOptions(verify=False).compares
        assert ModelReplayOptions(verify=False, strict=True).compares

    def test_report_mismatches(self) -> None:
        def step(seq: int, matched: bool | None) -> ModelReplayStep:
            return ModelReplayStep(
                sequence_number=seq,
                intent_type="SET_THEME",
                original_log_id=f"o{seq}",
                original_intent_id=f"i{seq}",
                original_status=EnumIntentStatus.COMPLETED,
                replay_log_id=f"r{seq}",
                replay_intent_id=f"i{seq}:replay",
                replay_status=EnumIntentStatus.COMPLETED,
                matched=matched,
            )

        report = ModelReplayReport(
            correlation_id="c",
            replay_correlation_id="r",
            steps=[step(1, True), step(2, False), step(3, None)],
        )
        assert [s.sequence_number for s in report.mismatches] == [2]
        assert not report.all_matched
        empty = ModelReplayReport(correlation_id="c", replay_correlation_id="r")
        assert empty.all_matched
