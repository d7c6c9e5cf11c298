"""End-to-end intent processing through a fully wired bus.

Collaborators are the in-memory UI and permission mocks from
``intentbus.testing``; every test drives ``IntentBus.process_intent``.
"""

import asyncio

import pytest

from intentbus import IntentBus, IntentBusSettings
from intentbus.audit import EnumIntentIssueType
from intentbus.enums import (
    EnumErrorType,
    EnumIntentErrorCode,
    EnumIntentOrigin,
    EnumIntentStatus,
    EnumIntentType,
    EnumValidationStage,
)
from intentbus.retry import EnumRetryDecision, RetryPolicy
from intentbus.testing import (
    MockLogSink,
    MockPermissionService,
    MockUIState,
    create_intent,
)

# =========================================================================
# Helpers
# =========================================================================


class _BrokenSnapshotUI(MockUIState):
    async def snapshot(self):
        raise RuntimeError("renderer detached: session=abc123")


def _table_intent(table_id: str = "work-orders", **kwargs):
    return create_intent(
        EnumIntentType.SET_TABLE_STATE,
        {"table_id": table_id, "state_update": {"pagination": {"page": 2}}},
        **kwargs,
    )


# =========================================================================
# Reference scenarios
# =========================================================================


@pytest.mark.integration
@pytest.mark.asyncio
class TestReferenceScenarios:
    async def test_user_navigation_completes(
        self, bus: IntentBus, ui: MockUIState, sink: MockLogSink
    ) -> None:
        envelope = create_intent(
            EnumIntentType.NAVIGATE, {"route": "/hs/app/work-orders"}
        )

        entry = await bus.process_intent(envelope)

        assert entry.status is EnumIntentStatus.COMPLETED
        assert entry.error is None
        assert "navigation" in entry.side_effects
        assert entry.sequence_number == 1
        assert entry.context.route == "/hs/app/dashboard"
        assert entry.origin_details.user_context is not None
        assert bus.repository.count() == 1
        assert sink.entries == [entry]
        assert ui.route == "/hs/app/work-orders"

    async def test_ai_cannot_disable_high_contrast(
        self, bus: IntentBus, ui: MockUIState
    ) -> None:
        envelope = create_intent(
            EnumIntentType.SET_THEME,
            {"theme_updates": {"high_contrast": False}},
            origin=EnumIntentOrigin.AI,
        )

        entry = await bus.process_intent(envelope)

        assert entry.status is EnumIntentStatus.REJECTED
        assert entry.error_code == EnumIntentErrorCode.AI_ACCESSIBILITY_DENIED
        assert entry.error.error_type is EnumErrorType.VALIDATION
        assert entry.execution_result is None
        assert ui.calls == []

    async def test_ai_external_link_requires_consent(self, bus: IntentBus) -> None:
        envelope = create_intent(
            EnumIntentType.RUN_CLIENT_ACTION,
            {
                "action": "open_external_link",
                "parameters": {"target": "https://example.com"},
                "safety_checks": {"requires_user_consent": False},
            },
            origin=EnumIntentOrigin.AI,
        )

        entry = await bus.process_intent(envelope)

        assert entry.status is EnumIntentStatus.REJECTED
        assert (
            entry.error_code == EnumIntentErrorCode.AI_EXTERNAL_LINK_CONSENT_REQUIRED
        )

    async def test_missing_table_is_retry_eligible(self, bus: IntentBus) -> None:
        entry = await bus.process_intent(_table_intent("does-not-exist"))

        assert entry.status is EnumIntentStatus.REJECTED
        assert entry.error_code == EnumIntentErrorCode.TABLE_NOT_FOUND
        assert entry.error.recoverable
        assert RetryPolicy.classify(entry) is EnumRetryDecision.RETRY


# =========================================================================
# Properties
# =========================================================================


@pytest.mark.integration
@pytest.mark.asyncio
class TestBusProperties:
    @pytest.mark.parametrize("intent_type", ["DELETE_TABLE", "navigate", "", "EVAL"])
    async def test_unsupported_types_never_execute(
        self, bus: IntentBus, ui: MockUIState, intent_type: str
    ) -> None:
        entry = await bus.process_intent(create_intent(intent_type, {"x": 1}))

        assert entry.status is EnumIntentStatus.REJECTED
        assert entry.error_code == EnumIntentErrorCode.INTENT_TYPE_UNSUPPORTED
        assert entry.validation_result.failed_stage is EnumValidationStage.SCHEMA
        assert ui.calls == []

    @pytest.mark.parametrize(
        "payload",
        [
            {"action": "take_screenshot"},
            {"action": "take_screenshot", "parameters": {"format": "png"}},
            {
                "action": "take_screenshot",
                "safety_checks": {"requires_user_consent": True},
            },
            {"action": "take_screenshot", "parameters": "garbage", "extra": 1},
        ],
    )
    async def test_ai_screenshots_always_denied(
        self, bus: IntentBus, ui: MockUIState, payload: dict
    ) -> None:
        envelope = create_intent(
            EnumIntentType.RUN_CLIENT_ACTION, payload, origin=EnumIntentOrigin.AI
        )

        entry = await bus.process_intent(envelope)

        assert entry.status is EnumIntentStatus.REJECTED
        assert entry.error_code == EnumIntentErrorCode.AI_SCREENSHOT_DENIED
        assert ui.calls == []

    @pytest.mark.parametrize("panel_type", ["overlay", "popup", "dialog", "modal"])
    async def test_overlay_panels_never_open(
        self, bus: IntentBus, ui: MockUIState, panel_type: str
    ) -> None:
        envelope = create_intent(
            EnumIntentType.OPEN_MODAL,
            {"panel_type": panel_type, "panel_id": "p1", "content_type": "form"},
        )

        entry = await bus.process_intent(envelope)

        assert entry.error_code == EnumIntentErrorCode.OVERLAY_MODAL_FORBIDDEN
        assert ui.panels == {}

    async def test_sequence_numbers_contiguous_per_correlation(
        self, bus: IntentBus
    ) -> None:
        envelopes = [
            create_intent(
                EnumIntentType.RUN_CLIENT_ACTION,
                {"action": "copy_to_clipboard"},
                correlation_id=correlation_id,
            )
            for _ in range(4)
            for correlation_id in ("corr-a", "corr-b", "corr-c")
        ]

        await asyncio.gather(*(bus.process_intent(e) for e in envelopes))

        for correlation_id in ("corr-a", "corr-b", "corr-c"):
            sequence = bus.repository.get_sequence(correlation_id)
            assert [e.sequence_number for e in sequence] == [1, 2, 3, 4]

    async def test_rejection_is_deterministic(self, bus: IntentBus) -> None:
        envelope = create_intent(
            EnumIntentType.SET_TABLE_STATE,
            {
                "table_id": "work-orders",
                "state_update": {
                    "filters": [
                        {
                            "field": "colour",
                            "operator": "eq",
                            "value": "red",
                            "data_type": "string",
                        }
                    ]
                },
            },
        )

        codes = [(await bus.process_intent(envelope)).error_code for _ in range(3)]

        assert codes == [EnumIntentErrorCode.UNKNOWN_TABLE_FIELD] * 3

    async def test_conflicting_table_updates_execute_once(
        self, bus: IntentBus, ui: MockUIState
    ) -> None:
        gate = ui.hold("apply_table_state")
        first = asyncio.create_task(bus.process_intent(_table_intent()))
        while not ui.calls:
            await asyncio.sleep(0)

        second = await bus.process_intent(_table_intent())
        gate.set()
        first_entry = await first

        assert first_entry.status is EnumIntentStatus.COMPLETED
        assert second.status is EnumIntentStatus.REJECTED
        assert second.error_code == EnumIntentErrorCode.INTENT_CONFLICT
        assert second.error.error_type is EnumErrorType.CONFLICT
        assert second.error.recoverable
        assert ui.write_methods_called == ["apply_table_state"]


# =========================================================================
# Logging, sanitization and failure handling
# =========================================================================


@pytest.mark.integration
@pytest.mark.asyncio
class TestBusLogging:
    async def test_persisted_payload_is_sanitized(
        self, bus: IntentBus, ui: MockUIState
    ) -> None:
        envelope = create_intent(
            EnumIntentType.RUN_CLIENT_ACTION,
            {
                "action": "show_toast",
                "parameters": {
                    "data": {"message": "Ping jane@example.com", "api_token": "t-1"}
                },
            },
        )

        entry = await bus.process_intent(envelope)

        assert entry.status is EnumIntentStatus.COMPLETED
        assert entry.payload["parameters"]["data"] == {
            "message": "Ping [EMAIL]",
            "api_token": "[REDACTED]",
        }
        _, arguments = ui.calls[0]
        assert arguments["parameters"]["data"]["api_token"] == "t-1"

    async def test_ai_prompt_never_stored(self, bus: IntentBus) -> None:
        envelope = create_intent(
            EnumIntentType.SET_THEME,
            {"theme_updates": {"color_scheme": "dark"}},
            origin=EnumIntentOrigin.AI,
            provenance={"prompt": "make it dark please", "model_id": "assistant"},
        )

        entry = await bus.process_intent(envelope)

        ai_context = entry.origin_details.ai_context
        assert ai_context.model_id == "assistant"
        assert len(ai_context.prompt_hash) == 64
        assert "make it dark" not in entry.model_dump_json()

    async def test_executor_failure_is_recoverable_failure(
        self, bus: IntentBus, ui: MockUIState
    ) -> None:
        ui.fail("apply_theme", RuntimeError("style engine offline"))
        envelope = create_intent(
            EnumIntentType.SET_THEME, {"theme_updates": {"density": "compact"}}
        )

        entry = await bus.process_intent(envelope)

        assert entry.status is EnumIntentStatus.FAILED
        assert entry.error_code == EnumIntentErrorCode.INTENT_EXECUTION_FAILED
        assert entry.error.error_type is EnumErrorType.EXECUTION
        assert entry.error.recoverable
        assert entry.execution_result.error == "style engine offline"

    async def test_unexpected_error_becomes_processing_error(
        self, permissions: MockPermissionService, sink: MockLogSink
    ) -> None:
        bus = IntentBus(_BrokenSnapshotUI(), permissions, sinks=[sink])
        envelope = create_intent(
            EnumIntentType.NAVIGATE, {"route": "/hs/app/work-orders"}
        )

        entry = await bus.process_intent(envelope)

        assert entry.status is EnumIntentStatus.FAILED
        assert entry.error_code == EnumIntentErrorCode.INTENT_PROCESSING_ERROR
        assert entry.error.error_type is EnumErrorType.SYSTEM
        assert not entry.error.recoverable
        assert "abc123" not in entry.error.error_message
        assert sink.entries == [entry]

    async def test_failing_sink_does_not_fail_processing(
        self, ui: MockUIState, permissions: MockPermissionService
    ) -> None:
        healthy = MockLogSink()
        bus = IntentBus(
            ui,
            permissions,
            sinks=[MockLogSink(error=ConnectionError("broker down")), healthy],
        )
        envelope = create_intent(
            EnumIntentType.SET_THEME, {"theme_updates": {"density": "compact"}}
        )

        entry = await bus.process_intent(envelope)

        assert entry.status is EnumIntentStatus.COMPLETED
        assert healthy.entries == [entry]
        assert bus.repository.get_entry(envelope.intent_id) == entry

    async def test_intermediate_states_recorded_when_enabled(
        self, ui: MockUIState, permissions: MockPermissionService
    ) -> None:
        bus = IntentBus(
            ui,
            permissions,
            settings=IntentBusSettings(record_intermediate_states=True),
        )
        envelope = create_intent(
            EnumIntentType.SET_THEME, {"theme_updates": {"density": "compact"}}
        )

        entry = await bus.process_intent(envelope)

        statuses = [e.status for e in bus.repository.get_history(entry.log_id)]
        assert statuses == [
            EnumIntentStatus.PENDING,
            EnumIntentStatus.EXECUTING,
            EnumIntentStatus.COMPLETED,
        ]

    async def test_motion_warning_does_not_block(
        self, permissions: MockPermissionService
    ) -> None:
        bus = IntentBus(MockUIState(reduced_motion=True), permissions)
        envelope = create_intent(
            EnumIntentType.SET_THEME, {"theme_updates": {"motion": "full"}}
        )

        entry = await bus.process_intent(envelope)

        assert entry.status is EnumIntentStatus.COMPLETED
        assert [w.code for w in entry.validation_result.warnings] == [
            EnumIntentErrorCode.MOTION_ACCESSIBILITY_CONFLICT
        ]

    async def test_rate_limited_intents_rejected_recoverably(
        self, ui: MockUIState, permissions: MockPermissionService
    ) -> None:
        bus = IntentBus(
            ui,
            permissions,
            settings=IntentBusSettings(rate_limit_ai_per_window=1),
        )

        def theme():
            return create_intent(
                EnumIntentType.SET_THEME,
                {"theme_updates": {"density": "compact"}},
                origin=EnumIntentOrigin.AI,
            )

        first = await bus.process_intent(theme())
        second = await bus.process_intent(theme())
        user = await bus.process_intent(
            create_intent(
                EnumIntentType.SET_THEME, {"theme_updates": {"density": "spacious"}}
            )
        )

        assert first.status is EnumIntentStatus.COMPLETED
        assert second.error_code == EnumIntentErrorCode.RATE_LIMIT_EXCEEDED
        assert second.error.recoverable
        assert user.status is EnumIntentStatus.COMPLETED

    async def test_issue_detection_uses_bus_thresholds(
        self, ui: MockUIState, permissions: MockPermissionService
    ) -> None:
        strict = IntentBus(
            ui, permissions, settings=IntentBusSettings(rejection_rate_threshold=0.1)
        )
        lenient = IntentBus(ui, permissions)
        for bus in (strict, lenient):
            for density in ("compact", "spacious", "compact", "spacious"):
                await bus.process_intent(
                    create_intent(
                        EnumIntentType.SET_THEME,
                        {"theme_updates": {"density": density}},
                    )
                )
            await bus.process_intent(_table_intent("invoices"))

        issues = strict.detect_issues()

        assert [i.issue_type for i in issues] == [
            EnumIntentIssueType.HIGH_REJECTION_RATE
        ]
        assert issues[0].origin is EnumIntentOrigin.USER
        assert lenient.detect_issues() == []
