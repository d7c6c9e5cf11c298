"""Retrying submission through the bus."""

import asyncio

import pytest

from intentbus import IntentBus, RetryingIntentSubmitter, RetryPolicy
from intentbus.enums import EnumIntentErrorCode, EnumIntentStatus, EnumIntentType
from intentbus.testing import MockUIState, create_intent


def _table_intent(correlation_id: str):
    return create_intent(
        EnumIntentType.SET_TABLE_STATE,
        {"table_id": "work-orders", "state_update": {"pagination": {"page": 4}}},
        correlation_id=correlation_id,
    )


@pytest.mark.integration
@pytest.mark.asyncio
class TestBusRetry:
    async def test_conflict_clears_on_retry(
        self, bus: IntentBus, ui: MockUIState
    ) -> None:
        gate = ui.hold("apply_table_state")
        first = asyncio.create_task(bus.process_intent(_table_intent("corr-first")))
        while bus.queue.executing is None:
            await asyncio.sleep(0)

        async def release_then_wait(_delay: float) -> None:
            gate.set()
            await first

        submitter = RetryingIntentSubmitter(
            bus, RetryPolicy(max_attempts=3), sleep=release_then_wait
        )
        entry = await submitter.submit(_table_intent("corr-second"))

        assert entry.status is EnumIntentStatus.COMPLETED
        assert entry.attempt == 2
        attempts = bus.repository.get_sequence("corr-second")
        assert [e.error_code for e in attempts] == [
            EnumIntentErrorCode.INTENT_CONFLICT,
            None,
        ]
        assert (await first).status is EnumIntentStatus.COMPLETED

    async def test_exhaustion_published_to_sinks(self, bus: IntentBus, sink) -> None:
        async def no_wait(_delay: float) -> None:
            return None

        envelope = create_intent(
            EnumIntentType.OPEN_MODAL,
            {
                "panel_type": "sidebar",
                "panel_id": "wo-details",
                "content_type": "details",
                "context": {"parent_context": "never-mounted"},
            },
            correlation_id="corr-panel",
        )
        submitter = RetryingIntentSubmitter(
            bus, RetryPolicy(max_attempts=2, backoff_ms=(0,)), sleep=no_wait
        )

        summary = await submitter.submit(envelope)

        assert summary.error_code == EnumIntentErrorCode.MAX_RETRIES_EXCEEDED
        assert "PARENT_CONTEXT_NOT_MOUNTED" in summary.error.error_message
        assert [e.error_code for e in sink.entries] == [
            EnumIntentErrorCode.PARENT_CONTEXT_NOT_MOUNTED,
            EnumIntentErrorCode.PARENT_CONTEXT_NOT_MOUNTED,
            EnumIntentErrorCode.MAX_RETRIES_EXCEEDED,
        ]
