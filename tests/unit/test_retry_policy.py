"""Unit tests for retry classification, backoff and the retrying submitter."""

from datetime import UTC, datetime

import pytest

from intentbus import IntentBus, IntentBusSettings
from intentbus.enums import (
    EnumErrorType,
    EnumIntentErrorCode,
    EnumIntentOrigin,
    EnumIntentStatus,
    EnumIntentType,
)
from intentbus.models import ModelIntentLogEntry, ModelLogError, ModelValidationResult
from intentbus.retry import EnumRetryDecision, RetryingIntentSubmitter, RetryPolicy
from intentbus.settings import ModelRetryConfig
from intentbus.testing import MockPermissionService, MockUIState, create_intent

# =========================================================================
# Helpers
# =========================================================================


def _make_entry(
    status: EnumIntentStatus,
    code: str | None = None,
    *,
    recoverable: bool = True,
) -> ModelIntentLogEntry:
    error = (
        ModelLogError(
            error_code=code,
            error_message="x",
            error_type=EnumErrorType.VALIDATION,
            recoverable=recoverable,
        )
        if code is not None
        else None
    )
    return ModelIntentLogEntry(
        log_id="log-1",
        intent_id="intent-1",
        correlation_id="corr-1",
        sequence_number=1,
        timestamp=datetime(2026, 3, 1, tzinfo=UTC),
        intent_type="SET_TABLE_STATE",
        origin=EnumIntentOrigin.USER,
        status=status,
        validation_result=ModelValidationResult(valid=False),
        error=error,
    )


class _RecordingSleep:
    def __init__(self, on_sleep=None) -> None:
        self.delays: list[float] = []
        self._on_sleep = on_sleep

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self._on_sleep is not None:
            self._on_sleep()


def _table_intent(correlation_id: str = "corr-retry"):
    return create_intent(
        EnumIntentType.SET_TABLE_STATE,
        {"table_id": "late-table", "state_update": {"pagination": {"page": 2}}},
        correlation_id=correlation_id,
    )


# =========================================================================
# RetryPolicy
# =========================================================================


@pytest.mark.unit
class TestRetryPolicy:
    def test_defaults(self) -> None:
        policy = RetryPolicy()
        assert policy.max_attempts == 5
        assert policy.backoff_ms == (100, 250, 500, 1000, 2000)

    def test_from_config(self) -> None:
        policy = RetryPolicy.from_config(
            ModelRetryConfig(max_attempts=2, backoff_ms=(10,))
        )
        assert policy == RetryPolicy(max_attempts=2, backoff_ms=(10,))

    @pytest.mark.parametrize(
        ("attempt", "seconds"), [(0, 0.1), (1, 0.1), (3, 0.5), (5, 2.0), (9, 2.0)]
    )
    def test_delay_for_clamps_to_schedule(self, attempt: int, seconds: float) -> None:
        assert RetryPolicy().delay_for(attempt) == pytest.approx(seconds)

    @pytest.mark.parametrize(
        "kwargs", [{"max_attempts": 0}, {"backoff_ms": ()}, {"backoff_ms": (5, -1)}]
    )
    def test_invalid_policy(self, kwargs) -> None:
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)

    def test_classify_completed(self) -> None:
        entry = _make_entry(EnumIntentStatus.COMPLETED)
        assert RetryPolicy.classify(entry) is EnumRetryDecision.DONE

    @pytest.mark.parametrize(
        "code",
        [
            EnumIntentErrorCode.TABLE_NOT_FOUND,
            EnumIntentErrorCode.RATE_LIMIT_EXCEEDED,
            EnumIntentErrorCode.INTENT_CONFLICT,
            EnumIntentErrorCode.PREEMPTED,
        ],
    )
    def test_classify_conditional_rejection(self, code: str) -> None:
        entry = _make_entry(EnumIntentStatus.REJECTED, code)
        assert RetryPolicy.classify(entry) is EnumRetryDecision.RETRY

    def test_classify_recoverable_execution_failure(self) -> None:
        entry = _make_entry(
            EnumIntentStatus.FAILED, EnumIntentErrorCode.INTENT_EXECUTION_FAILED
        )
        assert RetryPolicy.classify(entry) is EnumRetryDecision.RETRY

    @pytest.mark.parametrize(
        ("code", "recoverable"),
        [
            (EnumIntentErrorCode.AI_SCREENSHOT_DENIED, False),
            (EnumIntentErrorCode.INTENT_VALIDATION_FAILED, False),
            (EnumIntentErrorCode.TABLE_NOT_FOUND, False),
            (EnumIntentErrorCode.UNKNOWN_TABLE_FIELD, True),
            ("SOME_FUTURE_CODE", True),
        ],
    )
    def test_classify_final(self, code: str, recoverable: bool) -> None:
        entry = _make_entry(EnumIntentStatus.REJECTED, code, recoverable=recoverable)
        assert RetryPolicy.classify(entry) is EnumRetryDecision.FINAL


# =========================================================================
# RetryingIntentSubmitter
# =========================================================================


@pytest.mark.unit
@pytest.mark.asyncio
class TestRetryingIntentSubmitter:
    async def test_default_policy_comes_from_bus_settings(self) -> None:
        settings = IntentBusSettings(retry_max_attempts=3, retry_backoff_ms=[1, 2])
        bus = IntentBus(MockUIState(), MockPermissionService(), settings=settings)
        submitter = RetryingIntentSubmitter(bus)
        assert submitter.policy == RetryPolicy(max_attempts=3, backoff_ms=(1, 2))

    async def test_success_after_condition_clears(self) -> None:
        ui = MockUIState()
        bus = IntentBus(ui, MockPermissionService())

        def mount_table() -> None:
            ui.tables["late-table"] = {"status": "enum"}

        sleep = _RecordingSleep(mount_table)
        submitter = RetryingIntentSubmitter(bus, sleep=sleep)

        entry = await submitter.submit(_table_intent())

        assert entry.status is EnumIntentStatus.COMPLETED
        assert entry.attempt == 2
        assert sleep.delays == [pytest.approx(0.1)]
        history = bus.repository.get_sequence("corr-retry")
        assert [e.sequence_number for e in history] == [1, 2]
        assert history[0].error_code == EnumIntentErrorCode.TABLE_NOT_FOUND

    async def test_gives_up_at_cap_with_summary(self) -> None:
        bus = IntentBus(MockUIState(), MockPermissionService())
        sleep = _RecordingSleep()
        submitter = RetryingIntentSubmitter(
            bus, RetryPolicy(max_attempts=3, backoff_ms=(100, 250)), sleep=sleep
        )

        summary = await submitter.submit(_table_intent())

        assert summary.status is EnumIntentStatus.FAILED
        assert summary.error_code == EnumIntentErrorCode.MAX_RETRIES_EXCEEDED
        assert summary.is_retry_summary
        assert not summary.error.recoverable
        assert summary.attempt == 3
        assert sleep.delays == [pytest.approx(0.1), pytest.approx(0.25)]

        history = bus.repository.get_sequence("corr-retry")
        assert [e.attempt for e in history] == [1, 2, 3, 3]
        assert [e.sequence_number for e in history] == [1, 2, 3, 4]
        assert len({e.log_id for e in history}) == 4

    async def test_immediate_rejection_not_retried(self) -> None:
        bus = IntentBus(MockUIState(), MockPermissionService())
        sleep = _RecordingSleep()
        envelope = create_intent(
            EnumIntentType.RUN_CLIENT_ACTION,
            {"action": "take_screenshot"},
            origin=EnumIntentOrigin.AI,
        )

        entry = await RetryingIntentSubmitter(bus, sleep=sleep).submit(envelope)

        assert entry.error_code == EnumIntentErrorCode.AI_SCREENSHOT_DENIED
        assert sleep.delays == []
