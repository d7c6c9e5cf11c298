# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Intent bus: the single entry point for UI-change requests.

``IntentBus.process_intent`` takes a caller-submitted envelope through
intake, validation, queue admission and execution, and returns the one
terminal log entry recorded for it.

Flow:
    1. Intake: allocate the correlation sequence number, tag the origin,
       capture the UI snapshot, sanitize the payload. Record ``pending``.
    2. Validation: run the pipeline. Failure is terminal ``rejected``.
       Unsupported types stop here with zero execution.
    3. Admission: conflict check against in-flight intents. Refusal is
       terminal ``rejected`` (INTENT_CONFLICT, recoverable).
    4. Execution: wait for the queue to run the intent (``executing`` is
       recorded when it starts). The outcome is ``completed``, ``failed``
       (executor failure, or preempted mid-execution) or ``rejected``
       (preempted while queued).
    5. Finalize: timings, append to the log, publish to sinks.

Error handling:
    Any unexpected exception inside steps 1-4 becomes a terminal ``failed``
    entry with INTENT_PROCESSING_ERROR (non-recoverable). The message names
    only the exception class; the traceback goes to the logger.

Cancellation:
    A caller cancelled mid-flight withdraws its ticket from the queue, gets
    a terminal ``failed`` entry (INTENT_PROCESSING_ERROR) and then sees the
    CancelledError. ``shutdown`` resolves outstanding intents the same way,
    returning their ``failed`` entries to the callers instead of raising.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any

from intentbus.audit.metrics import detect_issues
from intentbus.audit.models import ModelIntentIssue
from intentbus.audit.protocols import ProtocolIntentLogRepository
from intentbus.audit.repository import IntentLogRepository
from intentbus.audit.sanitizer import PayloadSanitizer, get_payload_sanitizer
from intentbus.enums import (
    EnumErrorType,
    EnumIntentErrorCode,
    EnumIntentStatus,
)
from intentbus.executors import ExecutorDispatch
from intentbus.models import (
    ModelIntentEnvelope,
    ModelIntentLogEntry,
    ModelLogError,
    ModelLogMetadata,
    ModelPerformanceMetrics,
    ModelValidationResult,
    parse_intent,
)
from intentbus.origin_tagger import OriginTagger
from intentbus.protocols import (
    ProtocolIntentLogSink,
    ProtocolPermissionService,
    ProtocolUIState,
)
from intentbus.queue import (
    EnumTicketOutcome,
    IntentTicket,
    PriorityIntentQueue,
    TicketOutcome,
)
from intentbus.settings import IntentBusSettings
from intentbus.validators import (
    OriginRateLimiter,
    ValidationContext,
    ValidatorPipeline,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _elapsed_ms(since: float) -> float:
    return (time.perf_counter() - since) * 1000


def _transition(entry: ModelIntentLogEntry, **updates: Any) -> ModelIntentLogEntry:
    """Return a new entry with ``updates`` applied, re-running model validation."""
    return ModelIntentLogEntry(**{**dict(entry), **updates})


class IntentBus:
    """Validates, orders, executes and logs intents.

    Args:
        ui: UI-state collaborator (read by validators, written by executors).
        permissions: Permission and tenancy collaborator.
        settings: Bus configuration. Defaults to ``IntentBusSettings()``.
        repository: Audit log. Defaults to an in-memory repository.
        pipeline: Validator registry. Defaults to the built-in validators.
        rate_limiter: Per-origin budgets. Defaults to one built from settings.
        tagger: Origin tagger.
        sanitizer: Payload sanitizer applied before persistence.
        clock: Wall-clock source for log timestamps.
        sinks: External sinks registered on the repository.
    """

    def __init__(
        self,
        ui: ProtocolUIState,
        permissions: ProtocolPermissionService,
        *,
        settings: IntentBusSettings | None = None,
        repository: ProtocolIntentLogRepository | None = None,
        pipeline: ValidatorPipeline | None = None,
        rate_limiter: OriginRateLimiter | None = None,
        tagger: OriginTagger | None = None,
        sanitizer: PayloadSanitizer | None = None,
        clock: Callable[[], datetime] | None = None,
        sinks: Iterable[ProtocolIntentLogSink] = (),
    ) -> None:
        self._settings = settings or IntentBusSettings()
        self._ui = ui
        self._repository: ProtocolIntentLogRepository = (
            repository
            if repository is not None
            else IntentLogRepository(
                record_intermediate_states=self._settings.record_intermediate_states
            )
        )
        for sink in sinks:
            self._repository.add_sink(sink)
        self._pipeline = pipeline or ValidatorPipeline()
        self._tagger = tagger or OriginTagger()
        self._sanitizer = sanitizer or get_payload_sanitizer()
        self._clock = clock or _utcnow

        self._dispatch = ExecutorDispatch(
            ui, timeout_seconds=self._settings.executor_timeout_seconds
        )
        self._queue = PriorityIntentQueue(
            self._dispatch.execute, on_start=self._record_execution_start
        )
        self._validation_context = ValidationContext(
            ui=ui,
            permissions=permissions,
            rate_limiter=(
                rate_limiter
                if rate_limiter is not None
                else OriginRateLimiter(self._settings.to_rate_limits())
            ),
            is_in_flight=self._queue.is_in_flight,
            clock=self._clock,
        )
        # intent_id → validated pending entry, awaiting execution start
        self._awaiting_execution: dict[str, ModelIntentLogEntry] = {}

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def repository(self) -> ProtocolIntentLogRepository:
        return self._repository

    @property
    def settings(self) -> IntentBusSettings:
        return self._settings

    @property
    def queue(self) -> PriorityIntentQueue:
        return self._queue

    @property
    def ui(self) -> ProtocolUIState:
        return self._ui

    @property
    def supported_types(self) -> list[str]:
        return self._pipeline.supported_types

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def process_intent(
        self,
        envelope: ModelIntentEnvelope,
        *,
        attempt: int = 1,
    ) -> ModelIntentLogEntry:
        """Process one intent and return its terminal log entry.

        Args:
            envelope: The caller-submitted intent.
            attempt: 1-based submission attempt, set by retrying callers.

        Returns:
            The terminal ``ModelIntentLogEntry`` (already appended to the
            repository and published to sinks).
        """
        started = time.perf_counter()
        execution_start = self._clock()
        log_id = str(uuid.uuid4())
        sequence_number = self._repository.next_sequence_number(
            envelope.correlation_id
        )

        pending: ModelIntentLogEntry | None = None
        try:
            pending = self._intake(
                envelope,
                log_id=log_id,
                sequence_number=sequence_number,
                attempt=attempt,
                execution_start=execution_start,
            )
            pending = _transition(pending, context=await self._ui.snapshot())
            self._repository.append(pending)
            entry = await self._validate_and_execute(envelope, pending, started)
        except asyncio.CancelledError:
            # The sequence number is already allocated, so the intent still
            # gets its terminal entry before the cancellation propagates
            entry = self._system_failure(
                envelope,
                pending,
                ModelLogError(
                    error_code=EnumIntentErrorCode.INTENT_PROCESSING_ERROR,
                    error_message="Caller cancelled the intent before it finished",
                    error_type=EnumErrorType.SYSTEM,
                    recoverable=False,
                ),
                log_id=log_id,
                sequence_number=sequence_number,
                attempt=attempt,
                execution_start=execution_start,
                started=started,
            )
            self._repository.append(entry)
            await self._repository.publish(entry)
            logger.warning(
                "Intent %s (%s) cancelled by its caller; recorded as failed",
                envelope.intent_id,
                envelope.type,
                extra={"correlation_id": envelope.correlation_id},
            )
            raise
        except Exception as exc:
            logger.exception(
                "Unexpected error processing intent %s (%s)",
                envelope.intent_id,
                envelope.type,
                extra={"correlation_id": envelope.correlation_id},
            )
            entry = self._system_failure(
                envelope,
                pending,
                ModelLogError(
                    error_code=EnumIntentErrorCode.INTENT_PROCESSING_ERROR,
                    error_message=(
                        f"Unexpected {type(exc).__name__} while processing intent"
                    ),
                    error_type=EnumErrorType.SYSTEM,
                    recoverable=False,
                ),
                log_id=log_id,
                sequence_number=sequence_number,
                attempt=attempt,
                execution_start=execution_start,
                started=started,
            )

        self._repository.append(entry)
        await self._repository.publish(entry)
        logger.info(
            "Intent %s (%s, %s) %s%s in %.1fms",
            entry.intent_id,
            entry.intent_type,
            entry.origin.value,
            entry.status.value,
            f" [{entry.error_code}]" if entry.error_code else "",
            entry.duration_ms or 0.0,
            extra={"correlation_id": entry.correlation_id},
        )
        return entry

    async def record_retries_exhausted(
        self,
        envelope: ModelIntentEnvelope,
        last_entry: ModelIntentLogEntry,
        *,
        attempts: int,
    ) -> ModelIntentLogEntry:
        """Append the terminal summary for an intent that hit the retry cap.

        The summary is a separate entry in the correlation sequence with
        MAX_RETRIES_EXCEEDED; the individual attempts keep their own entries.
        """
        now = self._clock()
        summary = _transition(
            last_entry,
            log_id=str(uuid.uuid4()),
            sequence_number=self._repository.next_sequence_number(
                envelope.correlation_id
            ),
            execution_start=now,
            execution_end=now,
            duration_ms=0.0,
            status=EnumIntentStatus.FAILED,
            execution_result=None,
            performance=ModelPerformanceMetrics(),
            attempt=attempts,
            error=ModelLogError(
                error_code=EnumIntentErrorCode.MAX_RETRIES_EXCEEDED,
                error_message=(
                    f"Gave up after {attempts} attempts; last error "
                    f"{last_entry.error_code or 'none'}"
                ),
                error_type=EnumErrorType.RETRY,
                recoverable=False,
            ),
        )
        self._repository.append(summary)
        await self._repository.publish(summary)
        logger.warning(
            "Intent %s exhausted %d attempts (last error %s)",
            envelope.intent_id,
            attempts,
            last_entry.error_code,
            extra={"correlation_id": envelope.correlation_id},
        )
        return summary

    def detect_issues(
        self, *, detected_at: datetime | None = None
    ) -> list[ModelIntentIssue]:
        """Run issue detection over the whole log with the configured thresholds."""
        return detect_issues(
            self._repository.all_entries(),
            settings=self._settings,
            detected_at=detected_at,
        )

    async def shutdown(self) -> None:
        """Stop the queue; outstanding intents end as failed entries."""
        await self._queue.shutdown()

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    def _intake(
        self,
        envelope: ModelIntentEnvelope,
        *,
        log_id: str,
        sequence_number: int,
        attempt: int,
        execution_start: datetime,
    ) -> ModelIntentLogEntry:
        metadata = envelope.metadata
        return ModelIntentLogEntry(
            log_id=log_id,
            intent_id=envelope.intent_id,
            correlation_id=envelope.correlation_id,
            sequence_number=sequence_number,
            timestamp=envelope.timestamp,
            execution_start=execution_start,
            intent_type=envelope.type,
            origin=envelope.origin,
            status=EnumIntentStatus.PENDING,
            validation_result=ModelValidationResult(valid=False),
            payload=self._sanitizer.sanitize(envelope.payload),
            metadata=ModelLogMetadata(
                session_id=metadata.session_id,
                tenant_id=metadata.tenant_id,
                user_id=metadata.user_id,
            ),
            origin_details=self._tagger.tag(envelope),
            attempt=attempt,
        )

    async def _validate_and_execute(
        self,
        envelope: ModelIntentEnvelope,
        pending: ModelIntentLogEntry,
        started: float,
    ) -> ModelIntentLogEntry:
        if not self._pipeline.is_supported(envelope.type):
            logger.warning(
                "Unsupported intent type %r rejected without execution "
                "(supported: %s)",
                envelope.type,
                ", ".join(self._pipeline.supported_types),
                extra={"correlation_id": envelope.correlation_id},
            )

        validation = await self._pipeline.validate(envelope, self._validation_context)
        pending = _transition(pending, validation_result=validation)
        if not validation.valid:
            primary = validation.primary_error
            if primary is None:
                msg = "invalid validation result without errors"
                raise RuntimeError(msg)
            return self._finish(
                pending,
                started,
                status=EnumIntentStatus.REJECTED,
                error=ModelLogError(
                    error_code=primary.code,
                    error_message=primary.message,
                    error_type=EnumErrorType.VALIDATION,
                    recoverable=validation.recoverable,
                ),
            )

        intent = parse_intent(envelope)
        admission = self._queue.admit(intent)
        if not admission.admitted or admission.ticket is None:
            limiter = self._validation_context.rate_limiter
            if limiter is not None:
                limiter.release(intent.origin)
            return self._finish(
                pending,
                started,
                status=EnumIntentStatus.REJECTED,
                error=ModelLogError(
                    error_code=(
                        admission.rejection_code or EnumIntentErrorCode.INTENT_CONFLICT
                    ),
                    error_message=admission.reason,
                    error_type=EnumErrorType.CONFLICT,
                    recoverable=True,
                ),
            )

        self._awaiting_execution[intent.intent_id] = pending
        try:
            outcome = await admission.ticket.future
        except asyncio.CancelledError:
            self._queue.withdraw(admission.ticket)
            raise
        finally:
            self._awaiting_execution.pop(intent.intent_id, None)
        return self._finish_outcome(pending, outcome, started)

    def _record_execution_start(self, ticket: IntentTicket) -> None:
        pending = self._awaiting_execution.get(ticket.intent_id)
        if pending is None:
            return
        self._repository.append(
            _transition(pending, status=EnumIntentStatus.EXECUTING)
        )

    def _finish_outcome(
        self,
        pending: ModelIntentLogEntry,
        outcome: TicketOutcome,
        started: float,
    ) -> ModelIntentLogEntry:
        match outcome.kind:
            case EnumTicketOutcome.CANCELLED:
                return self._finish(
                    pending,
                    started,
                    status=EnumIntentStatus.FAILED,
                    error=ModelLogError(
                        error_code=EnumIntentErrorCode.INTENT_PROCESSING_ERROR,
                        error_message=(
                            "Intent bus shut down during execution"
                            if outcome.while_executing
                            else "Intent bus shut down before execution"
                        ),
                        error_type=EnumErrorType.SYSTEM,
                        recoverable=False,
                    ),
                    outcome=outcome,
                )
            case EnumTicketOutcome.PREEMPTED:
                return self._finish(
                    pending,
                    started,
                    status=(
                        EnumIntentStatus.FAILED
                        if outcome.while_executing
                        else EnumIntentStatus.REJECTED
                    ),
                    error=ModelLogError(
                        error_code=EnumIntentErrorCode.PREEMPTED,
                        error_message=(
                            "Preempted by higher-priority intent "
                            f"{outcome.preempted_by}"
                            + (" during execution" if outcome.while_executing else "")
                        ),
                        error_type=EnumErrorType.PREEMPTION,
                        recoverable=True,
                    ),
                    outcome=outcome,
                )
            case _:
                result = outcome.execution_result
                if result is not None and result.success:
                    return self._finish(
                        pending,
                        started,
                        status=EnumIntentStatus.COMPLETED,
                        execution_result=result,
                        outcome=outcome,
                    )
                return self._finish(
                    pending,
                    started,
                    status=EnumIntentStatus.FAILED,
                    execution_result=result,
                    error=ModelLogError(
                        error_code=EnumIntentErrorCode.INTENT_EXECUTION_FAILED,
                        error_message=(
                            result.error if result and result.error else "unknown error"
                        ),
                        error_type=EnumErrorType.EXECUTION,
                        recoverable=True,
                    ),
                    outcome=outcome,
                )

    def _finish(
        self,
        pending: ModelIntentLogEntry,
        started: float,
        *,
        status: EnumIntentStatus,
        error: ModelLogError | None = None,
        execution_result: Any = None,
        outcome: TicketOutcome | None = None,
    ) -> ModelIntentLogEntry:
        total_ms = _elapsed_ms(started)
        return _transition(
            pending,
            status=status,
            error=error,
            execution_result=execution_result,
            execution_end=self._clock(),
            duration_ms=total_ms,
            performance=ModelPerformanceMetrics(
                validation_duration_ms=pending.validation_result.performance_ms,
                queue_wait_ms=outcome.queue_wait_ms if outcome else 0.0,
                execution_duration_ms=outcome.execution_ms if outcome else 0.0,
                total_duration_ms=total_ms,
            ),
        )

    def _system_failure(
        self,
        envelope: ModelIntentEnvelope,
        pending: ModelIntentLogEntry | None,
        error: ModelLogError,
        *,
        log_id: str,
        sequence_number: int,
        attempt: int,
        execution_start: datetime,
        started: float,
    ) -> ModelIntentLogEntry:
        if pending is not None:
            return self._finish(
                pending, started, status=EnumIntentStatus.FAILED, error=error
            )

        total_ms = _elapsed_ms(started)
        return ModelIntentLogEntry(
            log_id=log_id,
            intent_id=envelope.intent_id,
            correlation_id=envelope.correlation_id,
            sequence_number=sequence_number,
            timestamp=envelope.timestamp,
            execution_start=execution_start,
            execution_end=self._clock(),
            duration_ms=total_ms,
            intent_type=envelope.type,
            origin=envelope.origin,
            status=EnumIntentStatus.FAILED,
            validation_result=ModelValidationResult(valid=False),
            performance=ModelPerformanceMetrics(total_duration_ms=total_ms),
            error=error,
            attempt=attempt,
        )


__all__ = ["IntentBus"]
