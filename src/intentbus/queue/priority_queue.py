# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Single-executor priority queue with conflict-driven preemption.

Admitted intents wait in a heap keyed by ``(priority, arrival)``: priority
strictly dominates, arrival order breaks ties (FIFO within a class). One
drain task pops the best ticket, runs it to completion, then re-reads the
heap, so a higher-priority intent admitted mid-run goes next.

At most one intent executes at a time. That is the only guarantee executors
rely on to mutate the shared UI state without locks.

Admission:
    The candidate is checked against the executing ticket and every queued
    ticket. Without conflicts it is queued. With conflicts it preempts them
    only if it is strictly higher priority than every one of them; otherwise
    it is rejected with INTENT_CONFLICT. Preempted queued tickets are dropped
    from the heap; a preempted executing ticket has its task cancelled.
    Preempted intents are not re-queued.

Withdrawal and shutdown:
    A caller that stops waiting withdraws its ticket: a queued ticket never
    starts and an executing one has its task cancelled. Shutdown resolves
    every outstanding ticket to a CANCELLED outcome.

``admit`` never awaits, so the conflict check and the heap update are
atomic with respect to the event loop.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum, unique

from intentbus.enums import EnumIntentErrorCode, EnumPriorityClass
from intentbus.models import ModelExecutionResult, ModelIntent
from intentbus.queue.conflict_detector import ConflictDetector, conflict_reason
from intentbus.queue.priority import priority_for

logger = logging.getLogger(__name__)

ExecuteFn = Callable[[ModelIntent], Awaitable[ModelExecutionResult]]


# ---------------------------------------------------------------------------
# Tickets and outcomes
# ---------------------------------------------------------------------------


@unique
class EnumTicketOutcome(str, Enum):
    """How a ticket left the queue."""

    COMPLETED = "completed"
    """The executor ran and returned a result (successful or not)."""

    PREEMPTED = "preempted"
    """A higher-priority conflicting intent displaced the ticket."""

    CANCELLED = "cancelled"
    """The queue shut down before the ticket finished."""


@dataclass(frozen=True)
class TicketOutcome:
    """Resolution of a ticket's future.

    Attributes:
        kind: COMPLETED, PREEMPTED or CANCELLED.
        execution_result: Executor result (COMPLETED only).
        preempted_by: Intent id that displaced the ticket (PREEMPTED only).
        while_executing: True if the ticket was preempted or cancelled
            mid-execution.
        queue_wait_ms: Time between admission and execution start (or
            preemption, for tickets that never started).
        execution_ms: Time spent executing.
    """

    kind: EnumTicketOutcome
    execution_result: ModelExecutionResult | None = None
    preempted_by: str | None = None
    while_executing: bool = False
    queue_wait_ms: float = 0.0
    execution_ms: float = 0.0


@dataclass(eq=False)
class IntentTicket:
    """An admitted intent waiting for, or holding, the executor."""

    intent: ModelIntent
    priority: EnumPriorityClass
    arrival: int
    future: asyncio.Future[TicketOutcome]
    enqueued_at: float = field(default_factory=time.perf_counter)
    started_at: float | None = None
    task: asyncio.Task[ModelExecutionResult] | None = None
    preempted_by: str | None = None
    dropped: bool = False

    @property
    def intent_id(self) -> str:
        return self.intent.intent_id

    @property
    def is_executing(self) -> bool:
        return self.task is not None and not self.task.done()


@dataclass(frozen=True)
class AdmissionResult:
    """Outcome of ``PriorityIntentQueue.admit``.

    Attributes:
        admitted: True if the intent was queued.
        ticket: The queued ticket; await ``ticket.future`` for the outcome.
        rejection_code: Why the intent was refused, when not admitted.
        reason: Human-readable explanation of a refusal.
        conflicting_ids: Intent ids the candidate conflicted with.
        preempted: Tickets displaced to admit the candidate.
    """

    admitted: bool
    ticket: IntentTicket | None = None
    rejection_code: str | None = None
    reason: str = ""
    conflicting_ids: tuple[str, ...] = ()
    preempted: tuple[IntentTicket, ...] = ()


# ---------------------------------------------------------------------------
# PriorityIntentQueue
# ---------------------------------------------------------------------------


class PriorityIntentQueue:
    """Serializes intent execution by priority.

    Args:
        execute: Coroutine function that runs one intent.
        detector: Conflict rules. Defaults to ``ConflictDetector()``.
        on_start: Called synchronously right before a ticket executes.
    """

    def __init__(
        self,
        execute: ExecuteFn,
        *,
        detector: ConflictDetector | None = None,
        on_start: Callable[[IntentTicket], None] | None = None,
    ) -> None:
        self._execute = execute
        self._detector = detector or ConflictDetector()
        self._on_start = on_start
        self._heap: list[tuple[int, int, IntentTicket]] = []
        self._arrivals = itertools.count()
        self._executing: IntentTicket | None = None
        self._drain_task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def executing(self) -> IntentTicket | None:
        """The ticket currently holding the executor."""
        return self._executing

    def queued(self) -> list[IntentTicket]:
        """Waiting tickets in execution order."""
        ordered = sorted(self._heap, key=lambda entry: entry[:2])
        return [ticket for _, _, ticket in ordered if not ticket.dropped]

    def active(self) -> list[IntentTicket]:
        """The executing ticket followed by the waiting ones.

        An executing ticket that has already been preempted or withdrawn is
        excluded: it is only unwinding.
        """
        tickets = self.queued()
        executing = self._executing
        if (
            executing is not None
            and executing.preempted_by is None
            and not executing.dropped
        ):
            tickets.insert(0, executing)
        return tickets

    def is_in_flight(self, intent_id: str) -> bool:
        """True if ``intent_id`` is queued or executing."""
        return any(t.intent_id == intent_id for t in self.active())

    def __len__(self) -> int:
        return len(self.active())

    # ------------------------------------------------------------------
    # Admission
    # ------------------------------------------------------------------

    def admit(self, intent: ModelIntent) -> AdmissionResult:
        """Queue ``intent`` or refuse it.

        Args:
            intent: A fully validated intent.

        Returns:
            AdmissionResult. When admitted, ``ticket.future`` resolves to a
            ``TicketOutcome`` once the ticket leaves the queue.
        """
        if self.is_in_flight(intent.intent_id):
            return AdmissionResult(
                admitted=False,
                rejection_code=EnumIntentErrorCode.INTENT_ALREADY_IN_FLIGHT,
                reason=f"Intent {intent.intent_id} is already queued or executing",
                conflicting_ids=(intent.intent_id,),
            )

        priority = priority_for(intent.type)
        conflicting = self._detector.find_conflicts(intent, self.active())

        if conflicting:
            conflicting_ids = tuple(t.intent_id for t in conflicting)
            if not all(priority < t.priority for t in conflicting):
                reasons = "; ".join(
                    f"{t.intent_id}: {conflict_reason(intent, t.intent)}"
                    for t in conflicting
                )
                logger.info(
                    "Intent %s rejected on conflict with %s",
                    intent.intent_id,
                    ", ".join(conflicting_ids),
                    extra={"correlation_id": intent.correlation_id},
                )
                return AdmissionResult(
                    admitted=False,
                    rejection_code=EnumIntentErrorCode.INTENT_CONFLICT,
                    reason=f"Conflicts with in-flight intents ({reasons})",
                    conflicting_ids=conflicting_ids,
                )
            for ticket in conflicting:
                self._preempt(ticket, by=intent)

        ticket = IntentTicket(
            intent=intent,
            priority=priority,
            arrival=next(self._arrivals),
            future=asyncio.get_running_loop().create_future(),
        )
        heapq.heappush(self._heap, (int(priority), ticket.arrival, ticket))
        self._ensure_draining()

        return AdmissionResult(
            admitted=True,
            ticket=ticket,
            conflicting_ids=tuple(t.intent_id for t in conflicting),
            preempted=tuple(conflicting),
        )

    def _preempt(self, ticket: IntentTicket, *, by: ModelIntent) -> None:
        ticket.preempted_by = by.intent_id
        logger.info(
            "Intent %s (%s) preempted by %s (%s)%s",
            ticket.intent_id,
            ticket.priority.name,
            by.intent_id,
            priority_for(by.type).name,
            " while executing" if ticket.is_executing else "",
            extra={"correlation_id": ticket.intent.correlation_id},
        )
        if ticket is self._executing and ticket.task is not None:
            # The drain loop resolves the future once the task unwinds
            ticket.task.cancel()
            return

        ticket.dropped = True
        if not ticket.future.done():
            ticket.future.set_result(
                TicketOutcome(
                    kind=EnumTicketOutcome.PREEMPTED,
                    preempted_by=by.intent_id,
                    queue_wait_ms=_elapsed_ms(ticket.enqueued_at),
                )
            )

    def withdraw(self, ticket: IntentTicket) -> None:
        """Remove a ticket whose caller stopped waiting for it.

        A queued ticket never starts; an executing one has its task
        cancelled. The ticket's future is left as the caller left it.
        """
        ticket.dropped = True
        if ticket is self._executing and ticket.task is not None:
            ticket.task.cancel()
        logger.info(
            "Intent %s withdrawn by its caller%s",
            ticket.intent_id,
            " while executing" if ticket.is_executing else "",
            extra={"correlation_id": ticket.intent.correlation_id},
        )

    # ------------------------------------------------------------------
    # Drain loop
    # ------------------------------------------------------------------

    def _ensure_draining(self) -> None:
        if self._drain_task is None or self._drain_task.done():
            self._drain_task = asyncio.create_task(self._drain())

    async def _drain(self) -> None:
        try:
            while self._heap:
                _, _, ticket = heapq.heappop(self._heap)
                if ticket.dropped or ticket.future.done():
                    continue
                await self._run(ticket)
        finally:
            self._drain_task = None

    async def _run(self, ticket: IntentTicket) -> None:
        ticket.started_at = time.perf_counter()
        queue_wait_ms = (ticket.started_at - ticket.enqueued_at) * 1000
        self._executing = ticket
        if self._on_start is not None:
            self._on_start(ticket)

        task = asyncio.create_task(self._execute(ticket.intent))
        ticket.task = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            # Only shutdown cancels the drain task
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            if not ticket.future.done():
                ticket.future.set_result(
                    TicketOutcome(
                        kind=EnumTicketOutcome.CANCELLED,
                        while_executing=True,
                        queue_wait_ms=queue_wait_ms,
                        execution_ms=_elapsed_ms(ticket.started_at),
                    )
                )
            raise
        finally:
            self._executing = None

        execution_ms = _elapsed_ms(ticket.started_at)
        if ticket.future.done():
            return

        if task.cancelled():
            ticket.future.set_result(
                TicketOutcome(
                    kind=EnumTicketOutcome.PREEMPTED,
                    preempted_by=ticket.preempted_by,
                    while_executing=True,
                    queue_wait_ms=queue_wait_ms,
                    execution_ms=execution_ms,
                )
            )
            return

        exc = task.exception()
        if exc is not None:
            ticket.future.set_exception(exc)
            return

        ticket.future.set_result(
            TicketOutcome(
                kind=EnumTicketOutcome.COMPLETED,
                execution_result=task.result(),
                queue_wait_ms=queue_wait_ms,
                execution_ms=execution_ms,
            )
        )

    async def shutdown(self) -> None:
        """Cancel the drain loop and every ticket still waiting.

        Waiting tickets and the executing one resolve to a CANCELLED
        outcome, so every admitted intent still gets a result.
        """
        for ticket in self.queued():
            ticket.dropped = True
            if not ticket.future.done():
                ticket.future.set_result(
                    TicketOutcome(
                        kind=EnumTicketOutcome.CANCELLED,
                        queue_wait_ms=_elapsed_ms(ticket.enqueued_at),
                    )
                )
        self._heap.clear()
        drain = self._drain_task
        if drain is not None:
            drain.cancel()
            await asyncio.gather(drain, return_exceptions=True)


def _elapsed_ms(since: float) -> float:
    return (time.perf_counter() - since) * 1000


__all__ = [
    "AdmissionResult",
    "EnumTicketOutcome",
    "IntentTicket",
    "PriorityIntentQueue",
    "TicketOutcome",
]
