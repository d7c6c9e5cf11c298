# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Append-only storage and querying for intent log entries.

Provides the IntentLogRepository: an in-memory repository holding every
terminal entry in append order, with optional history of the intermediate
``pending`` / ``executing`` states.

Sequencing:
    ``next_sequence_number`` allocates numbers per correlation id, starting
    at 1. The bus allocates exactly one number per processing run and always
    appends exactly one terminal entry for it, so each correlation group is a
    contiguous run.

Append-only:
    Once an entry with a given ``log_id`` reaches a terminal status, any
    further append for that ``log_id`` is refused and logged.

Query Support:
    - By intent_id (latest entry)
    - By correlation_id (full ordered sequence, used by replay)
    - By time range, type, origin, status, error code, correlation id and
      free text (paginated)
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from collections.abc import Callable

from intentbus.audit.models import ModelIntentLogCursor, ModelIntentLogQuery
from intentbus.models import ModelIntentLogEntry
from intentbus.protocols import ProtocolIntentLogSink

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# IntentLogRepository
# ---------------------------------------------------------------------------


class IntentLogRepository:
    """Repository for intent log persistence, querying and sink fan-out.

    Thread Safety:
        Not thread-safe. The bus runs on a single event loop and never
        awaits between allocating a sequence number and reading it back.

    Args:
        record_intermediate_states: Keep every non-terminal entry in the
            per-log history as well as the terminal one.
    """

    def __init__(self, *, record_intermediate_states: bool = False) -> None:
        self._record_intermediate = record_intermediate_states
        # correlation_id → last allocated sequence number
        self._sequences: dict[str, int] = defaultdict(int)
        # Terminal entries in append order; list index is the cursor position
        self._terminal: list[ModelIntentLogEntry] = []
        # log_id → latest entry (intermediate or terminal)
        self._latest: dict[str, ModelIntentLogEntry] = {}
        # log_id → every stored state, oldest first
        self._history: dict[str, list[ModelIntentLogEntry]] = defaultdict(list)
        # intent_id → log_id of the most recent processing run
        self._by_intent: dict[str, str] = {}
        self._sinks: list[ProtocolIntentLogSink] = []

    # ------------------------------------------------------------------
    # Sequencing
    # ------------------------------------------------------------------

    def next_sequence_number(self, correlation_id: str) -> int:
        """Allocate the next sequence number for ``correlation_id``.

        Args:
            correlation_id: The correlation group.

        Returns:
            1 for the first intent of the group, then 2, 3, ...
        """
        self._sequences[correlation_id] += 1
        return self._sequences[correlation_id]

    # ------------------------------------------------------------------
    # Write Operations
    # ------------------------------------------------------------------

    def append(self, entry: ModelIntentLogEntry) -> bool:
        """Append an entry to the log.

        Intermediate entries are kept only as the latest state for their
        ``log_id`` (and in the history when intermediate recording is on).
        Terminal entries are additionally appended to the queryable log.

        Args:
            entry: The entry to store.

        Returns:
            True if stored, False if the ``log_id`` already reached a
            terminal status (the entry is discarded).
        """
        current = self._latest.get(entry.log_id)
        if current is not None and current.is_terminal:
            logger.warning(
                "Refusing to overwrite terminal log entry. log_id=%s "
                "existing_status=%s attempted_status=%s",
                entry.log_id,
                current.status.value,
                entry.status.value,
                extra={"correlation_id": entry.correlation_id},
            )
            return False

        self._latest[entry.log_id] = entry
        self._by_intent[entry.intent_id] = entry.log_id

        if entry.is_terminal:
            self._terminal.append(entry)
            self._history[entry.log_id].append(entry)
            logger.debug(
                "Stored terminal log entry. log_id=%s intent_id=%s status=%s seq=%d",
                entry.log_id,
                entry.intent_id,
                entry.status.value,
                entry.sequence_number,
                extra={"correlation_id": entry.correlation_id},
            )
        elif self._record_intermediate:
            self._history[entry.log_id].append(entry)

        return True

    # ------------------------------------------------------------------
    # Sinks
    # ------------------------------------------------------------------

    def add_sink(self, sink: ProtocolIntentLogSink) -> None:
        """Register an external sink for terminal entries."""
        self._sinks.append(sink)

    async def publish(self, entry: ModelIntentLogEntry) -> None:
        """Hand a terminal entry to every registered sink.

        A failing sink is logged and does not prevent delivery to the
        remaining sinks; the entry is already stored locally.
        """
        for sink in self._sinks:
            try:
                await sink.publish(entry)
            except Exception:
                logger.warning(
                    "Failed to publish intent log entry to sink "
                    "(sink=%s, log_id=%s)",
                    type(sink).__name__,
                    entry.log_id,
                    exc_info=True,
                    extra={"correlation_id": entry.correlation_id},
                )

    # ------------------------------------------------------------------
    # Read Operations
    # ------------------------------------------------------------------

    def get_entry(self, intent_id: str) -> ModelIntentLogEntry | None:
        """Return the latest entry of the most recent run for ``intent_id``."""
        log_id = self._by_intent.get(intent_id)
        if log_id is None:
            return None
        return self._latest.get(log_id)

    def get_history(self, log_id: str) -> list[ModelIntentLogEntry]:
        """Return every stored state of one processing run, oldest first."""
        return list(self._history.get(log_id, ()))

    def get_sequence(self, correlation_id: str) -> list[ModelIntentLogEntry]:
        """Return the terminal entries of ``correlation_id`` by sequence number."""
        entries = [e for e in self._terminal if e.correlation_id == correlation_id]
        entries.sort(key=lambda e: e.sequence_number)
        return entries

    def all_entries(self) -> list[ModelIntentLogEntry]:
        """Return every terminal entry in append order."""
        return list(self._terminal)

    def query(
        self, query: ModelIntentLogQuery
    ) -> tuple[list[ModelIntentLogEntry], ModelIntentLogCursor | None]:
        """Search terminal entries.

        Results are in append order (oldest first).

        Args:
            query: Filter and pagination parameters.

        Returns:
            Tuple of (entries, next_cursor). ``next_cursor`` is None when
            there are no more pages.
        """
        return self._paginate(
            filter_fn=_build_filter(query),
            limit=query.limit,
            cursor=query.cursor,
        )

    # ------------------------------------------------------------------
    # Utility
    # ------------------------------------------------------------------

    def count(self) -> int:
        """Return the number of terminal entries stored."""
        return len(self._terminal)

    def clear(self) -> None:
        """Remove all entries and sequence counters. For test use only."""
        self._sequences.clear()
        self._terminal.clear()
        self._latest.clear()
        self._history.clear()
        self._by_intent.clear()

    # ------------------------------------------------------------------
    # Internal pagination helper
    # ------------------------------------------------------------------

    def _paginate(
        self,
        filter_fn: Callable[[ModelIntentLogEntry], bool],
        *,
        limit: int,
        cursor: ModelIntentLogCursor | None,
    ) -> tuple[list[ModelIntentLogEntry], ModelIntentLogCursor | None]:
        start = cursor.last_position + 1 if cursor is not None else 0

        page: list[tuple[int, ModelIntentLogEntry]] = []
        has_next = False
        for position in range(start, len(self._terminal)):
            entry = self._terminal[position]
            if not filter_fn(entry):
                continue
            if len(page) == limit:
                has_next = True
                break
            page.append((position, entry))

        next_cursor: ModelIntentLogCursor | None = None
        if has_next and page:
            next_cursor = ModelIntentLogCursor(last_position=page[-1][0])

        return [entry for _, entry in page], next_cursor


# ---------------------------------------------------------------------------
# Query filter
# ---------------------------------------------------------------------------


def _build_filter(
    query: ModelIntentLogQuery,
) -> Callable[[ModelIntentLogEntry], bool]:
    needle = query.text.lower() if query.text else None

    def _matches(entry: ModelIntentLogEntry) -> bool:
        if query.since is not None and entry.timestamp < query.since:
            return False
        if query.until is not None and entry.timestamp > query.until:
            return False
        if query.intent_type is not None and entry.intent_type != query.intent_type:
            return False
        if query.origin is not None and entry.origin is not query.origin:
            return False
        if query.status is not None and entry.status is not query.status:
            return False
        if query.error_code is not None and entry.error_code != query.error_code:
            return False
        if (
            query.correlation_id is not None
            and entry.correlation_id != query.correlation_id
        ):
            return False
        if needle is not None and needle not in _searchable_text(entry):
            return False
        return True

    return _matches


def _searchable_text(entry: ModelIntentLogEntry) -> str:
    parts = [
        entry.intent_id,
        entry.intent_type,
        entry.correlation_id,
        entry.error.error_code if entry.error else "",
        entry.error.error_message if entry.error else "",
        json.dumps(entry.payload, default=str, sort_keys=True),
    ]
    return " ".join(parts).lower()


__all__ = [
    "IntentLogRepository",
]
