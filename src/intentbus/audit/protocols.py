# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Protocol definition for intent log repository dependency injection.

The bus and the replay engine depend on ``ProtocolIntentLogRepository``
rather than the in-memory implementation, so the log can be backed by a
real store without touching either.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from intentbus.audit.models import ModelIntentLogCursor, ModelIntentLogQuery
from intentbus.models import ModelIntentLogEntry
from intentbus.protocols import ProtocolIntentLogSink


@runtime_checkable
class ProtocolIntentLogRepository(Protocol):
    """Protocol for intent log persistence and querying.

    Implementations must provide:
    - ``next_sequence_number``: Gap-free sequence allocation per correlation id.
    - ``append``: Append-only write; terminal entries are never overwritten.
    - ``add_sink``: Registration of external sinks.
    - ``publish``: Fan-out of terminal entries to external sinks.
    - ``get_entry``: Latest entry for an intent id.
    - ``get_sequence``: Terminal entries of one correlation group, in order.
    - ``query``: Filtered, paginated search.
    - ``all_entries``: Every terminal entry, in append order.
    - ``count``: Number of terminal entries stored.
    """

    def next_sequence_number(self, correlation_id: str) -> int:
        """Allocate the next sequence number for ``correlation_id``."""
        ...

    def append(self, entry: ModelIntentLogEntry) -> bool:
        """Append an entry.

        Returns:
            True if stored, False if it would overwrite a terminal entry.
        """
        ...

    def add_sink(self, sink: ProtocolIntentLogSink) -> None:
        """Register an external sink for terminal entries."""
        ...

    async def publish(self, entry: ModelIntentLogEntry) -> None:
        """Fan a terminal entry out to every registered sink."""
        ...

    def get_entry(self, intent_id: str) -> ModelIntentLogEntry | None:
        """Return the latest stored entry for ``intent_id``."""
        ...

    def get_sequence(self, correlation_id: str) -> list[ModelIntentLogEntry]:
        """Return the terminal entries of a correlation group by sequence."""
        ...

    def query(
        self, query: ModelIntentLogQuery
    ) -> tuple[list[ModelIntentLogEntry], ModelIntentLogCursor | None]:
        """Search terminal entries.

        Returns:
            (entries, next_cursor) tuple.
        """
        ...

    def all_entries(self) -> list[ModelIntentLogEntry]:
        """Return every terminal entry in append order."""
        ...

    def count(self) -> int:
        """Return the number of terminal entries stored."""
        ...


__all__ = [
    "ProtocolIntentLogRepository",
]
