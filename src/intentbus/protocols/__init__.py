# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Collaborator protocols consumed and exposed by the intent bus.

The bus never owns UI state, permission data, or log persistence. It holds
references to collaborators implementing these protocols, which keeps every
component testable without a real browser or backend.

Every method is async: validator stages 3/4 and executors suspend on these
calls while the UI or permission service answers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from intentbus.models import ModelIntentLogEntry, ModelUIStateSnapshot


@runtime_checkable
class ProtocolUIState(Protocol):
    """Port onto the running application's UI state.

    Read methods answer validator questions. Write methods are called only
    by executors, and only for the single intent currently executing.
    """

    # -- reads -------------------------------------------------------------

    async def current_route(self) -> str:
        """Return the route currently displayed."""
        ...

    async def get_table_schema(self, table_id: str) -> dict[str, str] | None:
        """Return ``{field: data_type}`` for a mounted table, or None if absent."""
        ...

    async def is_table_loaded(self, table_id: str) -> bool:
        """Return True once the table's dataset has finished loading."""
        ...

    async def get_loaded_row_ids(self, table_id: str) -> set[str]:
        """Return the ids of the rows currently loaded in the table."""
        ...

    async def is_panel_open(self, panel_id: str) -> bool:
        """Return True if a panel with this id is mounted."""
        ...

    async def list_open_panels(self) -> list[str]:
        """Return the ids of every mounted panel."""
        ...

    async def entity_exists(self, entity_type: str, entity_id: str) -> bool:
        """Return True if the entity is known to the current view."""
        ...

    async def is_component_mounted(self, component_id: str) -> bool:
        """Return True if the component is mounted."""
        ...

    async def prefers_reduced_motion(self) -> bool:
        """Return the OS-level reduced-motion preference."""
        ...

    async def snapshot(self) -> ModelUIStateSnapshot:
        """Capture the current UI state."""
        ...

    async def restore(self, snapshot: ModelUIStateSnapshot) -> None:
        """Restore a previously captured UI state (replay only)."""
        ...

    # -- writes ------------------------------------------------------------

    async def navigate(self, url: str, *, replace: bool, external: bool) -> None:
        """Navigate to ``url``."""
        ...

    async def apply_table_state(
        self,
        table_id: str,
        state_update: dict[str, Any],
        merge_strategy: str,
    ) -> None:
        """Apply filters, sorting, pagination and selection to a table."""
        ...

    async def mount_panel(
        self,
        panel_id: str,
        panel_type: str,
        content_type: str,
        config: dict[str, Any],
        context: dict[str, Any],
    ) -> None:
        """Mount an inline panel element."""
        ...

    async def unmount_panel(self, panel_id: str) -> None:
        """Unmount a panel element."""
        ...

    async def apply_theme(self, updates: dict[str, Any], scope: str) -> None:
        """Set theme attributes."""
        ...

    async def perform_client_action(
        self, action: str, parameters: dict[str, Any]
    ) -> None:
        """Perform a named client action (toast, clipboard, export, ...)."""
        ...


@runtime_checkable
class ProtocolPermissionService(Protocol):
    """Permission and tenancy lookups. The bus only queries, never stores."""

    async def has_permission(self, code: str) -> bool:
        """Return True if the current principal holds ``code``."""
        ...

    async def is_route_in_tenant_boundary(
        self, route: str, tenant_id: str | None
    ) -> bool:
        """Return True if ``route`` belongs to ``tenant_id``."""
        ...

    async def has_entity_permission(self, entity_type: str, action: str) -> bool:
        """Return True if ``action`` is allowed on entities of ``entity_type``."""
        ...


@runtime_checkable
class ProtocolIntentLogSink(Protocol):
    """External persistence or analytics target for terminal log entries."""

    async def publish(self, entry: ModelIntentLogEntry) -> None:
        """Receive one terminal log entry."""
        ...


__all__ = [
    "ProtocolIntentLogSink",
    "ProtocolPermissionService",
    "ProtocolUIState",
]
