# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""In-memory UI state for tests and local demos.

``MockUIState`` implements ``ProtocolUIState`` over plain dictionaries. It
records every write call so tests can assert on exactly which mutations an
executor performed (and that a rejected intent performed none), and it can
hold or fail individual write methods to simulate slow or broken UI work.

Usage:
    from intentbus.testing import MockUIState

    ui = MockUIState(tables={"work-orders": {"status": "enum"}})
    gate = ui.hold("apply_table_state")   # executor blocks until gate.set()
    ui.fail("navigate", RuntimeError("router unavailable"))
"""

from __future__ import annotations

import asyncio
import copy
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any
from urllib.parse import urlsplit

from intentbus.models import ModelUIStateSnapshot, ModelViewport

WRITE_METHODS: frozenset[str] = frozenset(
    {
        "navigate",
        "apply_table_state",
        "mount_panel",
        "unmount_panel",
        "apply_theme",
        "perform_client_action",
    }
)


class MockUIState:
    """Mock implementation of ProtocolUIState.

    Attributes:
        route: Current route.
        tables: ``{table_id: {field: data_type}}`` for mounted tables.
        loaded_rows: ``{table_id: row ids}``; a table is loaded once present.
        panels: ``{panel_id: mount arguments}`` for mounted panels.
        entities: Known ``(entity_type, entity_id)`` pairs.
        mounted_components: Ids of mounted components.
        reduced_motion: OS-level reduced-motion preference.
        theme: Applied theme attributes.
        table_states: Applied per-table state.
        calls: Every write call as ``(method, kwargs)``, in call order.
    """

    def __init__(
        self,
        *,
        route: str = "/hs/app/dashboard",
        tables: dict[str, dict[str, str]] | None = None,
        loaded_rows: dict[str, Iterable[str]] | None = None,
        open_panels: Iterable[str] = (),
        entities: Iterable[tuple[str, str]] = (),
        mounted_components: Iterable[str] = (),
        reduced_motion: bool = False,
        theme: dict[str, Any] | None = None,
    ) -> None:
        self.route = route
        self.tables: dict[str, dict[str, str]] = dict(tables or {})
        self.loaded_rows: dict[str, set[str]] = {
            table_id: set(rows) for table_id, rows in (loaded_rows or {}).items()
        }
        self.panels: dict[str, dict[str, Any]] = {pid: {} for pid in open_panels}
        self.entities: set[tuple[str, str]] = set(entities)
        self.mounted_components: set[str] = set(mounted_components)
        self.reduced_motion = reduced_motion
        self.theme: dict[str, Any] = dict(theme or {})
        self.table_states: dict[str, dict[str, Any]] = {}
        self.viewport = ModelViewport(width=1280, height=800)
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.restored: list[ModelUIStateSnapshot] = []
        self._failures: dict[str, Exception] = {}
        self._gates: dict[str, asyncio.Event] = {}

    # =========================================================================
    # Test controls
    # =========================================================================

    def fail(self, method: str, exc: Exception) -> None:
        """Make every later call to write ``method`` raise ``exc``."""
        self._require_write_method(method)
        self._failures[method] = exc

    def hold(self, method: str) -> asyncio.Event:
        """Block write ``method`` until the returned event is set."""
        self._require_write_method(method)
        gate = asyncio.Event()
        self._gates[method] = gate
        return gate

    def reset_controls(self) -> None:
        """Drop every failure and gate, releasing blocked writes."""
        for gate in self._gates.values():
            gate.set()
        self._gates.clear()
        self._failures.clear()

    @property
    def write_methods_called(self) -> list[str]:
        """Names of the write methods called so far, in order."""
        return [method for method, _ in self.calls]

    @staticmethod
    def _require_write_method(method: str) -> None:
        if method not in WRITE_METHODS:
            msg = f"{method!r} is not a write method of the UI state"
            raise ValueError(msg)

    async def _write(self, method: str, **kwargs: Any) -> None:
        self.calls.append((method, kwargs))
        gate = self._gates.get(method)
        if gate is not None:
            await gate.wait()
        exc = self._failures.get(method)
        if exc is not None:
            raise exc

    # =========================================================================
    # Reads
    # =========================================================================

    async def current_route(self) -> str:
        return self.route

    async def get_table_schema(self, table_id: str) -> dict[str, str] | None:
        schema = self.tables.get(table_id)
        return dict(schema) if schema is not None else None

    async def is_table_loaded(self, table_id: str) -> bool:
        return table_id in self.loaded_rows

    async def get_loaded_row_ids(self, table_id: str) -> set[str]:
        return set(self.loaded_rows.get(table_id, ()))

    async def is_panel_open(self, panel_id: str) -> bool:
        return panel_id in self.panels

    async def list_open_panels(self) -> list[str]:
        return list(self.panels)

    async def entity_exists(self, entity_type: str, entity_id: str) -> bool:
        return (entity_type, entity_id) in self.entities

    async def is_component_mounted(self, component_id: str) -> bool:
        return component_id in self.mounted_components

    async def prefers_reduced_motion(self) -> bool:
        return self.reduced_motion

    async def snapshot(self) -> ModelUIStateSnapshot:
        return ModelUIStateSnapshot(
            route=self.route,
            active_panels=list(self.panels),
            table_states=copy.deepcopy(self.table_states),
            theme_settings=dict(self.theme),
            viewport=self.viewport,
            captured_at=datetime.now(UTC),
        )

    async def restore(self, snapshot: ModelUIStateSnapshot) -> None:
        self.restored.append(snapshot)
        self.route = snapshot.route
        self.panels = {
            pid: self.panels.get(pid, {}) for pid in snapshot.active_panels
        }
        self.table_states = copy.deepcopy(snapshot.table_states)
        self.theme = dict(snapshot.theme_settings)
        self.viewport = snapshot.viewport

    # =========================================================================
    # Writes
    # =========================================================================

    async def navigate(self, url: str, *, replace: bool, external: bool) -> None:
        await self._write("navigate", url=url, replace=replace, external=external)
        if not external:
            self.route = urlsplit(url).path

    async def apply_table_state(
        self,
        table_id: str,
        state_update: dict[str, Any],
        merge_strategy: str,
    ) -> None:
        await self._write(
            "apply_table_state",
            table_id=table_id,
            state_update=state_update,
            merge_strategy=merge_strategy,
        )
        if merge_strategy in ("merge", "append"):
            self.table_states.setdefault(table_id, {}).update(state_update)
        else:
            self.table_states[table_id] = dict(state_update)

    async def mount_panel(
        self,
        panel_id: str,
        panel_type: str,
        content_type: str,
        config: dict[str, Any],
        context: dict[str, Any],
    ) -> None:
        arguments = {
            "panel_type": panel_type,
            "content_type": content_type,
            "config": config,
            "context": context,
        }
        await self._write("mount_panel", panel_id=panel_id, **arguments)
        self.panels[panel_id] = arguments

    async def unmount_panel(self, panel_id: str) -> None:
        await self._write("unmount_panel", panel_id=panel_id)
        self.panels.pop(panel_id, None)

    async def apply_theme(self, updates: dict[str, Any], scope: str) -> None:
        await self._write("apply_theme", updates=updates, scope=scope)
        self.theme.update(updates)

    async def perform_client_action(
        self, action: str, parameters: dict[str, Any]
    ) -> None:
        await self._write(
            "perform_client_action", action=action, parameters=parameters
        )


__all__ = [
    "WRITE_METHODS",
    "MockUIState",
]
