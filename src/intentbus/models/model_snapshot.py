# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Captured UI-state snapshot stored with each log entry.

Replay can restore these snapshots between steps to reproduce the
environment an intent originally ran against.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ModelViewport(BaseModel):
    """Viewport dimensions in CSS pixels."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)


class ModelUIStateSnapshot(BaseModel):
    """Point-in-time view of the shared UI state.

    Attributes:
        route: Current application route.
        active_panels: Ids of the panels currently mounted.
        table_states: Per-table applied state (filters, sorting, ...).
        theme_settings: Currently applied theme attributes.
        viewport: Viewport size.
        captured_at: When the snapshot was taken.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    route: str = "/"
    active_panels: list[str] = Field(default_factory=list)
    table_states: dict[str, dict[str, Any]] = Field(default_factory=dict)
    theme_settings: dict[str, Any] = Field(default_factory=dict)
    viewport: ModelViewport = Field(default_factory=ModelViewport)
    captured_at: datetime | None = None


__all__ = ["ModelUIStateSnapshot", "ModelViewport"]
