# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Controlled vocabulary of side-effect tags reported by executors.

Replay verification compares these tags between the original run and the
replayed run, so executors must only report values from this enum.
"""

from __future__ import annotations

from enum import Enum, unique


@unique
class EnumSideEffect(str, Enum):
    """Side-effect categories an executor may trigger."""

    DOM_MUTATION = "dom_mutation"
    STATE_UPDATE = "state_update"
    API_CALL = "api_call"
    STORAGE_OPERATION = "storage_operation"
    NAVIGATION = "navigation"
    HISTORY_CHANGE = "history_change"
    EXTERNAL_NAVIGATION = "external_navigation"
    PANEL_MOUNT = "panel_mount"
    PANEL_UNMOUNT = "panel_unmount"
    THEME_CHANGE = "theme_change"
    CLIPBOARD_WRITE = "clipboard_write"
    NOTIFICATION = "notification"
    CACHE_CLEAR = "cache_clear"
    FILE_DOWNLOAD = "file_download"
    SCREEN_CAPTURE = "screen_capture"


__all__ = ["EnumSideEffect"]
