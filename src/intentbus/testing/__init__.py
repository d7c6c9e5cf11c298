# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Testing utilities for intentbus.

Mock collaborators implementing the bus protocols, importable from the test
suite and from local demos.

Modules:
    mock_ui_state: In-memory ProtocolUIState with write recording
    mock_collaborators: Permission service, log sink and intent factory
"""

from intentbus.testing.mock_collaborators import (
    DEFAULT_TENANT_ID,
    MockLogSink,
    MockPermissionService,
    create_intent,
)
from intentbus.testing.mock_ui_state import WRITE_METHODS, MockUIState

__all__ = [
    "DEFAULT_TENANT_ID",
    "WRITE_METHODS",
    "MockLogSink",
    "MockPermissionService",
    "MockUIState",
    "create_intent",
]
