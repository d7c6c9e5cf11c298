# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Data contracts for the intent bus.

All models are frozen Pydantic v2 models:

    from intentbus.models import (
        ModelIntentEnvelope,
        ModelIntentLogEntry,
        ModelValidationResult,
    )
"""

from intentbus.models.model_execution import ModelExecutionResult
from intentbus.models.model_intent import (
    ModelClientActionParameters,
    ModelClientActionPayload,
    ModelIntent,
    ModelIntentEnvelope,
    ModelIntentMetadata,
    ModelNavigateIntent,
    ModelNavigatePayload,
    ModelOpenModalIntent,
    ModelOpenPanelPayload,
    ModelPanelConfig,
    ModelPanelContext,
    ModelRunClientActionIntent,
    ModelSafetyChecks,
    ModelSetTableStateIntent,
    ModelSetThemeIntent,
    ModelTableFilter,
    ModelTablePagination,
    ModelTableSelection,
    ModelTableSort,
    ModelTableStatePayload,
    ModelTableStateUpdate,
    ModelThemePayload,
    ModelThemeUpdates,
    parse_intent,
)
from intentbus.models.model_log_entry import (
    ModelIntentLogEntry,
    ModelLogError,
    ModelLogMetadata,
    ModelPerformanceMetrics,
)
from intentbus.models.model_origin import (
    ModelAIContext,
    ModelOriginDetails,
    ModelSystemContext,
    ModelUserContext,
)
from intentbus.models.model_snapshot import ModelUIStateSnapshot, ModelViewport
from intentbus.models.model_validation import (
    ModelValidationError,
    ModelValidationErrorContext,
    ModelValidationResult,
)

__all__ = [
    "ModelAIContext",
    "ModelClientActionParameters",
    "ModelClientActionPayload",
    "ModelExecutionResult",
    "ModelIntent",
    "ModelIntentEnvelope",
    "ModelIntentLogEntry",
    "ModelIntentMetadata",
    "ModelLogError",
    "ModelLogMetadata",
    "ModelNavigateIntent",
    "ModelNavigatePayload",
    "ModelOpenModalIntent",
    "ModelOpenPanelPayload",
    "ModelOriginDetails",
    "ModelPanelConfig",
    "ModelPanelContext",
    "ModelPerformanceMetrics",
    "ModelRunClientActionIntent",
    "ModelSafetyChecks",
    "ModelSetTableStateIntent",
    "ModelSetThemeIntent",
    "ModelSystemContext",
    "ModelTableFilter",
    "ModelTablePagination",
    "ModelTableSelection",
    "ModelTableSort",
    "ModelTableStatePayload",
    "ModelTableStateUpdate",
    "ModelThemePayload",
    "ModelThemeUpdates",
    "ModelUIStateSnapshot",
    "ModelUserContext",
    "ModelValidationError",
    "ModelValidationErrorContext",
    "ModelValidationResult",
    "ModelViewport",
    "parse_intent",
]
