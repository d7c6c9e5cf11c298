# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Four-stage intent validators and the per-type registry.

Usage:
    from intentbus.validators import ValidationContext, ValidatorPipeline

    pipeline = ValidatorPipeline()
    context = ValidationContext(ui=ui, permissions=permissions)
    result = await pipeline.validate(envelope, context)
"""

from intentbus.validators.base import (
    IntentValidator,
    ValidationContext,
    ValidationFinding,
    schema_findings,
)
from intentbus.validators.pipeline import ValidatorPipeline, default_validators
from intentbus.validators.rate_limiter import OriginRateLimiter
from intentbus.validators.validator_client_action import (
    SUPPORTED_CLIENT_ACTIONS,
    ClientActionValidator,
    is_safe_filename,
)
from intentbus.validators.validator_navigate import (
    CROSS_INDUSTRY_PERMISSION,
    ROUTE_PATTERN,
    NavigateValidator,
    route_industry,
)
from intentbus.validators.validator_open_panel import (
    ALLOWED_PANEL_TYPES,
    FORBIDDEN_PANEL_TYPES,
    OpenPanelValidator,
)
from intentbus.validators.validator_table_state import (
    OPERATORS_BY_DATA_TYPE,
    TableStateValidator,
)
from intentbus.validators.validator_theme import ThemeValidator

__all__ = [
    "ALLOWED_PANEL_TYPES",
    "CROSS_INDUSTRY_PERMISSION",
    "FORBIDDEN_PANEL_TYPES",
    "OPERATORS_BY_DATA_TYPE",
    "ROUTE_PATTERN",
    "SUPPORTED_CLIENT_ACTIONS",
    "ClientActionValidator",
    "IntentValidator",
    "NavigateValidator",
    "OpenPanelValidator",
    "OriginRateLimiter",
    "TableStateValidator",
    "ThemeValidator",
    "ValidationContext",
    "ValidationFinding",
    "ValidatorPipeline",
    "default_validators",
    "is_safe_filename",
    "route_industry",
    "schema_findings",
]
