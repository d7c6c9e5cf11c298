# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Intent envelope and typed intent variants.

Callers submit a ``ModelIntentEnvelope``: a loosely-typed value whose ``type``
is any string and whose ``payload`` is an unparsed mapping. This keeps
unrecognized intent types representable, so the bus can reject them
explicitly instead of failing at construction time.

Schema validation (stage 1) converts an envelope into one of the typed
variants via ``parse_intent``. The typed variants form a discriminated union
on ``type``; every later stage and every executor works on typed intents.

Schema Rules:
    - frozen=True (intents are never mutated after creation)
    - extra="forbid" (reject unknown fields)
    - No datetime.now() defaults (callers inject timestamps)
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from intentbus.enums import EnumIntentOrigin

# =============================================================================
# Envelope
# =============================================================================


class ModelIntentMetadata(BaseModel):
    """Flow and tenancy identifiers attached to an intent.

    Attributes:
        session_id: Browser tab / session identifier.
        tenant_id: Tenant the intent acts on behalf of.
        user_id: Human user the session belongs to.
        correlation_id: Groups intents belonging to one logical flow.
        provenance: Raw origin hints (model id, prompt, UI element, process
            name, ...). Read only by the origin tagger, never by validators.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", from_attributes=True)

    session_id: str | None = Field(default=None, description="Session identifier")
    tenant_id: str | None = Field(default=None, description="Tenant identifier")
    user_id: str | None = Field(default=None, description="User identifier")
    correlation_id: str | None = Field(
        default=None,
        description="Logical flow identifier; defaults to the intent_id",
    )
    provenance: dict[str, Any] = Field(
        default_factory=dict,
        description="Raw origin hints consumed by the origin tagger",
    )


class ModelIntentEnvelope(BaseModel):
    """A typed UI-change request as submitted by a caller.

    Attributes:
        type: Intent type name. Any string is accepted here; unsupported
            types are rejected by the validator pipeline.
        intent_id: Unique identifier of this intent.
        timestamp: When the caller created the intent (injected by caller).
        origin: AI, USER or SYSTEM.
        payload: Variant-specific payload, parsed during schema validation.
        metadata: Flow and tenancy identifiers.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", from_attributes=True)

    type: str = Field(..., description="Intent type name")
    intent_id: str = Field(..., min_length=1, description="Unique intent identifier")
    timestamp: datetime = Field(..., description="Creation time, injected by caller")
    origin: EnumIntentOrigin = Field(..., description="Provenance of the intent")
    payload: dict[str, Any] = Field(
        default_factory=dict, description="Variant-specific payload"
    )
    metadata: ModelIntentMetadata = Field(
        default_factory=ModelIntentMetadata,
        description="Flow and tenancy identifiers",
    )

    @property
    def correlation_id(self) -> str:
        """Correlation group of this intent, falling back to ``intent_id``."""
        return self.metadata.correlation_id or self.intent_id


# =============================================================================
# NAVIGATE
# =============================================================================


class ModelNavigatePayload(BaseModel):
    """Payload of a NAVIGATE intent."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    route: str = Field(..., min_length=1, description="Target route or external URL")
    params: dict[str, str] = Field(default_factory=dict)
    query: dict[str, str] = Field(default_factory=dict)
    replace: bool = Field(default=False, description="Replace the history entry")
    external: bool = Field(default=False, description="Leave the application")


# =============================================================================
# SET_TABLE_STATE
# =============================================================================


class ModelTableFilter(BaseModel):
    """A single column filter."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    field: str = Field(..., min_length=1)
    operator: str = Field(..., min_length=1)
    value: Any = None
    data_type: Literal["string", "number", "enum", "datetime"]


class ModelTableSort(BaseModel):
    """A single sort key."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    field: str = Field(..., min_length=1)
    direction: Literal["asc", "desc"] = "asc"


class ModelTablePagination(BaseModel):
    """Pagination window."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    page: int | None = Field(default=None, ge=1)
    page_size: int | None = Field(default=None, ge=1, le=1000)
    offset: int | None = Field(default=None, ge=0)


class ModelTableSelection(BaseModel):
    """Row selection."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    selected_rows: list[str] = Field(default_factory=list)
    select_all: bool = False
    select_page: bool = False


class ModelTableStateUpdate(BaseModel):
    """The table-state change. At least one section must be present."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    filters: list[ModelTableFilter] | None = None
    sorting: list[ModelTableSort] | None = None
    pagination: ModelTablePagination | None = None
    selection: ModelTableSelection | None = None

    @model_validator(mode="after")
    def _require_one_section(self) -> ModelTableStateUpdate:
        if (
            self.filters is None
            and self.sorting is None
            and self.pagination is None
            and self.selection is None
        ):
            msg = "state_update must contain filters, sorting, pagination or selection"
            raise ValueError(msg)
        return self


class ModelTableStatePayload(BaseModel):
    """Payload of a SET_TABLE_STATE intent."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    table_id: str = Field(..., min_length=1)
    state_update: ModelTableStateUpdate
    merge_strategy: Literal["replace", "merge", "append"] = "merge"


# =============================================================================
# OPEN_MODAL
# =============================================================================


class ModelPanelContext(BaseModel):
    """Entity context a panel is opened for."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    entity_id: str | None = None
    entity_type: str | None = None
    parent_context: str | None = None
    action: str | None = None


class ModelPanelConfig(BaseModel):
    """Presentation hints for an inline panel."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    width: Literal["sm", "md", "lg", "xl", "full"] | None = None
    position: Literal["left", "right", "below", "inline"] | None = None
    closable: bool = True
    auto_focus: bool = True


class ModelOpenPanelPayload(BaseModel):
    """Payload of an OPEN_MODAL intent.

    ``panel_type`` is a free string at schema level; the allow-list (which
    excludes every overlay style) is enforced by the validator so the
    rejection carries a dedicated code.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    panel_type: str = Field(..., min_length=1)
    panel_id: str = Field(..., pattern=r"^[A-Za-z0-9][A-Za-z0-9_-]*$")
    content_type: Literal[
        "form", "details", "list", "filters", "actions", "confirmation", "help"
    ]
    context: ModelPanelContext | None = None
    panel_config: ModelPanelConfig | None = None
    data: Any = None


# =============================================================================
# SET_THEME
# =============================================================================


class ModelThemeUpdates(BaseModel):
    """Theme attributes to change. At least one must be set."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    color_scheme: Literal["light", "dark", "auto"] | None = None
    density: Literal["compact", "comfortable", "spacious"] | None = None
    font_size: Literal["small", "medium", "large"] | None = None
    motion: Literal["full", "reduced", "none"] | None = None
    high_contrast: bool | None = None
    industry_branding: bool | None = None

    @model_validator(mode="after")
    def _require_one_update(self) -> ModelThemeUpdates:
        if not self.model_dump(exclude_none=True):
            msg = "theme_updates must set at least one attribute"
            raise ValueError(msg)
        return self


class ModelThemePayload(BaseModel):
    """Payload of a SET_THEME intent."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    theme_updates: ModelThemeUpdates
    scope: Literal["session", "user", "device"] = "session"
    apply_immediately: bool = True


# =============================================================================
# RUN_CLIENT_ACTION
# =============================================================================


class ModelClientActionParameters(BaseModel):
    """Parameters of a client action."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    target: str | None = None
    format: str | None = None
    data: Any = None
    options: dict[str, Any] = Field(default_factory=dict)


class ModelSafetyChecks(BaseModel):
    """Safety declarations attached to a client action."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    requires_user_consent: bool = False
    data_access_level: Literal["none", "current_page", "user_data", "tenant_data"] = (
        "none"
    )
    external_interaction: bool = False


class ModelClientActionPayload(BaseModel):
    """Payload of a RUN_CLIENT_ACTION intent."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    action: str = Field(..., min_length=1)
    parameters: ModelClientActionParameters = Field(
        default_factory=ModelClientActionParameters
    )
    safety_checks: ModelSafetyChecks = Field(default_factory=ModelSafetyChecks)


# =============================================================================
# Typed intents (discriminated union)
# =============================================================================


class _ModelTypedIntentBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", from_attributes=True)

    intent_id: str = Field(..., min_length=1)
    timestamp: datetime
    origin: EnumIntentOrigin
    metadata: ModelIntentMetadata = Field(default_factory=ModelIntentMetadata)

    @property
    def correlation_id(self) -> str:
        return self.metadata.correlation_id or self.intent_id


class ModelNavigateIntent(_ModelTypedIntentBase):
    type: Literal["NAVIGATE"]
    payload: ModelNavigatePayload


class ModelSetTableStateIntent(_ModelTypedIntentBase):
    type: Literal["SET_TABLE_STATE"]
    payload: ModelTableStatePayload


class ModelOpenModalIntent(_ModelTypedIntentBase):
    type: Literal["OPEN_MODAL"]
    payload: ModelOpenPanelPayload


class ModelSetThemeIntent(_ModelTypedIntentBase):
    type: Literal["SET_THEME"]
    payload: ModelThemePayload


class ModelRunClientActionIntent(_ModelTypedIntentBase):
    type: Literal["RUN_CLIENT_ACTION"]
    payload: ModelClientActionPayload


# Pydantic selects the variant from the ``type`` value
ModelIntent = Annotated[
    ModelNavigateIntent
    | ModelSetTableStateIntent
    | ModelOpenModalIntent
    | ModelSetThemeIntent
    | ModelRunClientActionIntent,
    Field(discriminator="type"),
]

_INTENT_ADAPTER: TypeAdapter[ModelIntent] = TypeAdapter(ModelIntent)


def parse_intent(envelope: ModelIntentEnvelope) -> ModelIntent:
    """Parse an envelope into its typed variant.

    Args:
        envelope: The caller-submitted intent.

    Returns:
        The typed intent.

    Raises:
        pydantic.ValidationError: If the envelope does not satisfy the
            variant schema (or its type is not a known variant).
    """
    return _INTENT_ADAPTER.validate_python(
        {
            "type": envelope.type,
            "intent_id": envelope.intent_id,
            "timestamp": envelope.timestamp,
            "origin": envelope.origin,
            "metadata": envelope.metadata,
            "payload": envelope.payload,
        }
    )


__all__ = [
    "ModelClientActionParameters",
    "ModelClientActionPayload",
    "ModelIntent",
    "ModelIntentEnvelope",
    "ModelIntentMetadata",
    "ModelNavigateIntent",
    "ModelNavigatePayload",
    "ModelOpenModalIntent",
    "ModelOpenPanelPayload",
    "ModelPanelConfig",
    "ModelPanelContext",
    "ModelRunClientActionIntent",
    "ModelSafetyChecks",
    "ModelSetTableStateIntent",
    "ModelSetThemeIntent",
    "ModelTableFilter",
    "ModelTablePagination",
    "ModelTableSelection",
    "ModelTableSort",
    "ModelTableStatePayload",
    "ModelTableStateUpdate",
    "ModelThemePayload",
    "ModelThemeUpdates",
    "parse_intent",
]
