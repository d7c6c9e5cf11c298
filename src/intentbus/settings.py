# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Intent bus configuration.

Rate-limit budgets, retry backoff, executor timeouts and monitoring
thresholds, loaded from the environment. Defaults are conservative.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from intentbus.enums import EnumIntentOrigin

DEFAULT_BACKOFF_MS: tuple[int, ...] = (100, 250, 500, 1000, 2000)


class ModelRateLimits(BaseModel):
    """Independent per-origin budgets over a sliding window.

    Attributes:
        window_seconds: Length of the sliding window.
        budgets: Maximum intents admitted per origin per window.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", from_attributes=True)

    window_seconds: float = Field(default=60.0, gt=0.0)
    budgets: dict[EnumIntentOrigin, int] = Field(
        default_factory=lambda: {
            EnumIntentOrigin.AI: 30,
            EnumIntentOrigin.USER: 120,
            EnumIntentOrigin.SYSTEM: 600,
        }
    )

    def budget_for(self, origin: EnumIntentOrigin) -> int:
        """Return the budget for ``origin`` (0 if none configured)."""
        return self.budgets.get(origin, 0)


class ModelRetryConfig(BaseModel):
    """Retry cap and backoff schedule."""

    model_config = ConfigDict(frozen=True, extra="forbid", from_attributes=True)

    max_attempts: int = Field(default=5, ge=1, le=10)
    backoff_ms: tuple[int, ...] = Field(default=DEFAULT_BACKOFF_MS, min_length=1)


class IntentBusSettings(BaseSettings):
    """Pydantic Settings for the intent bus, loaded from environment.

    Environment variables:
        INTENT_BUS_RATE_LIMIT_AI_PER_WINDOW: int (default 30)
        INTENT_BUS_RATE_LIMIT_USER_PER_WINDOW: int (default 120)
        INTENT_BUS_RATE_LIMIT_SYSTEM_PER_WINDOW: int (default 600)
        INTENT_BUS_RATE_LIMIT_WINDOW_SECONDS: float (default 60.0)
        INTENT_BUS_RETRY_MAX_ATTEMPTS: int (default 5)
        INTENT_BUS_RETRY_BACKOFF_MS: JSON list of ints (default [100,250,500,1000,2000])
        INTENT_BUS_EXECUTOR_TIMEOUT_SECONDS: float (default 5.0)
        INTENT_BUS_RECORD_INTERMEDIATE_STATES: bool (default false)
        INTENT_BUS_VALIDATION_BUDGET_MS: float (default 50.0)
        INTENT_BUS_REJECTION_RATE_THRESHOLD: float (default 0.5)
    """

    model_config = SettingsConfigDict(
        env_prefix="INTENT_BUS_",
        extra="ignore",
    )

    rate_limit_ai_per_window: int = Field(default=30, ge=0)
    rate_limit_user_per_window: int = Field(default=120, ge=0)
    rate_limit_system_per_window: int = Field(default=600, ge=0)
    rate_limit_window_seconds: float = Field(default=60.0, gt=0.0)

    retry_max_attempts: int = Field(default=5, ge=1, le=10)
    retry_backoff_ms: list[int] = Field(
        default_factory=lambda: list(DEFAULT_BACKOFF_MS)
    )

    executor_timeout_seconds: float = Field(
        default=5.0,
        gt=0.0,
        description="Executor-local timeout around each UI collaborator call",
    )
    record_intermediate_states: bool = Field(
        default=False,
        description="Also persist pending/executing entries in the entry history",
    )

    validation_budget_ms: float = Field(
        default=50.0,
        gt=0.0,
        description="Validation time above which the issue detector flags an entry",
    )
    rejection_rate_threshold: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Per-origin rejection ratio above which an issue is raised",
    )

    @field_validator("retry_backoff_ms")
    @classmethod
    def _backoff_positive(cls, value: list[int]) -> list[int]:
        if not value or any(step < 0 for step in value):
            msg = "retry_backoff_ms must be a non-empty list of non-negative ints"
            raise ValueError(msg)
        return value

    @classmethod
    def from_yaml(cls, path: str | Path) -> IntentBusSettings:
        """Load settings from a YAML file.

        Top-level keys are settings fields; a ``defaults`` section, when
        present, is used instead. Fields missing from the file still come
        from the environment.

        Args:
            path: Path to the YAML configuration file.

        Returns:
            IntentBusSettings instance.

        Raises:
            FileNotFoundError: If the file does not exist.
            yaml.YAMLError: If YAML parsing fails.
            pydantic.ValidationError: If a value is invalid.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}
        if isinstance(data, dict) and "defaults" in data:
            data = data["defaults"] or {}
        if not isinstance(data, dict):
            msg = f"Configuration file {path} must contain a mapping"
            raise ValueError(msg)

        return cls(**data)

    def to_rate_limits(self) -> ModelRateLimits:
        """Convert settings to a frozen ModelRateLimits instance."""
        return ModelRateLimits(
            window_seconds=self.rate_limit_window_seconds,
            budgets={
                EnumIntentOrigin.AI: self.rate_limit_ai_per_window,
                EnumIntentOrigin.USER: self.rate_limit_user_per_window,
                EnumIntentOrigin.SYSTEM: self.rate_limit_system_per_window,
            },
        )

    def to_retry_config(self) -> ModelRetryConfig:
        """Convert settings to a frozen ModelRetryConfig instance."""
        return ModelRetryConfig(
            max_attempts=self.retry_max_attempts,
            backoff_ms=tuple(self.retry_backoff_ms),
        )


__all__ = [
    "DEFAULT_BACKOFF_MS",
    "IntentBusSettings",
    "ModelRateLimits",
    "ModelRetryConfig",
]
