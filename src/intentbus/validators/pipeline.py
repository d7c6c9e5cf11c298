# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Validator registry keyed by intent type.

The pipeline is the only place intent types are looked up by name. An
envelope whose type has no registered validator is rejected with
INTENT_TYPE_UNSUPPORTED without consulting any collaborator.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable

from intentbus.enums import EnumIntentErrorCode, EnumValidationStage
from intentbus.models import (
    ModelIntentEnvelope,
    ModelValidationError,
    ModelValidationErrorContext,
    ModelValidationResult,
)
from intentbus.validators.base import IntentValidator, ValidationContext
from intentbus.validators.validator_client_action import ClientActionValidator
from intentbus.validators.validator_navigate import NavigateValidator
from intentbus.validators.validator_open_panel import OpenPanelValidator
from intentbus.validators.validator_table_state import TableStateValidator
from intentbus.validators.validator_theme import ThemeValidator

logger = logging.getLogger(__name__)


def default_validators() -> list[IntentValidator]:
    """One validator per built-in intent type."""
    return [
        NavigateValidator(),
        TableStateValidator(),
        OpenPanelValidator(),
        ThemeValidator(),
        ClientActionValidator(),
    ]


class ValidatorPipeline:
    """Dispatches envelopes to the validator registered for their type.

    Args:
        validators: Validators to register. Defaults to the five built-in
            validators.
    """

    def __init__(self, validators: Iterable[IntentValidator] | None = None) -> None:
        self._validators: dict[str, IntentValidator] = {}
        for validator in default_validators() if validators is None else validators:
            self.register(validator)

    def register(self, validator: IntentValidator) -> None:
        """Register ``validator`` for its ``intent_type``, replacing any other."""
        self._validators[str(validator.intent_type)] = validator

    @property
    def supported_types(self) -> list[str]:
        """Registered intent type names, sorted."""
        return sorted(self._validators)

    def is_supported(self, intent_type: str) -> bool:
        return intent_type in self._validators

    async def validate(
        self,
        envelope: ModelIntentEnvelope,
        context: ValidationContext,
    ) -> ModelValidationResult:
        """Validate ``envelope`` with the validator registered for its type."""
        validator = self._validators.get(envelope.type)
        if validator is None:
            return self._unsupported(envelope, context)
        return await validator.validate(envelope, context)

    def _unsupported(
        self,
        envelope: ModelIntentEnvelope,
        context: ValidationContext,
    ) -> ModelValidationResult:
        started = time.perf_counter()
        error = ModelValidationError(
            code=EnumIntentErrorCode.INTENT_TYPE_UNSUPPORTED,
            message=(
                f"Intent type {envelope.type!r} is not supported "
                f"(supported: {', '.join(self.supported_types)})"
            ),
            field="type",
            recoverable=False,
            context=ModelValidationErrorContext(
                intent_id=envelope.intent_id,
                intent_type=envelope.type,
                validation_stage=EnumValidationStage.SCHEMA,
                timestamp=context.clock(),
            ),
        )
        return ModelValidationResult(
            valid=False,
            errors=[error],
            performance_ms=(time.perf_counter() - started) * 1000,
            failed_stage=EnumValidationStage.SCHEMA,
        )


__all__ = [
    "ValidatorPipeline",
    "default_validators",
]
