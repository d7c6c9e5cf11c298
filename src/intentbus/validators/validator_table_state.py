# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""SET_TABLE_STATE validation.

The referenced table must be mounted. A missing table is recoverable (the
view may still be mounting) and stops further table checks, since there is
no schema to check against.
"""

from __future__ import annotations

from intentbus.enums import EnumIntentErrorCode, EnumIntentType
from intentbus.models import ModelSetTableStateIntent
from intentbus.validators.base import (
    IntentValidator,
    ValidationContext,
    ValidationFinding,
)

# Allowed filter operators per declared data type
OPERATORS_BY_DATA_TYPE: dict[str, frozenset[str]] = {
    "string": frozenset({"eq", "ne", "contains", "startswith", "endswith"}),
    "number": frozenset({"eq", "ne", "lt", "le", "gt", "ge", "between"}),
    "datetime": frozenset({"eq", "ne", "lt", "le", "gt", "ge", "between"}),
    "enum": frozenset({"eq", "ne", "in", "not_in"}),
}


def _needs_loaded_rows(intent: ModelSetTableStateIntent) -> bool:
    selection = intent.payload.state_update.selection
    return selection is not None and (
        bool(selection.selected_rows) or selection.select_all or selection.select_page
    )


class TableStateValidator(IntentValidator):
    """Validator for SET_TABLE_STATE intents."""

    intent_type = EnumIntentType.SET_TABLE_STATE

    async def check_business(
        self, intent: ModelSetTableStateIntent, context: ValidationContext
    ) -> list[ValidationFinding]:
        payload = intent.payload
        schema = await context.ui.get_table_schema(payload.table_id)
        if schema is None:
            return [
                ValidationFinding(
                    code=EnumIntentErrorCode.TABLE_NOT_FOUND,
                    message=f"Table {payload.table_id!r} is not mounted",
                    field="payload.table_id",
                    recoverable=True,
                )
            ]

        findings: list[ValidationFinding] = []
        update = payload.state_update

        for index, table_filter in enumerate(update.filters or ()):
            path = f"payload.state_update.filters.{index}"
            schema_type = schema.get(table_filter.field)
            if schema_type is None:
                findings.append(
                    ValidationFinding(
                        code=EnumIntentErrorCode.UNKNOWN_TABLE_FIELD,
                        message=(
                            f"Field {table_filter.field!r} does not exist on "
                            f"table {payload.table_id!r}"
                        ),
                        field=f"{path}.field",
                    )
                )
                continue
            if schema_type != table_filter.data_type:
                findings.append(
                    ValidationFinding(
                        code=EnumIntentErrorCode.FILTER_TYPE_MISMATCH,
                        message=(
                            f"Field {table_filter.field!r} is {schema_type}, "
                            f"filter declares {table_filter.data_type}"
                        ),
                        field=f"{path}.data_type",
                    )
                )
            allowed = OPERATORS_BY_DATA_TYPE[table_filter.data_type]
            if table_filter.operator not in allowed:
                findings.append(
                    ValidationFinding(
                        code=EnumIntentErrorCode.UNSUPPORTED_OPERATOR,
                        message=(
                            f"Operator {table_filter.operator!r} is not valid for "
                            f"{table_filter.data_type} fields "
                            f"(allowed: {', '.join(sorted(allowed))})"
                        ),
                        field=f"{path}.operator",
                    )
                )

        for index, sort in enumerate(update.sorting or ()):
            if sort.field not in schema:
                findings.append(
                    ValidationFinding(
                        code=EnumIntentErrorCode.UNKNOWN_TABLE_FIELD,
                        message=(
                            f"Sort field {sort.field!r} does not exist on "
                            f"table {payload.table_id!r}"
                        ),
                        field=f"payload.state_update.sorting.{index}.field",
                    )
                )

        # Unloaded tables are reported by the contextual stage instead
        selection = update.selection
        if (
            selection is not None
            and selection.selected_rows
            and await context.ui.is_table_loaded(payload.table_id)
        ):
            loaded = await context.ui.get_loaded_row_ids(payload.table_id)
            missing = [row for row in selection.selected_rows if row not in loaded]
            if missing:
                findings.append(
                    ValidationFinding(
                        code=EnumIntentErrorCode.ROW_NOT_FOUND,
                        message=(
                            f"Rows not in the loaded dataset: {', '.join(missing)}"
                        ),
                        field="payload.state_update.selection.selected_rows",
                    )
                )

        return findings

    async def check_contextual(
        self, intent: ModelSetTableStateIntent, context: ValidationContext
    ) -> list[ValidationFinding]:
        table_id = intent.payload.table_id
        if _needs_loaded_rows(intent) and not await context.ui.is_table_loaded(
            table_id
        ):
            return [
                ValidationFinding(
                    code=EnumIntentErrorCode.TABLE_DATA_NOT_LOADED,
                    message=f"Table {table_id!r} has not finished loading its data",
                    field="payload.state_update.selection",
                    recoverable=True,
                )
            ]
        return []


__all__ = [
    "OPERATORS_BY_DATA_TYPE",
    "TableStateValidator",
]
