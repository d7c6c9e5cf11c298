"""
Pytest configuration and fixtures for intentbus tests.

Shared collaborators: an in-memory UI with one mounted, loaded table, a
permission service, a collecting log sink, and a bus wired to all three.
"""

from datetime import UTC, datetime

import pytest

from intentbus import IntentBus
from intentbus.testing import MockLogSink, MockPermissionService, MockUIState
from intentbus.validators import ValidationContext

# =========================================================================
# Sample UI Data
# =========================================================================

WORK_ORDERS_SCHEMA = {
    "status": "enum",
    "title": "string",
    "priority": "number",
    "created_at": "datetime",
}


@pytest.fixture
def fixed_now() -> datetime:
    """Deterministic timestamp for intents and findings."""
    return datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def ui() -> MockUIState:
    """UI on a home-services route with the work-orders table mounted."""
    return MockUIState(
        route="/hs/app/dashboard",
        tables={"work-orders": dict(WORK_ORDERS_SCHEMA)},
        loaded_rows={"work-orders": {"wo-1", "wo-2", "wo-3"}},
        entities={("work_order", "wo-1")},
        mounted_components={"work-orders-page", "work-orders"},
    )


@pytest.fixture
def permissions() -> MockPermissionService:
    """Principal allowed to export the current page only."""
    return MockPermissionService({"data_access.current_page"})


@pytest.fixture
def sink() -> MockLogSink:
    return MockLogSink()


@pytest.fixture
def context(ui: MockUIState, permissions: MockPermissionService) -> ValidationContext:
    """Validation context without rate limiting or in-flight tracking."""
    return ValidationContext(ui=ui, permissions=permissions)


@pytest.fixture
def bus(
    ui: MockUIState, permissions: MockPermissionService, sink: MockLogSink
) -> IntentBus:
    """Fully wired bus with default settings."""
    return IntentBus(ui, permissions, sinks=[sink])
