"""Shared pytest fixtures and configuration."""

import os
import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("LOG_FORMAT", "text")

from tests.utils.helpers import MONDAY_NOON, SATURDAY_NOON

REGISTRY_FUNCTIONS = (
    "get_phone_number_assignment",
    "get_agent_by_primary_number",
    "get_active_agent_by_id",
    "list_active_agents",
    "list_active_agents_by_type",
    "get_agent_capacity",
    "count_agent_calls_by_status",
    "insert_call_log",
    "list_call_logs_since",
)


@pytest.fixture
def registry():
    """
    Patch the store helpers used by the routing service.

    Every helper starts out reporting "not found"; tests set return_value or
    side_effect on the attribute they care about.
    """
    patchers = {
        name: patch(f"src.services.agent_routing.{name}", new_callable=AsyncMock)
        for name in REGISTRY_FUNCTIONS
    }
    mocks = {name: p.start() for name, p in patchers.items()}

    mocks["get_phone_number_assignment"].return_value = None
    mocks["get_agent_by_primary_number"].return_value = None
    mocks["get_active_agent_by_id"].return_value = None
    mocks["list_active_agents"].return_value = []
    mocks["list_active_agents_by_type"].return_value = []
    mocks["get_agent_capacity"].return_value = None
    mocks["count_agent_calls_by_status"].return_value = 0
    mocks["insert_call_log"].return_value = None
    mocks["list_call_logs_since"].return_value = []

    yield SimpleNamespace(**mocks)

    for p in patchers.values():
        p.stop()


@pytest.fixture
def default_agent():
    """Default agent built with fixed voice settings."""
    from src.utils.routing_config import build_default_agent

    return build_default_agent(voice_name="Puck", language_code="en-US")


@pytest.fixture
def routing_service(default_agent):
    """Routing service whose clock reads Monday noon."""
    from src.services.agent_routing import AgentRoutingService

    return AgentRoutingService(default_agent=default_agent, clock=lambda: MONDAY_NOON)


@pytest.fixture
def weekend_routing_service(default_agent):
    """Routing service whose clock reads Saturday noon."""
    from src.services.agent_routing import AgentRoutingService

    return AgentRoutingService(default_agent=default_agent, clock=lambda: SATURDAY_NOON)


@pytest.fixture
def sample_incoming_call():
    """Twilio voice webhook fields for an incoming call."""
    return {
        "From": "+15551234567",
        "To": "+15557654321",
        "CallSid": "CA1234567890abcdef1234567890abcdef",
    }

