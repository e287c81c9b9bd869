"""Tests for outbound call routing."""

import pytest
from src.models.call_log import RoutingReason
from src.utils.errors import SupabaseError
from tests.utils.factories import create_agent_row


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize("direction", ["outbound", "both"])
async def test_outbound_requested_agent(routing_service, registry, direction):
    """Test that a capable requested agent is used."""
    requested = create_agent_row(call_direction=direction)
    registry.get_active_agent_by_id.return_value = requested

    decision = await routing_service.route_outbound_call_with_reason(requested["id"], {})

    assert decision.agent.id == requested["id"]
    assert decision.reason == RoutingReason.REQUESTED_AGENT
    registry.get_active_agent_by_id.assert_awaited_once_with(requested["id"])
    registry.list_active_agents.assert_not_awaited()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_outbound_requested_inbound_agent_falls_through(routing_service, registry):
    """Test that an inbound-only requested agent is not used for outbound calls."""
    inbound = create_agent_row(name="Receptionist", call_direction="inbound")
    dialer = create_agent_row(name="Dialer", call_direction="outbound")
    registry.get_active_agent_by_id.return_value = inbound
    registry.list_active_agents.return_value = [inbound, dialer]

    decision = await routing_service.route_outbound_call_with_reason(inbound["id"], {})

    assert decision.agent.id == dialer["id"]
    assert decision.reason == RoutingReason.ACTIVE_OUTBOUND


@pytest.mark.unit
@pytest.mark.asyncio
async def test_outbound_requested_agent_missing_falls_through(routing_service, registry):
    """Test that an unknown agent id falls through to the general search."""
    dialer = create_agent_row(call_direction="outbound")
    registry.list_active_agents.return_value = [dialer]

    agent = await routing_service.route_outbound_call("missing-agent", {})

    assert agent.id == dialer["id"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_outbound_without_agent_id(routing_service, registry):
    """Test the newest outbound-capable agent without a request."""
    newest = create_agent_row(call_direction="both", created_days_ago=0)
    older = create_agent_row(call_direction="outbound", created_days_ago=4)
    registry.list_active_agents.return_value = [newest, older]

    agent = await routing_service.route_outbound_call(None)

    assert agent.id == newest["id"]
    registry.get_active_agent_by_id.assert_not_awaited()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_outbound_no_capable_agent_returns_default(routing_service, registry, default_agent):
    """Test that the default agent is used when no agent places outbound calls."""
    registry.list_active_agents.return_value = [create_agent_row(call_direction="inbound")]

    decision = await routing_service.route_outbound_call_with_reason("agent-1", {})

    assert decision.agent is default_agent
    assert decision.reason == RoutingReason.DEFAULT_AGENT


@pytest.mark.unit
@pytest.mark.asyncio
async def test_outbound_store_errors_return_default(routing_service, registry, default_agent):
    """Test that outbound routing never raises."""
    registry.get_active_agent_by_id.side_effect = SupabaseError("down")
    registry.list_active_agents.side_effect = SupabaseError("down")

    agent = await routing_service.route_outbound_call("agent-1", {"CallSid": "CA1"})

    assert agent is default_agent


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_agent_by_id(routing_service, registry):
    """Test lookup by ID applies routing defaults."""
    row = create_agent_row()
    registry.get_active_agent_by_id.return_value = row

    agent = await routing_service.get_agent_by_id(row["id"])

    assert agent.id == row["id"]
    assert agent.business_days == [1, 2, 3, 4, 5]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_agent_by_id_error_returns_none(routing_service, registry):
    """Test that lookup by ID swallows store errors."""
    registry.get_active_agent_by_id.side_effect = SupabaseError("down")

    assert await routing_service.get_agent_by_id("agent-1") is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_active_outbound_agent_none(routing_service, registry):
    """Test that the outbound helper returns None with no candidates."""
    registry.list_active_agents.return_value = []

    assert await routing_service.get_active_outbound_agent() is None
