"""Incoming call webhook endpoint - select the agent for an inbound call."""

import asyncio
from src.services.agent_routing import get_agent_routing_service
from src.utils.logging import correlation_context, get_structured_logger, setup_logging
from src.utils.webhook import json_response, parse_call_data

setup_logging()
logger = get_structured_logger(__name__)


async def route_and_log(call_data: dict) -> dict:
    """Route the call and record the decision."""
    service = get_agent_routing_service()
    call_sid = call_data.get("CallSid")

    with correlation_context(call_sid or None):
        decision = await service.route_incoming_call_with_reason(call_data)
        if call_sid:
            await service.log_call_routing(call_sid, decision.agent.id, decision.reason)

    return {
        "ok": True,
        "call_sid": call_sid,
        "routing_reason": decision.reason.value,
        "agent": decision.agent.model_dump(mode="json"),
    }


def handler(request):
    """
    Route an incoming call.

    Called by the telephony webhook with Twilio's From/To/CallSid fields.
    """
    try:
        call_data = parse_call_data(request)
    except ValueError as e:
        return json_response(400, {"ok": False, "error": str(e)})

    try:
        return json_response(200, asyncio.run(route_and_log(call_data)))
    except Exception as e:
        logger.error("Error handling incoming call", error=str(e), exc_info=True)
        return json_response(500, {"ok": False, "error": str(e)})
