"""Routing statistics endpoint (trailing 24 hours by default)."""

import asyncio
from src.services.agent_routing import get_agent_routing_service
from src.services.routing_stats import summarize_routing_stats
from src.utils.logging import get_structured_logger, setup_logging
from src.utils.webhook import json_response

setup_logging()
logger = get_structured_logger(__name__)


async def collect_stats() -> dict:
    rows = await get_agent_routing_service().get_routing_stats()
    return {"ok": True, **summarize_routing_stats(rows)}


def handler(request):
    """Return routing counts per reason and per agent."""
    try:
        return json_response(200, asyncio.run(collect_stats()))
    except Exception as e:
        logger.error("Error collecting routing stats", error=str(e), exc_info=True)
        return json_response(500, {"ok": False, "error": str(e)})
