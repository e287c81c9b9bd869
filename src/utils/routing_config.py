"""Routing configuration and the built-in default agent."""

import os
from typing import Optional

from src.models.agent import Agent, CallDirection

DEFAULT_SYSTEM_INSTRUCTION = (
    "You are a professional AI assistant for customer service calls. "
    "IMPORTANT: You MUST speak first immediately when the call connects. "
    "Start with a warm greeting like \"Hello! Thank you for calling. How can I help you today?\" "
    "Be helpful, polite, and efficient. Always initiate the conversation and maintain "
    "a friendly, professional tone throughout the call."
)

DEFAULT_GREETING = "Hello! Thank you for calling. How can I help you today?"


class RoutingConfig:
    """Environment-sourced routing configuration, read once at import."""

    VOICE_NAME = os.environ.get("VOICE_NAME") or "Puck"
    LANGUAGE_CODE = os.environ.get("LANGUAGE_CODE") or "en-US"
    SYSTEM_INSTRUCTION = os.environ.get("SYSTEM_INSTRUCTION") or DEFAULT_SYSTEM_INSTRUCTION
    # Applied when an agent row has no max_concurrent_calls
    DEFAULT_MAX_CONCURRENT_CALLS = int(os.environ.get("DEFAULT_MAX_CONCURRENT_CALLS", "5"))
    ROUTING_STATS_WINDOW_HOURS = int(os.environ.get("ROUTING_STATS_WINDOW_HOURS", "24"))


def build_default_agent(
    voice_name: Optional[str] = None,
    language_code: Optional[str] = None,
    system_instruction: Optional[str] = None,
) -> Agent:
    """
    Build the terminal fallback agent.

    Explicit arguments win over RoutingConfig; the returned Agent is frozen.
    """
    return Agent(
        id="default",
        name="Default AI Agent",
        agent_type="general",
        voice_name=voice_name or RoutingConfig.VOICE_NAME,
        language_code=language_code or RoutingConfig.LANGUAGE_CODE,
        system_instruction=system_instruction or RoutingConfig.SYSTEM_INSTRUCTION,
        greeting=DEFAULT_GREETING,
        is_active=True,
        max_concurrent_calls=10,
        call_direction=CallDirection.INBOUND,
        timezone="America/New_York",
        business_hours_start="09:00",
        business_hours_end="17:00",
        business_days=[1, 2, 3, 4, 5],
    )
