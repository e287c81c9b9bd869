"""Agent model - a configured conversational handler for calls (ai_agents table)."""

from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator


class CallDirection(str, Enum):
    """Which calls an agent may handle."""
    INBOUND = "inbound"
    OUTBOUND = "outbound"
    BOTH = "both"


class AgentType:
    """Well-known agent_type values. The column itself is free-form."""
    GENERAL = "general"
    AFTER_HOURS = "after_hours"


class Agent(BaseModel):
    """Agent record as returned to callers, with routing defaults applied."""
    model_config = ConfigDict(extra="allow", frozen=True, coerce_numbers_to_str=True)

    id: str = Field(..., description="Agent ID")
    name: str = Field(..., description="Display name")
    agent_type: str = Field(default=AgentType.GENERAL, description="Agent type, e.g. general, after_hours, sales")
    is_active: bool = Field(default=True, description="Whether the agent may receive calls")
    call_direction: Union[CallDirection, str] = Field(
        default=CallDirection.INBOUND,
        description="inbound, outbound or both; other stored values handle neither"
    )
    max_concurrent_calls: Optional[int] = Field(None, ge=0, description="Concurrent call limit")
    voice_name: Optional[str] = Field(None, description="TTS voice name")
    language_code: Optional[str] = Field(None, description="BCP-47 language code")
    system_instruction: Optional[str] = Field(None, description="System prompt for the conversation")
    greeting: Optional[str] = Field(None, description="Opening line")
    twilio_phone_number: Optional[str] = Field(None, description="Agent's primary phone number")
    timezone: str = Field(default="America/New_York", description="IANA timezone (informational)")
    business_hours_start: str = Field(default="09:00", description="Start of business hours (HH:MM)")
    business_hours_end: str = Field(default="17:00", description="End of business hours (HH:MM)")
    business_days: list[int] = Field(
        default_factory=lambda: [1, 2, 3, 4, 5],
        description="Business days, 0=Sunday .. 6=Saturday"
    )
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("call_direction", mode="before")
    @classmethod
    def known_direction(cls, value):
        try:
            return CallDirection(value)
        except ValueError:
            return value

    def handles(self, direction: CallDirection) -> bool:
        """True if this agent accepts calls in the given direction."""
        return self.call_direction in (direction, CallDirection.BOTH)
