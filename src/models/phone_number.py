"""PhoneNumberAssignment model - maps a phone number to at most one agent."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class PhoneNumberAssignment(BaseModel):
    """Row of the phone_numbers table joined with its agent."""
    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)

    phone_number: str = Field(..., description="E.164 phone number")
    agent_id: Optional[str] = Field(None, description="Assigned agent ID")
    is_active: bool = Field(default=True, description="Whether the assignment is in effect")
    agent: Optional[dict] = Field(None, alias="ai_agents", description="Joined ai_agents row")
    created_at: Optional[str] = None

    @property
    def assigned_agent(self) -> Optional[dict]:
        """The joined agent row if the assigned agent is active."""
        if self.agent and self.agent.get("is_active"):
            return self.agent
        return None
