"""CallLog model - one routing decision per call (call_logs table)."""

from enum import Enum
from typing import Optional
from datetime import datetime, timezone
from pydantic import BaseModel, Field


class CallStatus(str, Enum):
    """Call lifecycle status. Only ROUTING is written by the router."""
    ROUTING = "routing"
    RINGING = "ringing"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    FAILED = "failed"
    BUSY = "busy"
    NO_ANSWER = "no-answer"


class RoutingReason(str, Enum):
    """Why a particular agent was selected."""
    PHONE_NUMBER_ASSIGNMENT = "phone_number_assignment"
    BUSINESS_HOURS = "business_hours"
    AFTER_HOURS = "after_hours"
    ACTIVE_INBOUND = "active_inbound"
    REQUESTED_AGENT = "requested_agent"
    ACTIVE_OUTBOUND = "active_outbound"
    AGENT_TYPE = "agent_type"
    DEFAULT_AGENT = "default_agent"


class CallLog(BaseModel):
    """Call routing log entry."""
    call_sid: str = Field(..., description="Telephony call identifier")
    agent_id: str = Field(..., description="Selected agent ID")
    routing_reason: str = Field(..., description="Routing reason tag")
    call_status: CallStatus = Field(default=CallStatus.ROUTING, description="Call status")
    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="UTC ISO-8601 timestamp"
    )
    id: Optional[str] = None

    def to_row(self) -> dict:
        """Insert payload for the call_logs table."""
        return self.model_dump(mode="json", exclude_none=True)
