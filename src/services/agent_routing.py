"""Agent routing service - select which agent handles a call."""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError

from src.models.agent import Agent, AgentType, CallDirection
from src.models.call_log import CallLog, CallStatus, RoutingReason
from src.models.lookup import (
    Found,
    LookupResult,
    NotFound,
    RoutingDecision,
    StoreError,
    agent_or_none,
    first_found,
)
from src.models.phone_number import PhoneNumberAssignment
from src.services.supabase_client import (
    count_agent_calls_by_status,
    get_active_agent_by_id,
    get_agent_by_primary_number,
    get_agent_capacity,
    get_phone_number_assignment,
    insert_call_log,
    list_active_agents,
    list_active_agents_by_type,
    list_call_logs_since,
)
from src.utils.logging import (
    get_structured_logger,
    log_timing,
    mask_phone_number,
    mask_sensitive_data,
    timed,
)
from src.utils.routing_config import RoutingConfig, build_default_agent

logger = get_structured_logger(__name__)

# Applied at read time; stored rows are never updated
ROUTING_DEFAULTS: dict[str, Any] = {
    "call_direction": CallDirection.INBOUND.value,
    "timezone": "America/New_York",
    "business_hours_start": "09:00",
    "business_hours_end": "17:00",
    "business_days": [1, 2, 3, 4, 5],
}


def enhance_agent_with_defaults(agent: Optional[dict]) -> Optional[dict]:
    """
    Return a shallow copy of an agent row with missing routing fields defaulted.

    A field is missing when absent, None or an empty string. The input is
    never mutated.
    """
    if agent is None:
        return None

    enhanced = dict(agent)
    for field, default in ROUTING_DEFAULTS.items():
        value = enhanced.get(field)
        if value is None or value == "":
            enhanced[field] = list(default) if isinstance(default, list) else default
    return enhanced


def current_day_and_time(now: datetime) -> tuple[int, str]:
    """Weekday (0=Sunday .. 6=Saturday) and HH:MM for a wall-clock datetime."""
    return now.isoweekday() % 7, now.strftime("%H:%M")


def is_agent_available(agent: Agent, current_day: int, current_time: str) -> bool:
    """
    Check whether current_day/current_time fall inside the agent's business hours.

    Times are zero-padded 24-hour HH:MM strings, so string comparison orders
    them correctly. Both ends of the window are inclusive.
    """
    if current_day not in agent.business_days:
        return False
    return agent.business_hours_start <= current_time <= agent.business_hours_end


def _to_agent(row: Optional[dict]) -> Optional[Agent]:
    """Enhance and validate a registry row. Invalid rows are skipped."""
    enhanced = enhance_agent_with_defaults(row)
    if enhanced is None:
        return None
    try:
        return Agent.model_validate(enhanced)
    except ValidationError as e:
        logger.warning(
            "Skipping invalid agent row",
            agent_id=enhanced.get("id"),
            error_count=e.error_count(),
        )
        return None


def _candidates(rows: list[dict], direction: CallDirection) -> list[Agent]:
    agents = (_to_agent(row) for row in rows)
    return [a for a in agents if a is not None and a.is_active and a.handles(direction)]


class AgentRoutingService:
    """Select agents for inbound and outbound calls with an ordered fallback chain."""

    def __init__(
        self,
        default_agent: Optional[Agent] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.default_agent = default_agent or build_default_agent()
        self.clock = clock

    def _now(self) -> datetime:
        # Local wall-clock time; agent timezones are not applied
        return self.clock() if self.clock else datetime.now()

    # ------------------------------------------------------------------
    # Routing entry points
    # ------------------------------------------------------------------

    async def route_incoming_call(self, call_data: dict) -> Agent:
        """Route an incoming call. Always returns an agent."""
        decision = await self.route_incoming_call_with_reason(call_data)
        return decision.agent

    async def route_incoming_call_with_reason(self, call_data: dict) -> RoutingDecision:
        """
        Route an incoming call and report which step selected the agent.

        Steps, first success wins:
        1. agent assigned to the called number
        2. active inbound agent in business hours, else an after-hours agent
        3. newest active inbound agent
        4. the default agent
        """
        try:
            caller_number = call_data.get("From")
            called_number = call_data.get("To")
            call_sid = call_data.get("CallSid")

            logger.info(
                "Routing incoming call",
                call_sid=call_sid,
                caller=mask_phone_number(caller_number),
                called=mask_phone_number(called_number),
            )

            with log_timing("route_incoming_call", logger=logger, call_sid=call_sid):
                decision = await first_found(
                    [
                        lambda: self._find_by_phone_number(called_number),
                        lambda: self._find_by_business_hours(CallDirection.INBOUND),
                        lambda: self._find_active(CallDirection.INBOUND, RoutingReason.ACTIVE_INBOUND),
                    ],
                    self.default_agent,
                )

            if decision.reason == RoutingReason.DEFAULT_AGENT:
                logger.warning("No specific agent found, using default agent", call_sid=call_sid)

            logger.info(
                "Selected agent",
                call_sid=call_sid,
                agent_id=decision.agent.id,
                agent_name=decision.agent.name,
                agent_type=decision.agent.agent_type,
                routing_reason=decision.reason.value,
            )
            return decision

        except Exception as e:
            logger.error("Error in agent routing", error=mask_sensitive_data(str(e)), exc_info=True)
            return RoutingDecision(agent=self.default_agent, reason=RoutingReason.DEFAULT_AGENT)

    async def route_outbound_call(self, agent_id: Optional[str], call_data: Optional[dict] = None) -> Agent:
        """Route an outbound call. Always returns an agent."""
        decision = await self.route_outbound_call_with_reason(agent_id, call_data)
        return decision.agent

    async def route_outbound_call_with_reason(
        self,
        agent_id: Optional[str],
        call_data: Optional[dict] = None,
    ) -> RoutingDecision:
        """Use the requested agent if it can place outbound calls, else the newest outbound agent."""
        try:
            steps = []
            if agent_id:
                steps.append(lambda: self._find_requested_outbound(agent_id))
            steps.append(lambda: self._find_active(CallDirection.OUTBOUND, RoutingReason.ACTIVE_OUTBOUND))

            decision = await first_found(steps, self.default_agent)

            logger.info(
                "Selected outbound agent",
                requested_agent_id=agent_id,
                call_sid=(call_data or {}).get("CallSid"),
                agent_id=decision.agent.id,
                agent_name=decision.agent.name,
                routing_reason=decision.reason.value,
            )
            return decision

        except Exception as e:
            logger.error("Error in outbound agent routing", error=mask_sensitive_data(str(e)), exc_info=True)
            return RoutingDecision(agent=self.default_agent, reason=RoutingReason.DEFAULT_AGENT)

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    async def get_agent_by_phone_number(self, phone_number: str) -> Optional[Agent]:
        """Agent assigned to a phone number, or whose primary number it is."""
        return agent_or_none(await self._find_by_phone_number(phone_number))

    async def get_agent_by_business_hours(
        self,
        call_direction: CallDirection = CallDirection.INBOUND,
    ) -> Optional[Agent]:
        """Agent currently in business hours, else an after-hours agent."""
        return agent_or_none(await self._find_by_business_hours(call_direction))

    async def get_active_inbound_agent(self) -> Optional[Agent]:
        """Newest active agent that accepts inbound calls."""
        return agent_or_none(await self._find_active(CallDirection.INBOUND, RoutingReason.ACTIVE_INBOUND))

    async def get_active_outbound_agent(self) -> Optional[Agent]:
        """Newest active agent that places outbound calls."""
        return agent_or_none(await self._find_active(CallDirection.OUTBOUND, RoutingReason.ACTIVE_OUTBOUND))

    async def get_agent_by_id(self, agent_id: str) -> Optional[Agent]:
        """Active agent by ID."""
        return agent_or_none(await self._find_by_id(agent_id))

    async def get_agent_by_type(
        self,
        agent_type: str,
        call_direction: CallDirection = CallDirection.INBOUND,
    ) -> Optional[Agent]:
        """Newest active agent of a type (sales, support, ...) for a direction."""
        return agent_or_none(await self._find_by_type(agent_type, call_direction))

    async def _find_by_phone_number(self, phone_number: Optional[str]) -> LookupResult:
        if not phone_number:
            return NotFound()

        # The assignment table takes precedence over an agent's primary number
        try:
            row = await get_phone_number_assignment(phone_number)
            if row:
                assignment = PhoneNumberAssignment.model_validate(row)
                agent = _to_agent(assignment.assigned_agent)
                if agent:
                    logger.info(
                        "Found agent assigned to phone number",
                        phone_number=mask_phone_number(phone_number),
                        agent_name=agent.name,
                    )
                    return Found(agent, RoutingReason.PHONE_NUMBER_ASSIGNMENT)
        except Exception as e:
            logger.error(
                "Error getting phone number assignment",
                phone_number=mask_phone_number(phone_number),
                error=mask_sensitive_data(str(e)),
            )

        try:
            agent = _to_agent(await get_agent_by_primary_number(phone_number))
        except Exception as e:
            logger.error(
                "Error getting agent by phone number",
                phone_number=mask_phone_number(phone_number),
                error=mask_sensitive_data(str(e)),
            )
            return StoreError(e)

        if agent:
            logger.info(
                "Found agent with primary number",
                phone_number=mask_phone_number(phone_number),
                agent_name=agent.name,
            )
            return Found(agent, RoutingReason.PHONE_NUMBER_ASSIGNMENT)
        return NotFound()

    async def _find_by_business_hours(self, call_direction: CallDirection) -> LookupResult:
        current_day, current_time = current_day_and_time(self._now())

        try:
            candidates = _candidates(await list_active_agents(), call_direction)
        except Exception as e:
            logger.error("Error fetching agents for business hours", error=mask_sensitive_data(str(e)))
            return StoreError(e)

        for agent in candidates:
            if is_agent_available(agent, current_day, current_time):
                logger.info(
                    "Found agent available during business hours",
                    agent_name=agent.name,
                    current_day=current_day,
                    current_time=current_time,
                )
                return Found(agent, RoutingReason.BUSINESS_HOURS)

        after_hours = next((a for a in candidates if a.agent_type == AgentType.AFTER_HOURS), None)
        if after_hours:
            logger.info("Using after-hours agent", agent_name=after_hours.name)
            return Found(after_hours, RoutingReason.AFTER_HOURS)

        return NotFound()

    async def _find_active(self, call_direction: CallDirection, reason: RoutingReason) -> LookupResult:
        try:
            candidates = _candidates(await list_active_agents(), call_direction)
        except Exception as e:
            logger.error(
                f"Error getting active {call_direction.value} agent",
                error=mask_sensitive_data(str(e)),
            )
            return StoreError(e)

        if candidates:
            logger.info(f"Found active {call_direction.value} agent", agent_name=candidates[0].name)
            return Found(candidates[0], reason)
        return NotFound()

    async def _find_by_id(self, agent_id: str) -> LookupResult:
        try:
            agent = _to_agent(await get_active_agent_by_id(agent_id))
        except Exception as e:
            logger.error("Error getting agent by ID", agent_id=agent_id, error=mask_sensitive_data(str(e)))
            return StoreError(e)

        if agent:
            logger.info("Found agent by ID", agent_id=agent_id, agent_name=agent.name)
            return Found(agent, RoutingReason.REQUESTED_AGENT)
        return NotFound()

    async def _find_requested_outbound(self, agent_id: str) -> LookupResult:
        result = await self._find_by_id(agent_id)
        if not isinstance(result, Found):
            return result

        agent = result.agent
        if agent.is_active and agent.handles(CallDirection.OUTBOUND):
            return result

        logger.info(
            "Requested agent cannot place outbound calls",
            agent_id=agent_id,
            call_direction=agent.call_direction,
        )
        return NotFound()

    async def _find_by_type(self, agent_type: str, call_direction: CallDirection) -> LookupResult:
        try:
            candidates = _candidates(await list_active_agents_by_type(agent_type), call_direction)
        except Exception as e:
            logger.error("Error getting agent by type", agent_type=agent_type, error=mask_sensitive_data(str(e)))
            return StoreError(e)

        if candidates:
            logger.info("Found agent by type", agent_type=agent_type, agent_name=candidates[0].name)
            return Found(candidates[0], RoutingReason.AGENT_TYPE)
        return NotFound()

    # ------------------------------------------------------------------
    # Capacity, routing log, stats
    # ------------------------------------------------------------------

    async def can_agent_handle_call(self, agent_id: str) -> bool:
        """
        Check an agent's in-progress call count against its limit.

        Fails open: if the store cannot be queried the call is allowed. The
        check is advisory; two concurrent callers can both pass it.
        """
        try:
            capacity = await get_agent_capacity(agent_id)
        except Exception as e:
            logger.error("Error checking agent capacity", agent_id=agent_id, error=mask_sensitive_data(str(e)))
            return True

        if not capacity:
            logger.warning("Capacity check for unknown agent", agent_id=agent_id)
            return False

        # 0 and None both fall back to the configured limit
        max_calls = capacity.get("max_concurrent_calls") or RoutingConfig.DEFAULT_MAX_CONCURRENT_CALLS

        try:
            current_calls = await count_agent_calls_by_status(agent_id, CallStatus.IN_PROGRESS.value)
        except Exception as e:
            logger.error("Error checking active calls", agent_id=agent_id, error=mask_sensitive_data(str(e)))
            return True

        logger.info(
            f"Agent {agent_id}: {current_calls}/{max_calls} concurrent calls",
            agent_id=agent_id,
            current_calls=current_calls,
            max_calls=max_calls,
        )
        return current_calls < max_calls

    async def log_call_routing(
        self,
        call_sid: str,
        agent_id: str,
        routing_reason: Union[RoutingReason, str],
    ) -> None:
        """Record a routing decision. Errors are logged and dropped."""
        if isinstance(routing_reason, RoutingReason):
            routing_reason = routing_reason.value

        try:
            entry = CallLog(call_sid=call_sid, agent_id=agent_id, routing_reason=routing_reason)
            await insert_call_log(entry.to_row())
        except Exception as e:
            logger.error(
                "Error logging call routing",
                call_sid=call_sid,
                agent_id=agent_id,
                error=mask_sensitive_data(str(e)),
            )

    @timed("get_routing_stats", logger=logger)
    async def get_routing_stats(self) -> list[dict]:
        """Call logs from the trailing window joined with agent name and type."""
        since = datetime.now(timezone.utc) - timedelta(hours=RoutingConfig.ROUTING_STATS_WINDOW_HOURS)
        try:
            return await list_call_logs_since(since.isoformat())
        except Exception as e:
            logger.error("Error getting routing stats", error=mask_sensitive_data(str(e)))
            return []


# Global routing service instance
_routing_service: Optional[AgentRoutingService] = None


def get_agent_routing_service() -> AgentRoutingService:
    """Get or create the global routing service."""
    global _routing_service
    if _routing_service is None:
        _routing_service = AgentRoutingService(default_agent=build_default_agent())
    return _routing_service
