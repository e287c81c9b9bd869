"""Lookup results for agent registry queries."""

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence, Union

from src.models.agent import Agent
from src.models.call_log import RoutingReason


@dataclass(frozen=True)
class Found:
    """A lookup produced an agent."""
    agent: Agent
    reason: Optional[RoutingReason] = None


@dataclass(frozen=True)
class NotFound:
    """No matching record. A normal step in the fallback chain."""
    pass


@dataclass(frozen=True)
class StoreError:
    """The store could not be queried."""
    error: Exception


LookupResult = Union[Found, NotFound, StoreError]


@dataclass(frozen=True)
class RoutingDecision:
    """Selected agent plus the reason it was selected."""
    agent: Agent
    reason: RoutingReason


def agent_or_none(result: LookupResult) -> Optional[Agent]:
    """Collapse a lookup result to the agent or None."""
    if isinstance(result, Found):
        return result.agent
    return None


async def first_found(
    steps: Sequence[Callable[[], Awaitable[LookupResult]]],
    default: Agent,
) -> RoutingDecision:
    """
    Run lookup steps in order and stop at the first Found.

    NotFound and StoreError both mean "try the next step". When every step
    misses, the default agent is selected.
    """
    for step in steps:
        result = await step()
        if isinstance(result, Found):
            return RoutingDecision(
                agent=result.agent,
                reason=result.reason or RoutingReason.DEFAULT_AGENT,
            )
    return RoutingDecision(agent=default, reason=RoutingReason.DEFAULT_AGENT)
