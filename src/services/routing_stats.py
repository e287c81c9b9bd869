"""Aggregate call routing logs for reporting."""

from collections import Counter
from typing import Any, Iterable


def summarize_routing_stats(rows: Iterable[dict]) -> dict[str, Any]:
    """
    Summarize call log rows joined with their agent.

    Returns totals per routing reason and per agent. Rows without an agent
    join (deleted agents, the built-in default agent) are counted under
    their agent_id with no name or type.
    """
    by_reason: Counter = Counter()
    by_agent: dict[str, dict[str, Any]] = {}
    total = 0

    for row in rows:
        total += 1
        by_reason[row.get("routing_reason") or "unknown"] += 1

        agent_id = str(row.get("agent_id") or "unknown")
        agent = row.get("ai_agents") or {}
        entry = by_agent.setdefault(agent_id, {
            "name": agent.get("name"),
            "agent_type": agent.get("agent_type"),
            "count": 0,
        })
        entry["count"] += 1

    return {
        "total": total,
        "by_reason": dict(by_reason),
        "by_agent": by_agent,
    }
