"""Test helper functions."""

import json
from datetime import datetime
from typing import Any, Dict, Optional, Tuple
from unittest.mock import MagicMock
from urllib.parse import urlencode

# 2024-12-09 is a Monday, 2024-12-14 a Saturday
MONDAY_NOON = datetime(2024, 12, 9, 12, 0)
SATURDAY_NOON = datetime(2024, 12, 14, 12, 0)


def create_query_mock(
    data: Optional[list] = None,
    count: Optional[int] = None,
    error: Optional[Exception] = None,
) -> Tuple[MagicMock, MagicMock]:
    """
    Create a mocked Supabase client whose query builder chains to itself.

    Returns (client, query); query.execute() yields a response with data and count.
    """
    query = MagicMock()
    for method in ("select", "eq", "gte", "order", "limit", "insert"):
        getattr(query, method).return_value = query

    if error is not None:
        query.execute.side_effect = error
    else:
        query.execute.return_value = MagicMock(data=data, count=count)

    client = MagicMock()
    client.table.return_value = query
    return client, query


def create_webhook_request(
    body: Any = None,
    method: str = "POST",
    path: str = "/api/calls/incoming",
    query: Optional[Dict[str, str]] = None,
    form: bool = True,
) -> Dict[str, Any]:
    """Create a serverless request object, form-encoded like Twilio by default."""
    if body is None:
        body = {}

    if form:
        content_type = "application/x-www-form-urlencoded"
        encoded = urlencode(body)
    else:
        content_type = "application/json"
        encoded = json.dumps(body) if isinstance(body, dict) else body

    return {
        "method": method,
        "path": path,
        "headers": {"content-type": content_type},
        "body": encoded,
        "query": query or {},
    }
