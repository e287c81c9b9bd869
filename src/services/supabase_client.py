"""Supabase client wrapper with async context manager support."""

import os
from typing import Optional
from supabase import create_client, Client
from supabase.client import ClientOptions
from src.utils.errors import ConfigurationError, SupabaseError
import logging

logger = logging.getLogger(__name__)

AGENTS_TABLE = "ai_agents"
PHONE_NUMBERS_TABLE = "phone_numbers"
CALL_LOGS_TABLE = "call_logs"

# Global client instance (singleton pattern)
_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Get or create Supabase client singleton."""
    global _client

    if _client is None:
        url = os.environ.get("SUPABASE_URL")
        key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")

        if not url or not key:
            raise ConfigurationError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        options = ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )

        _client = create_client(url, key, options)
        logger.info("Supabase client initialized", extra={"url": url})

    return _client


class SupabaseClient:
    """Async context manager for Supabase client."""

    def __init__(self):
        self.client: Optional[Client] = None

    async def __aenter__(self) -> Client:
        """Enter async context."""
        self.client = get_supabase_client()
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context."""
        if exc_type:
            logger.error(
                "Supabase operation error",
                extra={"error": str(exc_val), "type": exc_type.__name__}
            )
        return False


def _first(result) -> Optional[dict]:
    return result.data[0] if result.data and len(result.data) > 0 else None


# Phone number assignments
async def get_phone_number_assignment(phone_number: str) -> Optional[dict]:
    """Get the active assignment for a phone number, joined with its agent."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table(PHONE_NUMBERS_TABLE)
                .select(f"*, {AGENTS_TABLE}(*)")
                .eq("phone_number", phone_number)
                .eq("is_active", True)
                .limit(1)
                .execute()
            )
            return _first(result)
        except Exception as e:
            raise SupabaseError(f"Failed to get phone number assignment: {e}")


# ai_agents table operations
async def get_agent_by_primary_number(phone_number: str) -> Optional[dict]:
    """Get the active agent whose own primary number is phone_number."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table(AGENTS_TABLE)
                .select("*")
                .eq("twilio_phone_number", phone_number)
                .eq("is_active", True)
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
            return _first(result)
        except Exception as e:
            raise SupabaseError(f"Failed to get agent by primary number: {e}")


async def get_active_agent_by_id(agent_id: str) -> Optional[dict]:
    """Get an active agent by ID."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table(AGENTS_TABLE)
                .select("*")
                .eq("id", agent_id)
                .eq("is_active", True)
                .execute()
            )
            return _first(result)
        except Exception as e:
            raise SupabaseError(f"Failed to get agent by id: {e}")


async def list_active_agents() -> list[dict]:
    """List active agents, newest first."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table(AGENTS_TABLE)
                .select("*")
                .eq("is_active", True)
                .order("created_at", desc=True)
                .execute()
            )
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to list active agents: {e}")


async def list_active_agents_by_type(agent_type: str) -> list[dict]:
    """List active agents of one type, newest first."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table(AGENTS_TABLE)
                .select("*")
                .eq("agent_type", agent_type)
                .eq("is_active", True)
                .order("created_at", desc=True)
                .execute()
            )
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to list agents by type: {e}")


async def get_agent_capacity(agent_id: str) -> Optional[dict]:
    """Get an agent's concurrency limit."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table(AGENTS_TABLE)
                .select("id, max_concurrent_calls")
                .eq("id", agent_id)
                .execute()
            )
            return _first(result)
        except Exception as e:
            raise SupabaseError(f"Failed to get agent capacity: {e}")


# call_logs table operations
async def count_agent_calls_by_status(agent_id: str, call_status: str) -> int:
    """Count an agent's call logs in the given status."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table(CALL_LOGS_TABLE)
                .select("id", count="exact")
                .eq("agent_id", agent_id)
                .eq("call_status", call_status)
                .execute()
            )
            if result.count is not None:
                return result.count
            return len(result.data) if result.data else 0
        except Exception as e:
            raise SupabaseError(f"Failed to count calls: {e}")


async def insert_call_log(log_data: dict) -> Optional[dict]:
    """Insert a call log row."""
    async with SupabaseClient() as client:
        try:
            result = client.table(CALL_LOGS_TABLE).insert(log_data).execute()
            return _first(result)
        except Exception as e:
            raise SupabaseError(f"Failed to insert call log: {e}")


async def list_call_logs_since(since_iso: str) -> list[dict]:
    """List call logs created at or after since_iso, joined with agent name and type."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table(CALL_LOGS_TABLE)
                .select(f"agent_id, routing_reason, call_status, created_at, {AGENTS_TABLE}(name, agent_type)")
                .gte("created_at", since_iso)
                .order("created_at", desc=True)
                .execute()
            )
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to list call logs: {e}")
