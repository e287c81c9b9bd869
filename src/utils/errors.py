"""Error handling utilities."""


class CallRoutingError(Exception):
    """Base exception for the call routing backend."""
    pass


class ConfigurationError(CallRoutingError):
    """Required configuration is missing or invalid."""
    pass


class SupabaseError(CallRoutingError):
    """Supabase operation error."""
    pass
