"""Logging setup for the call routing handlers, driven by LOG_* environment variables."""

import os
import logging
import sys
from pythonjsonlogger import jsonlogger

# Client libraries that log every Supabase request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "hpack", "supabase", "postgrest")


class LoggingConfig:
    """Logging settings read once at import."""

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json").lower()
    LOG_MASK_SENSITIVE = os.environ.get("LOG_MASK_SENSITIVE", "true").lower() == "true"
    LOG_SLOW_OPERATION_THRESHOLD_MS = int(os.environ.get("LOG_SLOW_OPERATION_THRESHOLD_MS", "1000"))

    @classmethod
    def level(cls) -> int:
        return getattr(logging, cls.LOG_LEVEL, logging.INFO)

    @classmethod
    def formatter(cls) -> logging.Formatter:
        """JSON lines for the platform log drain, plain text for local runs."""
        if cls.LOG_FORMAT == "json":
            return jsonlogger.JsonFormatter(
                "%(timestamp)s %(levelname)s %(name)s %(message)s",
                rename_fields={"levelname": "level", "name": "logger"},
                timestamp=True,
            )
        return logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")

    @classmethod
    def setup_logging(cls) -> None:
        """
        Install a single stdout handler on the root logger.

        Every handler module calls this at import, so a handler installed by
        an earlier call is replaced rather than duplicated. Handlers added by
        anything else are left alone.
        """
        root_logger = logging.getLogger()
        root_logger.setLevel(cls.level())

        for existing in list(root_logger.handlers):
            if getattr(existing, "_call_routing", False):
                root_logger.removeHandler(existing)

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(cls.level())
        handler.setFormatter(cls.formatter())
        handler._call_routing = True
        root_logger.addHandler(handler)

        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)
