"""Logging setup for the serverless handlers, driven by environment variables."""

import os
import logging
import sys
from pythonjsonlogger import jsonlogger

SERVICE_NAME = "realty-crm"

# Client libraries that log every HTTP round-trip to Supabase at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "hpack", "supabase", "postgrest")


class LoggingConfig:
    """Log level, format, masking and slow-operation threshold."""

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json").lower()
    LOG_MASK_SENSITIVE = os.environ.get("LOG_MASK_SENSITIVE", "true").lower() == "true"
    LOG_SLOW_OPERATION_THRESHOLD_MS = int(os.environ.get("LOG_SLOW_OPERATION_THRESHOLD_MS", "1000"))

    @classmethod
    def level(cls) -> int:
        return getattr(logging, cls.LOG_LEVEL, logging.INFO)

    @classmethod
    def build_formatter(cls) -> logging.Formatter:
        """JSON records tagged with the service name, or plain text for local runs."""
        if cls.LOG_FORMAT == "json":
            return jsonlogger.JsonFormatter(
                "%(timestamp)s %(levelname)s %(name)s %(message)s",
                timestamp=True,
                static_fields={"service": SERVICE_NAME},
            )
        return logging.Formatter(f"%(asctime)s {SERVICE_NAME} %(levelname)s %(name)s: %(message)s")

    @classmethod
    def setup_logging(cls) -> None:
        """Send every record to stdout through a single handler."""
        root_logger = logging.getLogger()
        root_logger.setLevel(cls.level())
        root_logger.handlers.clear()

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(cls.level())
        handler.setFormatter(cls.build_formatter())
        root_logger.addHandler(handler)

        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
