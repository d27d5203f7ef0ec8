"""
Logging configuration for the order record store

Every record that reaches the root handler is stamped with the service name and
environment, so module loggers (logging.getLogger(__name__)) need no adapter.
"""
import logging
import sys
from typing import Optional
from pythonjsonlogger import jsonlogger


class ServiceContextFilter(logging.Filter):
    """Attach service and environment to each record"""

    def __init__(self, service_name: str, environment: Optional[str] = None):
        super().__init__()
        self.service_name = service_name
        self.environment = environment or "unknown"

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        record.environment = self.environment
        return True


def build_formatter(log_format: str) -> logging.Formatter:
    """JSON formatter for production, plain text for local runs"""
    if log_format.lower() == "json":
        formatter = jsonlogger.JsonFormatter(
            fmt="%(asctime)s %(service)s %(environment)s %(name)s %(levelname)s %(message)s",
            rename_fields={
                "asctime": "timestamp",
                "name": "logger",
                "levelname": "level"
            }
        )
        formatter.default_time_format = "%Y-%m-%dT%H:%M:%S"
        formatter.default_msec_format = "%s.%03dZ"
        return formatter

    return logging.Formatter(
        fmt="%(asctime)s - [%(service)s] %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


def setup_logging(
    service_name: str,
    log_level: str = "INFO",
    log_format: str = "json",
    environment: Optional[str] = None
) -> logging.Handler:
    """
    Route all logging to stdout, tagged with the service

    Args:
        service_name: Value of the ``service`` field on every record
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Format (json or text)
        environment: Value of the ``environment`` field on every record

    Returns:
        The installed stdout handler
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level.upper()))

    # Replace handlers from earlier setup calls
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(ServiceContextFilter(service_name, environment))
    handler.setFormatter(build_formatter(log_format))
    root.addHandler(handler)

    logging.getLogger(__name__).info(f"Logging initialized for {service_name} at level {log_level}")

    return handler
