"""
Structured logging: get_logger() for module loggers, short_address() for log fields.
"""

from backend_wrapped.wrapped_logging.logger import get_logger, short_address

__all__ = ["get_logger", "short_address"]
