"""
Structured logging for Stellar Explorer.

JSON logs with timestamp, level and event_type. Use get_logger() in all
modules for aggregation-friendly output.
"""

from stellar_explorer.explorer_logging.logger import bind_request, get_logger

__all__ = ["bind_request", "get_logger"]
