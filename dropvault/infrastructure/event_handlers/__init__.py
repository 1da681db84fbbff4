"""Infrastructure event handlers for domain events."""

from .logging_handler import LoggingEventHandler

__all__ = ["LoggingEventHandler"]
