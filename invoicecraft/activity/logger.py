"""
Activity Logger

Every significant ledger action is reported here. The logger:
- Always writes the event to the structured local log
- Forwards user-facing events to a notifier (the UI's toast)
- Never lets a failing notifier break the action that triggered it
"""

import logging
from typing import Callable, Optional

import structlog

from invoicecraft.models.activity import ActivityEvent, ActivitySeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

Notifier = Callable[[str], None]


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger at `level`."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))


class ActivityLogger:
    """
    Central activity reporting service.

    Reports events to:
    1. Structured local log (for debugging)
    2. The notifier, when the event is meant for the user
    """

    def __init__(self, notifier: Optional[Notifier] = None):
        """
        Initialize activity logger.

        Args:
            notifier: Callback receiving user-facing messages.
                     If None, events are only logged.
        """
        self._notifier = notifier
        self._logger = structlog.get_logger("invoicecraft.activity")

    async def log(self, event: ActivityEvent) -> None:
        log_dict = event.to_log_dict()

        if event.severity == ActivitySeverity.ERROR:
            self._logger.error("activity_event", **log_dict)
        elif event.severity == ActivitySeverity.WARNING:
            self._logger.warning("activity_event", **log_dict)
        elif event.severity == ActivitySeverity.DEBUG:
            self._logger.debug("activity_event", **log_dict)
        else:
            self._logger.info("activity_event", **log_dict)

        if event.notify_user and self._notifier:
            try:
                self._notifier(event.message)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "activity_notify_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
