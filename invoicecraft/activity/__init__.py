"""Activity logging package."""

from invoicecraft.activity.logger import ActivityLogger, Notifier, configure_logging

__all__ = ["ActivityLogger", "Notifier", "configure_logging"]
