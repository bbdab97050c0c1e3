# src/services/notifier.py

"""Notification sinks for price-drop alerts."""

import logging
from abc import ABC, abstractmethod

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from src.models.notification import Notification

logger = logging.getLogger("price_watch.notify")


class NotificationSink(ABC):
    """Fire-and-forget destination for alerts."""

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        """Deliver *notification*; must not raise."""
        ...


class ConsoleNotifier(NotificationSink):
    """Prints alerts as a rich panel on stderr."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)

    def notify(self, notification: Notification) -> None:
        logger.info(
            "Notification: %s | %s",
            notification.title,
            notification.body,
        )
        try:
            self.console.print(
                Panel(
                    Text(notification.body),
                    title=f"[bold green]{notification.title}[/bold green]",
                    expand=False,
                )
            )
        except Exception:
            logger.error("Failed to print notification", exc_info=True)
