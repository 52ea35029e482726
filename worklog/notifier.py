"""
Desktop Notification Service

Tells the user when a work session or break starts or ends.
"""

from typing import Protocol

from plyer import notification

from .errors import NotifierError
from .logging_setup import get_logger


class Notifier(Protocol):
    def notify(self, title: str, message: str) -> None: ...


class DesktopNotifier:
    """Sends desktop notifications through plyer."""

    def __init__(self, app_name: str = "worklog", timeout: int = 10, enabled: bool = True):
        """
        Initialize the notifier.

        Args:
            app_name: Application name shown in the notification
            timeout: Seconds the notification stays visible
            enabled: When False, notifications are only logged
        """
        self.logger = get_logger(__name__)
        self.app_name = app_name
        self.timeout = timeout
        self.enabled = enabled

    def notify(self, title: str, message: str) -> None:
        """
        Show a notification.

        Raises:
            NotifierError: if the platform backend fails
        """
        if not self.enabled:
            self.logger.debug(f"Notification suppressed: {title} - {message}")
            return

        try:
            notification.notify(
                title=f"{self.app_name}: {title}",
                message=message,
                app_name=self.app_name,
                timeout=self.timeout,
            )
        except Exception as e:
            raise NotifierError(f"failed to show notification '{title}': {e}") from e
