"""
Notifier
========
Desktop notification shown when the monitored runs finish, via plyer.

Notifications are best effort: a machine without a notification daemon
still gets the full report on stdout, so failures are logged, not raised.
"""
import logging

from plyer import notification

from ghactions.core.constants import APP_NAME

logger = logging.getLogger(__name__)


class DesktopNotifier:
    """
    Sends one desktop notification per finished session.

    Args:
        repo: Repository name, shown in the notification title.
        timeout: Seconds the notification stays visible (platform-dependent).
    """

    def __init__(self, repo: str, timeout: int = 10) -> None:
        self.title = f"{APP_NAME} ({repo})"
        self._timeout = timeout

    def notify(self, message: str) -> bool:
        """Show ``message``; returns False if the platform refused it."""
        try:
            notification.notify(
                title=self.title,
                message=message,
                app_name=APP_NAME,
                timeout=self._timeout,
            )
        except Exception as exc:
            logger.warning("Desktop notification failed: %s", exc)
            return False
        logger.debug("Desktop notification sent: %s", message)
        return True
