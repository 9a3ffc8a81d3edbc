"""Session-complete notifications.

The controller only knows the ``Notifier`` interface. Delivery is best effort:
a notifier that can't show anything just reports itself unavailable.
"""

from abc import ABC, abstractmethod
from wt.common.logger import log
from wt.core.models import EntryType

NOTIFY_TITLE = "Time's Up!"
WORK_COMPLETE_BODY = "Work session completed! Time for a break."
BREAK_COMPLETE_BODY = "Break time is over! Ready to work?"


def completion_message(entry_type):
    """Return ``(title, body)`` for a session of ``entry_type`` reaching its target."""
    if entry_type is EntryType.WORK:
        return NOTIFY_TITLE, WORK_COMPLETE_BODY
    return NOTIFY_TITLE, BREAK_COMPLETE_BODY


class Notifier(ABC):

    @property
    def available(self):
        return True

    @abstractmethod
    def notify(self, title, body):
        ...


class NullNotifier(Notifier):

    @property
    def available(self):
        return False

    def notify(self, title, body):
        pass


class RecordingNotifier(Notifier):
    """Keeps every notification in ``sent``; handy for headless hosts and tests."""

    def __init__(self):
        self.sent = []

    def notify(self, title, body):
        self.sent.append((title, body))


class TrayNotifier(Notifier):
    """Shows notifications as system tray balloons.

    Needs a QApplication. When the platform has no system tray the notifier is
    unavailable, which the controller treats like a denied permission.
    """

    def __init__(self, icon=None, timeout_ms=10000):
        from PySide6.QtGui import QIcon
        from PySide6.QtWidgets import QSystemTrayIcon

        self._supported = QSystemTrayIcon.isSystemTrayAvailable()
        self._timeout_ms = timeout_ms
        self._tray = None
        if self._supported:
            self._tray = QSystemTrayIcon(icon or QIcon())
            self._tray.show()
        else:
            log.info("System tray not available, notifications will be skipped.")

    @property
    def available(self):
        return self._supported and self._tray is not None

    def notify(self, title, body):
        from PySide6.QtWidgets import QSystemTrayIcon

        if not self.available:
            return
        self._tray.showMessage(title, body, QSystemTrayIcon.MessageIcon.Information, self._timeout_ms)
