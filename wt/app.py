from wt.common.logger import log
from wt.core.notify import NullNotifier, TrayNotifier
from wt.core.session import SessionController
from wt.core.store import JsonStore
from wt.core.ticker import ManualTicker, QtTicker


# Reads the desktop's color scheme through Qt. Only meaningful once a QGuiApplication exists, otherwise light.
def system_prefers_dark():
    from PySide6.QtCore import QCoreApplication, Qt

    app = QCoreApplication.instance()
    if app is None or not app.inherits("QGuiApplication"):
        return False
    from PySide6.QtGui import QGuiApplication

    try:
        return QGuiApplication.styleHints().colorScheme() == Qt.ColorScheme.Dark
    except AttributeError:
        # colorScheme() arrived in Qt 6.5
        log.debug("Qt build has no color scheme hint, assuming light mode")
        return False

# Wires up a controller for a host UI. With qt=True the tick comes from a QTimer and notifications go to the system
# tray, so a QApplication has to exist first.
def create_controller(store_path=None, qt=True):
    store = JsonStore(store_path)
    if qt:
        ticker = QtTicker()
        notifier = TrayNotifier()
    else:
        ticker = ManualTicker()
        notifier = NullNotifier()
    controller = SessionController(store, ticker=ticker, notifier=notifier, prefers_dark=system_prefers_dark)
    log.info(f"Created session controller (qt={qt}) backed by '{store.path}'")
    return controller
