from abc import ABC, abstractmethod
from PySide6.QtCore import QTimer
from wt.common.logger import log

TICK_INTERVAL_MS = 1000

# A once-per-second tick source. The session controller owns one and starts/stops it on its own state transitions.
class Ticker(ABC):

    def __init__(self):
        self._callback = None

    def connect(self, callback):
        self._callback = callback

    @property
    @abstractmethod
    def is_active(self):
        ...

    @abstractmethod
    def start(self):
        ...

    @abstractmethod
    def stop(self):
        ...

# Headless ticker that only ticks when told to. Used by tests and by hosts that drive time themselves.
class ManualTicker(Ticker):

    def __init__(self):
        super().__init__()
        self._active = False

    @property
    def is_active(self):
        return self._active

    def start(self):
        self._active = True

    def stop(self):
        self._active = False

    # Delivers `count` ticks, stopping early if the callback deactivated the ticker.
    def fire(self, count=1):
        delivered = 0
        for _ in range(count):
            if not self._active or self._callback is None:
                break
            self._callback()
            delivered += 1
        return delivered

# Ticker backed by a QTimer, needs a running Qt event loop to actually fire.
class QtTicker(Ticker):

    def __init__(self, interval_ms=TICK_INTERVAL_MS):
        super().__init__()
        self._timer = QTimer()
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._on_timeout)

    @property
    def is_active(self):
        return self._timer.isActive()

    def start(self):
        if not self._timer.isActive():
            self._timer.start()
            log.debug(f"Started QtTicker at {self._timer.interval()}ms")

    def stop(self):
        if self._timer.isActive():
            self._timer.stop()
            log.debug("Stopped QtTicker")

    def _on_timeout(self):
        # A timeout already queued when stop() ran must not reach the callback
        if self._timer.isActive() and self._callback is not None:
            self._callback()
