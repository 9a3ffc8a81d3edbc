"""Session state machine and the controller that owns the application state.

There is at most one current session. It lives in ``AppState.current`` until it
is stopped, at which point it is stamped and appended to the entry list, or
reset, in which case it is thrown away.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from wt.common.logger import log
from wt.common.setup import PATHS
from wt.core import config
from wt.core.export import export_filename, write_csv
from wt.core.models import EntryType, TimeEntry
from wt.core.notify import NullNotifier, completion_message
from wt.core.settings import SettingsStore
from wt.core.statistics import TimeRange, compute_statistics
from wt.core.ticker import ManualTicker
from wt.util.misc import now_local


class TimerStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


@dataclass
class AppState:
    owner_id: str
    entries: list[TimeEntry] = field(default_factory=list)
    current: TimeEntry | None = None
    elapsed: int = 0
    status: TimerStatus = TimerStatus.IDLE


class SessionController:
    """Single owner of the timer state, the settings store and the tick source.

    All operations are synchronous. The ticker calls ``tick()`` once a second
    while a session is running; every transition out of RUNNING stops the
    ticker before touching any other state.
    """

    def __init__(self, store, ticker=None, notifier=None, clock=None, prefers_dark=None):
        self._store = store
        self._clock = clock or now_local
        owner_id = config.get_owner_id(store)
        self.settings_store = SettingsStore(store, owner_id, prefers_dark)
        self.state = AppState(owner_id=owner_id, entries=config.load_entries(store, owner_id))
        self._last_id = max((entry.id for entry in self.state.entries), default=0)

        self.ticker = ticker or ManualTicker()
        self.ticker.connect(self.tick)
        self.notifier = notifier or NullNotifier()
        log.debug(f"Initialized session controller for owner '{owner_id}' with {len(self.state.entries)} entries")

    #region === Read-only views ===

    @property
    def settings(self):
        return self.settings_store.settings

    @property
    def status(self):
        return self.state.status

    @property
    def is_running(self):
        return self.state.status is TimerStatus.RUNNING

    @property
    def elapsed(self):
        return self.state.elapsed

    @property
    def current_session(self):
        return self.state.current

    @property
    def entries(self):
        return list(self.state.entries)

    #endregion === Read-only views ===

    #region === Transitions ===

    def start(self):
        state = self.state
        if state.status is TimerStatus.RUNNING:
            log.debug("start() ignored, timer already running")
            return state.current
        if state.status is TimerStatus.PAUSED:
            state.status = TimerStatus.RUNNING
            self.ticker.start()
            log.debug(f"Resumed {state.current.type.value} session {state.current.id} at {state.elapsed}s")
            return state.current

        state.current = self._new_entry(EntryType.WORK)
        state.elapsed = 0
        state.status = TimerStatus.RUNNING
        self.ticker.start()
        log.debug(f"Started work session {state.current.id}")
        return state.current

    def pause(self):
        state = self.state
        if state.status is not TimerStatus.RUNNING:
            log.debug(f"pause() ignored, timer is {state.status.value}")
            return
        self.ticker.stop()
        state.status = TimerStatus.PAUSED
        log.debug(f"Paused session {state.current.id} at {state.elapsed}s")

    def stop(self):
        """Finalize the current session and append it to the entry list.

        Returns the finished entry, or None when there was nothing to stop.
        """
        state = self.state
        if state.current is None:
            log.debug("stop() ignored, no current session")
            return None
        self.ticker.stop()

        finished = replace(state.current, end_time=self._clock(), duration=state.elapsed)
        state.entries.append(finished)
        state.current = None
        state.elapsed = 0
        state.status = TimerStatus.IDLE
        log.debug(f"Stopped {finished.type.value} session {finished.id} after {finished.duration}s")

        self._persist_entries()
        return finished

    # Throws away the current session without saving it.
    def reset(self):
        self.ticker.stop()
        state = self.state
        discarded = state.current
        state.current = None
        state.elapsed = 0
        state.status = TimerStatus.IDLE
        if discarded is not None:
            log.debug(f"Reset timer, discarded {discarded.type.value} session {discarded.id}")
        else:
            log.debug("Reset timer with no current session")

    def start_break(self):
        self.stop()
        state = self.state
        state.current = self._new_entry(EntryType.BREAK)
        state.elapsed = 0
        state.status = TimerStatus.RUNNING
        self.ticker.start()
        log.debug(f"Started break session {state.current.id}")
        return state.current

    def add_note(self, text):
        if self.state.current is None:
            log.debug("add_note() ignored, no current session")
            return False
        self.state.current.notes = text
        return True

    #endregion === Transitions ===

    #region === Ticking and auto-completion ===

    def tick(self):
        state = self.state
        # A stray tick after pause/stop/reset must not move anything
        if state.status is not TimerStatus.RUNNING or state.current is None:
            return
        state.elapsed += 1
        self._check_completion()

    def _check_completion(self):
        current = self.state.current
        target = self.settings.target_duration(current.type)
        if self.state.elapsed < target:
            return

        entry_type = current.type
        log.info(f"{entry_type.value} session {current.id} reached its target of {target}s")
        self._send_notification(entry_type)

        settings = self.settings
        if entry_type is EntryType.WORK and settings.auto_start_breaks:
            self.stop()
            self.start_break()
        elif entry_type.is_break and settings.auto_start_work:
            self.stop()
            self.start()
        else:
            self.stop()

    def _send_notification(self, entry_type):
        if not self.settings.notifications:
            return
        if not self.notifier.available:
            log.debug("Notifier unavailable, skipping session complete notification")
            return
        title, body = completion_message(entry_type)
        try:
            self.notifier.notify(title, body)
        except Exception:
            log.warning("Failed to deliver session complete notification.", exc_info=True)

    #endregion === Ticking and auto-completion ===

    #region === Settings, statistics and export ===

    def update_settings(self, new_settings):
        return self._write_settings(self.settings_store.update, new_settings)

    def toggle_dark_mode(self):
        return self._write_settings(self.settings_store.toggle_dark_mode)

    # The store swaps its record in before writing, so a failed write still leaves the new settings in effect.
    def _write_settings(self, operation, *args):
        try:
            return operation(*args)
        except OSError:
            log.warning("Settings changed but could not be written to the store.", exc_info=True)
            return self.settings_store.settings

    def clear_statistics(self, confirm):
        """Erase every finished entry for the owner.

        ``confirm`` is the caller's answer to "are you sure?", either a bool or
        a zero-argument callable that asks. Returns True when entries were cleared.
        """
        answer = confirm() if callable(confirm) else confirm
        if not answer:
            log.info("Clear statistics cancelled by caller.")
            return False
        self.state.entries = []
        try:
            config.clear_entries(self._store, self.state.owner_id)
        except OSError:
            log.warning("Cleared entries in memory but could not write the empty list.", exc_info=True)
        return True

    def statistics(self, time_range=TimeRange.TODAY, include_breaks=False):
        return compute_statistics(self.state.entries, time_range, include_breaks, now=self._clock())

    def export_csv(self, path=None, time_range=TimeRange.ALL, include_breaks=True):
        snapshot = self.statistics(time_range, include_breaks)
        if path is None:
            path = PATHS.exports / export_filename(self._clock().date())
        return write_csv(snapshot.entries, path)

    #endregion === Settings, statistics and export ===

    #region === Helpers ===

    # Epoch milliseconds, bumped past the previous id if two entries land in the same millisecond.
    def _new_entry(self, entry_type):
        started = self._clock()
        entry_id = max(int(started.timestamp() * 1000), self._last_id + 1)
        self._last_id = entry_id
        return TimeEntry(
            id=entry_id,
            start_time=started,
            type=entry_type,
            user_id=self.state.owner_id,
        )

    def _persist_entries(self):
        try:
            config.save_entries(self._store, self.state.owner_id, self.state.entries)
        except OSError:
            log.warning("Entry list changed but could not be written to the store.", exc_info=True)

    #endregion === Helpers ===
