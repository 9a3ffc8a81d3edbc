"""Settings store: the single mutable settings record for the owner."""

from wt.common.logger import log
from wt.core import config


class SettingsStore:
    """Holds the current AppSettings and persists every change.

    No validation happens here. Whatever is handed to ``update()`` replaces the
    record wholesale; callers check durations before calling.
    """

    def __init__(self, store, owner_id, prefers_dark=None):
        self._store = store
        self.owner_id = owner_id
        self.settings = config.load_settings(store, owner_id, prefers_dark)

    def update(self, new_settings):
        self.settings = new_settings.copy(user_id=self.owner_id)
        config.save_settings(self._store, self.owner_id, self.settings)
        log.debug(f"Settings updated: {self.settings}")
        return self.settings

    def toggle_dark_mode(self):
        return self.update(self.settings.copy(dark_mode=not self.settings.dark_mode))
