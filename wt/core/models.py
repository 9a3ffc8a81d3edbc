"""Data model: time entries, settings and the derived statistics records.

On disk everything is plain JSON with camelCase keys, matching the format of
previously exported data. In memory the records are dataclasses.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum


class EntryType(str, Enum):
    """Kinds of time entry.

    The session controller only ever produces WORK and BREAK. SHORT_BREAK and
    LONG_BREAK are accepted on load and counted by the statistics engine, but
    nothing generates them yet.
    """

    WORK = "work"
    BREAK = "break"
    SHORT_BREAK = "shortBreak"
    LONG_BREAK = "longBreak"

    @property
    def is_break(self):
        return self is not EntryType.WORK


def _parse_dt(value):
    """Parse an ISO-8601 string into an aware local datetime.

    Naive strings are taken as local time; a trailing ``Z`` is accepted.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    return dt.astimezone()


@dataclass
class TimeEntry:
    id: int
    start_time: datetime
    end_time: datetime | None = None
    duration: int = 0
    type: EntryType = EntryType.WORK
    notes: str = ""
    user_id: str | None = None

    @property
    def is_active(self):
        return self.end_time is None

    def to_dict(self):
        return {
            "id": self.id,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat() if self.end_time is not None else None,
            "duration": self.duration,
            "type": self.type.value,
            "notes": self.notes,
            "userId": self.user_id,
        }

    @classmethod
    def from_dict(cls, raw):
        """Build an entry from its stored form. Raises ValueError on anything malformed."""
        if not isinstance(raw, dict):
            raise ValueError(f"Expected a dict for a time entry, got {type(raw).__name__}")
        try:
            entry_id = int(raw["id"])
            start_time = _parse_dt(raw["startTime"])
            end_raw = raw.get("endTime")
            end_time = _parse_dt(end_raw) if end_raw is not None else None
            duration = int(raw.get("duration", 0))
            entry_type = EntryType(raw.get("type", EntryType.WORK.value))
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed time entry: {raw!r}") from e
        notes = raw.get("notes") or ""
        return cls(
            id=entry_id,
            start_time=start_time,
            end_time=end_time,
            duration=duration,
            type=entry_type,
            notes=str(notes),
            user_id=raw.get("userId"),
        )


# Default values for the settings record (seconds for the durations).
_SETTINGS_DEFAULTS = {
    "workDuration": 25 * 60,
    "breakDuration": 5 * 60,
    "autoStartBreaks": False,
    "autoStartWork": False,
    "notifications": True,
    "darkMode": False,
}

# camelCase storage key -> dataclass attribute
_SETTINGS_FIELDS = {
    "workDuration": "work_duration",
    "breakDuration": "break_duration",
    "autoStartBreaks": "auto_start_breaks",
    "autoStartWork": "auto_start_work",
    "notifications": "notifications",
    "darkMode": "dark_mode",
}


@dataclass
class AppSettings:
    work_duration: int = _SETTINGS_DEFAULTS["workDuration"]
    break_duration: int = _SETTINGS_DEFAULTS["breakDuration"]
    auto_start_breaks: bool = False
    auto_start_work: bool = False
    notifications: bool = True
    dark_mode: bool = False
    user_id: str | None = None

    def target_duration(self, entry_type):
        """Configured length for a session of the given type."""
        if entry_type is EntryType.WORK:
            return self.work_duration
        return self.break_duration

    def to_dict(self):
        out = {key: getattr(self, attr) for key, attr in _SETTINGS_FIELDS.items()}
        out["userId"] = self.user_id
        return out

    @classmethod
    def from_dict(cls, raw):
        """Build settings from a stored dict, defaulting anything missing or mistyped.

        Returns ``(settings, defaulted)`` where ``defaulted`` is the sorted list of
        storage keys that had to be filled in.
        """
        raw = raw if isinstance(raw, dict) else {}
        defaulted = []
        values = {}
        for key, attr in _SETTINGS_FIELDS.items():
            default = _SETTINGS_DEFAULTS[key]
            value = raw.get(key)
            if isinstance(default, bool):
                ok = isinstance(value, bool)
            else:
                # bool is an int subclass, don't let True sneak in as a duration
                ok = isinstance(value, int) and not isinstance(value, bool) and value > 0
            if not ok:
                defaulted.append(key)
                value = default
            values[attr] = value
        user_id = raw.get("userId")
        return cls(user_id=user_id if isinstance(user_id, str) else None, **values), sorted(defaulted)

    def copy(self, **changes):
        current = {f.name: getattr(self, f.name) for f in fields(self)}
        current.update(changes)
        return AppSettings(**current)


@dataclass
class DailyStats:
    date: str
    total_work_time: int = 0
    total_break_time: int = 0
    sessions: int = 0


@dataclass
class WeeklyStats:
    week_start: str
    week_end: str
    total_work_time: int = 0
    total_break_time: int = 0
    daily_stats: list[DailyStats] = field(default_factory=list)


@dataclass
class StatisticsSnapshot:
    total_work_time: int = 0
    total_break_time: int = 0
    work_sessions: int = 0
    short_breaks: int = 0
    long_breaks: int = 0
    daily_stats: list[DailyStats] = field(default_factory=list)
    entries: list[TimeEntry] = field(default_factory=list)
    most_productive_day: DailyStats | None = None
    productivity_score: int = 0
