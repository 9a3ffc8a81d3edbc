"""Statistics engine.

Pure functions over a list of finished time entries. Nothing here mutates its
input or touches storage.
"""

from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from wt.core.models import DailyStats, EntryType, StatisticsSnapshot, WeeklyStats
from wt.util.misc import now_local

# Only these count toward break totals. Plain BREAK entries show up in the
# display list and in the per-day rows' entry set but add no break time.
BREAK_TOTAL_TYPES = (EntryType.SHORT_BREAK, EntryType.LONG_BREAK)

IDEAL_RATIO_LOW = 4
IDEAL_RATIO_HIGH = 6
SCORE_FLOOR = 50
NO_BREAK_RATIO = 100


class TimeRange(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


def range_start(time_range, now):
    """Earliest start instant included by ``time_range``, or None for ALL.

    Weeks start on Sunday at local midnight.
    """
    time_range = TimeRange(time_range)
    now = _aware(now)
    today = now.date()
    if time_range is TimeRange.TODAY:
        return _midnight(today, now)
    if time_range is TimeRange.WEEK:
        return _midnight(_week_start(today), now)
    if time_range is TimeRange.MONTH:
        return _midnight(today.replace(day=1), now)
    return None


# Naive values are taken as local time, the same rule used for stored timestamps.
def _aware(now):
    return now if now.tzinfo is not None else now.astimezone()


def _midnight(day, now):
    """Midnight starting `day`, in the zone `now` is expressed in."""
    if isinstance(now.tzinfo, timezone) and now.utcoffset() == now.astimezone().utcoffset():
        # A bare offset matching the system zone: let the system rules pick that day's offset, which can
        # differ from today's across a DST change
        return datetime(day.year, day.month, day.day).astimezone()
    return datetime.combine(day, time(), tzinfo=now.tzinfo)


def filter_entries(entries, time_range, now=None):
    start = range_start(time_range, _aware(now or now_local()))
    if start is None:
        return list(entries)
    return [entry for entry in entries if entry.start_time >= start]


def productivity_score(total_work_time, total_break_time):
    """Score the work:break ratio from 0 to 100.

    A ratio between 4 and 6 scores 100. Above that the score drops by 25 per
    ratio point, below it the score scales down linearly; both sides stop at 50.
    """
    if total_work_time == 0 and total_break_time == 0:
        return 0
    if total_break_time > 0:
        ratio = total_work_time / total_break_time
    else:
        ratio = NO_BREAK_RATIO if total_work_time > 0 else 0

    score = 0
    if IDEAL_RATIO_LOW <= ratio <= IDEAL_RATIO_HIGH:
        score = 100
    elif ratio > IDEAL_RATIO_HIGH:
        score = 100 - min(((ratio - IDEAL_RATIO_HIGH) / 4) * 100, SCORE_FLOOR)
    elif 0 < ratio < IDEAL_RATIO_LOW:
        score = max((ratio / IDEAL_RATIO_LOW) * 100, SCORE_FLOOR)
    # round half up, like Math.round, not Python's banker's rounding
    return int(score + 0.5)


def _day_key(entry):
    return entry.start_time.date().isoformat()


def daily_breakdown(entries):
    """Group entries by local calendar day, newest day first."""
    by_day = {}
    for entry in entries:
        by_day.setdefault(_day_key(entry), []).append(entry)

    rows = []
    for day, day_entries in by_day.items():
        rows.append(DailyStats(
            date=day,
            total_work_time=sum(e.duration for e in day_entries if e.type is EntryType.WORK),
            total_break_time=sum(e.duration for e in day_entries if e.type in BREAK_TOTAL_TYPES),
            sessions=sum(1 for e in day_entries if e.type is EntryType.WORK),
        ))
    rows.sort(key=lambda row: row.date, reverse=True)
    return rows


def most_productive_day(daily_stats):
    # First row wins ties, so the newest of equally productive days is returned
    best = None
    for row in daily_stats:
        if best is None or row.total_work_time > best.total_work_time:
            best = row
    return best


def compute_statistics(entries, time_range=TimeRange.TODAY, include_breaks=False, now=None):
    """Compute the statistics snapshot for ``entries``.

    Totals and counts use every entry in ``time_range``. ``include_breaks``
    only decides whether break entries appear in the display list and hence in
    the per-day rows.
    """
    filtered = filter_entries(entries, time_range, now)
    displayed = filtered if include_breaks else [e for e in filtered if e.type is EntryType.WORK]

    total_work = sum(e.duration for e in filtered if e.type is EntryType.WORK)
    total_break = sum(e.duration for e in filtered if e.type in BREAK_TOTAL_TYPES)
    daily = daily_breakdown(displayed)

    return StatisticsSnapshot(
        total_work_time=total_work,
        total_break_time=total_break,
        work_sessions=sum(1 for e in filtered if e.type is EntryType.WORK),
        short_breaks=sum(1 for e in filtered if e.type is EntryType.SHORT_BREAK),
        long_breaks=sum(1 for e in filtered if e.type is EntryType.LONG_BREAK),
        daily_stats=daily,
        entries=displayed,
        most_productive_day=most_productive_day(daily),
        productivity_score=productivity_score(total_work, total_break),
    )


def _week_start(day):
    return day - timedelta(days=(day.weekday() + 1) % 7)


def weekly_stats(daily_stats):
    """Roll daily rows up into Sunday-to-Saturday weeks, newest week first."""
    weeks = {}
    for row in daily_stats:
        start = _week_start(date.fromisoformat(row.date))
        week = weeks.get(start)
        if week is None:
            week = WeeklyStats(
                week_start=start.isoformat(),
                week_end=(start + timedelta(days=6)).isoformat(),
            )
            weeks[start] = week
        week.total_work_time += row.total_work_time
        week.total_break_time += row.total_break_time
        week.daily_stats.append(row)
    return [weeks[start] for start in sorted(weeks, reverse=True)]
