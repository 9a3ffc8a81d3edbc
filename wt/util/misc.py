from datetime import datetime


# Current local time, timezone-aware.
def now_local():
    return datetime.now().astimezone()

# Simply returns the current local time as an ISO8601 string with timezone offset.
def now_iso():
    return now_local().isoformat()

# Formats a number of seconds as HH:MM:SS. Hours are not wrapped at 24.
def format_time(seconds):
    seconds = max(0, int(seconds))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02}:{minutes:02}:{secs:02}"

# Converts a minutes value typed into a settings form into whole seconds. Anything that doesn't parse as an
# integer becomes 0, it is up to the caller to reject that before saving.
def minutes_to_seconds(value):
    try:
        return int(float(str(value).strip())) * 60
    except (TypeError, ValueError, OverflowError):
        return 0

def seconds_to_minutes(seconds):
    try:
        return int(seconds) // 60
    except (TypeError, ValueError):
        return 0
