from pathlib import Path
from wt.common.logger import log

CSV_HEADERS = ["Date", "Start Time", "End Time", "Duration (minutes)", "Type", "Notes"]

# Builds the CSV text for a list of entries. No quoting at all: commas in notes become semicolons so the columns
# stay put, which is all the downstream spreadsheets ever needed.
def build_csv(entries):
    lines = [",".join(CSV_HEADERS)]
    for entry in entries:
        row = [
            entry.start_time.date().isoformat(),
            entry.start_time.strftime("%H:%M:%S"),
            entry.end_time.strftime("%H:%M:%S") if entry.end_time is not None else "",
            str(int(entry.duration / 60 + 0.5)),
            entry.type.value,
            entry.notes.replace(",", ";"),
        ]
        lines.append(",".join(row))
    return "\n".join(lines)

def export_filename(day):
    return f"time-tracker-export-{day.isoformat()}.csv"

def write_csv(entries, path):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(build_csv(entries))
    log.info(f"Exported {len(entries)} entries to '{path}'")
    return path
