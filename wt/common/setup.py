import os
import sys
from pathlib import Path
from dataclasses import dataclass

_APP_FOLDER = "WorkTimer"

# Lil helper function to create missing directories if missing, and optionally error out when a path
# doesn't exist.
def ensure_directory(path: Path,must_exist=False):
    if must_exist:
        if not path.exists():
            raise FileNotFoundError(f"Required directory is missing: {path}")
        if not path.is_dir():
            raise NotADirectoryError(f"Expected a directory, got a file: {path}")
    else:
        path.mkdir(parents=True,exist_ok=True)
    return path

# Resolves the per-user data root. WORKTIMER_HOME always wins, which is also how tests and portable installs
# redirect everything somewhere else.
def resolve_data_root() -> Path:
    override = os.getenv("WORKTIMER_HOME")
    if override:
        return Path(override)
    if sys.platform.startswith("win"):
        appdata = os.getenv("APPDATA")
        if not appdata:
            raise RuntimeError("Missing APPDATA environment variable, cannot determine data directories.")
        return Path(appdata) / _APP_FOLDER
    xdg = os.getenv("XDG_DATA_HOME")
    base = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return base / _APP_FOLDER

# Dataclass for accessing paths across program.
@dataclass(frozen=False)
class ProjectPaths:

    data: Path

    logs: Path
    current: Path
    exports: Path

    @staticmethod
    def build(root: Path | None = None):
        # Folder for all worktimer user-specific stuff
        data = ensure_directory(root or resolve_data_root())

        # Folders within the data folder
        logs = ensure_directory(data / "logs")
        current = ensure_directory(data / "current")
        exports = ensure_directory(data / "exports")

        return ProjectPaths(
            data = data,
            logs = logs,
            current = current,
            exports = exports
        )
PATHS = ProjectPaths.build()
