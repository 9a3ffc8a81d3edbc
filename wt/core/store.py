import json
import os
from pathlib import Path
from wt.common.logger import log
from wt.common.setup import PATHS


STORE_PATH = PATHS.current / "store.json"

# Small namespaced key-value store, persisted as a single JSON document. Every write rewrites the whole file,
# which is fine for the handful of small records this app keeps.
class JsonStore:

    def __init__(self, path: Path | None = None):
        self.path = Path(path) if path is not None else STORE_PATH
        self._data = self._read()

    # Reads the backing file. A missing, unreadable or corrupt file is treated as an empty store.
    def _read(self):
        if not self.path.exists():
            log.info(f"No existing store found at '{self.path}', starting empty.")
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError):
            log.warning(f"Ran into an error while trying to read '{self.path}', treating the store as empty.", exc_info=True)
            return {}
        if not isinstance(data, dict):
            log.warning(f"Store at '{self.path}' did not contain an object, treating the store as empty.")
            return {}
        log.info(f"Successfully loaded store from '{self.path}' ({len(data)} keys).")
        return data

    # Writes to a sibling temp file and swaps it in, so a crash mid-write leaves the previous file intact.
    def _write(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

    def get(self, key, default=None):
        return self._data.get(key, default)

    def set(self, key, value):
        self._data[key] = value
        self._write()
        log.debug(f"Wrote key '{key}' to '{self.path}'")

    def remove(self, key):
        if key in self._data:
            del self._data[key]
            self._write()
            log.debug(f"Removed key '{key}' from '{self.path}'")

    def keys(self):
        return list(self._data.keys())

    def __contains__(self, key):
        return key in self._data
