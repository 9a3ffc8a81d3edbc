import logging
import os
from pathlib import Path
from logging.handlers import RotatingFileHandler
from wt.common.setup import PATHS

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(filename)s:%(lineno)d] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Reads the log level from WORKTIMER_LOG_LEVEL ("DEBUG", "info", ...), falling back to `default` for anything
# logging doesn't recognise.
def level_from_env(default=logging.DEBUG):
    name = os.getenv("WORKTIMER_LOG_LEVEL", "").strip().upper()
    level = logging.getLevelName(name) if name else default
    return level if isinstance(level, int) else default

def _has_handler(logger, handler_name):
    return any(h.get_name() == handler_name for h in logger.handlers)

def _attach(logger, handler, handler_name, level, fmt):
    handler.setLevel(level)
    handler.setFormatter(fmt)
    handler.set_name(handler_name)
    logger.addHandler(handler)

# Builds the app logger: a rotating history file, a latest.log that only holds the current run, and optionally a
# console stream. Calling it again with the same name never stacks duplicate handlers.
def get_logger(
        name = "worktimer",
        level = logging.INFO,
        log_dir: Path | None = None,
        max_bytes = 5 * 1024 * 1024,
        backup_count = 5,
        console = False,
) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(level)

    log_dir = log_dir or PATHS.logs
    log_dir.mkdir(parents=True,exist_ok=True)
    fmt = logging.Formatter(LOG_FORMAT,LOG_DATE_FORMAT)

    history_name = f"{name}:history"
    if not _has_handler(logger, history_name):
        history = RotatingFileHandler(
            filename=log_dir / f"{name}.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
            delay=True,
        )
        _attach(logger, history, history_name, level, fmt)

    latest_name = f"{name}:latest"
    if not _has_handler(logger, latest_name):
        latest = logging.FileHandler(log_dir / "latest.log", mode="w", encoding="utf-8", delay=True)
        _attach(logger, latest, latest_name, level, fmt)

    console_name = f"{name}:console"
    if console and not _has_handler(logger, console_name):
        _attach(logger, logging.StreamHandler(), console_name, level, fmt)

    return logger

log = get_logger(level=level_from_env(), console=bool(os.getenv("WORKTIMER_LOG_CONSOLE")))
log.info("=== WORKTIMER STARTED ===")
