"""Shared settings for the habit store and the storage microservice."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Storage keys
HABITS_KEY = "habits"            # date-key -> [habit ids]
USER_HABITS_KEY = "userHabits"   # [{id, name, active, isDefault}]

# Debounce window for writes
SAVE_DELAY_MS = 300

DATA_PATH = "data/storage.json"

STORAGE_PORT = 5570
TIMEOUT_MS = 1500

LOG_LEVEL = logging.INFO
LOG_FILE = "logs/habits.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(log_file: str = LOG_FILE, level=LOG_LEVEL,
                  max_bytes: int = 1_000_000, backup_count: int = 3):
    Path(log_file).parent.mkdir(exist_ok=True, parents=True)
    logger = logging.getLogger()
    logger.setLevel(level)
    handler = RotatingFileHandler(
        log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger
