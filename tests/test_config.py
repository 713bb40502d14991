import logging

import config


def test_setup_logging_writes_to_rotating_file(tmp_path):
    log_file = tmp_path / "logs" / "habits.log"
    previous = logging.getLogger().level
    root = config.setup_logging(str(log_file), level=logging.DEBUG)
    handler = root.handlers[-1]
    try:
        logging.getLogger("habit_store").warning("Failed to save habits")
        handler.flush()
        text = log_file.read_text(encoding="utf-8")
        assert "[WARNING] habit_store: Failed to save habits" in text
    finally:
        root.removeHandler(handler)
        handler.close()
        root.setLevel(previous)
