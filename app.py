import config
from habit_store import HabitStore
from repo_json import JSONFileStorage, MemoryStorage
from storage_client import RemoteStorage


def make_storage(backend: str = "file", data_path: str = config.DATA_PATH,
                 port: int = config.STORAGE_PORT):
    if backend == "file":
        return JSONFileStorage(data_path)
    if backend == "remote":
        return RemoteStorage(port=port)
    if backend == "memory":
        return MemoryStorage()
    raise ValueError(f"Unknown storage backend: {backend!r}")


def create_store(storage=None, scheduler=None, **kwargs) -> HabitStore:
    """Build a HabitStore wired to the configured keys and debounce window.

    `scheduler` is any object with Tk's after/after_cancel (a Tk root, or
    debounce.AsyncioScheduler); without one, every change is written at once.
    """
    if storage is None:
        storage = make_storage()
    options = {
        "habits_key": config.HABITS_KEY,
        "user_habits_key": config.USER_HABITS_KEY,
        "save_delay_ms": config.SAVE_DELAY_MS,
    }
    options.update(kwargs)
    return HabitStore(storage, scheduler=scheduler, **options)
