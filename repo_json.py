# repo_json.py
import json, logging, os
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """The key/value store could not be read or written."""


class MemoryStorage:
    """In-process key/value store with the localStorage contract."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set_item(self, key: str, value: str):
        self.data[key] = value

    def remove_item(self, key: str):
        self.data.pop(key, None)


class JSONFileStorage:
    """Key/value strings kept in a single JSON object on disk."""

    def __init__(self, path: str):
        self.path = path
        folder = os.path.dirname(path)
        if folder:
            os.makedirs(folder, exist_ok=True)

    def _read(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            raise StorageError(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"{self.path} does not hold a JSON object.")
        return data

    def _write(self, obj):
        tmp = self.path + ".tmp"
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(obj, f, indent=2)
            os.replace(tmp, self.path)
        except OSError as exc:
            raise StorageError(f"Cannot write {self.path}: {exc}") from exc

    def _read_for_write(self) -> Dict[str, str]:
        """Current contents, or {} after moving an unreadable file aside."""
        try:
            return self._read()
        except StorageError as exc:
            aside = self.path + ".corrupt"
            logger.warning("Overwriting unreadable %s (kept as %s): %s", self.path, aside, exc)
            try:
                os.replace(self.path, aside)
            except OSError as move_exc:
                raise StorageError(f"Cannot move aside {self.path}: {move_exc}") from move_exc
            return {}

    def get_item(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str):
        data = self._read_for_write()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str):
        data = self._read_for_write()
        if data.pop(key, None) is not None:
            self._write(data)
