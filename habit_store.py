# habit_store.py
import json
import logging
from typing import Callable, Dict, Iterable, List, Optional

import config
from debounce import Debouncer
from models import Habit, ValidationError, habit_id_from_name, upgrade_record
from repo_json import StorageError

logger = logging.getLogger(__name__)

# wire name -> attribute name, for partial updates
_UPDATABLE = {
    "name": "name",
    "active": "active",
    "isDefault": "is_default",
    "is_default": "is_default",
}


def _habit_id(habit) -> Optional[str]:
    if habit is None:
        return None
    if isinstance(habit, Habit):
        return habit.id or None
    if isinstance(habit, dict):
        return habit.get("id") or None
    return None


class HabitStore:
    """Habits plus their daily completions, persisted to a key/value store.

    Mutators change memory first, notify subscribers, then schedule one
    debounced full-state write of both storage keys.
    """

    def __init__(
        self,
        storage,
        scheduler=None,
        habits_key: str = config.HABITS_KEY,
        user_habits_key: str = config.USER_HABITS_KEY,
        save_delay_ms: int = config.SAVE_DELAY_MS,
    ):
        self.storage = storage
        self.habits_key = habits_key
        self.user_habits_key = user_habits_key
        self.loading = False
        self._listeners: List[Callable[["HabitStore"], None]] = []
        self._saver = Debouncer(self.save, save_delay_ms, scheduler)
        self.completions: Dict[str, List[str]] = self._load_completions()
        self.habits: List[Habit] = self._load_habits()

    # -------- Loading --------
    def _read_json(self, key: str):
        try:
            raw = self.storage.get_item(key)
        except StorageError as exc:
            logger.warning("Storage unavailable reading %r: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding malformed JSON under %r", key)
            return None

    def _load_completions(self) -> Dict[str, List[str]]:
        data = self._read_json(self.habits_key)
        if not isinstance(data, dict):
            return {}
        return {
            day: [hid for hid in ids if isinstance(hid, str)]
            for day, ids in data.items()
            if isinstance(ids, list)
        }

    def _load_habits(self) -> List[Habit]:
        data = self._read_json(self.user_habits_key)
        if not isinstance(data, list):
            return []
        habits = [upgrade_record(item) for item in data]
        return [h for h in habits if h is not None]

    def refresh_habits(self):
        """Drop in-memory state (and any unsaved write) and reload from storage."""
        self.loading = True
        self._notify()
        try:
            self._saver.cancel()
            self.completions = self._load_completions()
            self.habits = self._load_habits()
            logger.debug(
                "Reloaded %d habits and %d days", len(self.habits), len(self.completions)
            )
        finally:
            self.loading = False
        self._notify()

    # -------- Persistence --------
    def save(self):
        """Write the full state of both keys; failures are logged, not raised."""
        try:
            self.storage.set_item(self.habits_key, json.dumps(self.completions))
            self.storage.set_item(
                self.user_habits_key, json.dumps([h.to_dict() for h in self.habits])
            )
        except StorageError:
            logger.warning("Failed to save habits", exc_info=True)

    def flush(self):
        self._saver.flush()

    def close(self):
        self.flush()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    @property
    def save_pending(self) -> bool:
        return self._saver.pending

    # -------- Subscribers --------
    def subscribe(self, listener: Callable[["HabitStore"], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        for listener in list(self._listeners):
            listener(self)

    def _changed(self):
        self._notify()
        self._saver.trigger()

    # -------- Habits --------
    def get_habit(self, habit_id: str) -> Optional[Habit]:
        for habit in self.habits:
            if habit.id == habit_id:
                return habit
        return None

    def add_habit(self, name: str) -> Habit:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Habit name cannot be empty.")
        habit_id = habit_id_from_name(name)
        lowered = name.lower()
        for existing in self.habits:
            if existing.name.lower() == lowered or existing.id == habit_id:
                raise ValidationError(f"Habit {name!r} already exists.")
        habit = Habit(id=habit_id, name=name, active=True, is_default=False)
        self.habits.append(habit)
        self._changed()
        return habit

    def update_habit(self, habit) -> Optional[Habit]:
        """Shallow-merge the given fields into the stored habit with the same id."""
        changes = habit.to_dict() if isinstance(habit, Habit) else dict(habit or {})
        habit_id = changes.pop("id", None)
        if not habit_id:
            raise ValidationError("Habit id is required for an update.")
        stored = self.get_habit(habit_id)
        if stored is None:
            return None
        updates = {}
        for field, value in changes.items():
            attr = _UPDATABLE.get(field)
            if attr is None:
                logger.debug("Ignoring unknown habit field %r", field)
                continue
            updates[attr] = self._checked(stored, attr, value)
        for attr, value in updates.items():
            setattr(stored, attr, value)
        self._changed()
        return stored

    def _checked(self, stored: Habit, attr: str, value):
        if attr != "name":
            if not isinstance(value, bool):
                raise ValidationError(f"Habit {attr} must be true or false.")
            return value
        if not isinstance(value, str) or not value.strip():
            raise ValidationError("Habit name cannot be empty.")
        name = value.strip()
        lowered = name.lower()
        for other in self.habits:
            if other is not stored and other.name.lower() == lowered:
                raise ValidationError(f"Habit {name!r} already exists.")
        return name

    def _set_active(self, habit, active: bool):
        stored = self.get_habit(_habit_id(habit))
        if stored is None:
            return
        stored.active = active
        self._changed()

    def stop_habit(self, habit):
        self._set_active(habit, False)

    def resume_habit(self, habit):
        self._set_active(habit, True)

    def delete_habit(self, habit):
        stored = self.get_habit(_habit_id(habit))
        if stored is None:
            return
        self.habits.remove(stored)
        self._changed()

    # -------- Derived views --------
    @property
    def all_habits(self) -> List[Habit]:
        return list(self.habits)

    @property
    def active_habits(self) -> List[Habit]:
        return [h for h in self.habits if h.active]

    @property
    def inactive_habits(self) -> List[Habit]:
        return [h for h in self.habits if not h.active]

    @property
    def visible_habits(self) -> List[Habit]:
        """Active or default habits, plus stopped ones that still have history."""
        return [
            h for h in self.habits
            if h.active or h.is_default or self.has_completion_history(h.id)
        ]

    # -------- Completions --------
    def toggle_habit(self, habit_id: str, date_key: str) -> bool:
        ids = self.completions.setdefault(date_key, [])
        if habit_id in ids:
            ids.remove(habit_id)
            done = False
        else:
            ids.append(habit_id)
            done = True
        self._changed()
        return done

    def batch_toggle_habits(self, habit_ids: Iterable[str], date_key: str, completed: bool):
        if not completed and date_key not in self.completions:
            return
        ids = self.completions.setdefault(date_key, [])
        targets = list(habit_ids)
        if completed:
            for hid in targets:
                if hid not in ids:
                    ids.append(hid)
        else:
            ids[:] = [hid for hid in ids if hid not in targets]
        self._changed()

    def is_habit_completed(self, habit_id: str, date_key: str) -> bool:
        return habit_id in self.completions.get(date_key, [])

    def get_completed_habits(self, date_key: str) -> List[str]:
        return list(self.completions.get(date_key, []))

    def has_completion_history(self, habit_id: str) -> bool:
        return any(habit_id in ids for ids in self.completions.values())
