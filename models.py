# models.py
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Union

DATE_KEY_FORMAT = "%Y-%m-%d"
DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_WHITESPACE = re.compile(r"\s+")


class ValidationError(ValueError):
    """Raised when a habit mutation is given bad input."""


@dataclass
class Habit:
    id: str
    name: str
    active: bool = True
    is_default: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "active": self.active,
            "isDefault": self.is_default,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Habit":
        name = str(data.get("name", ""))
        return cls(
            id=str(data.get("id") or habit_id_from_name(name)),
            name=name,
            active=bool(data.get("active", True)),
            is_default=bool(data.get("isDefault", data.get("is_default", False))),
        )


def habit_id_from_name(name: str) -> str:
    """'Drink  Water' -> 'drink-water'"""
    return _WHITESPACE.sub("-", name.lower())


def upgrade_record(item) -> Optional[Habit]:
    """Turn a stored userHabits entry into a Habit.

    Older data stored bare name strings; those become active, non-default
    habits with a derived id. Entries of any other shape are dropped.
    """
    if isinstance(item, str):
        return Habit(id=habit_id_from_name(item), name=item)
    if isinstance(item, dict):
        return Habit.from_dict(item)
    return None


# ---------- Date keys ----------
def normalize_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def format_date_key(value: Union[date, datetime]) -> str:
    return normalize_date(value).isoformat()


def is_valid_date_key(raw) -> bool:
    if not isinstance(raw, str) or not DATE_KEY_RE.match(raw):
        return False
    try:
        datetime.strptime(raw, DATE_KEY_FORMAT)
    except ValueError:
        return False
    return True


def parse_date_key(raw: str) -> date:
    if not is_valid_date_key(raw):
        raise ValidationError(f"Not a YYYY-MM-DD date key: {raw!r}")
    return datetime.strptime(raw, DATE_KEY_FORMAT).date()


def today_key() -> str:
    return format_date_key(date.today())


def shift_date_key(key: str, days: int) -> str:
    """Step a date key forward (or back, for negative days)."""
    return format_date_key(parse_date_key(key) + timedelta(days=days))
