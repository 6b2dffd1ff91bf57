# registry.py
import locale
import logging
import math
import re
import unicodedata
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^(\d{4})[-/](\d{2})[-/](\d{2})$")


@dataclass(frozen=True)
class MealRecord:
    name: str
    last_picked: Optional[date] = None
    pick_count: int = 0


def _key(name: str) -> str:
    return name.strip().lower()


def clean_name(raw: Any) -> str:
    """Trimmed name with control characters (NUL, tabs, newlines, ...) removed."""
    if not isinstance(raw, str):
        return ""
    return "".join(c for c in raw if unicodedata.category(c) != "Cc").strip()


def _sort_key(name: str) -> Tuple[str, str, str]:
    # Accents fold onto their base letter first so "Éclair" sits among the E's even in the C locale
    folded = unicodedata.normalize("NFKD", name.casefold())
    base = "".join(c for c in folded if not unicodedata.combining(c))
    try:
        collated = locale.strxfrm(name.casefold())
    except ValueError:
        collated = base
    return (base, collated, name)


class MealRegistry:
    """The session's meal list. Names are unique ignoring case and surrounding whitespace."""

    def __init__(self, records: Iterable[MealRecord] = ()) -> None:
        self._records: List[MealRecord] = list(records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MealRecord]:
        return iter(tuple(self._records))

    @property
    def records(self) -> Tuple[MealRecord, ...]:
        return tuple(self._records)

    def find(self, name: str) -> Optional[MealRecord]:
        for m in self._records:
            if m.name == name:
                return m
        return None

    def has_name(self, name: str) -> bool:
        key = _key(name)
        return any(_key(m.name) == key for m in self._records)

    def add(self, raw_name: str) -> bool:
        name = clean_name(raw_name)
        if not name:
            return False
        if self.has_name(name):
            return False
        self._records.append(MealRecord(name=name))
        return True

    def remove(self, name: str) -> bool:
        kept = [m for m in self._records if m.name != name]
        if len(kept) == len(self._records):
            return False
        self._records = kept
        return True

    def replace_all(self, records: Iterable[MealRecord]) -> None:
        self._records = list(records)

    def mark_picked(self, name: str, on: date) -> bool:
        for i, m in enumerate(self._records):
            if m.name == name:
                self._records[i] = replace(m, last_picked=on, pick_count=m.pick_count + 1)
                return True
        return False

    def sorted_view(self) -> List[MealRecord]:
        return sorted(self._records, key=lambda m: _sort_key(m.name))


# -------------------------
# Load-time validation
# -------------------------
def normalize_date(value: Any) -> Optional[date]:
    """Accepts YYYY-MM-DD or YYYY/MM/DD naming a real calendar day, else None."""
    if not isinstance(value, str):
        return None
    match = _DATE_RE.match(value)
    if not match:
        return None
    y, m, d = (int(part) for part in match.groups())
    try:
        return date(y, m, d)
    except ValueError:
        return None


def normalize_pick_count(value: Any) -> int:
    # bool is an int subclass; a stored true/false is not a count
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and (not math.isfinite(value) or not value.is_integer()):
        return 0
    if value < 0:
        return 0
    return int(value)


def sanitize_meals(raw: Iterable[Any]) -> List[MealRecord]:
    meals: List[MealRecord] = []
    seen = set()
    for entry in raw:
        if not isinstance(entry, dict):
            logger.debug("Dropping non-object meal entry: %r", entry)
            continue
        name = clean_name(entry.get("name"))
        if not name:
            logger.debug("Dropping meal entry without a name: %r", entry)
            continue
        if _key(name) in seen:
            logger.debug("Dropping duplicate meal %r", name)
            continue
        seen.add(_key(name))
        meals.append(MealRecord(
            name=name,
            last_picked=normalize_date(entry.get("last_picked")),
            pick_count=normalize_pick_count(entry.get("pick_count")),
        ))
    return meals


def record_to_dict(record: MealRecord) -> Dict[str, Any]:
    return {
        "name": record.name,
        "last_picked": record.last_picked.isoformat() if record.last_picked else None,
        "pick_count": record.pick_count,
    }
