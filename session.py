# session.py
import logging
import random
from datetime import date
from typing import Callable, List, Optional

from config import CONFIRM, SELECTION
from meal_bank import DEFAULT_MEALS, QUICK_ADD
from planner import Picker, SelectionPolicy, SelectionResult, apply_selection, select_meal
from registry import MealRecord, MealRegistry
from stats import MealStats, compute_stats
from storage import StoredState

logger = logging.getLogger(__name__)

Clock = Callable[[], date]
Saver = Callable[[StoredState], None]
Loader = Callable[[], Optional[StoredState]]
Confirm = Callable[[str], bool]


def default_meals() -> List[MealRecord]:
    return [MealRecord(name=name) for name in DEFAULT_MEALS]


class Session:
    """
    One user's running app state: the meal registry, the selection policy and
    the current suggestion.

    Every mutation is written through `save`; a failing save is logged and
    ignored so the in-memory state keeps working.
    """

    def __init__(
        self,
        registry: MealRegistry,
        policy: SelectionPolicy,
        *,
        today: Clock = date.today,
        pick: Picker = random.randrange,
        save: Optional[Saver] = None,
    ) -> None:
        self.registry = registry
        self.policy = policy
        self.suggestion: Optional[SelectionResult] = None
        self._today = today
        self._pick = pick
        self._save = save

    @classmethod
    def from_storage(
        cls,
        load: Loader,
        save: Optional[Saver] = None,
        *,
        today: Clock = date.today,
        pick: Picker = random.randrange,
    ) -> "Session":
        saved = load()
        if saved is None:
            registry = MealRegistry(default_meals())
            policy = SelectionPolicy()
        else:
            registry = MealRegistry(saved.meals)
            policy = SelectionPolicy(avoid_recent=saved.avoid_recent)
        return cls(registry, policy, today=today, pick=pick, save=save)

    # -------------------------
    # Persistence
    # -------------------------
    def snapshot(self) -> StoredState:
        return StoredState(meals=list(self.registry.records), avoid_recent=self.policy.avoid_recent)

    def _persist(self) -> None:
        if self._save is None:
            return
        try:
            self._save(self.snapshot())
        except Exception as exc:
            logger.warning("Saving session failed, continuing in memory: %s", exc)

    # -------------------------
    # Meals
    # -------------------------
    def meals(self) -> List[MealRecord]:
        return self.registry.sorted_view()

    def add_meal(self, raw_name: str) -> bool:
        added = self.registry.add(raw_name)
        if added:
            self._persist()
        return added

    def submit_meal(self, text: str) -> str:
        """Adds `text` and returns what the input box should show next: empty on success, unchanged on rejection."""
        return "" if self.add_meal(text) else text

    def quick_add_options(self) -> List[str]:
        return [name for name in QUICK_ADD if not self.registry.has_name(name)]

    def quick_add(self, name: str) -> bool:
        if name not in QUICK_ADD:
            return False
        return self.add_meal(name)

    def remove_meal(self, name: str) -> bool:
        removed = self.registry.remove(name)
        if removed:
            if self.suggestion and self.suggestion.chosen_name == name:
                self.suggestion = None
            self._persist()
        return removed

    def restore_defaults(self) -> None:
        self.registry.replace_all(default_meals())
        self.suggestion = None
        self._persist()

    def clear_all(self, confirm: Confirm) -> bool:
        if not confirm(CONFIRM["clear_all"]):
            return False
        self.registry.replace_all([])
        self.suggestion = None
        self._persist()
        return True

    def reset_all(self, confirm: Confirm) -> bool:
        if not confirm(CONFIRM["reset_all"]):
            return False
        self.registry.replace_all(default_meals())
        self.policy = SelectionPolicy(avoid_recent=SELECTION["avoid_recent_default"])
        self.suggestion = None
        self._persist()
        return True

    # -------------------------
    # Selection
    # -------------------------
    @property
    def can_suggest(self) -> bool:
        return len(self.registry) > 0

    def set_avoid_recent(self, value: bool) -> None:
        if self.policy.avoid_recent == bool(value):
            return
        self.policy.avoid_recent = bool(value)
        self._persist()

    def suggest(self) -> Optional[SelectionResult]:
        result = select_meal(self.registry.records, self.policy, self._today(), self._pick)
        if result is None:
            return None
        apply_selection(self.registry, result)
        self.suggestion = result
        logger.info("Suggested %r on %s", result.chosen_name, result.as_of.isoformat())
        self._persist()
        return result

    def clear_suggestion(self) -> None:
        self.suggestion = None

    def stats(self) -> MealStats:
        return compute_stats(self.registry.records)
