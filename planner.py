# planner.py
import logging
import random
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, List, Optional, Sequence

from config import SELECTION
from registry import MealRecord, MealRegistry

logger = logging.getLogger(__name__)

# pick(n) -> index in [0, n)
Picker = Callable[[int], int]


@dataclass
class SelectionPolicy:
    avoid_recent: bool = SELECTION["avoid_recent_default"]
    window_days: int = SELECTION["window_days"]


@dataclass(frozen=True)
class SelectionResult:
    chosen_name: str
    as_of: date


def recency_cutoff(today: date, window_days: int) -> date:
    return today - timedelta(days=window_days)


def candidate_pool(records: Sequence[MealRecord], policy: SelectionPolicy, today: date) -> List[MealRecord]:
    if not policy.avoid_recent:
        return list(records)

    cutoff = recency_cutoff(today, policy.window_days)
    candidates = [m for m in records if m.last_picked is None or m.last_picked < cutoff]

    # Everything was eaten this week: any meal beats no meal
    return candidates if candidates else list(records)


def select_meal(
    records: Sequence[MealRecord],
    policy: SelectionPolicy,
    today: date,
    pick: Picker = random.randrange,
) -> Optional[SelectionResult]:
    """
    Draws one meal uniformly from the candidate pool.

    Returns None for an empty registry (pick is never called). The registry is
    not touched; feed the result to apply_selection().
    """
    if not records:
        return None

    pool = candidate_pool(records, policy, today)
    index = pick(len(pool))
    if not 0 <= index < len(pool):
        raise ValueError(f"pick({len(pool)}) returned out-of-range index {index}")

    return SelectionResult(chosen_name=pool[index].name, as_of=today)


def apply_selection(registry: MealRegistry, result: SelectionResult) -> None:
    if not registry.mark_picked(result.chosen_name, result.as_of):
        logger.warning("Selected meal %r is no longer in the registry", result.chosen_name)
