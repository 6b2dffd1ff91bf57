# stats.py
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Tuple

import pandas as pd

from registry import MealRecord


@dataclass(frozen=True)
class MealStats:
    total_picks: int
    most_picked: Optional[MealRecord]
    longest_avoided: Optional[MealRecord]

    @property
    def has_history(self) -> bool:
        return self.total_picks > 0


def _avoided_key(m: MealRecord) -> Tuple[int, date]:
    # A picked meal with no date sorts before every dated one
    if m.last_picked is None:
        return (0, date.min)
    return (1, m.last_picked)


def compute_stats(records: Iterable[MealRecord]) -> MealStats:
    """
    Summary over the registry in its stored order.

    Ties go to the first record encountered: most_picked on equal counts,
    longest_avoided on equal (or equally missing) dates.
    """
    total = 0
    most: Optional[MealRecord] = None
    oldest: Optional[MealRecord] = None

    for m in records:
        total += m.pick_count
        if m.pick_count <= 0:
            continue
        if most is None or m.pick_count > most.pick_count:
            most = m
        if oldest is None or _avoided_key(m) < _avoided_key(oldest):
            oldest = m

    return MealStats(total_picks=total, most_picked=most, longest_avoided=oldest)


def stats_frame(records: Iterable[MealRecord]) -> pd.DataFrame:
    rows = [(m.name, m.last_picked.isoformat() if m.last_picked else "", m.pick_count) for m in records]
    df = pd.DataFrame(rows, columns=["meal", "last_picked", "times_picked"])
    return df.sort_values("times_picked", ascending=False, kind="stable").reset_index(drop=True)
