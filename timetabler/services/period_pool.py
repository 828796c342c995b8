import math
from typing import List
from timetabler.models.pool_entry import PoolEntry
from timetabler.models.subject import Subject


def round_half_up(value: float) -> int:
    """Rounds .5 away from zero for positive values (Python's round() is banker's)"""
    return int(math.floor(value + 0.5))


def build_period_pool(subjects: List[Subject], working_days: int, hours_per_day: int,
                      break_count: int, free_percentage: float = 20) -> List[PoolEntry]:
    """
    Converts a class's subjects into the flat list of periods to place.

    Each subject gets a share of the schedulable periods proportional to its
    credits; the rest of the week is padded with Free placeholders so the pool
    fills the week minus the break periods.

    Args:
        subjects: Subjects of the class, in order
        working_days: Days in the week grid
        hours_per_day: Periods per day
        break_count: Number of break periods configured per day
        free_percentage: Share of the week (0-100) reserved for free periods

    Returns:
        List of PoolEntry, subject entries first (in subject order), then Free

    Example:
        Subjects with 3 and 1 credits on a 5x5 grid, no breaks, 20% free:
        schedulable = 25 - round(25 * 0.2) = 20, so 15 + 5 subject entries
        and 5 Free entries.
    """
    total_slots = working_days * hours_per_day
    schedulable = total_slots - break_count - round_half_up(total_slots * free_percentage / 100)
    total_credits = sum(subject.credits for subject in subjects)

    pool = []
    for subject in subjects:
        if total_credits > 0:
            periods = round_half_up(subject.credits / total_credits * schedulable)
        else:
            periods = 0
        pool.extend(PoolEntry(subject) for _ in range(max(periods, 0)))

    # Rounding drift is accepted; entries left over after allocation are dropped
    target = total_slots - break_count
    pool.extend(PoolEntry() for _ in range(max(target - len(pool), 0)))
    return pool
