from dataclasses import dataclass, field
from typing import List, Optional
from timetabler.exceptions import PreconditionError


@dataclass()
class GenerationConfig:
    """
    Grid shape and allocation knobs for one generation cycle.

    Attributes:
        working_days: Number of days in the week grid
        hours_per_day: Number of periods per day
        break_slots: 1-based period numbers that are breaks on every day
        free_period_percentage: Share of the week kept free (0-100)
        seed: Seed for the allocation random generator; None for a random run
        carry_over_hours: Seed teacher budgets from their persisted hours_left
                          instead of weekly_required_hours
    """
    working_days: int = 5
    hours_per_day: int = 5
    break_slots: List[int] = field(default_factory=list)
    free_period_percentage: float = 20
    seed: Optional[int] = None
    carry_over_hours: bool = False

    def __post_init__(self):
        if self.working_days <= 0:
            raise PreconditionError("Working days must be a positive number")
        if self.hours_per_day <= 0:
            raise PreconditionError("Hours per day must be a positive number")
        if not 0 <= self.free_period_percentage <= 100:
            raise PreconditionError("Free period percentage must be between 0 and 100")

        slots = sorted(set(self.break_slots))
        invalid = [s for s in slots if not 1 <= s <= self.hours_per_day]
        if invalid:
            raise PreconditionError(
                f"Break slots {invalid} are outside periods 1-{self.hours_per_day}"
            )
        self.break_slots = slots

    @property
    def total_slots(self) -> int:
        return self.working_days * self.hours_per_day

    @property
    def break_count(self) -> int:
        """Number of break periods per day; the pool is sized against this count"""
        return len(self.break_slots)

    def is_break(self, period: int) -> bool:
        """Checks a 0-based period index against the 1-based break slots"""
        return (period + 1) in self.break_slots
