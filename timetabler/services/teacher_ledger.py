import logging
from typing import Dict, Iterable, List
from timetabler.models.teacher import Teacher

logger = logging.getLogger(__name__)


class TeacherLedger:
    """
    Per-cycle record of teacher occupancy and remaining weekly hours.

    One ledger is created for each generation cycle and shared by every class
    allocated in it, so a teacher taken by an earlier class is unavailable to
    later ones. It holds no locks: the cycle that owns it is sequential.
    """

    def __init__(self, teachers: Iterable[Teacher], working_days: int, hours_per_day: int,
                 carry_over_hours: bool = False):
        self.working_days = working_days
        self.hours_per_day = hours_per_day
        self._hours_left: Dict[str, int] = {}
        self._occupied: Dict[str, List[List[bool]]] = {}

        for teacher in teachers:
            if carry_over_hours:
                budget = teacher.hours_left
            else:
                budget = teacher.weekly_required_hours
            self._hours_left[teacher.id] = max(int(budget), 0)
            self._occupied[teacher.id] = [
                [False for _ in range(hours_per_day)] for _ in range(working_days)
            ]

    def knows(self, teacher_id: str) -> bool:
        return teacher_id in self._hours_left

    def hours_left(self, teacher_id: str) -> int:
        return self._hours_left.get(teacher_id, 0)

    def is_free(self, teacher_id: str, day: int, period: int) -> bool:
        occupied = self._occupied.get(teacher_id)
        if occupied is None:
            return False
        return not occupied[day][period]

    def is_available(self, teacher_id: str, day: int, period: int) -> bool:
        """Free at the cell and still has budget left"""
        return self.is_free(teacher_id, day, period) and self.hours_left(teacher_id) > 0

    def commit(self, teacher_id: str, day: int, period: int) -> bool:
        """
        Books a teacher for one cell.

        Callers check is_available first. A commit that would overspend the
        budget or double-book the teacher changes nothing and returns False.
        """
        if not self.is_available(teacher_id, day, period):
            logger.debug(f"Ignoring commit for teacher {teacher_id} at ({day}, {period})")
            return False
        self._occupied[teacher_id][day][period] = True
        self._hours_left[teacher_id] -= 1
        return True

    def snapshot_hours(self) -> Dict[str, int]:
        return dict(self._hours_left)
