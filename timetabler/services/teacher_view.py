from typing import Dict
from timetabler.models.timetable import Timetable
from timetabler.models.timetable_slot import TimetableSlot


def teacher_timetable(timetables: Dict[str, Timetable], teacher_id: str,
                      working_days: int, hours_per_day: int) -> Timetable:
    """
    Collects the slots one teacher holds across all classes into a single grid.

    Both confirmed slots and pending substitution requests are included; the
    class name of each slot is the class whose timetable it came from.
    """
    view = Timetable(working_days, hours_per_day)
    for class_name, timetable in timetables.items():
        for day, period, slot in timetable.cells():
            if slot is None or slot.teacher_id != teacher_id or not view.contains(day, period):
                continue
            view.set(day, period, TimetableSlot(slot.subject_name, class_name, slot.status, slot.teacher_id))
    return view
