from collections import defaultdict
from typing import Dict, Tuple
from timetabler.models.teacher import Teacher
from timetabler.models.timetable import Timetable
from timetabler.models.timetable_slot import SlotStatus


def count_double_bookings(timetables: Dict[str, Timetable]) -> int:
    """
    Counts teachers holding more than one confirmed slot at the same time.

    :param timetables: dictionary where key = class name, value = its timetable
    :return: number of extra bookings (two classes on one teacher counts once)
    """
    bookings: Dict[Tuple[str, int, int], int] = defaultdict(int)
    for timetable in timetables.values():
        for day, period, slot in timetable.cells():
            if slot is not None and slot.status == SlotStatus.CONFIRMED:
                bookings[(slot.teacher_id, day, period)] += 1

    return sum(count - 1 for count in bookings.values() if count > 1)


def hour_budget_violations(timetables: Dict[str, Timetable], teachers: Dict[str, Teacher]) -> int:
    """
    Counts confirmed periods above each teacher's weekly required hours.

    Slots held by teachers unknown to the roster count in full.
    """
    taught: Dict[str, int] = defaultdict(int)
    for timetable in timetables.values():
        for _, _, slot in timetable.cells():
            if slot is not None and slot.status == SlotStatus.CONFIRMED:
                taught[slot.teacher_id] += 1

    overflow = 0
    for teacher_id, count in taught.items():
        teacher = teachers.get(teacher_id)
        limit = teacher.weekly_required_hours if teacher is not None else 0
        overflow += max(count - limit, 0)
    return overflow


def daily_repeat_violations(timetables: Dict[str, Timetable], max_repeats: int = 2,
                            max_run: int = 2) -> int:
    """
    Counts class-days breaking the daily repetition rules for assigned subjects:
    more than max_repeats periods of one subject in a day, or more than
    max_run periods of it in a row.
    """
    violations = 0
    for timetable in timetables.values():
        for row in timetable.rows():
            per_subject: Dict[str, int] = defaultdict(int)
            run_subject = None
            run_length = 0
            run_broken = set()

            for slot in row:
                if slot is None or not slot.is_assigned:
                    run_subject, run_length = None, 0
                    continue
                per_subject[slot.subject_name] += 1
                if slot.subject_name == run_subject:
                    run_length += 1
                else:
                    run_subject, run_length = slot.subject_name, 1
                if run_length > max_run:
                    run_broken.add(slot.subject_name)

            violations += sum(1 for count in per_subject.values() if count > max_repeats)
            violations += len(run_broken)
    return violations


def check_hard_constraints(timetables: Dict[str, Timetable], teachers: Dict[str, Teacher]) -> int:
    """
    Checks the scheduling invariants and returns the number of violations:
    double bookings, hour budget overflow and daily repetition breaks.
    """
    return (count_double_bookings(timetables)
            + hour_budget_violations(timetables, teachers)
            + daily_repeat_violations(timetables))


def fill_statistics(timetables: Dict[str, Timetable]) -> Dict[str, Dict[str, int]]:
    """
    Counts cells per status for each class.

    :return: {class name: {"confirmed": n, "sub_request": n, "free": n, "break": n, "empty": n}}
    """
    stats = {}
    for class_name, timetable in timetables.items():
        counts = {status.value: 0 for status in SlotStatus}
        counts["empty"] = 0
        for _, _, slot in timetable.cells():
            if slot is None:
                counts["empty"] += 1
            else:
                counts[slot.status.value] += 1
        stats[class_name] = counts
    return stats
