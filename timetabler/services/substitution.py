import logging
from typing import List
from timetabler.exceptions import PreconditionError
from timetabler.models.substitution_outcome import SubstitutionOutcome
from timetabler.models.timetable_slot import SlotStatus, TimetableSlot
from timetabler.services.store import TimetableStore

logger = logging.getLogger(__name__)


def _load_slot(store: TimetableStore, class_name: str, day: int, period: int):
    timetable = store.get_timetable(class_name)
    if not timetable.contains(day, period):
        raise PreconditionError(f"Slot ({day}, {period}) is outside the timetable of class {class_name}")
    return timetable, timetable.get(day, period)


def is_teacher_busy(store: TimetableStore, teacher_id: str, day: int, period: int) -> bool:
    """
    Checks every class timetable for a slot held by the teacher at (day, period).

    Reads the store on each call so the answer reflects the latest saved
    timetables.
    """
    for timetable in store.all_timetables().values():
        if not timetable.contains(day, period):
            continue
        slot = timetable.get(day, period)
        if slot is not None and slot.teacher_id == teacher_id:
            return True
    return False


def substitute_candidates(store: TimetableStore, class_name: str, subject_name: str,
                          teacher_id: str) -> List[str]:
    """Eligible teachers for the subject in list order, without the requester"""
    subject = store.get_class(class_name).find_subject(subject_name)
    if subject is None:
        raise PreconditionError(f"Subject {subject_name} not found in class {class_name}")
    return [candidate for candidate in subject.teachers if candidate != teacher_id]


def request_substitution(store: TimetableStore, class_name: str, day: int, period: int,
                         teacher_id: str) -> SubstitutionOutcome:
    """
    Handles a teacher dropping a confirmed slot.

    The first eligible colleague who holds no slot at that (day, period) in
    any class gets a substitution request. When nobody is free the slot is
    released as a Free period.

    Args:
        store: Source of classes and live timetables
        class_name: Class owning the slot
        day: 0-based day index
        period: 0-based period index
        teacher_id: Teacher who cannot attend

    Returns:
        SubstitutionOutcome with the new slot and the notified candidate

    Raises:
        PreconditionError: the slot is not a confirmed slot of this teacher
    """
    timetable, slot = _load_slot(store, class_name, day, period)
    if slot is None or slot.status != SlotStatus.CONFIRMED:
        raise PreconditionError("Only confirmed slots can be handed to a substitute")
    if slot.teacher_id != teacher_id:
        raise PreconditionError(f"Slot is not assigned to teacher {teacher_id}")

    for candidate in substitute_candidates(store, class_name, slot.subject_name, teacher_id):
        if is_teacher_busy(store, candidate, day, period):
            logger.debug(f"Candidate {candidate} is busy at ({day}, {period})")
            continue

        new_slot = TimetableSlot(slot.subject_name, slot.class_name, SlotStatus.SUB_REQUEST, candidate)
        timetable.set(day, period, new_slot)
        store.save_timetable(class_name, timetable)
        logger.info(f"Substitution request for {class_name} ({day}, {period}) sent to {candidate}")
        return SubstitutionOutcome(new_slot, candidate, f"Substitution request sent to Teacher {candidate}!")

    new_slot = TimetableSlot.free()
    timetable.set(day, period, new_slot)
    store.save_timetable(class_name, timetable)
    logger.info(f"No substitute for {class_name} ({day}, {period}), slot released")
    return SubstitutionOutcome(new_slot, None, "No substitute available. Slot converted to a Free Period.")


def accept_substitution(store: TimetableStore, class_name: str, day: int, period: int,
                        teacher_id: str) -> SubstitutionOutcome:
    """Confirms a pending substitution; only the addressed teacher can accept it"""
    timetable, slot = _load_slot(store, class_name, day, period)
    if slot is None or slot.status != SlotStatus.SUB_REQUEST:
        raise PreconditionError("There is no pending substitution request for this slot")
    if slot.teacher_id != teacher_id:
        raise PreconditionError(f"Substitution request is not addressed to teacher {teacher_id}")

    new_slot = TimetableSlot(slot.subject_name, slot.class_name, SlotStatus.CONFIRMED, slot.teacher_id)
    timetable.set(day, period, new_slot)
    store.save_timetable(class_name, timetable)
    logger.info(f"Teacher {teacher_id} accepted {class_name} ({day}, {period})")
    return SubstitutionOutcome(new_slot, None, "Class accepted! Your timetable has been updated.")
