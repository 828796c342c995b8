from dataclasses import dataclass
from typing import Optional
from timetabler.models.timetable_slot import TimetableSlot


@dataclass()
class SubstitutionOutcome:
    """
    Result of a substitution action on one slot.

    Attributes:
        slot: New state of the slot
        candidate_id: Teacher notified of a substitution request, if any
        message: Human readable summary for the caller
    """
    slot: TimetableSlot
    candidate_id: Optional[str]
    message: str

    @property
    def released(self) -> bool:
        """True when no substitute was found and the slot became free"""
        return self.slot.is_free
