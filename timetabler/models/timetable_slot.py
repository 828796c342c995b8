from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


FREE_SUBJECT = "Free"
BREAK_SUBJECT = "Break"


class SlotStatus(str, Enum):
    CONFIRMED = "confirmed"
    SUB_REQUEST = "sub_request"
    FREE = "free"
    BREAK = "break"


@dataclass()
class TimetableSlot:
    """
    One (day, period) cell of a class timetable.

    Whether a slot is a Free or Break sentinel is decided by its status, not
    by its subject name, so a real subject called "Free" is still an
    assigned slot.

    Attributes:
        subject_name: Subject taught, or "Free"/"Break" for sentinels
        class_name: Owning class; empty for breaks and released slots
        status: One of SlotStatus
        teacher_id: Teacher holding the slot; empty for Free/Break
    """
    subject_name: str
    class_name: str
    status: SlotStatus
    teacher_id: str = ""

    @classmethod
    def free(cls, class_name: str = "") -> "TimetableSlot":
        return cls(FREE_SUBJECT, class_name, SlotStatus.FREE, "")

    @classmethod
    def break_slot(cls) -> "TimetableSlot":
        return cls(BREAK_SUBJECT, "", SlotStatus.BREAK, "")

    @classmethod
    def assigned(cls, subject_name: str, class_name: str, teacher_id: str) -> "TimetableSlot":
        return cls(subject_name, class_name, SlotStatus.CONFIRMED, teacher_id)

    @property
    def is_free(self) -> bool:
        return self.status == SlotStatus.FREE

    @property
    def is_break(self) -> bool:
        return self.status == SlotStatus.BREAK

    @property
    def is_assigned(self) -> bool:
        """True for slots that carry a teacher (confirmed or pending substitution)"""
        return self.status in (SlotStatus.CONFIRMED, SlotStatus.SUB_REQUEST)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subjectName": self.subject_name,
            "className": self.class_name,
            "status": self.status.value,
            "teacherId": self.teacher_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimetableSlot":
        """
        Builds a slot from its wire form.

        Older records carry no status for sentinels, so it is inferred from
        the subject name when missing.
        """
        subject_name = data.get("subjectName") or FREE_SUBJECT
        status = data.get("status")
        if not status:
            if subject_name == BREAK_SUBJECT:
                status = SlotStatus.BREAK
            elif subject_name == FREE_SUBJECT:
                status = SlotStatus.FREE
            else:
                status = SlotStatus.CONFIRMED
        return cls(
            subject_name=subject_name,
            class_name=data.get("className") or "",
            status=SlotStatus(status),
            teacher_id=data.get("teacherId") or "",
        )
