from dataclasses import dataclass, field
from typing import List


HIGHER_CREDIT_THRESHOLD = 2


@dataclass()
class Subject:
    """
    Represents a subject taught to a class.

    Credits are a relative weight: a class's non-free periods are shared out
    between its subjects in proportion to their credits.

    Attributes:
        name: Subject name, unique within a class (e.g., "Math")
        credits: Relative weight of the subject (positive integer)
        teachers: Ordered list of teacher ids eligible to teach it
    """
    name: str
    credits: int
    teachers: List[str] = field(default_factory=list)

    @property
    def is_higher_credit(self) -> bool:
        """Subjects above the credit threshold count as demanding ones"""
        return self.credits > HIGHER_CREDIT_THRESHOLD
