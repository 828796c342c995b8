from dataclasses import dataclass
from typing import Optional, Tuple
from timetabler.models.subject import Subject


@dataclass()
class PoolEntry:
    """
    One period requirement in a class's period pool.

    An entry without a subject is a Free placeholder.

    Attributes:
        subject: Subject to place, or None for a Free period
    """
    subject: Optional[Subject] = None

    @property
    def is_free(self) -> bool:
        return self.subject is None

    @property
    def is_higher_credit(self) -> bool:
        return self.subject is not None and self.subject.is_higher_credit

    @property
    def key(self) -> Tuple[Optional[str], Tuple[str, ...]]:
        """Identity used to match entries: subject name plus teacher list"""
        if self.subject is None:
            return None, ()
        return self.subject.name, tuple(self.subject.teachers)
