import logging
from typing import Any, Dict, Optional
from timetabler.exceptions import StoreUnavailableError
from timetabler.models.class_def import ClassDef
from timetabler.models.timetable import Timetable

logger = logging.getLogger(__name__)


class TimetableStore:
    """
    In-memory view of the persisted classes and timetables for one request.

    Timetables are kept in the raw form the persistence layer handed over (a
    JSON string or a nested list) and normalized on every read, so each read
    reflects the latest saved state.
    """

    def __init__(self, classes: Optional[Dict[str, ClassDef]] = None,
                 timetables: Optional[Dict[str, Any]] = None):
        self._classes = dict(classes or {})
        self._timetables: Dict[str, Any] = dict(timetables or {})

    def get_class(self, class_name: str) -> ClassDef:
        class_def = self._classes.get(class_name)
        if class_def is None:
            raise StoreUnavailableError(f"Class {class_name} not found")
        return class_def

    def get_timetable(self, class_name: str) -> Timetable:
        if class_name not in self._timetables:
            raise StoreUnavailableError(f"No timetable stored for class {class_name}")
        return Timetable.from_raw(self._timetables[class_name])

    def all_timetables(self) -> Dict[str, Timetable]:
        return {name: Timetable.from_raw(raw) for name, raw in self._timetables.items()}

    def save_timetable(self, class_name: str, timetable: Timetable):
        logger.debug(f"Saving timetable for class {class_name}")
        self._timetables[class_name] = timetable.to_json()
