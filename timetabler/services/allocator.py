import logging
import random
import threading
from contextlib import contextmanager
from typing import Dict, List, Optional, Tuple
from timetabler.exceptions import GenerationInProgressError, PreconditionError
from timetabler.models.class_def import ClassDef
from timetabler.models.generation_config import GenerationConfig
from timetabler.models.generation_result import GenerationResult
from timetabler.models.pool_entry import PoolEntry
from timetabler.models.roster import Roster
from timetabler.models.timetable import Timetable
from timetabler.models.timetable_slot import TimetableSlot
from timetabler.services.period_pool import build_period_pool
from timetabler.services.teacher_ledger import TeacherLedger

logger = logging.getLogger(__name__)

MAX_DAILY_REPEATS = 2


class GenerationGuard:
    """
    Rejects a generation request while another one is running.

    Requests are not queued: the second caller gets GenerationInProgressError
    straight away.
    """

    def __init__(self):
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def hold(self):
        if not self._lock.acquire(blocking=False):
            raise GenerationInProgressError("Timetable generation is already running")
        try:
            yield
        finally:
            self._lock.release()


def place_breaks(timetable: Timetable, config: GenerationConfig):
    """Writes the Break sentinels before any subject is placed"""
    for day in range(config.working_days):
        for period in range(config.hours_per_day):
            if config.is_break(period):
                timetable.set(day, period, TimetableSlot.break_slot())


def order_candidates(pool: List[PoolEntry], previous: Optional[PoolEntry],
                     rng: random.Random) -> List[PoolEntry]:
    """
    Returns the order in which pool entries are tried for one cell.

    The order is random, but after a higher-credit period every higher-credit
    entry goes behind the lower-credit ones.
    """
    candidates = list(pool)
    rng.shuffle(candidates)
    if previous is not None and previous.is_higher_credit:
        candidates.sort(key=lambda entry: entry.is_higher_credit)
    return candidates


def _same_entry(slot: Optional[TimetableSlot], entry: PoolEntry) -> bool:
    if slot is None:
        return False
    if entry.is_free:
        return slot.is_free
    return slot.is_assigned and slot.subject_name == entry.subject.name


def would_triple(timetable: Timetable, day: int, period: int, entry: PoolEntry) -> bool:
    """Checks whether placing the entry makes three identical periods in a row"""
    if period < 2:
        return False
    return (_same_entry(timetable.get(day, period - 1), entry)
            and _same_entry(timetable.get(day, period - 2), entry))


def pick_teacher(entry: PoolEntry, ledger: TeacherLedger, day: int, period: int) -> Optional[str]:
    """First eligible teacher, in list order, who is free and has hours left"""
    for teacher_id in entry.subject.teachers:
        if ledger.is_available(teacher_id, day, period):
            return teacher_id
    return None


def remove_from_pool(pool: List[PoolEntry], entry: PoolEntry):
    """Removes the first entry with the same subject name and teacher list"""
    for index, candidate in enumerate(pool):
        if candidate.key == entry.key:
            del pool[index]
            return


def allocate_class(class_def: ClassDef, pool: List[PoolEntry], ledger: TeacherLedger,
                   config: GenerationConfig, rng: random.Random) -> Tuple[Timetable, int]:
    """
    Fills one class's week grid from its period pool.

    Cells are visited day by day, period by period. Each cell takes the first
    entry of a freshly ordered copy of the pool that passes the daily repeat
    limit, the three-in-a-row check and, for subjects, has a teacher
    available in the ledger. A cell nothing fits into becomes Free without
    consuming the pool.

    Args:
        class_def: Class being scheduled
        pool: Period pool of the class; consumed in place
        ledger: Ledger shared by every class of the cycle
        config: Grid shape and break slots
        rng: Random generator used for every shuffle

    Returns:
        The filled timetable and the number of subject periods left unplaced
    """
    timetable = Timetable(config.working_days, config.hours_per_day)
    place_breaks(timetable, config)
    rng.shuffle(pool)

    for day in range(config.working_days):
        daily_count: Dict[str, int] = {}
        previous: Optional[PoolEntry] = None

        for period in range(config.hours_per_day):
            current = timetable.get(day, period)
            if current is not None and current.is_break:
                previous = None
                continue

            chosen = None
            teacher_id = ""
            for entry in order_candidates(pool, previous, rng):
                if not entry.is_free and daily_count.get(entry.subject.name, 0) >= MAX_DAILY_REPEATS:
                    continue
                if would_triple(timetable, day, period, entry):
                    continue
                if not entry.is_free:
                    teacher_id = pick_teacher(entry, ledger, day, period)
                    if teacher_id is None:
                        continue
                chosen = entry
                break

            if chosen is None:
                timetable.set(day, period, TimetableSlot.free(class_def.name))
                previous = None
                continue

            if chosen.is_free:
                timetable.set(day, period, TimetableSlot.free(class_def.name))
            else:
                timetable.set(day, period,
                              TimetableSlot.assigned(chosen.subject.name, class_def.name, teacher_id))
                daily_count[chosen.subject.name] = daily_count.get(chosen.subject.name, 0) + 1
                ledger.commit(teacher_id, day, period)

            remove_from_pool(pool, chosen)
            previous = chosen

    dropped = sum(1 for entry in pool if not entry.is_free)
    return timetable, dropped


def check_preconditions(roster: Roster):
    """
    Raises:
        PreconditionError: if there is nothing to schedule or a class has no subjects
    """
    if not roster.teachers or not roster.classes:
        raise PreconditionError("Please upload teacher and student data first.")

    without_subjects = [name for name, class_def in roster.classes.items() if not class_def.subjects]
    if without_subjects:
        raise PreconditionError(
            f"Classes {', '.join(without_subjects)} have no subjects assigned. "
            f"Please assign subjects before generating the timetable."
        )


def generate_timetables(roster: Roster, config: GenerationConfig,
                        rng: Optional[random.Random] = None,
                        guard: Optional[GenerationGuard] = None) -> GenerationResult:
    """
    Runs one generation cycle over every class of the roster.

    Classes are allocated in roster order against a single TeacherLedger, so
    earlier classes get priority for shared teachers. Periods that cannot be
    placed are dropped and counted, never raised.

    Args:
        roster: Teachers and classes to schedule
        config: Grid shape, breaks and allocation knobs
        rng: Random generator; defaults to one seeded with config.seed
        guard: Optional guard rejecting concurrent generations

    Returns:
        GenerationResult with one timetable per class and the teachers'
        remaining hours

    Raises:
        PreconditionError: missing roster data or a class without subjects
        GenerationInProgressError: the guard is already held
    """
    if guard is not None:
        with guard.hold():
            return generate_timetables(roster, config, rng)

    check_preconditions(roster)
    if rng is None:
        rng = random.Random(config.seed)

    logger.info(f"Generating timetables for {len(roster.classes)} classes, "
                f"{len(roster.teachers)} teachers, "
                f"grid {config.working_days}x{config.hours_per_day}")

    ledger = TeacherLedger(roster.teachers.values(), config.working_days, config.hours_per_day,
                           carry_over_hours=config.carry_over_hours)
    result = GenerationResult()

    for class_name, class_def in roster.classes.items():
        pool = build_period_pool(class_def.subjects, config.working_days, config.hours_per_day,
                                 config.break_count, config.free_period_percentage)
        timetable, dropped = allocate_class(class_def, pool, ledger, config, rng)
        result.timetables[class_name] = timetable
        result.dropped[class_name] = dropped

        assigned = sum(1 for _, _, slot in timetable.cells() if slot is not None and slot.is_assigned)
        logger.info(f"Class {class_name}: {assigned} periods assigned")
        if dropped:
            logger.warning(f"Class {class_name}: {dropped} subject periods could not be placed")

    result.hours_left = ledger.snapshot_hours()
    logger.info(f"Generation completed, {result.total_dropped} periods dropped in total")
    return result
