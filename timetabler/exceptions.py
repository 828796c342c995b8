class TimetablerError(Exception):
    """Base class for errors surfaced to callers of the scheduling engine"""

    code = "TIMETABLER_ERROR"


class PreconditionError(TimetablerError):
    """The requested operation cannot run with the data it was given"""

    code = "PRECONDITION_FAILED"


class GenerationInProgressError(TimetablerError):
    """A timetable generation is already running"""

    code = "GENERATION_IN_PROGRESS"


class StoreUnavailableError(TimetablerError):
    """Timetable data could not be read from the backing store"""

    code = "STORE_UNAVAILABLE"
