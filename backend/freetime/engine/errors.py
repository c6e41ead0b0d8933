"""
Engine Errors - Structured failures raised by the availability engine

Every stage raises immediately on invalid input; nothing here is recoverable
inside the engine. Callers translate the ``code`` of each error into whatever
user-visible message their surface needs.
"""


class FreeTimeError(ValueError):
    """Base class for all availability engine failures"""

    code = "FREE_TIME_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInterval(FreeTimeError):
    """An interval has start >= end, or its weekday metadata disagrees with its start"""

    code = "INVALID_INTERVAL"


class InvalidRecurrence(FreeTimeError):
    """Malformed recurrence metadata (unknown frequency, non-positive step, missing pattern)"""

    code = "INVALID_RECURRENCE"


class InvalidRange(FreeTimeError):
    """A query range, working-hours window or numeric limit is unusable"""

    code = "INVALID_RANGE"


class InvalidCommitment(FreeTimeError):
    """A commitment was handed to a person who does not own it"""

    code = "INVALID_COMMITMENT"


class EmptyParticipantSet(FreeTimeError):
    """Raised only when a caller explicitly requires at least one participant"""

    code = "EMPTY_PARTICIPANT_SET"


__all__ = [
    'FreeTimeError',
    'InvalidInterval',
    'InvalidRecurrence',
    'InvalidRange',
    'InvalidCommitment',
    'EmptyParticipantSet'
]
