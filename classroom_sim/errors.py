"""
Error types raised by the simulator.

Every failure is reported to the caller as one of these; nothing in the
library terminates the process.
"""


class SimulationError(ValueError):
    """Base class for all simulator errors."""


class InvalidDuration(SimulationError):
    """Session duration is outside the accepted range."""


class InsufficientParticipants(SimulationError):
    """Fewer participants than a session needs."""


class DuplicateParticipant(SimulationError):
    """The same participant identifier was given more than once."""

    def __init__(self, participant_id: str):
        super().__init__(f"Duplicate participant identifier: {participant_id!r}")
        self.participant_id = participant_id


class UnknownSessionType(SimulationError):
    """A session type string that names no interaction context."""

    def __init__(self, session_type: str):
        super().__init__(f"Unknown session type: {session_type!r}")
        self.session_type = session_type


class InvalidProfile(SimulationError):
    """A participant profile field is out of range."""


class InvalidParameter(SimulationError):
    """A model or session parameter is out of range."""


class InvalidEvent(SimulationError):
    """An interaction event violates its field invariants."""
