"""
Interaction events and per-context activity tables.

Describes what a single pairwise interaction looks like and when,
how long and in what form interactions happen in each kind of session.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from datetime import datetime, timedelta
from enum import Enum
import logging

from ..errors import InvalidEvent, UnknownSessionType


logger = logging.getLogger(__name__)


class InteractionType(Enum):
    """Kinds of interaction between two participants."""
    DISCUSSION = "discussion"
    COLLABORATION = "collaboration"
    SOCIAL = "social"
    HELP_SEEKING = "help-seeking"


class InteractionContext(Enum):
    """Session context an interaction takes place in."""
    LECTURE = "lecture"
    TUTORIAL = "tutorial"
    LAB = "lab"
    GROUP_WORK = "group-work"
    BREAK = "break"


# Fractional positions in the session where interaction spikes
ACTIVITY_PEAKS: Dict[InteractionContext, Tuple[float, ...]] = {
    InteractionContext.LECTURE: (0.1, 0.5, 0.9),
    InteractionContext.GROUP_WORK: (0.2, 0.4, 0.6, 0.8),
    InteractionContext.LAB: (0.3, 0.7),
    InteractionContext.TUTORIAL: (0.2, 0.6),
}
DEFAULT_ACTIVITY_PEAKS: Tuple[float, ...] = (0.5,)

# Average interaction length in seconds
BASE_DURATIONS: Dict[InteractionContext, float] = {
    InteractionContext.LECTURE: 15.0,
    InteractionContext.TUTORIAL: 60.0,
    InteractionContext.LAB: 120.0,
    InteractionContext.GROUP_WORK: 180.0,
}
DEFAULT_BASE_DURATION = 60.0

CONTEXT_INTERACTION_TYPES: Dict[InteractionContext, Tuple[InteractionType, ...]] = {
    InteractionContext.LECTURE: (
        InteractionType.DISCUSSION,
        InteractionType.SOCIAL,
    ),
    InteractionContext.TUTORIAL: (
        InteractionType.DISCUSSION,
        InteractionType.HELP_SEEKING,
        InteractionType.COLLABORATION,
    ),
    InteractionContext.LAB: (
        InteractionType.COLLABORATION,
        InteractionType.HELP_SEEKING,
    ),
    InteractionContext.GROUP_WORK: (
        InteractionType.COLLABORATION,
        InteractionType.DISCUSSION,
        InteractionType.HELP_SEEKING,
    ),
}
DEFAULT_INTERACTION_TYPES: Tuple[InteractionType, ...] = (InteractionType.DISCUSSION,)


def parse_context(value) -> InteractionContext:
    """Resolve a context name (or enum member) to an InteractionContext."""
    if isinstance(value, InteractionContext):
        return value
    try:
        return InteractionContext(value)
    except ValueError:
        raise UnknownSessionType(str(value)) from None


def activity_peaks(context: InteractionContext) -> Tuple[float, ...]:
    """Peak positions for a context, falling back to a single mid-session peak."""
    peaks = ACTIVITY_PEAKS.get(context)
    if peaks is None:
        logger.warning(
            "No activity peaks configured for %s, using %s",
            context.value, DEFAULT_ACTIVITY_PEAKS,
        )
        return DEFAULT_ACTIVITY_PEAKS
    return peaks


def base_duration(context: InteractionContext) -> float:
    return BASE_DURATIONS.get(context, DEFAULT_BASE_DURATION)


def allowed_interaction_types(context: InteractionContext) -> Tuple[InteractionType, ...]:
    return CONTEXT_INTERACTION_TYPES.get(context, DEFAULT_INTERACTION_TYPES)


@dataclass(frozen=True)
class InteractionEvent:
    """
    A single interaction between two participants.

    Events are created once by the timeline generator and never
    modified. The first participant is treated as the initiator.
    """
    event_id: str
    session_id: str
    participant_id_1: str
    participant_id_2: str
    start_time: datetime
    end_time: datetime
    duration: float  # seconds
    avg_distance: float  # meters
    avg_orientation_diff: float  # degrees, 0-180
    confidence: float  # 0.0 to 1.0
    interaction_type: InteractionType
    context: InteractionContext

    def __post_init__(self):
        if self.participant_id_1 == self.participant_id_2:
            raise InvalidEvent(
                f"Event {self.event_id} pairs {self.participant_id_1} with itself"
            )
        if not self.duration > 0:
            raise InvalidEvent(f"Event {self.event_id} has non-positive duration")
        if self.end_time <= self.start_time:
            raise InvalidEvent(f"Event {self.event_id} ends before it starts")
        elapsed = (self.end_time - self.start_time).total_seconds()
        if abs(elapsed - self.duration) > 1e-3:
            raise InvalidEvent(
                f"Event {self.event_id} duration {self.duration} does not match "
                f"its time span of {elapsed} seconds"
            )
        if not self.avg_distance > 0:
            raise InvalidEvent(f"Event {self.event_id} has non-positive distance")
        if not 0.0 <= self.avg_orientation_diff <= 180.0:
            raise InvalidEvent(f"Event {self.event_id} orientation must be in [0, 180]")
        if not 0.0 <= self.confidence <= 1.0:
            raise InvalidEvent(f"Event {self.event_id} confidence must be in [0, 1]")

    @classmethod
    def create(
        cls,
        event_id: str,
        session_id: str,
        participant_id_1: str,
        participant_id_2: str,
        start_time: datetime,
        duration: float,
        avg_distance: float,
        avg_orientation_diff: float,
        confidence: float,
        interaction_type: InteractionType,
        context: InteractionContext,
    ) -> "InteractionEvent":
        """Build an event whose end time is derived from its duration."""
        if not duration > 0:
            raise InvalidEvent(f"Event {event_id} has non-positive duration")
        return cls(
            event_id=event_id,
            session_id=session_id,
            participant_id_1=participant_id_1,
            participant_id_2=participant_id_2,
            start_time=start_time,
            end_time=start_time + timedelta(seconds=duration),
            duration=duration,
            avg_distance=avg_distance,
            avg_orientation_diff=avg_orientation_diff,
            confidence=confidence,
            interaction_type=interaction_type,
            context=context,
        )

    def involves(self, participant_id: str) -> bool:
        return participant_id in (self.participant_id_1, self.participant_id_2)

    def partner_of(self, participant_id: str) -> Optional[str]:
        """The other participant, or None if this event does not involve them."""
        if participant_id == self.participant_id_1:
            return self.participant_id_2
        if participant_id == self.participant_id_2:
            return self.participant_id_1
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.event_id,
            "session_id": self.session_id,
            "participant_id_1": self.participant_id_1,
            "participant_id_2": self.participant_id_2,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration": self.duration,
            "avg_distance": self.avg_distance,
            "avg_orientation_diff": self.avg_orientation_diff,
            "confidence": self.confidence,
            "interaction_type": self.interaction_type.value,
            "context": self.context.value,
        }

    def __lt__(self, other: "InteractionEvent") -> bool:
        return self.start_time < other.start_time
