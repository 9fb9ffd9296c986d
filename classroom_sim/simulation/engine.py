"""
Session timeline generation.

Walks a session's activity peaks, asks the probability model whether
each pair of participants interacts at that peak, and materializes an
interaction event for every pair that does.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
from datetime import datetime, timedelta
import json
import logging
import math
import random
import uuid

from ..errors import InsufficientParticipants, InvalidDuration, InvalidParameter
from ..participants.profile import Participant, ParticipantProvisioner, ProfileLookup
from ..network.dynamics import (
    InteractionContext,
    InteractionEvent,
    activity_peaks,
    allowed_interaction_types,
    base_duration,
    parse_context,
)
from ..analysis.metrics import GraphMetrics, compute_metrics
from .probability import InteractionProbabilityModel, ProbabilityConfig


logger = logging.getLogger(__name__)

MIN_DURATION_MINUTES = 10
MAX_DURATION_MINUTES = 300
MIN_PARTICIPANTS = 2
MAX_PARTICIPANTS = 100


@dataclass
class TimelineConfig:
    """Ranges used when synthesizing interaction events."""
    start_offset_minutes: int = 10  # events start within +/- this of a peak
    duration_variation: float = 0.5  # +/- fraction of the context base duration
    min_duration_seconds: float = 5.0
    distance_range: Tuple[float, float] = (0.8, 1.5)  # meters
    orientation_range: Tuple[float, float] = (0.0, 45.0)  # degrees
    confidence_range: Tuple[float, float] = (0.7, 1.0)

    def __post_init__(self):
        if self.start_offset_minutes < 0:
            raise InvalidParameter("start_offset_minutes must be non-negative")
        if not 0.0 <= self.duration_variation < 1.0:
            raise InvalidParameter("duration_variation must be in [0, 1)")
        if self.min_duration_seconds <= 0:
            raise InvalidParameter("min_duration_seconds must be positive")
        if not 0.0 < self.distance_range[0] <= self.distance_range[1]:
            raise InvalidParameter(f"Invalid distance range {self.distance_range}")
        if not 0.0 <= self.orientation_range[0] <= self.orientation_range[1] <= 180.0:
            raise InvalidParameter(f"Invalid orientation range {self.orientation_range}")
        if not 0.0 <= self.confidence_range[0] <= self.confidence_range[1] <= 1.0:
            raise InvalidParameter(f"Invalid confidence range {self.confidence_range}")


@dataclass(frozen=True)
class SessionRecord:
    """
    A generated class session.

    Produced in one piece by the timeline generator; participants keep
    roster order and interactions keep peak-then-pair order.
    """
    session_id: str
    course_id: str
    date: datetime
    duration_minutes: int
    session_type: InteractionContext
    participants: Tuple[Participant, ...]
    interactions: Tuple[InteractionEvent, ...]
    network_metrics: GraphMetrics

    @property
    def participant_ids(self) -> List[str]:
        return [p.participant_id for p in self.participants]

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        for participant in self.participants:
            if participant.participant_id == participant_id:
                return participant
        return None

    def events_for(self, participant_id: str) -> List[InteractionEvent]:
        """All interactions the participant took part in."""
        return [e for e in self.interactions if e.involves(participant_id)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.session_id,
            "course_id": self.course_id,
            "date": self.date.isoformat(),
            "duration": self.duration_minutes,
            "session_type": self.session_type.value,
            "participants": [p.to_dict() for p in self.participants],
            "interactions": [e.to_dict() for e in self.interactions],
            "network_metrics": self.network_metrics.to_dict(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def __repr__(self) -> str:
        return (
            f"SessionRecord(id={self.session_id[:8]}, type={self.session_type.value}, "
            f"participants={len(self.participants)}, interactions={len(self.interactions)})"
        )


class TimelineGenerator:
    """
    Generates the interaction timeline of a session.

    At each activity peak every unordered pair of participants is
    evaluated once against the probability model. All randomness comes
    from the injected random source, so a seeded source and a fixed
    start time reproduce a session exactly.
    """

    def __init__(
        self,
        config: Optional[TimelineConfig] = None,
        probability_model: Optional[InteractionProbabilityModel] = None,
        provisioner: Optional[ParticipantProvisioner] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or TimelineConfig()
        self.probability_model = probability_model or InteractionProbabilityModel()
        self._rng = rng or random.Random()
        self.provisioner = provisioner or ParticipantProvisioner(rng=self._rng)

    def generate(
        self,
        course_id: str,
        session_type,
        duration_minutes: int,
        participant_ids: Sequence[str],
        start_time: Optional[datetime] = None,
    ) -> SessionRecord:
        """
        Generate a full session.

        A single participant yields a session with no interactions and
        degenerate metrics rather than an error.
        """
        context = parse_context(session_type)
        if duration_minutes <= 0:
            raise InvalidDuration(
                f"Session duration must be positive, got {duration_minutes}"
            )

        participants = self.provisioner.provision(participant_ids)
        start_time = start_time or datetime.now()
        session_id = self._new_id()

        events = self.generate_timeline(
            session_id, participants, duration_minutes, context, start_time
        )
        metrics = compute_metrics(
            events,
            [p.participant_id for p in participants],
            timestamp=start_time,
        )

        logger.info(
            "Generated %s session %s: %d participants, %d interactions",
            context.value, session_id[:8], len(participants), len(events),
        )

        return SessionRecord(
            session_id=session_id,
            course_id=course_id,
            date=start_time,
            duration_minutes=duration_minutes,
            session_type=context,
            participants=tuple(participants),
            interactions=tuple(events),
            network_metrics=metrics,
        )

    def generate_timeline(
        self,
        session_id: str,
        participants: Sequence[Participant],
        duration_minutes: int,
        context: InteractionContext,
        start_time: datetime,
    ) -> List[InteractionEvent]:
        """Events for every peak, merged in peak-then-pair order."""
        events: List[InteractionEvent] = []

        for peak in activity_peaks(context):
            peak_minute = math.floor(duration_minutes * peak)
            peak_events = self._generate_peak_interactions(
                session_id, participants, peak_minute, context, start_time
            )
            logger.debug(
                "Peak %.2f (minute %d): %d interactions",
                peak, peak_minute, len(peak_events),
            )
            events.extend(peak_events)

        return events

    def _generate_peak_interactions(
        self,
        session_id: str,
        participants: Sequence[Participant],
        peak_minute: int,
        context: InteractionContext,
        start_time: datetime,
    ) -> List[InteractionEvent]:
        events = []

        for i, first in enumerate(participants):
            for second in participants[i + 1:]:
                probability = self.probability_model.probability(first, second, context)
                if self._rng.random() < probability:
                    events.append(self._create_event(
                        session_id, first, second, peak_minute, context, start_time
                    ))

        return events

    def _create_event(
        self,
        session_id: str,
        first: Participant,
        second: Participant,
        peak_minute: int,
        context: InteractionContext,
        start_time: datetime,
    ) -> InteractionEvent:
        config = self.config
        rng = self._rng

        offset = config.start_offset_minutes
        shift = rng.randrange(-offset, offset) if offset else 0
        start_minute = max(0, peak_minute + shift)

        return InteractionEvent.create(
            event_id=self._new_id(),
            session_id=session_id,
            participant_id_1=first.participant_id,
            participant_id_2=second.participant_id,
            start_time=start_time + timedelta(minutes=start_minute),
            duration=self._draw_duration(context),
            avg_distance=rng.uniform(*config.distance_range),
            avg_orientation_diff=rng.uniform(*config.orientation_range),
            confidence=rng.uniform(*config.confidence_range),
            interaction_type=rng.choice(allowed_interaction_types(context)),
            context=context,
        )

    def _draw_duration(self, context: InteractionContext) -> float:
        """Context base duration with uniform +/- variation and a floor."""
        base = base_duration(context)
        variation = base * self.config.duration_variation
        duration = base + (self._rng.random() - 0.5) * 2 * variation
        return max(self.config.min_duration_seconds, duration)

    def _new_id(self) -> str:
        return str(uuid.UUID(int=self._rng.getrandbits(128), version=4))

    def __repr__(self) -> str:
        return f"TimelineGenerator(model={self.probability_model!r})"


def generate_session(
    course_id: str,
    session_type,
    duration_minutes: int,
    participant_ids: Sequence[str],
    parameters: Optional[Mapping[str, Any]] = None,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
    lookup: Optional[ProfileLookup] = None,
    start_time: Optional[datetime] = None,
    timeline_config: Optional[TimelineConfig] = None,
) -> SessionRecord:
    """
    Generate a session for a course.

    Args:
        course_id: Course the session belongs to
        session_type: Context name ("lecture", "group-work", ...) or InteractionContext
        duration_minutes: Session length, 10 to 300 minutes
        participant_ids: 2 to 100 unique participant identifiers
        parameters: Optional overrides (interactionProbability,
            extrovertBonus, academicCorrelation)
        rng: Random source; takes precedence over seed
        seed: Seed for a fresh random source
        lookup: Callable resolving an identifier to a Participant
        start_time: Session start; defaults to now
    """
    context = parse_context(session_type)

    if not MIN_DURATION_MINUTES <= duration_minutes <= MAX_DURATION_MINUTES:
        raise InvalidDuration(
            f"Session duration must be between {MIN_DURATION_MINUTES} and "
            f"{MAX_DURATION_MINUTES} minutes, got {duration_minutes}"
        )
    if len(participant_ids) < MIN_PARTICIPANTS:
        raise InsufficientParticipants(
            f"A session needs at least {MIN_PARTICIPANTS} participants, "
            f"got {len(participant_ids)}"
        )
    if len(participant_ids) > MAX_PARTICIPANTS:
        raise InvalidParameter(
            f"A session allows at most {MAX_PARTICIPANTS} participants, "
            f"got {len(participant_ids)}"
        )

    rng = rng or random.Random(seed)
    probability_config = ProbabilityConfig().with_overrides(parameters)

    generator = TimelineGenerator(
        config=timeline_config,
        probability_model=InteractionProbabilityModel(probability_config),
        provisioner=ParticipantProvisioner(lookup=lookup, rng=rng),
        rng=rng,
    )
    return generator.generate(
        course_id, context, duration_minutes, participant_ids, start_time=start_time
    )
