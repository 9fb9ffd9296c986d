"""
Descriptive summaries of session interactions.

Per-participant breakdowns (partners, types, contexts) and
session-wide activity distributions.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence, Tuple
from collections import Counter, defaultdict
from datetime import datetime

from ..network.dynamics import InteractionEvent


@dataclass
class InteractionSummary:
    """Interaction statistics of one participant."""
    participant_id: str
    total_interactions: int
    average_duration: float  # seconds
    interactions_by_type: Dict[str, int] = field(default_factory=dict)
    interactions_by_context: Dict[str, int] = field(default_factory=dict)
    unique_partners: int = 0
    top_partners: List[Tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "participant_id": self.participant_id,
            "total_interactions": self.total_interactions,
            "average_duration": self.average_duration,
            "interactions_by_type": dict(self.interactions_by_type),
            "interactions_by_context": dict(self.interactions_by_context),
            "unique_partners": self.unique_partners,
            "top_partners": [
                {"participant_id": pid, "count": count} for pid, count in self.top_partners
            ],
        }


def summarize_interactions(
    participant_id: str,
    events: Iterable[InteractionEvent],
    top_n: int = 3,
) -> InteractionSummary:
    """Summarize the interactions a participant took part in."""
    own_events = [e for e in events if e.involves(participant_id)]
    partners = Counter(e.partner_of(participant_id) for e in own_events)

    # Most frequent first, ties broken by identifier
    top_partners = sorted(partners.items(), key=lambda x: (-x[1], x[0]))[:top_n]

    return InteractionSummary(
        participant_id=participant_id,
        total_interactions=len(own_events),
        average_duration=(
            sum(e.duration for e in own_events) / len(own_events) if own_events else 0.0
        ),
        interactions_by_type=dict(Counter(e.interaction_type.value for e in own_events)),
        interactions_by_context=dict(Counter(e.context.value for e in own_events)),
        unique_partners=len(partners),
        top_partners=top_partners,
    )


def interaction_counts(
    events: Iterable[InteractionEvent],
    participant_ids: Sequence[str] = (),
) -> Dict[str, int]:
    """Number of interactions per participant, including those with none."""
    counts: Dict[str, int] = {pid: 0 for pid in participant_ids}
    for event in events:
        counts[event.participant_id_1] = counts.get(event.participant_id_1, 0) + 1
        counts[event.participant_id_2] = counts.get(event.participant_id_2, 0) + 1
    return counts


def get_activity_distribution(
    events: Iterable[InteractionEvent],
    participant_ids: Sequence[str] = (),
) -> Dict[str, float]:
    """Distribution statistics for participant activity."""
    interactions = list(interaction_counts(events, participant_ids).values())

    if not interactions:
        return {"min": 0, "max": 0, "mean": 0, "std": 0}

    mean = sum(interactions) / len(interactions)
    variance = sum((x - mean) ** 2 for x in interactions) / len(interactions)

    return {
        "min": min(interactions),
        "max": max(interactions),
        "mean": mean,
        "std": variance ** 0.5,
    }


def get_top_active(
    events: Iterable[InteractionEvent],
    n: int = 10,
) -> List[Tuple[str, int]]:
    """The most active participants."""
    sorted_participants = sorted(
        interaction_counts(events).items(),
        key=lambda x: (-x[1], x[0]),
    )
    return sorted_participants[:n]


def activity_timeline(
    events: Iterable[InteractionEvent],
    session_start: datetime,
    duration_minutes: int,
) -> List[Dict[str, Any]]:
    """Interactions starting in each minute of the session."""
    per_minute: Dict[int, int] = defaultdict(int)
    per_minute_seconds: Dict[int, float] = defaultdict(float)

    for event in events:
        minute = int((event.start_time - session_start).total_seconds() // 60)
        per_minute[minute] += 1
        per_minute_seconds[minute] += event.duration

    last_minute = max([duration_minutes] + list(per_minute))
    return [
        {
            "minute": minute,
            "interactions": per_minute.get(minute, 0),
            "interaction_seconds": per_minute_seconds.get(minute, 0.0),
        }
        for minute in range(last_minute + 1)
    ]
