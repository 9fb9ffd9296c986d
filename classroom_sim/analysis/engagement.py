"""
Per-participant engagement and risk scoring.

Combines a participant's profile, their interactions in a session and
their position in the session's interaction graph into a bounded
engagement/risk record.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence, Tuple
from datetime import datetime
from enum import Enum
import json
import logging

from ..errors import InvalidDuration, InvalidParameter
from ..network.dynamics import InteractionEvent, InteractionType
from ..participants.profile import Participant, RiskLevel
from .metrics import GraphMetrics

if TYPE_CHECKING:
    from ..simulation.engine import SessionRecord


logger = logging.getLogger(__name__)


class EngagementTrend(Enum):
    """Direction of a participant's engagement over time."""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


@dataclass
class ScoringConfig:
    """Thresholds and weights of the engagement/risk score."""
    isolation_threshold: float = 0.1  # degree centrality below this is isolated
    high_isolation_risk: float = 0.8
    low_isolation_risk: float = 0.2
    collaboration_points: int = 15  # per collaboration event
    help_seeking_points: int = 20  # per help-seeking event
    low_gpa: float = 2.5
    low_participation: int = 40
    min_social_events: int = 2
    introvert_min_events: int = 3
    # (upper bound, points) checked in order; first match wins
    gpa_bands: Tuple[Tuple[float, float], ...] = ((2.0, 40.0), (2.5, 25.0), (3.0, 10.0))
    participation_bands: Tuple[Tuple[float, float], ...] = ((30, 30.0), (50, 20.0), (70, 10.0))
    isolation_weight: float = 30.0
    max_risk_score: float = 100.0
    trend_tolerance: float = 0.1  # relative change treated as stable
    risk_thresholds: Dict[str, float] = field(
        default_factory=lambda: {"medium": 60.0, "high": 80.0}
    )

    def __post_init__(self):
        if self.trend_tolerance < 0:
            raise InvalidParameter("trend_tolerance must be non-negative")
        if not 0.0 <= self.low_isolation_risk <= 1.0 or not 0.0 <= self.high_isolation_risk <= 1.0:
            raise InvalidParameter("Isolation risk levels must be in [0, 1]")
        if self.risk_thresholds.get("medium", 60.0) > self.risk_thresholds.get("high", 80.0):
            raise InvalidParameter("Medium risk threshold must not exceed the high threshold")


def risk_category(
    risk_score: float,
    thresholds: Optional[Dict[str, float]] = None,
) -> RiskLevel:
    """
    Categorize a 0-100 risk score.

    Args:
        risk_score: Overall risk score
        thresholds: Dict with 'medium' and 'high' lower bounds

    Returns:
        The matching RiskLevel
    """
    thresholds = thresholds or {}
    if risk_score >= thresholds.get("high", 80.0):
        return RiskLevel.HIGH
    elif risk_score >= thresholds.get("medium", 60.0):
        return RiskLevel.MEDIUM
    else:
        return RiskLevel.LOW


@dataclass(frozen=True)
class EngagementRecord:
    """Engagement and risk summary for one participant in one session."""
    participant_id: str
    session_id: str
    timestamp: datetime

    # Social engagement
    interaction_frequency: float  # interactions per hour
    average_interaction_duration: float  # seconds
    social_network_position: float  # degree centrality, 0-1

    # Behavior
    initiates_interactions: bool
    responds_to_interactions: bool
    isolation_risk: float  # 0-1

    collaboration_score: float  # 0-100
    help_seeking_behavior: float  # 0-100
    peer_influence_level: float  # 0-100

    engagement_trend: EngagementTrend
    participation_gap: float  # deviation from the reference average

    academic_risk_flags: Tuple[str, ...]
    social_risk_flags: Tuple[str, ...]
    overall_risk_score: float  # 0-100
    risk_category: RiskLevel  # from the scorer's risk thresholds

    def to_dict(self) -> Dict[str, Any]:
        return {
            "participant_id": self.participant_id,
            "session_id": self.session_id,
            "timestamp": self.timestamp.isoformat(),
            "interaction_frequency": self.interaction_frequency,
            "average_interaction_duration": self.average_interaction_duration,
            "social_network_position": self.social_network_position,
            "initiates_interactions": self.initiates_interactions,
            "responds_to_interactions": self.responds_to_interactions,
            "isolation_risk": self.isolation_risk,
            "collaboration_score": self.collaboration_score,
            "help_seeking_behavior": self.help_seeking_behavior,
            "peer_influence_level": self.peer_influence_level,
            "engagement_trend": self.engagement_trend.value,
            "participation_gap": self.participation_gap,
            "academic_risk_flags": list(self.academic_risk_flags),
            "social_risk_flags": list(self.social_risk_flags),
            "overall_risk_score": self.overall_risk_score,
            "risk_category": self.risk_category.value,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


class EngagementScorer:
    """
    Scores a participant's engagement within a session.

    Scores are derived on demand and are deterministic for the same
    inputs. Without historical data the engagement trend is reported
    as stable.
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()

    def score(
        self,
        participant: Participant,
        events: Iterable[InteractionEvent],
        graph_metrics: GraphMetrics,
        reference_average_participation: float,
        duration_minutes: float,
        session_id: str = "",
        history: Optional[Sequence[float]] = None,
        timestamp: Optional[datetime] = None,
    ) -> EngagementRecord:
        """
        Build the engagement record for one participant.

        Args:
            participant: The participant being scored
            events: Session events; only those involving the participant count
            graph_metrics: Metrics of the same session
            reference_average_participation: Cohort average to compare against
            duration_minutes: Session length
            session_id: Session the record belongs to
            history: Interaction frequencies from earlier sessions, oldest first
            timestamp: Record time; defaults to the metrics timestamp
        """
        if duration_minutes <= 0:
            raise InvalidDuration(
                f"Session duration must be positive, got {duration_minutes}"
            )

        config = self.config
        pid = participant.participant_id
        own_events = [e for e in events if e.involves(pid)]
        count = len(own_events)

        interaction_frequency = count / duration_minutes * 60
        average_duration = sum(e.duration for e in own_events) / count if count else 0.0

        position = graph_metrics.centrality_for(pid).degree

        initiated = sum(1 for e in own_events if e.participant_id_1 == pid)
        initiates = initiated > 0
        responds = count > initiated

        isolation_risk = (
            config.high_isolation_risk if position < config.isolation_threshold
            else config.low_isolation_risk
        )

        collaboration = self._count_type(own_events, InteractionType.COLLABORATION)
        help_seeking = self._count_type(own_events, InteractionType.HELP_SEEKING)

        academic_flags = self._academic_risk_flags(participant, count)
        social_flags = self._social_risk_flags(participant, count, isolation_risk)
        risk_score = self.overall_risk_score(participant, isolation_risk)

        record = EngagementRecord(
            participant_id=pid,
            session_id=session_id,
            timestamp=timestamp or graph_metrics.timestamp,
            interaction_frequency=interaction_frequency,
            average_interaction_duration=average_duration,
            social_network_position=position,
            initiates_interactions=initiates,
            responds_to_interactions=responds,
            isolation_risk=isolation_risk,
            collaboration_score=min(100.0, float(config.collaboration_points * collaboration)),
            help_seeking_behavior=min(100.0, float(config.help_seeking_points * help_seeking)),
            peer_influence_level=position * 100,
            engagement_trend=self.engagement_trend(interaction_frequency, history),
            participation_gap=participant.participation_score - reference_average_participation,
            academic_risk_flags=tuple(academic_flags),
            social_risk_flags=tuple(social_flags),
            overall_risk_score=risk_score,
            risk_category=risk_category(risk_score, config.risk_thresholds),
        )

        logger.debug(
            "Scored %s: %d events, risk=%.1f", pid, count, record.overall_risk_score
        )
        return record

    @staticmethod
    def _count_type(events: List[InteractionEvent], interaction_type: InteractionType) -> int:
        return sum(1 for e in events if e.interaction_type == interaction_type)

    def _academic_risk_flags(self, participant: Participant, event_count: int) -> List[str]:
        flags = []
        if participant.gpa < self.config.low_gpa:
            flags.append("low_gpa")
        if participant.participation_score < self.config.low_participation:
            flags.append("low_participation")
        if event_count < self.config.min_social_events:
            flags.append("social_isolation")
        return flags

    def _social_risk_flags(
        self,
        participant: Participant,
        event_count: int,
        isolation_risk: float,
    ) -> List[str]:
        flags = []
        if isolation_risk > 0.5:
            flags.append("social_isolation")
        if event_count == 0:
            flags.append("no_interactions")
        if participant.is_introvert and event_count < self.config.introvert_min_events:
            flags.append("introvert_underengagement")
        return flags

    def overall_risk_score(self, participant: Participant, isolation_risk: float) -> float:
        """GPA band + participation band + weighted isolation, capped at 100."""
        config = self.config
        score = 0.0

        for upper, points in config.gpa_bands:
            if participant.gpa < upper:
                score += points
                break

        for upper, points in config.participation_bands:
            if participant.participation_score < upper:
                score += points
                break

        score += isolation_risk * config.isolation_weight
        return min(config.max_risk_score, score)

    def engagement_trend(
        self,
        current_frequency: float,
        history: Optional[Sequence[float]] = None,
    ) -> EngagementTrend:
        """Compare the current interaction frequency against earlier sessions."""
        if not history:
            return EngagementTrend.STABLE

        baseline = sum(history) / len(history)
        if baseline == 0:
            return EngagementTrend.INCREASING if current_frequency > 0 else EngagementTrend.STABLE

        change = (current_frequency - baseline) / baseline
        if change > self.config.trend_tolerance:
            return EngagementTrend.INCREASING
        if change < -self.config.trend_tolerance:
            return EngagementTrend.DECREASING
        return EngagementTrend.STABLE

    def __repr__(self) -> str:
        return "EngagementScorer()"


def compute_engagement(
    participant: Participant,
    session: "SessionRecord",
    reference_average_participation: float,
    history: Optional[Sequence[float]] = None,
    timestamp: Optional[datetime] = None,
    scorer: Optional[EngagementScorer] = None,
) -> EngagementRecord:
    """Engagement/risk record for one participant within a generated session."""
    scorer = scorer or EngagementScorer()
    return scorer.score(
        participant,
        session.events_for(participant.participant_id),
        session.network_metrics,
        reference_average_participation,
        session.duration_minutes,
        session_id=session.session_id,
        history=history,
        timestamp=timestamp,
    )


def score_session(
    session: "SessionRecord",
    reference_average_participation: Optional[float] = None,
    timestamp: Optional[datetime] = None,
    scorer: Optional[EngagementScorer] = None,
) -> Dict[str, EngagementRecord]:
    """
    Score every participant of a session.

    The reference participation defaults to the roster's own mean.
    """
    participants = session.participants
    if reference_average_participation is None:
        reference_average_participation = (
            sum(p.participation_score for p in participants) / len(participants)
            if participants else 0.0
        )

    scorer = scorer or EngagementScorer()
    return {
        p.participant_id: compute_engagement(
            p, session, reference_average_participation,
            timestamp=timestamp, scorer=scorer,
        )
        for p in participants
    }


def rank_by_risk(records: Iterable[EngagementRecord], n: Optional[int] = None) -> List[EngagementRecord]:
    """Records sorted from highest to lowest overall risk."""
    ranked = sorted(
        records,
        key=lambda r: (-r.overall_risk_score, r.participant_id),
    )
    return ranked[:n] if n is not None else ranked
