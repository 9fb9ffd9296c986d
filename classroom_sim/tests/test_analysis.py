"""Tests for graph metrics, engagement scoring and summaries."""

from datetime import datetime

import pytest

from classroom_sim.analysis.engagement import (
    EngagementScorer,
    EngagementTrend,
    ScoringConfig,
    compute_engagement,
    rank_by_risk,
    risk_category,
    score_session,
)
from classroom_sim.analysis.metrics import CentralityScores, compute_metrics
from classroom_sim.analysis.summary import (
    activity_timeline,
    get_activity_distribution,
    get_top_active,
    interaction_counts,
    summarize_interactions,
)
from classroom_sim.errors import InvalidDuration, InvalidParameter
from classroom_sim.network.dynamics import InteractionType
from classroom_sim.participants.profile import PersonalityType, RiskLevel
from classroom_sim.simulation.engine import generate_session


STAMP = datetime(2024, 3, 4, 12, 0, 0)


class TestComputeMetrics:
    """Tests for compute_metrics."""

    def test_single_pair(self, make_event):
        metrics = compute_metrics([make_event("a", "b")], timestamp=STAMP)

        assert metrics.total_students == 2
        assert metrics.total_interactions == 1
        assert metrics.network_density == 1.0
        assert metrics.num_components == 1
        assert metrics.centrality_scores["a"].degree == 1.0
        assert metrics.centrality_scores["a"].closeness == 1.0
        assert metrics.centrality_scores["b"].degree == 1.0
        assert metrics.centrality_scores["b"].closeness == 1.0

    def test_open_triad(self, make_event):
        metrics = compute_metrics([make_event("a", "b"), make_event("b", "c")])

        assert metrics.network_density == pytest.approx(2 / 3)
        assert metrics.avg_clustering_coeff == 0.0
        assert metrics.num_components == 1
        assert metrics.centrality_scores["b"].betweenness == pytest.approx(1.0)
        assert metrics.centrality_scores["b"].degree == 1.0
        assert metrics.centrality_scores["a"].degree == 0.5

    def test_triangle(self, make_event):
        metrics = compute_metrics([
            make_event("a", "b"), make_event("b", "c"), make_event("a", "c"),
        ])

        assert metrics.avg_clustering_coeff == pytest.approx(1.0)
        assert metrics.network_density == pytest.approx(1.0)

    def test_no_events(self):
        metrics = compute_metrics([], participant_ids=["a", "b"], timestamp=STAMP)

        assert metrics.total_students == 0
        assert metrics.total_interactions == 0
        assert metrics.network_density == 0.0
        assert metrics.avg_clustering_coeff == 0.0
        assert metrics.num_components == 0
        assert metrics.centrality_scores == {"a": CentralityScores(), "b": CentralityScores()}

    def test_repeated_pair_counts_interactions_not_edges(self, make_event):
        metrics = compute_metrics([make_event("a", "b"), make_event("b", "a"),
                                   make_event("a", "b")])

        assert metrics.total_interactions == 3
        assert metrics.total_students == 2
        assert metrics.network_density == 1.0

    def test_isolates_excluded_from_totals(self, make_event):
        metrics = compute_metrics([make_event("a", "b")], participant_ids=["a", "b", "c"])

        assert metrics.total_students == 2
        assert metrics.network_density == 1.0
        assert metrics.num_components == 1
        assert metrics.centrality_for("c") == CentralityScores()
        assert metrics.centrality_for("unknown").degree == 0.0

    def test_components(self, make_event):
        metrics = compute_metrics([
            make_event("a", "b"), make_event("c", "d"), make_event("d", "e"),
        ])

        assert metrics.num_components == 2

    def test_centralities_are_bounded(self, make_event):
        events = [
            make_event("a", "b"), make_event("a", "c"), make_event("a", "d"),
            make_event("b", "c"), make_event("d", "e"), make_event("f", "g"),
        ]
        metrics = compute_metrics(events)

        for scores in metrics.centrality_scores.values():
            for value in scores.to_dict().values():
                assert 0.0 <= value <= 1.0

    def test_idempotent(self, make_event):
        events = [make_event("a", "b"), make_event("b", "c"), make_event("c", "d"),
                  make_event("a", "c")]

        first = compute_metrics(events, ["a", "b", "c", "d"], timestamp=STAMP)
        second = compute_metrics(events, ["a", "b", "c", "d"], timestamp=STAMP)

        assert first == second
        assert first.to_json() == second.to_json()

    def test_to_dict(self, make_event):
        data = compute_metrics([make_event("a", "b")], timestamp=STAMP).to_dict()

        assert data["timestamp"] == STAMP.isoformat()
        assert data["centrality_scores"]["a"]["degree"] == 1.0


class TestEngagementScorer:
    """Tests for EngagementScorer class."""

    @pytest.fixture
    def scorer(self):
        return EngagementScorer()

    @pytest.fixture
    def roster(self, make_participant):
        return {
            "A": make_participant("A", gpa=1.8, participation_score=20,
                                  personality_type=PersonalityType.INTROVERT),
            "B": make_participant("B", gpa=3.5, participation_score=80,
                                  personality_type=PersonalityType.EXTROVERT),
            "C": make_participant("C", gpa=2.7, participation_score=45),
            "D": make_participant("D", gpa=2.2, participation_score=60),
            "E": make_participant("E", gpa=1.0, participation_score=10,
                                  personality_type=PersonalityType.INTROVERT),
        }

    @pytest.fixture
    def events(self, make_event):
        return [
            make_event("B", "C", InteractionType.COLLABORATION, duration=60.0),
            make_event("B", "D", InteractionType.HELP_SEEKING, duration=120.0),
            make_event("A", "B", InteractionType.DISCUSSION, duration=30.0),
        ]

    @pytest.fixture
    def metrics(self, events, roster):
        return compute_metrics(events, list(roster), timestamp=STAMP)

    def _score(self, scorer, participant, events, metrics, **kwargs):
        return scorer.score(
            participant, events, metrics,
            reference_average_participation=65.0,
            duration_minutes=60,
            session_id="session-1",
            timestamp=STAMP,
            **kwargs,
        )

    def test_well_connected_participant(self, scorer, roster, events, metrics):
        record = self._score(scorer, roster["B"], events, metrics)

        assert record.participant_id == "B"
        assert record.session_id == "session-1"
        assert record.interaction_frequency == pytest.approx(3.0)
        assert record.average_interaction_duration == pytest.approx(70.0)
        assert record.social_network_position == 1.0
        assert record.initiates_interactions
        assert record.responds_to_interactions
        assert record.isolation_risk == 0.2
        assert record.collaboration_score == 15
        assert record.help_seeking_behavior == 20
        assert record.peer_influence_level == 100.0
        assert record.participation_gap == 15.0
        assert record.academic_risk_flags == ()
        assert record.social_risk_flags == ()
        assert record.overall_risk_score == pytest.approx(6.0)
        assert record.engagement_trend == EngagementTrend.STABLE
        assert record.risk_category == RiskLevel.LOW

    def test_initiator_only(self, scorer, roster, events, metrics):
        record = self._score(scorer, roster["A"], events, metrics)

        assert record.initiates_interactions
        assert not record.responds_to_interactions
        assert record.social_network_position == pytest.approx(1 / 3)
        assert record.academic_risk_flags == ("low_gpa", "low_participation", "social_isolation")
        assert record.social_risk_flags == ("introvert_underengagement",)
        # GPA < 2.0: 40, participation < 30: 30, isolation 0.2 * 30
        assert record.overall_risk_score == pytest.approx(76.0)
        assert record.risk_category == RiskLevel.MEDIUM

    def test_responder_only(self, scorer, roster, events, metrics):
        record = self._score(scorer, roster["C"], events, metrics)

        assert not record.initiates_interactions
        assert record.responds_to_interactions
        # GPA < 3.0: 10, participation < 50: 20, isolation 0.2 * 30
        assert record.overall_risk_score == pytest.approx(36.0)

    def test_participant_without_interactions(self, scorer, roster, events, metrics):
        record = self._score(scorer, roster["E"], events, metrics)

        assert record.interaction_frequency == 0.0
        assert record.average_interaction_duration == 0.0
        assert record.social_network_position == 0.0
        assert not record.initiates_interactions
        assert not record.responds_to_interactions
        assert record.isolation_risk == 0.8
        assert record.collaboration_score == 0
        assert record.academic_risk_flags == ("low_gpa", "low_participation", "social_isolation")
        assert record.social_risk_flags == (
            "social_isolation", "no_interactions", "introvert_underengagement",
        )
        assert record.overall_risk_score == pytest.approx(94.0)
        assert record.risk_category == RiskLevel.HIGH
        assert record.participation_gap == -55.0

    def test_scores_are_capped(self, roster, make_event):
        events = [make_event("B", p, InteractionType.COLLABORATION) for p in "ACDE"] * 2
        events += [make_event("B", p, InteractionType.HELP_SEEKING) for p in "ACDE"] * 2
        metrics = compute_metrics(events, list(roster))

        record = EngagementScorer().score(roster["B"], events, metrics, 65.0, 60)

        assert record.collaboration_score == 100
        assert record.help_seeking_behavior == 100

    def test_overall_risk_clamped(self, roster, events, metrics):
        scorer = EngagementScorer(ScoringConfig(isolation_weight=100.0))

        record = self._score(scorer, roster["E"], events, metrics)

        assert record.overall_risk_score == 100.0

    def test_configured_risk_thresholds(self, roster, events, metrics):
        scorer = EngagementScorer(ScoringConfig(risk_thresholds={"medium": 10.0, "high": 20.0}))

        record = self._score(scorer, roster["C"], events, metrics)

        assert record.overall_risk_score == pytest.approx(36.0)
        assert record.risk_category == RiskLevel.HIGH
        assert record.to_dict()["risk_category"] == "high"

    def test_default_thresholds_for_same_score(self, scorer, roster, events, metrics):
        assert self._score(scorer, roster["C"], events, metrics).risk_category == RiskLevel.LOW

    def test_rejects_inverted_risk_thresholds(self):
        with pytest.raises(InvalidParameter):
            ScoringConfig(risk_thresholds={"medium": 90.0, "high": 50.0})

    def test_timestamp_defaults_to_metrics_timestamp(self, scorer, roster, events, metrics):
        first = scorer.score(roster["B"], events, metrics, 65.0, 60)
        second = scorer.score(roster["B"], events, metrics, 65.0, 60)

        assert first.timestamp == STAMP
        assert first == second

    def test_rejects_non_positive_duration(self, scorer, roster, events, metrics):
        with pytest.raises(InvalidDuration):
            scorer.score(roster["B"], events, metrics, 65.0, 0)

    def test_deterministic(self, scorer, roster, events, metrics):
        first = self._score(scorer, roster["D"], events, metrics)
        second = self._score(scorer, roster["D"], events, metrics)

        assert first == second

    @pytest.mark.parametrize("history,expected", [
        (None, EngagementTrend.STABLE),
        ([], EngagementTrend.STABLE),
        ([2.0, 2.0], EngagementTrend.INCREASING),
        ([4.0, 4.0], EngagementTrend.DECREASING),
        ([3.1], EngagementTrend.STABLE),
        ([0.0], EngagementTrend.INCREASING),
    ])
    def test_engagement_trend(self, scorer, roster, events, metrics, history, expected):
        record = self._score(scorer, roster["B"], events, metrics, history=history)

        assert record.engagement_trend == expected

    def test_to_dict(self, scorer, roster, events, metrics):
        data = self._score(scorer, roster["E"], events, metrics).to_dict()

        assert data["engagement_trend"] == "stable"
        assert data["risk_category"] == "high"
        assert data["social_risk_flags"] == [
            "social_isolation", "no_interactions", "introvert_underengagement",
        ]


class TestRiskCategory:
    """Tests for risk_category."""

    def test_thresholds(self):
        assert risk_category(85.0) == RiskLevel.HIGH
        assert risk_category(80.0) == RiskLevel.HIGH
        assert risk_category(79.9) == RiskLevel.MEDIUM
        assert risk_category(60.0) == RiskLevel.MEDIUM
        assert risk_category(59.9) == RiskLevel.LOW
        assert risk_category(0.0) == RiskLevel.LOW

    def test_custom_thresholds(self):
        assert risk_category(50.0, {"medium": 40, "high": 50}) == RiskLevel.HIGH


class TestSessionScoring:
    """Tests for scoring generated sessions."""

    IDS = [f"STU_{i:03d}" for i in range(1, 11)]

    @pytest.fixture
    def session(self, session_start):
        return generate_session("CS101", "group-work", 90, self.IDS, seed=21,
                                start_time=session_start)

    def test_compute_engagement_matches_session(self, session):
        participant = session.participants[0]
        pid = participant.participant_id

        record = compute_engagement(participant, session, 65.0, timestamp=STAMP)

        assert record.session_id == session.session_id
        assert record.interaction_frequency == pytest.approx(
            len(session.events_for(pid)) / 90 * 60
        )
        assert record.social_network_position == session.network_metrics.centrality_for(pid).degree
        assert record.participation_gap == participant.participation_score - 65.0
        assert 0.0 <= record.overall_risk_score <= 100.0

    def test_score_session_defaults_to_roster_mean(self, session):
        records = score_session(session, timestamp=STAMP)
        mean = sum(p.participation_score for p in session.participants) / len(session.participants)

        assert list(records) == self.IDS
        assert sum(r.participation_gap for r in records.values()) == pytest.approx(0.0, abs=1e-9)
        for participant in session.participants:
            expected = participant.participation_score - mean
            assert records[participant.participant_id].participation_gap == pytest.approx(expected)

    def test_records_default_to_session_date(self, session, session_start):
        first = score_session(session)
        second = score_session(session)

        assert first == second
        assert all(r.timestamp == session_start for r in first.values())

    def test_score_session_uses_scorer_thresholds(self, session):
        scorer = EngagementScorer(ScoringConfig(risk_thresholds={"medium": 0.0, "high": 0.0}))

        records = score_session(session, 65.0, scorer=scorer)

        assert all(r.risk_category == RiskLevel.HIGH for r in records.values())

    def test_rank_by_risk(self, session):
        records = score_session(session, 65.0, timestamp=STAMP)

        ranked = rank_by_risk(records.values())
        scores = [r.overall_risk_score for r in ranked]

        assert scores == sorted(scores, reverse=True)
        assert len(rank_by_risk(records.values(), n=3)) == 3


class TestSummary:
    """Tests for interaction summaries."""

    @pytest.fixture
    def events(self, make_event):
        return [
            make_event("B", "C", InteractionType.COLLABORATION, duration=60.0, start_minute=2),
            make_event("B", "D", InteractionType.HELP_SEEKING, duration=120.0, start_minute=2),
            make_event("A", "B", InteractionType.DISCUSSION, duration=30.0, start_minute=5),
            make_event("C", "B", InteractionType.COLLABORATION, duration=90.0, start_minute=7),
        ]

    def test_summarize_interactions(self, events):
        summary = summarize_interactions("B", events, top_n=2)

        assert summary.total_interactions == 4
        assert summary.average_duration == pytest.approx(75.0)
        assert summary.interactions_by_type == {
            "collaboration": 2, "help-seeking": 1, "discussion": 1,
        }
        assert summary.interactions_by_context == {"group-work": 4}
        assert summary.unique_partners == 3
        assert summary.top_partners == [("C", 2), ("A", 1)]

    def test_summarize_without_interactions(self, events):
        summary = summarize_interactions("Z", events)

        assert summary.total_interactions == 0
        assert summary.average_duration == 0.0
        assert summary.top_partners == []
        assert summary.to_dict()["unique_partners"] == 0

    def test_interaction_counts(self, events):
        counts = interaction_counts(events, ["A", "B", "C", "D", "E"])

        assert counts == {"A": 1, "B": 4, "C": 2, "D": 1, "E": 0}

    def test_activity_distribution(self, events):
        distribution = get_activity_distribution(events, ["A", "B", "C", "D", "E"])

        assert distribution["min"] == 0
        assert distribution["max"] == 4
        assert distribution["mean"] == pytest.approx(8 / 5)

    def test_activity_distribution_empty(self):
        assert get_activity_distribution([]) == {"min": 0, "max": 0, "mean": 0, "std": 0}

    def test_top_active(self, events):
        assert get_top_active(events, n=2) == [("B", 4), ("C", 2)]

    def test_activity_timeline(self, events, session_start):
        timeline = activity_timeline(events, session_start, 10)

        assert len(timeline) == 11
        assert timeline[2]["interactions"] == 2
        assert timeline[2]["interaction_seconds"] == pytest.approx(180.0)
        assert sum(t["interactions"] for t in timeline) == 4
