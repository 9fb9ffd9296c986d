"""Analysis module - Graph metrics, engagement scoring and summaries."""

from .metrics import GraphMetrics, CentralityScores, compute_metrics
from .engagement import (
    EngagementRecord,
    EngagementScorer,
    EngagementTrend,
    ScoringConfig,
    compute_engagement,
    score_session,
    rank_by_risk,
    risk_category,
)
from .summary import InteractionSummary, summarize_interactions

__all__ = [
    "GraphMetrics",
    "CentralityScores",
    "compute_metrics",
    "EngagementRecord",
    "EngagementScorer",
    "EngagementTrend",
    "ScoringConfig",
    "compute_engagement",
    "score_session",
    "rank_by_risk",
    "risk_category",
    "InteractionSummary",
    "summarize_interactions",
]
