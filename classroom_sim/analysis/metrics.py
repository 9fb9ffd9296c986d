"""
Graph metrics for a session's interaction network.

Computed once per session from its full event set and never updated
incrementally.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Sequence
from datetime import datetime
import json
import logging

from ..network.dynamics import InteractionEvent
from ..network.graph import InteractionGraph


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CentralityScores:
    """Centrality of one participant, each measure in [0, 1]."""
    degree: float = 0.0
    betweenness: float = 0.0
    closeness: float = 0.0
    eigenvector: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "degree": self.degree,
            "betweenness": self.betweenness,
            "closeness": self.closeness,
            "eigenvector": self.eigenvector,
        }


@dataclass(frozen=True)
class GraphMetrics:
    """Network-level snapshot of one session."""
    timestamp: datetime
    total_students: int
    total_interactions: int
    network_density: float
    avg_clustering_coeff: float
    num_components: int
    centrality_scores: Dict[str, CentralityScores] = field(default_factory=dict)

    def centrality_for(self, participant_id: str) -> CentralityScores:
        """Scores for a participant; all zero if they never interacted."""
        return self.centrality_scores.get(participant_id, CentralityScores())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "total_students": self.total_students,
            "total_interactions": self.total_interactions,
            "network_density": self.network_density,
            "avg_clustering_coeff": self.avg_clustering_coeff,
            "num_components": self.num_components,
            "centrality_scores": {
                pid: scores.to_dict() for pid, scores in self.centrality_scores.items()
            },
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


def _clamp_unit(value: float) -> float:
    # Floating-point noise can push normalized scores a hair past 1.0
    return min(1.0, max(0.0, value))


def compute_metrics(
    events: Iterable[InteractionEvent],
    participant_ids: Sequence[str] = (),
    timestamp: Optional[datetime] = None,
) -> GraphMetrics:
    """
    Build the interaction graph and measure it.

    Counts and density only cover participants that appear in at least
    one event. Participants in ``participant_ids`` who never interacted
    still get an all-zero centrality entry.
    """
    events = list(events)
    graph = InteractionGraph.from_events(events)

    degree = graph.degree_centrality()
    betweenness = graph.betweenness_centrality()
    closeness = graph.closeness_centrality()
    eigenvector = graph.eigenvector_centrality()

    centrality_scores: Dict[str, CentralityScores] = {}
    for participant_id in participant_ids:
        centrality_scores[participant_id] = CentralityScores()
    for node in graph.nodes:
        centrality_scores[node] = CentralityScores(
            degree=_clamp_unit(degree[node]),
            betweenness=_clamp_unit(betweenness[node]),
            closeness=_clamp_unit(closeness[node]),
            eigenvector=_clamp_unit(eigenvector[node]),
        )

    metrics = GraphMetrics(
        timestamp=timestamp or datetime.now(),
        total_students=graph.node_count,
        total_interactions=len(events),
        network_density=graph.density(),
        avg_clustering_coeff=graph.average_clustering(),
        num_components=graph.count_components(),
        centrality_scores=centrality_scores,
    )

    logger.debug(
        "Graph metrics: %d students, %d interactions, density=%.4f, components=%d",
        metrics.total_students,
        metrics.total_interactions,
        metrics.network_density,
        metrics.num_components,
    )
    return metrics
