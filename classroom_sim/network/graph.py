"""
Interaction graph for classroom sessions.

An undirected simple graph built from pairwise interaction events,
with the structural measures used for engagement analysis.
"""

from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple
from collections import deque
import logging
import math

from .dynamics import InteractionEvent


logger = logging.getLogger(__name__)


class InteractionGraph:
    """
    An undirected graph of who interacted with whom.

    Repeated interactions between the same pair collapse into one edge;
    the number of interactions is kept as the edge weight.

    Supports:
    - Neighbor and path queries
    - Density and clustering
    - Connected components
    - Degree, closeness, betweenness and eigenvector centrality
    """

    def __init__(self):
        self._adjacency: Dict[str, Set[str]] = {}
        self._weights: Dict[FrozenSet[str], int] = {}

    @classmethod
    def from_events(cls, events: Iterable[InteractionEvent]) -> "InteractionGraph":
        """Build a graph containing every participant seen in the events."""
        graph = cls()
        for event in events:
            graph.add_edge(event.participant_id_1, event.participant_id_2)
        return graph

    def add_node(self, participant_id: str) -> None:
        """Add a participant to the graph."""
        if participant_id not in self._adjacency:
            self._adjacency[participant_id] = set()

    def add_edge(self, source_id: str, target_id: str) -> None:
        """Record one interaction between two participants."""
        if source_id == target_id:
            raise ValueError(f"Self-interaction is not allowed: {source_id}")

        self.add_node(source_id)
        self.add_node(target_id)
        self._adjacency[source_id].add(target_id)
        self._adjacency[target_id].add(source_id)

        key = frozenset((source_id, target_id))
        self._weights[key] = self._weights.get(key, 0) + 1

    def has_edge(self, source_id: str, target_id: str) -> bool:
        return target_id in self._adjacency.get(source_id, ())

    def edge_weight(self, source_id: str, target_id: str) -> int:
        """Number of interactions recorded between two participants."""
        return self._weights.get(frozenset((source_id, target_id)), 0)

    def neighbors(self, participant_id: str) -> List[str]:
        """Participants directly connected to this one, sorted."""
        return sorted(self._adjacency.get(participant_id, ()))

    def degree(self, participant_id: str) -> int:
        return len(self._adjacency.get(participant_id, ()))

    @property
    def nodes(self) -> List[str]:
        """All participant IDs, in insertion order."""
        return list(self._adjacency)

    @property
    def edges(self) -> List[Tuple[str, str, int]]:
        """All edges as (source, target, weight), with source < target."""
        result = []
        for key, weight in self._weights.items():
            source, target = sorted(key)
            result.append((source, target, weight))
        return sorted(result)

    @property
    def node_count(self) -> int:
        return len(self._adjacency)

    @property
    def edge_count(self) -> int:
        """Number of distinct connected pairs."""
        return len(self._weights)

    @property
    def total_weight(self) -> int:
        """Number of interactions, counting repeats."""
        return sum(self._weights.values())

    def density(self) -> float:
        """
        Calculate graph density.

        Density = edges / (nodes * (nodes - 1) / 2)
        For undirected graphs.
        """
        n = self.node_count
        if n < 2:
            return 0.0
        max_edges = n * (n - 1) / 2
        return self.edge_count / max_edges

    def clustering_coefficient(self, participant_id: str) -> float:
        """
        Calculate local clustering coefficient for a participant.

        Measures how interconnected a participant's neighbors are.
        """
        neighbors = self.neighbors(participant_id)
        k = len(neighbors)

        if k < 2:
            return 0.0

        links = 0
        for i, n1 in enumerate(neighbors):
            for n2 in neighbors[i + 1:]:
                if self.has_edge(n1, n2):
                    links += 1

        return links / (k * (k - 1) / 2)

    def average_clustering(self) -> float:
        """
        Average clustering coefficient over participants with degree >= 2.

        Participants with fewer than two neighbors are left out of the
        average entirely rather than counted as zero.
        """
        qualifying = [n for n in self._adjacency if self.degree(n) >= 2]
        if not qualifying:
            return 0.0

        total = sum(self.clustering_coefficient(n) for n in qualifying)
        return total / len(qualifying)

    def shortest_path_lengths(self, source_id: str) -> Dict[str, int]:
        """Hop distance from a participant to everyone reachable, using BFS."""
        if source_id not in self._adjacency:
            return {}

        distances = {source_id: 0}
        queue = deque([source_id])

        while queue:
            current = queue.popleft()
            for neighbor in self.neighbors(current):
                if neighbor not in distances:
                    distances[neighbor] = distances[current] + 1
                    queue.append(neighbor)

        return distances

    def shortest_path_length(self, source_id: str, target_id: str) -> Optional[int]:
        """
        Find shortest path length between two participants.

        Returns None if no path exists.
        """
        return self.shortest_path_lengths(source_id).get(target_id)

    def connected_components(self) -> List[Set[str]]:
        """Maximal groups of mutually reachable participants."""
        visited: Set[str] = set()
        components = []

        for node in self._adjacency:
            if node in visited:
                continue

            component = set(self.shortest_path_lengths(node))
            visited |= component
            components.append(component)

        return components

    def count_components(self) -> int:
        return len(self.connected_components())

    def degree_centrality(self) -> Dict[str, float]:
        """Degree divided by the largest possible degree (n - 1)."""
        n = self.node_count
        if n < 2:
            return {node: 0.0 for node in self._adjacency}
        return {node: self.degree(node) / (n - 1) for node in self._adjacency}

    def closeness_centrality(self) -> Dict[str, float]:
        """
        Closeness from BFS distance sums.

        For a disconnected graph the score is scaled by the fraction of
        the graph a participant can reach, so isolated groups do not look
        artificially central.
        """
        n = self.node_count
        closeness = {}

        for node in self._adjacency:
            distances = self.shortest_path_lengths(node)
            total = sum(distances.values())
            reachable = len(distances) - 1

            if total > 0 and n > 1:
                closeness[node] = (reachable / total) * (reachable / (n - 1))
            else:
                closeness[node] = 0.0

        return closeness

    def betweenness_centrality(self) -> Dict[str, float]:
        """
        Normalized betweenness centrality (Brandes' algorithm).

        Values are the fraction of shortest paths between other pairs
        that pass through each participant.
        """
        nodes = self.nodes
        betweenness = dict.fromkeys(nodes, 0.0)

        for source in nodes:
            stack = []
            predecessors: Dict[str, List[str]] = {node: [] for node in nodes}
            sigma = dict.fromkeys(nodes, 0.0)
            sigma[source] = 1.0
            distance = {source: 0}
            queue = deque([source])

            while queue:
                v = queue.popleft()
                stack.append(v)
                for w in self.neighbors(v):
                    if w not in distance:
                        distance[w] = distance[v] + 1
                        queue.append(w)
                    if distance[w] == distance[v] + 1:
                        sigma[w] += sigma[v]
                        predecessors[w].append(v)

            delta = dict.fromkeys(nodes, 0.0)
            while stack:
                w = stack.pop()
                for v in predecessors[w]:
                    delta[v] += (sigma[v] / sigma[w]) * (1.0 + delta[w])
                if w != source:
                    betweenness[w] += delta[w]

        n = len(nodes)
        if n <= 2:
            return dict.fromkeys(nodes, 0.0)

        # Each unordered pair was counted from both ends
        scale = 1.0 / ((n - 1) * (n - 2))
        return {node: value * scale for node, value in betweenness.items()}

    def eigenvector_centrality(
        self,
        max_iter: int = 100,
        tol: float = 1.0e-6,
    ) -> Dict[str, float]:
        """
        Eigenvector centrality by power iteration.

        Iterates on (A + I) so bipartite graphs converge, and normalizes
        to unit Euclidean length. Slowly mixing graphs (long paths) may not
        reach the tolerance within max_iter; the last normalized iterate is
        then returned and a warning is logged.
        """
        n = self.node_count
        if n == 0:
            return {}

        x = {node: 1.0 / n for node in self._adjacency}

        for _ in range(max_iter):
            previous = x
            x = dict(previous)
            for node in self._adjacency:
                for neighbor in self._adjacency[node]:
                    x[neighbor] += previous[node]

            norm = math.sqrt(sum(value ** 2 for value in x.values())) or 1.0
            x = {node: value / norm for node, value in x.items()}

            if sum(abs(x[node] - previous[node]) for node in x) < n * tol:
                return x

        logger.warning(
            "Eigenvector centrality did not converge in %d iterations", max_iter
        )
        return x

    def __repr__(self) -> str:
        return f"InteractionGraph(nodes={self.node_count}, edges={self.edge_count})"
