"""
Plotting utilities for session visualization.

Generates visualizations for:
- Interaction network topology
- Activity over the session timeline
- Risk score distribution
"""

from typing import Any, Dict, List, Optional, Sequence
from collections import Counter
import json
import math

from ..analysis.engagement import EngagementRecord
from ..analysis.summary import activity_timeline, get_activity_distribution
from ..network.graph import InteractionGraph
from ..participants.profile import RiskLevel
from ..simulation.engine import SessionRecord


RISK_COLORS = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "orange",
    RiskLevel.HIGH: "red",
}


def build_network_data(session: SessionRecord) -> Dict[str, Any]:
    """
    Node/link data of a session's interaction network.

    Nodes carry their component index as ``group`` and their degree
    centrality; links carry the number of interactions between the pair
    and the most common interaction type.
    """
    graph = InteractionGraph.from_events(session.interactions)

    group_of = {}
    for index, component in enumerate(graph.connected_components()):
        for participant_id in component:
            group_of[participant_id] = index

    metrics = session.network_metrics
    nodes = []
    for participant in session.participants:
        pid = participant.participant_id
        nodes.append({
            "id": pid,
            "name": participant.name,
            "group": group_of.get(pid, -1),  # -1: never interacted
            "centrality": metrics.centrality_for(pid).degree,
            "risk_level": participant.risk_level.value,
        })

    types_by_pair: Dict[frozenset, Counter] = {}
    for event in session.interactions:
        key = frozenset((event.participant_id_1, event.participant_id_2))
        types_by_pair.setdefault(key, Counter())[event.interaction_type.value] += 1

    links = []
    for source, target, weight in graph.edges:
        counts = types_by_pair[frozenset((source, target))]
        dominant = sorted(counts.items(), key=lambda x: (-x[1], x[0]))[0][0]
        links.append({
            "source": source,
            "target": target,
            "weight": weight,
            "interaction_type": dominant,
        })

    return {"nodes": nodes, "links": links, "metrics": metrics.to_dict()}


class SessionPlotter:
    """
    Creates visualizations for generated sessions.

    Figures are drawn with matplotlib and returned to the caller;
    passing a save_path also writes them to disk.
    """

    def __init__(self, output_dir: str = "."):
        """Initialize the session plotter.

        Args:
            output_dir: Directory path for saving output files. Defaults to
                current directory.
        """
        self.output_dir = output_dir

    def plot_network(
        self,
        session: SessionRecord,
        records: Optional[Dict[str, EngagementRecord]] = None,
        save_path: Optional[str] = None,
    ) -> Any:
        """Plot the interaction network on a circular layout.

        Args:
            session: The session to draw.
            records: Optional engagement records; when given, nodes are
                colored by scored risk instead of profile risk level.
            save_path: Optional file path to save the plot image.

        Returns:
            The matplotlib figure.
        """
        import matplotlib.pyplot as plt

        data = build_network_data(session)
        fig, ax = plt.subplots(figsize=(12, 10))

        n = len(data["nodes"])
        positions = {}
        for i, node in enumerate(data["nodes"]):
            angle = 2 * math.pi * i / max(n, 1)
            positions[node["id"]] = (math.cos(angle), math.sin(angle))

        max_weight = max([link["weight"] for link in data["links"]] or [1])
        for link in data["links"]:
            x1, y1 = positions[link["source"]]
            x2, y2 = positions[link["target"]]
            strength = link["weight"] / max_weight
            ax.plot([x1, x2], [y1, y2], 'gray', alpha=0.2 + 0.6 * strength,
                    linewidth=0.5 + strength * 2)

        for node in data["nodes"]:
            x, y = positions[node["id"]]
            if records and node["id"] in records:
                level = records[node["id"]].risk_category
            else:
                level = RiskLevel(node["risk_level"])
            ax.scatter(x, y, c=RISK_COLORS[level], s=100 + 400 * node["centrality"], zorder=5)
            ax.annotate(
                node["id"][:8], (x, y),
                xytext=(5, 5), textcoords='offset points',
                fontsize=8,
            )

        ax.set_title(f'Interaction Network ({session.session_type.value})')
        ax.axis('equal')
        ax.axis('off')

        for level, color in RISK_COLORS.items():
            ax.scatter([], [], c=color, s=100, label=f'{level.value.capitalize()} risk')
        ax.legend(loc='upper right')

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')

        return fig

    def plot_timeline(
        self,
        session: SessionRecord,
        save_path: Optional[str] = None,
    ) -> Any:
        """Plot interactions per minute across the session.

        Args:
            session: The session to draw.
            save_path: Optional file path to save the plot image.

        Returns:
            The matplotlib figure.
        """
        import matplotlib.pyplot as plt

        timeline = activity_timeline(
            session.interactions, session.date, session.duration_minutes
        )
        minutes = [t["minute"] for t in timeline]
        interactions = [t["interactions"] for t in timeline]

        fig, ax = plt.subplots(figsize=(12, 5))

        ax.bar(minutes, interactions, color='steelblue', width=1.0)
        ax.axvline(x=session.duration_minutes, color='red', linestyle='--',
                   alpha=0.5, label='Session end')

        ax.set_xlabel('Minute')
        ax.set_ylabel('Interactions started')
        ax.set_title('Session Activity Over Time')
        ax.legend()
        ax.grid(True, alpha=0.3)

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')

        return fig

    def plot_risk_distribution(
        self,
        records: Sequence[EngagementRecord],
        save_path: Optional[str] = None,
    ) -> Any:
        """Plot the distribution of overall risk scores.

        Args:
            records: Engagement records to summarize.
            save_path: Optional file path to save the plot image.

        Returns:
            The matplotlib figure, or an error dict if no records are provided.
        """
        if not records:
            return {"error": "No records to plot"}

        import matplotlib.pyplot as plt

        scores = [r.overall_risk_score for r in records]
        category_counts = Counter(r.risk_category for r in records)

        fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 5))

        ax1.hist(scores, bins=10, range=(0, 100), color='steelblue', edgecolor='white')
        ax1.set_xlabel('Overall Risk Score')
        ax1.set_ylabel('Participants')
        ax1.set_title('Risk Score Distribution')

        levels = list(RISK_COLORS)
        ax2.bar(
            [level.value for level in levels],
            [category_counts.get(level, 0) for level in levels],
            color=[RISK_COLORS[level] for level in levels],
        )
        ax2.set_ylabel('Participants')
        ax2.set_title('Participants by Risk Category')

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')

        return fig

    def export_plot_data(
        self,
        data: Dict[str, Any],
        filepath: str,
    ) -> None:
        """Export plot data to JSON for external visualization.

        Args:
            data: Dictionary containing plot data to export.
            filepath: Path to the output JSON file.
        """
        with open(filepath, 'w') as f:
            json.dump(data, f, indent=2, default=str)

    def create_summary_report(
        self,
        session: SessionRecord,
        records: Dict[str, EngagementRecord],
        top_n: int = 5,
        save_path: Optional[str] = None,
    ) -> str:
        """Create a text summary report of a session.

        Args:
            session: The generated session.
            records: Engagement records keyed by participant ID.
            top_n: How many highest-risk participants to list.
            save_path: Optional file path to save the text report.

        Returns:
            The formatted report as a string.
        """
        metrics = session.network_metrics
        activity = get_activity_distribution(session.interactions, session.participant_ids)
        categories = Counter(r.risk_category for r in records.values())

        lines = [
            "=" * 60,
            "CLASSROOM INTERACTION SESSION REPORT",
            "=" * 60,
            "",
            "SESSION OVERVIEW",
            "-" * 40,
            f"Session ID: {session.session_id}",
            f"Course: {session.course_id}",
            f"Type: {session.session_type.value}",
            f"Duration: {session.duration_minutes} minutes",
            f"Participants: {len(session.participants)}",
            f"Interactions: {metrics.total_interactions}",
            "",
            "NETWORK STATISTICS",
            "-" * 40,
            f"Interacting Participants: {metrics.total_students}",
            f"Network Density: {metrics.network_density:.4f}",
            f"Avg Clustering: {metrics.avg_clustering_coeff:.4f}",
            f"Connected Components: {metrics.num_components}",
            f"Interactions per Participant: mean={activity['mean']:.2f}, "
            f"min={activity['min']}, max={activity['max']}",
            "",
            "ENGAGEMENT & RISK",
            "-" * 40,
        ]

        for level in (RiskLevel.HIGH, RiskLevel.MEDIUM, RiskLevel.LOW):
            lines.append(f"{level.value.capitalize()} Risk: {categories.get(level, 0)}")

        ranked = sorted(records.values(), key=lambda r: (-r.overall_risk_score, r.participant_id))
        if ranked:
            lines.extend(["", "Highest Risk Participants:"])
            for record in ranked[:top_n]:
                flags = sorted(set(record.academic_risk_flags) | set(record.social_risk_flags))
                lines.append(
                    f"  - {record.participant_id}: score={record.overall_risk_score:.1f}"
                    f" ({', '.join(flags) or 'no flags'})"
                )

        lines.extend([
            "",
            "=" * 60,
            "END OF REPORT",
            "=" * 60,
        ])

        report = "\n".join(lines)

        if save_path:
            with open(save_path, 'w') as f:
                f.write(report)

        return report

    def __repr__(self) -> str:
        return f"SessionPlotter(output_dir={self.output_dir!r})"
