"""
Classroom Interaction Simulator

Synthesizes plausible pairwise interactions among the participants of
a class session and derives network and engagement/risk metrics from
them. Interaction data is synthetic, not measured.
"""

__version__ = "0.1.0"

from .simulation.engine import generate_session
from .analysis.engagement import compute_engagement

__all__ = ["generate_session", "compute_engagement"]
