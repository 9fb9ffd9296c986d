"""Simulation module - Interaction probability and timeline generation."""

from .engine import SessionRecord, TimelineConfig, TimelineGenerator, generate_session
from .probability import InteractionProbabilityModel, ProbabilityConfig

__all__ = [
    "SessionRecord",
    "TimelineConfig",
    "TimelineGenerator",
    "generate_session",
    "InteractionProbabilityModel",
    "ProbabilityConfig",
]
