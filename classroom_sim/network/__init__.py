"""Network module - Interaction events and the interaction graph."""

from .graph import InteractionGraph
from .dynamics import (
    InteractionEvent,
    InteractionType,
    InteractionContext,
    parse_context,
)

__all__ = [
    "InteractionGraph",
    "InteractionEvent",
    "InteractionType",
    "InteractionContext",
    "parse_context",
]
