"""Shared test fixtures."""

from datetime import datetime, timedelta

import pytest

from classroom_sim.network.dynamics import (
    InteractionContext,
    InteractionEvent,
    InteractionType,
)
from classroom_sim.participants.profile import (
    AcademicLevel,
    Participant,
    PersonalityType,
    RiskLevel,
)


SESSION_START = datetime(2024, 3, 4, 9, 0, 0)


@pytest.fixture
def session_start():
    return SESSION_START


@pytest.fixture
def make_participant():
    """Factory for participants with sensible defaults."""
    def _make(participant_id, **overrides):
        fields = {
            "participant_id": participant_id,
            "name": f"Student {participant_id}",
            "academic_level": AcademicLevel.UNDERGRADUATE,
            "major": "Mathematics",
            "gpa": 3.0,
            "risk_level": RiskLevel.LOW,
            "personality_type": PersonalityType.AMBIVERT,
            "participation_score": 70,
        }
        fields.update(overrides)
        return Participant(**fields)
    return _make


@pytest.fixture
def make_event():
    """Factory for interaction events between two participants."""
    counter = iter(range(1, 10_000))

    def _make(
        p1,
        p2,
        interaction_type=InteractionType.DISCUSSION,
        duration=60.0,
        start_minute=0,
        context=InteractionContext.GROUP_WORK,
        session_id="session-1",
    ):
        return InteractionEvent.create(
            event_id=f"event-{next(counter)}",
            session_id=session_id,
            participant_id_1=p1,
            participant_id_2=p2,
            start_time=SESSION_START + timedelta(minutes=start_minute),
            duration=duration,
            avg_distance=1.0,
            avg_orientation_diff=10.0,
            confidence=0.9,
            interaction_type=interaction_type,
            context=context,
        )
    return _make
