"""Participants module - Profiles and provisioning."""

from .profile import (
    Participant,
    ParticipantProvisioner,
    AcademicLevel,
    RiskLevel,
    PersonalityType,
)

__all__ = [
    "Participant",
    "ParticipantProvisioner",
    "AcademicLevel",
    "RiskLevel",
    "PersonalityType",
]
