"""
Participant profiles for classroom sessions.

Profiles are resolved once per session and never change afterwards.
The attributes drive how likely two participants are to interact.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence
from enum import Enum
import logging
import random

from ..errors import DuplicateParticipant, InsufficientParticipants, InvalidProfile


logger = logging.getLogger(__name__)


class AcademicLevel(Enum):
    """Program level of a participant."""
    UNDERGRADUATE = "undergraduate"
    POSTGRADUATE = "postgraduate"


class RiskLevel(Enum):
    """Academic risk level assigned to a participant."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PersonalityType(Enum):
    """Coarse sociability of a participant."""
    EXTROVERT = "extrovert"
    INTROVERT = "introvert"
    AMBIVERT = "ambivert"


MAJORS = [
    "Computer Science", "Engineering", "Mathematics", "Physics",
    "Biology", "Chemistry", "Psychology", "Business", "Economics",
]


@dataclass(frozen=True)
class Participant:
    """
    The stable profile of one session participant.

    Values are validated on construction; an out-of-range field raises
    InvalidProfile instead of being clamped.
    """
    participant_id: str
    name: str
    academic_level: AcademicLevel
    major: str
    gpa: float  # 0.0 to 4.0
    risk_level: RiskLevel
    personality_type: PersonalityType
    participation_score: int  # 0 to 100

    def __post_init__(self):
        if not self.participant_id:
            raise InvalidProfile("Participant identifier must be non-empty")
        if not 0.0 <= self.gpa <= 4.0:
            raise InvalidProfile(
                f"GPA for {self.participant_id} must be in [0, 4], got {self.gpa}"
            )
        if not 0 <= self.participation_score <= 100:
            raise InvalidProfile(
                f"Participation score for {self.participant_id} must be in "
                f"[0, 100], got {self.participation_score}"
            )
        for attr, enum_type in (
            ("academic_level", AcademicLevel),
            ("risk_level", RiskLevel),
            ("personality_type", PersonalityType),
        ):
            if not isinstance(getattr(self, attr), enum_type):
                raise InvalidProfile(
                    f"{attr} for {self.participant_id} must be a {enum_type.__name__}"
                )

    @property
    def is_introvert(self) -> bool:
        return self.personality_type == PersonalityType.INTROVERT

    def to_dict(self) -> dict:
        return {
            "id": self.participant_id,
            "name": self.name,
            "academic_level": self.academic_level.value,
            "major": self.major,
            "gpa": self.gpa,
            "risk_level": self.risk_level.value,
            "personality_type": self.personality_type.value,
            "participation_score": self.participation_score,
        }


ProfileLookup = Callable[[str], Participant]


class ParticipantProvisioner:
    """
    Resolves participant identifiers into profiles.

    A lookup callable supplied by the caller takes precedence. Without
    one, profiles are synthesized from the provisioner's random source,
    which stands in for a student records system.
    """

    def __init__(
        self,
        lookup: Optional[ProfileLookup] = None,
        rng: Optional[random.Random] = None,
    ):
        self._lookup = lookup
        self._rng = rng or random.Random()

    def provision(self, participant_ids: Sequence[str]) -> List[Participant]:
        """Return one profile per identifier, in the given order."""
        if not participant_ids:
            raise InsufficientParticipants("At least one participant identifier is required")

        seen = set()
        for participant_id in participant_ids:
            if participant_id in seen:
                raise DuplicateParticipant(participant_id)
            seen.add(participant_id)

        participants = []
        for participant_id in participant_ids:
            if self._lookup is not None:
                participant = self._lookup(participant_id)
                if participant.participant_id != participant_id:
                    raise InvalidProfile(
                        f"Lookup for {participant_id!r} returned profile "
                        f"{participant.participant_id!r}"
                    )
            else:
                participant = self._synthesize(participant_id)
            participants.append(participant)

        logger.debug("Provisioned %d participants", len(participants))
        return participants

    def _synthesize(self, participant_id: str) -> Participant:
        """Create a plausible mock profile."""
        rng = self._rng
        return Participant(
            participant_id=participant_id,
            name=f"Student {participant_id[-3:]}",
            academic_level=(
                AcademicLevel.POSTGRADUATE if rng.random() > 0.7
                else AcademicLevel.UNDERGRADUATE
            ),
            major=rng.choice(MAJORS),
            gpa=2.0 + rng.random() * 2.0,
            risk_level=self._draw_risk_level(),
            personality_type=self._draw_personality(),
            participation_score=int(rng.random() * 100),
        )

    def _draw_risk_level(self) -> RiskLevel:
        roll = self._rng.random()
        if roll < 0.6:
            return RiskLevel.LOW
        if roll < 0.85:
            return RiskLevel.MEDIUM
        return RiskLevel.HIGH

    def _draw_personality(self) -> PersonalityType:
        roll = self._rng.random()
        if roll < 0.3:
            return PersonalityType.EXTROVERT
        if roll < 0.6:
            return PersonalityType.INTROVERT
        return PersonalityType.AMBIVERT

    def __repr__(self) -> str:
        source = "lookup" if self._lookup is not None else "synthetic"
        return f"ParticipantProvisioner(source={source})"
