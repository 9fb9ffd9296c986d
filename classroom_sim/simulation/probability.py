"""
Pairwise interaction probability.

Combines personality, session context, academic similarity and risk
level into the chance that two participants interact at an activity peak.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

from ..errors import InvalidParameter
from ..network.dynamics import InteractionContext
from ..participants.profile import Participant, PersonalityType, RiskLevel


def _default_personality_multipliers() -> Dict[PersonalityType, float]:
    return {
        PersonalityType.EXTROVERT: 1.5,
        PersonalityType.AMBIVERT: 1.0,
        PersonalityType.INTROVERT: 0.7,
    }


def _default_context_multipliers() -> Dict[InteractionContext, float]:
    return {
        InteractionContext.LECTURE: 0.3,
        InteractionContext.TUTORIAL: 0.8,
        InteractionContext.LAB: 0.9,
        InteractionContext.GROUP_WORK: 1.2,
    }


# Session-level parameter name -> (config field, lower bound, upper bound)
SESSION_PARAMETERS = {
    "interactionProbability": ("base_probability", 0.0, 1.0),
    "extrovertBonus": ("extrovert_multiplier", 0.5, 3.0),
    "academicCorrelation": ("academic_correlation", 0.0, 1.0),
}


@dataclass
class ProbabilityConfig:
    """Constants of the interaction probability model."""
    base_probability: float = 0.10
    personality_multipliers: Dict[PersonalityType, float] = field(
        default_factory=_default_personality_multipliers
    )
    introvert_pair_dampening: float = 0.5
    context_multipliers: Dict[InteractionContext, float] = field(
        default_factory=_default_context_multipliers
    )
    default_context_multiplier: float = 1.0
    gpa_similarity_threshold: float = 0.5
    academic_similarity_bonus: float = 1.2
    high_risk_help_seeking: float = 1.3  # group-work
    high_risk_withdrawal: float = 0.8  # every other context
    max_probability: float = 0.7

    def __post_init__(self):
        if not 0.0 <= self.base_probability <= 1.0:
            raise InvalidParameter(
                f"base_probability must be in [0, 1], got {self.base_probability}"
            )
        if not 0.0 <= self.max_probability <= 1.0:
            raise InvalidParameter(
                f"max_probability must be in [0, 1], got {self.max_probability}"
            )

        multipliers = {
            "introvert_pair_dampening": self.introvert_pair_dampening,
            "default_context_multiplier": self.default_context_multiplier,
            "academic_similarity_bonus": self.academic_similarity_bonus,
            "high_risk_help_seeking": self.high_risk_help_seeking,
            "high_risk_withdrawal": self.high_risk_withdrawal,
            "gpa_similarity_threshold": self.gpa_similarity_threshold,
        }
        for personality, value in self.personality_multipliers.items():
            multipliers[f"personality_multipliers[{personality.value}]"] = value
        for context, value in self.context_multipliers.items():
            multipliers[f"context_multipliers[{context.value}]"] = value

        for name, value in multipliers.items():
            if value < 0:
                raise InvalidParameter(f"{name} must be non-negative, got {value}")

        missing = set(PersonalityType) - set(self.personality_multipliers)
        if missing:
            names = sorted(p.value for p in missing)
            raise InvalidParameter(f"Missing personality multipliers: {names}")

    @property
    def academic_correlation(self) -> float:
        """Similarity bonus expressed as the fraction added on top of 1."""
        return self.academic_similarity_bonus - 1.0

    def with_overrides(self, parameters: Optional[Mapping[str, Any]]) -> "ProbabilityConfig":
        """
        Return a copy with session parameters applied.

        Accepts interactionProbability, extrovertBonus and
        academicCorrelation; absent or None values keep the defaults.
        """
        if not parameters:
            return self

        changes: Dict[str, Any] = {}
        for name, value in parameters.items():
            if name not in SESSION_PARAMETERS:
                raise InvalidParameter(f"Unknown session parameter: {name!r}")
            if value is None:
                continue

            target, low, high = SESSION_PARAMETERS[name]
            if not low <= value <= high:
                raise InvalidParameter(
                    f"{name} must be in [{low}, {high}], got {value}"
                )

            if target == "extrovert_multiplier":
                personality = dict(self.personality_multipliers)
                personality[PersonalityType.EXTROVERT] = float(value)
                changes["personality_multipliers"] = personality
            elif target == "academic_correlation":
                changes["academic_similarity_bonus"] = 1.0 + float(value)
            else:
                changes[target] = float(value)

        return replace(self, **changes)


class InteractionProbabilityModel:
    """
    Probability that two participants interact at one activity peak.

    The result is symmetric in the two participants and capped at
    max_probability.
    """

    def __init__(self, config: Optional[ProbabilityConfig] = None):
        self.config = config or ProbabilityConfig()

    def probability(
        self,
        a: Participant,
        b: Participant,
        context: InteractionContext,
    ) -> float:
        return min(self.uncapped_probability(a, b, context), self.config.max_probability)

    def uncapped_probability(
        self,
        a: Participant,
        b: Participant,
        context: InteractionContext,
    ) -> float:
        """The model value before the final cap is applied."""
        config = self.config
        p = config.base_probability

        # Single pair factor: exactly order-independent in a, b
        p *= (config.personality_multipliers[a.personality_type]
              * config.personality_multipliers[b.personality_type])

        # Applied on top of the two individual introvert multipliers
        if a.is_introvert and b.is_introvert:
            p *= config.introvert_pair_dampening

        p *= config.context_multipliers.get(context, config.default_context_multiplier)

        if abs(a.gpa - b.gpa) < config.gpa_similarity_threshold:
            p *= config.academic_similarity_bonus

        if RiskLevel.HIGH in (a.risk_level, b.risk_level):
            if context == InteractionContext.GROUP_WORK:
                p *= config.high_risk_help_seeking
            else:
                p *= config.high_risk_withdrawal

        return max(0.0, p)

    def __repr__(self) -> str:
        return f"InteractionProbabilityModel(base={self.config.base_probability})"
