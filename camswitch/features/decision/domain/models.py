# File: camswitch/features/decision/domain/models.py
from dataclasses import dataclass, field
from typing import Optional

from camswitch.core.common.enums import TriggerReason, TransitionType
from camswitch.features.signals.domain.models import EngagementWeights


@dataclass(frozen=True)
class ConfidenceWeights:
    """
    Fixed (not learned) weights turning signal strengths into a [0, 1] confidence.
    Tunable per deployment; the defaults are a starting point only.

    speaker_change:    level * speaker_level + clarity * speaker_clarity + (1 - noise) * speaker_noise
    audio_level:       min(1, level * audio_level_gain)
    engagement:        top_score * engagement_top + mean_score * engagement_mean
    silence_fallback:  silence_confidence
    hybrid:            component weights come from the rule's own conditions
    """
    speaker_level: float = 0.4
    speaker_clarity: float = 0.4
    speaker_noise: float = 0.2
    audio_level_gain: float = 2.0
    engagement_top: float = 0.7
    engagement_mean: float = 0.3
    silence_confidence: float = 0.8
    # Used by hybrid rules when no engagement sample has arrived yet
    neutral_engagement: float = 0.5
    engagement: EngagementWeights = field(default_factory=EngagementWeights)


@dataclass(frozen=True)
class Decision:
    """
    Output of one evaluation. A decision without target_camera is a no-op.
    """
    target_camera: Optional[str] = None
    confidence: float = 0.0
    trigger_reason: Optional[TriggerReason] = None
    rule_id: Optional[str] = None
    rule_cooldown: float = 0.0
    transition_type: TransitionType = TransitionType.SMOOTH
    audio_level: float = 0.0
    engagement_score: float = 0.0
    reason: str = ""

    @property
    def is_noop(self) -> bool:
        return self.target_camera is None

    @classmethod
    def noop(cls, reason: str) -> "Decision":
        return cls(reason=reason)
