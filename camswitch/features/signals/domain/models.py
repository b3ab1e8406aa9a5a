# File: camswitch/features/signals/domain/models.py
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from camswitch.core.common.errors import InvalidSignalData


def _check_number(name: str, value: Any, low: float = 0.0, high: Optional[float] = 1.0) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        raise InvalidSignalData(f"{name} must be a number, got {value!r}.")
    if value < low or (high is not None and value > high):
        bound = f"[{low}, {high}]" if high is not None else f">= {low}"
        raise InvalidSignalData(f"{name} must be {bound}, got {value}.")


@dataclass(frozen=True)
class AudioSample:
    """
    Pre-extracted audio features for one instant.
    speaker_detected is a hint naming a camera position or camera id.
    """
    level: float
    frequency: float = 0.0
    clarity: float = 0.7
    background_noise: float = 0.1
    speaker_detected: Optional[str] = None
    silence_duration: float = 0.0
    timestamp: Optional[float] = None

    def __post_init__(self):
        for name in ("level", "clarity", "background_noise"):
            _check_number(name, getattr(self, name))
        _check_number("frequency", self.frequency, high=None)
        _check_number("silence_duration", self.silence_duration, high=None)
        if self.timestamp is not None:
            _check_number("timestamp", self.timestamp, high=None)

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "AudioSample":
        if not data:
            raise InvalidSignalData("Audio data is required.")
        if "level" not in data:
            raise InvalidSignalData("Audio data requires a level.")
        return cls(
            level=data["level"],
            frequency=data.get("frequency", 0.0),
            clarity=data.get("clarity", 0.7),
            background_noise=data.get("background_noise", 0.1),
            speaker_detected=data.get("speaker_detected"),
            silence_duration=data.get("silence_duration", 0.0),
            timestamp=data.get("timestamp"),
        )


@dataclass(frozen=True)
class EngagementWeights:
    """Weights of the composite engagement score. Must sum to 1."""
    attention: float = 0.3
    interaction: float = 0.3
    speech_activity: float = 0.2
    gesture_activity: float = 0.2

    def __post_init__(self):
        total = self.attention + self.interaction + self.speech_activity + self.gesture_activity
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Engagement weights must sum to 1, got {total}.")


@dataclass(frozen=True)
class EngagementSample:
    participant_id: str
    attention: float = 0.5
    interaction: float = 0.5
    speech_activity: float = 0.5
    gesture_activity: float = 0.5
    facial_expression: str = "neutral"
    emotion: str = "neutral"
    timestamp: Optional[float] = None

    def __post_init__(self):
        if not self.participant_id:
            raise InvalidSignalData("participant_id is required.")
        for name in ("attention", "interaction", "speech_activity", "gesture_activity"):
            _check_number(name, getattr(self, name))
        if self.timestamp is not None:
            _check_number("timestamp", self.timestamp, high=None)

    def score(self, weights: EngagementWeights = EngagementWeights()) -> float:
        value = (self.attention * weights.attention
                 + self.interaction * weights.interaction
                 + self.speech_activity * weights.speech_activity
                 + self.gesture_activity * weights.gesture_activity)
        return min(1.0, max(0.0, value))

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "EngagementSample":
        if not data:
            raise InvalidSignalData("Engagement data is required.")
        return cls(
            participant_id=data.get("participant_id", ""),
            attention=data.get("attention", 0.5),
            interaction=data.get("interaction", 0.5),
            speech_activity=data.get("speech_activity", 0.5),
            gesture_activity=data.get("gesture_activity", 0.5),
            facial_expression=data.get("facial_expression", "neutral"),
            emotion=data.get("emotion", "neutral"),
            timestamp=data.get("timestamp"),
        )


Signal = Union[AudioSample, EngagementSample]


@dataclass(frozen=True)
class ParticipantEngagement:
    sample: EngagementSample
    score: float


@dataclass
class FeatureSnapshot:
    """
    Latest-value-wins view of a session's signals:
    the last audio sample and the last engagement sample per participant.
    """
    audio: Optional[AudioSample] = None
    engagement: Dict[str, ParticipantEngagement] = field(default_factory=dict)

    def merge(self, signal: Signal, weights: EngagementWeights = EngagementWeights()) -> None:
        if isinstance(signal, AudioSample):
            self.audio = signal
        else:
            self.engagement[signal.participant_id] = ParticipantEngagement(signal, signal.score(weights))

    @property
    def mean_engagement(self) -> Optional[float]:
        if not self.engagement:
            return None
        return sum(p.score for p in self.engagement.values()) / len(self.engagement)

    def top_participants(self) -> List[ParticipantEngagement]:
        """All participants sharing the maximum score."""
        if not self.engagement:
            return []
        best = max(p.score for p in self.engagement.values())
        return [p for p in self.engagement.values() if math.isclose(p.score, best, abs_tol=1e-12)]
