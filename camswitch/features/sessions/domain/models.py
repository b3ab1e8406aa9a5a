# File: camswitch/features/sessions/domain/models.py
import math
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Optional, Tuple

from camswitch.core.config.settings import settings
from camswitch.core.common.enums import (
    SwitchingMode, SessionStatus, Sensitivity, SwitchType, TriggerReason
)
from camswitch.core.common.errors import InvalidOptions
from camswitch.features.analytics.domain.models import SessionAnalytics
from camswitch.features.decision.domain.models import Decision
from camswitch.features.switching.domain.models import SwitchEvent


@dataclass(frozen=True)
class SessionOptions:
    mode: SwitchingMode = SwitchingMode.AUTO
    sensitivity: Sensitivity = Sensitivity.MEDIUM
    switch_delay: float = settings.DEFAULT_SWITCH_DELAY
    audio_threshold: float = 0.1
    engagement_threshold: float = 0.5
    speaker_detection_enabled: bool = True
    audio_level_switching: bool = True
    engagement_switching: bool = True
    fallback_enabled: bool = True
    transition_effects: bool = True

    def __post_init__(self):
        # Accept plain strings for the enum fields
        try:
            object.__setattr__(self, "mode", SwitchingMode(self.mode))
            object.__setattr__(self, "sensitivity", Sensitivity(self.sensitivity))
        except ValueError as e:
            raise InvalidOptions(str(e)) from e

        if not self._is_number(self.switch_delay) or self.switch_delay < 0:
            raise InvalidOptions(f"switch_delay must be >= 0, got {self.switch_delay!r}.")
        for name in ("audio_threshold", "engagement_threshold"):
            value = getattr(self, name)
            if not self._is_number(value) or not 0.0 <= value <= 1.0:
                raise InvalidOptions(f"{name} must be within [0, 1], got {value!r}.")

    @staticmethod
    def _is_number(value: Any) -> bool:
        return isinstance(value, (int, float)) and not isinstance(value, bool) and not math.isnan(value)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SessionOptions":
        data = data or {}
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidOptions(f"Unknown session options: {sorted(unknown)}")
        return cls(**data)


@dataclass
class SwitchingSession:
    """
    Live state of one interview session.
    Mutated only from the session's evaluation context; callers get copies.
    """
    session_id: str
    interview_id: str
    options: SessionOptions
    started_at: float
    user_id: Optional[str] = None
    status: SessionStatus = SessionStatus.ACTIVE
    ended_at: Optional[float] = None
    live_camera: Optional[str] = None
    last_switch_time: Optional[float] = None
    event_seq: int = field(default=0, repr=False)

    def next_event_id(self) -> str:
        self.event_seq += 1
        return f"{self.session_id}:{self.event_seq}"

    def copy(self) -> "SwitchingSession":
        return replace(self)

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    # Options read by the decision engine and executor
    @property
    def mode(self) -> SwitchingMode:
        return self.options.mode

    @property
    def sensitivity(self) -> Sensitivity:
        return self.options.sensitivity

    @property
    def switch_delay(self) -> float:
        return self.options.switch_delay

    @property
    def audio_threshold(self) -> float:
        return self.options.audio_threshold

    @property
    def engagement_threshold(self) -> float:
        return self.options.engagement_threshold

    @property
    def speaker_detection_enabled(self) -> bool:
        return self.options.speaker_detection_enabled

    @property
    def audio_level_switching(self) -> bool:
        return self.options.audio_level_switching

    @property
    def engagement_switching(self) -> bool:
        return self.options.engagement_switching

    @property
    def fallback_enabled(self) -> bool:
        return self.options.fallback_enabled

    @property
    def transition_effects(self) -> bool:
        return self.options.transition_effects


@dataclass(frozen=True)
class SignalAnalysis:
    """What one accepted sample did to the session."""
    session_id: str
    timestamp: float
    decision: Decision
    event: Optional[SwitchEvent]
    live_camera: Optional[str]

    @property
    def switched(self) -> bool:
        return self.event is not None and self.event.success


@dataclass(frozen=True)
class SessionSummary:
    session_id: str
    interview_id: str
    started_at: float
    ended_at: float
    final_camera: Optional[str]
    analytics: SessionAnalytics

    @property
    def duration_seconds(self) -> float:
        return max(0.0, self.ended_at - self.started_at)


@dataclass(frozen=True)
class EventFilter:
    trigger_reason: Optional[TriggerReason] = None
    switch_type: Optional[SwitchType] = None
    success: Optional[bool] = None
    limit: int = settings.EVENT_PAGE_LIMIT
    offset: int = 0

    def __post_init__(self):
        if self.limit <= 0:
            raise ValueError("limit must be positive.")
        if self.offset < 0:
            raise ValueError("offset cannot be negative.")
        if self.trigger_reason is not None:
            object.__setattr__(self, "trigger_reason", TriggerReason(self.trigger_reason))
        if self.switch_type is not None:
            object.__setattr__(self, "switch_type", SwitchType(self.switch_type))

    def matches(self, event: SwitchEvent) -> bool:
        if self.trigger_reason is not None and event.trigger_reason != self.trigger_reason:
            return False
        if self.switch_type is not None and event.switch_type != self.switch_type:
            return False
        if self.success is not None and event.success != self.success:
            return False
        return True


@dataclass(frozen=True)
class EventPage:
    """Newest-first slice of a session's events."""
    events: Tuple[SwitchEvent, ...]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.events) < self.total
