# File: camswitch/features/switching/domain/models.py
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from camswitch.core.common.enums import SwitchType, TriggerReason, TransitionType


@dataclass(frozen=True)
class SwitchEvent:
    """
    Append-only record of one attempted switch.
    Failed attempts (cooldown, unreachable target) are recorded too.
    """
    event_id: str
    session_id: str
    timestamp: float
    target_camera: str
    switch_type: SwitchType
    trigger_reason: TriggerReason
    success: bool
    previous_camera: Optional[str] = None
    rule_id: Optional[str] = None
    confidence_score: float = 0.0
    audio_level: float = 0.0
    engagement_score: float = 0.0
    transition_type: TransitionType = TransitionType.SMOOTH
    error: Optional[str] = None
    switch_duration_ms: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "session_id": self.session_id,
            "timestamp": self.timestamp,
            "target_camera": self.target_camera,
            "previous_camera": self.previous_camera,
            "switch_type": self.switch_type.value,
            "trigger_reason": self.trigger_reason.value,
            "rule_id": self.rule_id,
            "confidence_score": self.confidence_score,
            "audio_level": self.audio_level,
            "engagement_score": self.engagement_score,
            "transition_type": self.transition_type.value,
            "success": self.success,
            "error": self.error,
            "switch_duration_ms": self.switch_duration_ms,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class ManualSwitchRequest:
    camera_id: str
    reason: str = "Manual override"
    transition_type: TransitionType = TransitionType.SMOOTH

    def __post_init__(self):
        if not self.camera_id:
            raise ValueError("Target camera is required.")
        object.__setattr__(self, "transition_type", TransitionType(self.transition_type))


@dataclass(frozen=True)
class SwitchResult:
    """Outcome of a manual switch. event is None when the camera was already live."""
    success: bool
    live_camera: Optional[str]
    event: Optional[SwitchEvent] = None
    error: Optional[str] = None
