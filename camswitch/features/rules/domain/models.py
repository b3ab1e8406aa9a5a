# File: camswitch/features/rules/domain/models.py
from dataclasses import dataclass, field, asdict, replace
from typing import Any, Dict, Iterable, Optional, Tuple

from camswitch.core.common.enums import ActionKind, RuleType, TransitionType


def _check_unit(name: str, value: float):
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be within [0, 1], got {value}.")


@dataclass(frozen=True)
class RuleConditions:
    """
    Structured predicate parameters. Each rule type reads the subset it needs;
    thresholds are compared inclusively.
    """
    min_audio_level: float = 0.0        # speaker_change, audio_level
    max_audio_level: float = 1.0        # silence_fallback (level must stay at or below)
    max_background_noise: float = 1.0   # audio_level
    min_silence_duration: float = 0.0   # silence_fallback (seconds)
    min_engagement: float = 0.0         # engagement
    # hybrid
    speaker_weight: float = 0.4
    audio_weight: float = 0.3
    engagement_weight: float = 0.3
    min_combined_score: float = 0.6

    def __post_init__(self):
        for name in ("min_audio_level", "max_audio_level", "max_background_noise",
                     "min_engagement", "speaker_weight", "audio_weight",
                     "engagement_weight", "min_combined_score"):
            _check_unit(name, getattr(self, name))
        if self.min_silence_duration < 0:
            raise ValueError("min_silence_duration cannot be negative.")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "RuleConditions":
        data = data or {}
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown condition fields: {sorted(unknown)}")
        return cls(**data)


@dataclass(frozen=True)
class RuleAction:
    """
    Closed set of target-selection strategies.
    camera_id is only meaningful for SWITCH_TO_FIXED_CAMERA, position only for SWITCH_TO_POSITION.
    """
    kind: ActionKind
    camera_id: Optional[str] = None
    position: Optional[str] = None
    transition_type: TransitionType = TransitionType.SMOOTH

    def __post_init__(self):
        if self.kind == ActionKind.SWITCH_TO_FIXED_CAMERA and not self.camera_id:
            raise ValueError("switch_to_fixed_camera requires a camera_id.")
        if self.kind == ActionKind.SWITCH_TO_POSITION and not self.position:
            raise ValueError("switch_to_position requires a position.")

    @classmethod
    def to_speaker(cls, transition: TransitionType = TransitionType.SMOOTH) -> "RuleAction":
        return cls(ActionKind.SWITCH_TO_SPEAKER, transition_type=transition)

    @classmethod
    def to_highest_engagement(cls, transition: TransitionType = TransitionType.SMOOTH) -> "RuleAction":
        return cls(ActionKind.SWITCH_TO_HIGHEST_ENGAGEMENT, transition_type=transition)

    @classmethod
    def to_camera(cls, camera_id: str, transition: TransitionType = TransitionType.SMOOTH) -> "RuleAction":
        return cls(ActionKind.SWITCH_TO_FIXED_CAMERA, camera_id=camera_id, transition_type=transition)

    @classmethod
    def to_position(cls, position: str, transition: TransitionType = TransitionType.SMOOTH) -> "RuleAction":
        return cls(ActionKind.SWITCH_TO_POSITION, position=position, transition_type=transition)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "camera_id": self.camera_id,
            "position": self.position,
            "transition_type": self.transition_type.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RuleAction":
        return cls(
            kind=ActionKind(data["kind"]),
            camera_id=data.get("camera_id"),
            position=data.get("position"),
            transition_type=TransitionType(data.get("transition_type", TransitionType.SMOOTH.value)),
        )


@dataclass(frozen=True)
class SwitchingRule:
    """
    One versioned switching rule. Never mutated: updates produce a new version.
    """
    rule_id: str
    name: str
    rule_type: RuleType
    priority: int
    action: RuleAction
    conditions: RuleConditions = field(default_factory=RuleConditions)
    enabled: bool = True
    min_confidence: float = 0.5
    cooldown_seconds: float = 0.0
    version: int = 1

    def __post_init__(self):
        _check_unit("min_confidence", self.min_confidence)
        if self.cooldown_seconds < 0:
            raise ValueError("cooldown_seconds cannot be negative.")

    @property
    def sort_key(self) -> Tuple[int, str]:
        return (self.priority, self.rule_id)

    def next_version(self, **changes) -> "SwitchingRule":
        return replace(self, version=self.version + 1, **changes)


@dataclass(frozen=True)
class RuleSnapshot:
    """
    Immutable, priority-sorted view of the rule set at one version.
    Evaluations capture one snapshot and use it to completion.
    """
    version: int
    rules: Tuple[SwitchingRule, ...] = ()

    @classmethod
    def build(cls, version: int, rules: Iterable[SwitchingRule]) -> "RuleSnapshot":
        return cls(version=version, rules=tuple(sorted(rules, key=lambda r: r.sort_key)))

    @property
    def enabled(self) -> Tuple[SwitchingRule, ...]:
        return tuple(r for r in self.rules if r.enabled)

    def get(self, rule_id: str) -> Optional[SwitchingRule]:
        for rule in self.rules:
            if rule.rule_id == rule_id:
                return rule
        return None
