# File: camswitch/core/common/enums.py

from enum import Enum, unique

@unique
class SwitchingMode(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"
    HYBRID = "hybrid"

@unique
class SessionStatus(str, Enum):
    ACTIVE = "active"
    STOPPED = "stopped"

@unique
class Sensitivity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

@unique
class SwitchType(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"

@unique
class TriggerReason(str, Enum):
    SPEAKER_CHANGE = "speaker_change"
    AUDIO_LEVEL = "audio_level"
    ENGAGEMENT = "engagement"
    SILENCE_FALLBACK = "silence_fallback"
    MANUAL = "manual"

@unique
class RuleType(str, Enum):
    SPEAKER_CHANGE = "speaker_change"
    AUDIO_LEVEL = "audio_level"
    ENGAGEMENT = "engagement"
    SILENCE_FALLBACK = "silence_fallback"
    HYBRID = "hybrid"

@unique
class ActionKind(str, Enum):
    SWITCH_TO_SPEAKER = "switch_to_speaker"
    SWITCH_TO_HIGHEST_ENGAGEMENT = "switch_to_highest_engagement"
    SWITCH_TO_FIXED_CAMERA = "switch_to_fixed_camera"
    SWITCH_TO_POSITION = "switch_to_position"

@unique
class TransitionType(str, Enum):
    INSTANT = "instant"
    FADE = "fade"
    SMOOTH = "smooth"
    ZOOM = "zoom"
    SMART = "smart"
