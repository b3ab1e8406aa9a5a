# File: camswitch/features/cameras/domain/models.py
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class CameraConfig:
    """
    One camera endpoint of a session.
    Lower priority wins tie-breaks between equally qualified cameras.
    """
    camera_id: str
    device_id: str
    name: str = "Camera"
    position: str = "general"
    priority: int = 5
    auto_switch_enabled: bool = True
    audio_threshold: Optional[float] = None
    engagement_threshold: Optional[float] = None
    quality_settings: Dict[str, Any] = field(default_factory=dict, compare=False)
    constraints: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        if not self.camera_id or not str(self.camera_id).strip():
            raise ValueError("camera_id cannot be empty.")
        if not self.device_id:
            raise ValueError(f"Camera {self.camera_id} has no device_id.")
        if isinstance(self.priority, bool) or not isinstance(self.priority, int):
            raise ValueError(f"Camera {self.camera_id} priority must be an integer.")
        for name in ("audio_threshold", "engagement_threshold"):
            value = getattr(self, name)
            if value is not None and not 0.0 <= value <= 1.0:
                raise ValueError(f"Camera {self.camera_id} {name} must be within [0, 1].")

    @property
    def tie_break_key(self) -> Tuple[int, str]:
        return (self.priority, self.camera_id)

    def matches(self, hint: str) -> bool:
        """A speaker/participant hint names either a position or a camera id."""
        return hint == self.position or hint == self.camera_id

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "CameraConfig":
        return cls(
            camera_id=data.get("camera_id", ""),
            device_id=data.get("device_id", ""),
            name=data.get("name", "Camera"),
            position=data.get("position", "general"),
            priority=data.get("priority", 5),
            auto_switch_enabled=bool(data.get("auto_switch_enabled", True)),
            audio_threshold=data.get("audio_threshold"),
            engagement_threshold=data.get("engagement_threshold"),
            quality_settings=data.get("quality_settings") or {},
            constraints=data.get("constraints") or {},
        )


def pick_preferred(candidates: Iterable[CameraConfig]) -> Optional[CameraConfig]:
    """Lowest priority first, then lexicographically smallest camera_id."""
    ordered = sorted(candidates, key=lambda c: c.tie_break_key)
    return ordered[0] if ordered else None


@dataclass(frozen=True)
class CameraSet:
    """
    Immutable camera set. Reconfiguring a session swaps in a new CameraSet,
    so no reader ever sees a half-applied configuration.
    """
    cameras: Tuple[CameraConfig, ...] = ()
    version: int = 0

    @classmethod
    def build(cls, cameras: Iterable[CameraConfig], version: int) -> "CameraSet":
        cameras = tuple(cameras)
        ids = [c.camera_id for c in cameras]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate camera ids: {duplicates}")
        return cls(cameras=tuple(sorted(cameras, key=lambda c: c.tie_break_key)), version=version)

    @property
    def eligible(self) -> Tuple[CameraConfig, ...]:
        return tuple(c for c in self.cameras if c.auto_switch_enabled)

    def get(self, camera_id: str) -> Optional[CameraConfig]:
        for camera in self.cameras:
            if camera.camera_id == camera_id:
                return camera
        return None

    def matching(self, hint: str, eligible_only: bool = True) -> List[CameraConfig]:
        pool = self.eligible if eligible_only else self.cameras
        return [c for c in pool if c.matches(hint)]

    def __len__(self) -> int:
        return len(self.cameras)


@dataclass(frozen=True)
class CameraConfiguration:
    """Result of configuring a session's cameras."""
    session_id: str
    cameras: Tuple[CameraConfig, ...]
    eligible_count: int

    @property
    def total_cameras(self) -> int:
        return len(self.cameras)
