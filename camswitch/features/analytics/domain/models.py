# File: camswitch/features/analytics/domain/models.py
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(frozen=True)
class SessionAnalytics:
    """Point-in-time view of a session's switching statistics."""
    session_id: str
    total_switches: int = 0
    successful_switches: int = 0
    failed_switches: int = 0
    auto_switches: int = 0
    manual_switches: int = 0
    switches_by_reason: Dict[str, int] = field(default_factory=dict)
    average_confidence: float = 0.0
    success_rate: float = 0.0
    average_switch_duration_ms: float = 0.0
    camera_dwell_seconds: Dict[str, float] = field(default_factory=dict)
    performance_score: float = 0.0
    live_camera: Optional[str] = None

    @property
    def most_used_camera(self) -> Optional[str]:
        if not self.camera_dwell_seconds:
            return None
        # Longest dwell, smallest id on ties
        return min(self.camera_dwell_seconds.items(), key=lambda kv: (-kv[1], kv[0]))[0]
