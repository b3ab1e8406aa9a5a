import logging
from collections import Counter, defaultdict
from threading import Lock
from typing import Optional

from camswitch.core.common.enums import SwitchType
from camswitch.features.switching.domain.models import SwitchEvent
from ..domain.models import SessionAnalytics

logger = logging.getLogger(__name__)

# Used for the performance score before any sample exists
NEUTRAL_SUCCESS_RATE = 1.0
NEUTRAL_CONFIDENCE = 0.7
NEUTRAL_DURATION_MS = 1000.0
DURATION_BUDGET_MS = 2000.0


def performance_score(success_rate: float, avg_confidence: float, avg_duration_ms: float) -> float:
    """0.4 * success_rate + 0.4 * avg_confidence + 0.2 * speed, speed = max(0, 1 - ms / 2000)."""
    speed = max(0.0, 1.0 - avg_duration_ms / DURATION_BUDGET_MS)
    return round(0.4 * success_rate + 0.4 * avg_confidence + 0.2 * speed, 4)


class SessionAnalyticsAggregator:
    """
    Running totals for one session. `record` is O(1).

    Written from the session's evaluation context, read from any thread.
    """

    def __init__(self, session_id: str):
        self.session_id = session_id
        self._lock = Lock()

        self._total = 0
        self._successful = 0
        self._by_type = Counter()
        self._by_reason = Counter()
        self._confidence_sum = 0.0
        self._duration_sum = 0

        self._dwell = defaultdict(float)
        self._live: Optional[str] = None
        self._live_since: Optional[float] = None
        self._closed = False

    def record(self, event: SwitchEvent) -> None:
        with self._lock:
            self._total += 1
            self._by_type[event.switch_type] += 1
            self._by_reason[event.trigger_reason.value] += 1
            self._confidence_sum += event.confidence_score

            if not event.success:
                return

            self._successful += 1
            self._duration_sum += event.switch_duration_ms
            self._close_dwell(event.timestamp)
            self._live = event.target_camera
            self._live_since = event.timestamp

    def close(self, at: float) -> None:
        """Ends dwell accounting. Further snapshots are frozen at `at`."""
        with self._lock:
            if self._closed:
                return
            self._close_dwell(at)
            self._live_since = None
            self._closed = True

    def snapshot(self, as_of: Optional[float] = None) -> SessionAnalytics:
        """
        Current aggregates. With `as_of`, the live camera's open interval
        is counted up to that instant.
        """
        with self._lock:
            dwell = dict(self._dwell)
            if as_of is not None and self._live is not None and self._live_since is not None:
                dwell[self._live] = dwell.get(self._live, 0.0) + max(0.0, as_of - self._live_since)

            success_rate = self._successful / self._total if self._total else 0.0
            avg_confidence = self._confidence_sum / self._total if self._total else 0.0
            avg_duration = self._duration_sum / self._successful if self._successful else 0.0

            return SessionAnalytics(
                session_id=self.session_id,
                total_switches=self._total,
                successful_switches=self._successful,
                failed_switches=self._total - self._successful,
                auto_switches=self._by_type[SwitchType.AUTO],
                manual_switches=self._by_type[SwitchType.MANUAL],
                switches_by_reason=dict(self._by_reason),
                average_confidence=round(avg_confidence, 4),
                success_rate=round(success_rate, 4),
                average_switch_duration_ms=round(avg_duration, 2),
                camera_dwell_seconds=dwell,
                performance_score=performance_score(
                    success_rate if self._total else NEUTRAL_SUCCESS_RATE,
                    avg_confidence if self._total else NEUTRAL_CONFIDENCE,
                    avg_duration if self._successful else NEUTRAL_DURATION_MS,
                ),
                live_camera=self._live,
            )

    def _close_dwell(self, at: float) -> None:
        if self._live is not None and self._live_since is not None:
            self._dwell[self._live] += max(0.0, at - self._live_since)
