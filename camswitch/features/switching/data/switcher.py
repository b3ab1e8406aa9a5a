import logging
from threading import Lock
from typing import Dict, Optional, Set

from camswitch.core.config.settings import settings
from camswitch.core.common.enums import TransitionType
from camswitch.core.common.errors import SwitchTargetUnreachable
from camswitch.features.cameras.domain.models import CameraConfig
from ..domain.interfaces import ICameraSwitcher

logger = logging.getLogger(__name__)


class SimulatedCameraSwitcher(ICameraSwitcher):
    """
    Switcher with no hardware behind it.
    Durations come from the transition profile; cameras can be marked
    unreachable to exercise the retry path.
    """

    def __init__(self, delays_ms: Optional[Dict[str, int]] = None):
        self.delays_ms = dict(delays_ms or settings.TRANSITION_DELAYS_MS)
        self._unreachable: Set[str] = set()
        self._lock = Lock()

    def mark_unreachable(self, camera_id: str) -> None:
        with self._lock:
            self._unreachable.add(camera_id)

    def mark_reachable(self, camera_id: str) -> None:
        with self._lock:
            self._unreachable.discard(camera_id)

    def switch(self, session_id: str, camera: CameraConfig, transition: TransitionType) -> int:
        with self._lock:
            down = camera.camera_id in self._unreachable
        if down:
            raise SwitchTargetUnreachable(camera.camera_id)

        duration = self.delays_ms.get(transition.value, 0)
        logger.debug(f"Session {session_id}: {camera.camera_id} on air ({transition.value}, {duration}ms).")
        return duration
