import logging
from typing import Iterable, Optional, Sequence, Union, Any, Dict

from camswitch.core.common.errors import EmptyCameraSet
from ..domain.models import CameraConfig, CameraSet, pick_preferred

logger = logging.getLogger(__name__)

CameraInput = Union[CameraConfig, Dict[str, Any]]


class CameraRegistry:
    """
    Camera set of a single session.
    Owned by the session's evaluation context; reads go through `current`.
    """

    def __init__(self, session_id: str):
        self.session_id = session_id
        self._current = CameraSet()

    @property
    def current(self) -> CameraSet:
        return self._current

    def configure(self, cameras: Sequence[CameraInput], require_eligible: bool = True) -> CameraSet:
        """
        Replaces the full camera set in one reference swap.
        Raises EmptyCameraSet when nothing is given, or when `require_eligible`
        and no camera is auto-switch enabled.
        """
        if not cameras:
            raise EmptyCameraSet("Cameras configuration is required.")

        try:
            configs = [c if isinstance(c, CameraConfig) else CameraConfig.from_payload(c) for c in cameras]
            new_set = CameraSet.build(configs, version=self._current.version + 1)
        except ValueError as e:
            raise EmptyCameraSet(f"Invalid camera configuration: {e}") from e

        if require_eligible and not new_set.eligible:
            raise EmptyCameraSet(f"Session {self.session_id}: no camera has auto_switch_enabled.")

        self._current = new_set
        logger.info(
            f"Session {self.session_id}: configured {len(new_set)} cameras "
            f"({len(new_set.eligible)} auto-eligible, v{new_set.version})."
        )
        return new_set

    def next_eligible(self, excluded: Iterable[Optional[str]]) -> Optional[CameraConfig]:
        """Best-priority eligible camera not in `excluded` (retry target)."""
        skip = {e for e in excluded if e}
        return pick_preferred(c for c in self._current.eligible if c.camera_id not in skip)
