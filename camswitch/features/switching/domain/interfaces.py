from abc import ABC, abstractmethod

from camswitch.core.common.enums import TransitionType
from camswitch.features.cameras.domain.models import CameraConfig


class ICameraSwitcher(ABC):
    @abstractmethod
    def switch(self, session_id: str, camera: CameraConfig, transition: TransitionType) -> int:
        """
        Puts `camera` on air for the session.
        Returns: transition duration in milliseconds.
        Raises: SwitchTargetUnreachable if the camera cannot be reached.
        """
        pass
