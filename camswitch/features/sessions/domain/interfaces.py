from abc import ABC, abstractmethod
from typing import List, Optional

from camswitch.features.cameras.domain.models import CameraSet
from camswitch.features.switching.domain.models import SwitchEvent
from .models import SwitchingSession


class ISwitchingRepository(ABC):
    @abstractmethod
    def save_session(self, session: SwitchingSession) -> None:
        """Inserts or updates the session row (status, live camera, timestamps)."""
        pass

    @abstractmethod
    def save_cameras(self, session_id: str, cameras: CameraSet) -> None:
        """Stores a full camera configuration version."""
        pass

    @abstractmethod
    def append_event(self, event: SwitchEvent) -> None:
        """Append-only; events are never updated."""
        pass

    @abstractmethod
    def list_events(self, session_id: str) -> List[SwitchEvent]:
        """All events of a session, oldest first."""
        pass

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[SwitchingSession]:
        pass
