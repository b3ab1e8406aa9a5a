import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Union

from camswitch.core.common.enums import SessionStatus
from camswitch.core.common.errors import SessionInactive, InvalidSignalData
from ..domain.models import AudioSample, EngagementSample

logger = logging.getLogger(__name__)


class SignalIngestor:
    """
    Gatekeeper in front of the decision engine.
    Only validated, timestamped samples for active sessions get through.
    """

    def __init__(self, clock: Callable[[], float]):
        self.clock = clock

    def accept_audio(self, session, data: Union[AudioSample, Dict[str, Any]]) -> AudioSample:
        self._require_active(session)
        sample = data if isinstance(data, AudioSample) else self._parse(AudioSample, data)
        return self._stamp(sample)

    def accept_engagement(self, session, data: Union[EngagementSample, Dict[str, Any]]) -> EngagementSample:
        self._require_active(session)
        sample = data if isinstance(data, EngagementSample) else self._parse(EngagementSample, data)
        return self._stamp(sample)

    @staticmethod
    def _require_active(session) -> None:
        if session.status != SessionStatus.ACTIVE:
            raise SessionInactive(session.session_id)

    @staticmethod
    def _parse(sample_cls, data):
        if not isinstance(data, dict):
            raise InvalidSignalData(f"Expected a {sample_cls.__name__} or a dict, got {type(data).__name__}.")
        try:
            return sample_cls.from_payload(data)
        except TypeError as e:
            raise InvalidSignalData(str(e)) from e

    def _stamp(self, sample):
        if sample.timestamp is None:
            return replace(sample, timestamp=self.clock())
        return sample
