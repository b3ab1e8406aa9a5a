import pytest

from camswitch.core.common.enums import SwitchingMode, Sensitivity
from camswitch.core.common.errors import InvalidOptions
from camswitch.features.sessions.domain.models import SessionOptions, EventFilter, SwitchingSession


def test_options_from_dict_coerces_enums():
    options = SessionOptions.from_dict({"mode": "manual", "sensitivity": "low", "switch_delay": 0})

    assert options.mode == SwitchingMode.MANUAL
    assert options.sensitivity == Sensitivity.LOW
    assert options.switch_delay == 0


@pytest.mark.parametrize("data", [
    {"switch_delay": "fast"},
    {"switch_delay": float("nan")},
    {"engagement_threshold": -0.1},
    {"audio_threshold": True},
])
def test_invalid_option_values(data):
    with pytest.raises(InvalidOptions):
        SessionOptions.from_dict(data)


def test_threshold_bounds_inclusive():
    options = SessionOptions(audio_threshold=0.0, engagement_threshold=1.0)

    assert options.audio_threshold == 0.0
    assert options.engagement_threshold == 1.0


def test_session_copy_is_detached():
    session = SwitchingSession("s1", "i1", SessionOptions(), started_at=0.0)
    copy = session.copy()

    session.live_camera = "cam"
    session.next_event_id()

    assert copy.live_camera is None
    assert copy.event_seq == 0


@pytest.mark.parametrize("kwargs", [{"limit": 0}, {"offset": -1}])
def test_event_filter_bounds(kwargs):
    with pytest.raises(ValueError):
        EventFilter(**kwargs)
