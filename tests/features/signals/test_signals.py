import pytest

from camswitch.core.common.enums import SessionStatus
from camswitch.core.common.errors import InvalidSignalData, SessionInactive
from camswitch.features.sessions.domain.models import SwitchingSession, SessionOptions
from camswitch.features.signals.domain.models import (
    AudioSample, EngagementSample, EngagementWeights, FeatureSnapshot
)
from camswitch.features.signals.service.ingestor import SignalIngestor


@pytest.fixture
def session():
    return SwitchingSession(session_id="s1", interview_id="i1", options=SessionOptions(), started_at=0.0)


@pytest.mark.parametrize("level", [0.0, 1.0])
def test_level_bounds_are_inclusive(level):
    assert AudioSample(level=level).level == level


@pytest.mark.parametrize("payload", [
    {"level": 1.0000001},
    {"level": -0.1},
    {"level": float("nan")},
    {"level": "loud"},
    {"level": True},
    {"level": 0.5, "clarity": 2},
    {"level": 0.5, "background_noise": -1},
    {"level": 0.5, "frequency": -10},
    {"level": 0.5, "silence_duration": -0.5},
    {"frequency": 440},
    {},
])
def test_invalid_audio_payloads(payload):
    with pytest.raises(InvalidSignalData):
        AudioSample.from_payload(payload)


@pytest.mark.parametrize("payload", [
    {"participant_id": "p1", "attention": 1.5},
    {"participant_id": "p1", "gesture_activity": -0.01},
    {"participant_id": ""},
    {"attention": 0.5},
])
def test_invalid_engagement_payloads(payload):
    with pytest.raises(InvalidSignalData):
        EngagementSample.from_payload(payload)


def test_engagement_score_weights():
    sample = EngagementSample("p1", attention=1.0, interaction=0.5, speech_activity=0.0, gesture_activity=1.0)

    assert sample.score() == pytest.approx(0.3 * 1.0 + 0.3 * 0.5 + 0.2 * 0.0 + 0.2 * 1.0)
    assert EngagementSample("p2").score() == pytest.approx(0.5)


def test_engagement_weights_must_sum_to_one():
    with pytest.raises(ValueError):
        EngagementWeights(attention=0.5, interaction=0.5, speech_activity=0.5, gesture_activity=0.5)


def test_feature_snapshot_latest_value_wins():
    features = FeatureSnapshot()

    features.merge(AudioSample(level=0.2))
    features.merge(AudioSample(level=0.6))
    features.merge(EngagementSample("p1", attention=0.1))
    features.merge(EngagementSample("p1", attention=0.9))
    features.merge(EngagementSample("p2"))

    assert features.audio.level == 0.6
    assert features.engagement["p1"].sample.attention == 0.9
    assert len(features.engagement) == 2


def test_top_participants_include_ties():
    features = FeatureSnapshot()
    features.merge(EngagementSample("p1"))
    features.merge(EngagementSample("p2"))
    features.merge(EngagementSample("p3", attention=0.0))

    assert sorted(p.sample.participant_id for p in features.top_participants()) == ["p1", "p2"]


def test_ingestor_stamps_missing_timestamp(session):
    ingestor = SignalIngestor(clock=lambda: 42.0)

    stamped = ingestor.accept_audio(session, {"level": 0.3})
    kept = ingestor.accept_audio(session, {"level": 0.3, "timestamp": 7.0})

    assert stamped.timestamp == 42.0
    assert kept.timestamp == 7.0


def test_ingestor_rejects_stopped_session(session):
    ingestor = SignalIngestor(clock=lambda: 0.0)
    session.status = SessionStatus.STOPPED

    with pytest.raises(SessionInactive):
        ingestor.accept_engagement(session, {"participant_id": "p1"})


def test_ingestor_rejects_non_mapping(session):
    ingestor = SignalIngestor(clock=lambda: 0.0)

    with pytest.raises(InvalidSignalData):
        ingestor.accept_audio(session, [0.5])
