import pytest

from camswitch.core.common.enums import (
    RuleType, SessionStatus, SwitchingMode, Sensitivity, TriggerReason, TransitionType
)
from camswitch.core.common.errors import InvalidSessionState
from camswitch.features.cameras.domain.models import CameraConfig
from camswitch.features.cameras.service.api import CameraRegistry
from camswitch.features.decision.domain.models import ConfidenceWeights
from camswitch.features.decision.service.evaluator import DecisionEngine
from camswitch.features.rules.domain.models import SwitchingRule, RuleAction, RuleConditions, RuleSnapshot
from camswitch.features.rules.service.api import RuleStore
from camswitch.features.sessions.domain.models import SwitchingSession, SessionOptions
from camswitch.features.signals.domain.models import AudioSample, EngagementSample, FeatureSnapshot


def make_session(**options):
    return SwitchingSession(session_id="s1", interview_id="i1",
                            options=SessionOptions(**options), started_at=0.0)


def make_registry(*cameras):
    registry = CameraRegistry("s1")
    registry.configure(cameras or [
        CameraConfig("host_cam", "dev0", position="host", priority=1),
        CameraConfig("guest_cam", "dev1", position="guest", priority=2),
        CameraConfig("wide_cam", "dev2", position="wide", priority=3),
    ], require_eligible=False)
    return registry


@pytest.fixture
def engine():
    return DecisionEngine()


@pytest.fixture
def rules():
    return RuleStore().snapshot()


def test_speaker_change_targets_speaker_camera(engine, rules):
    session = make_session(audio_threshold=0.1)

    decision = engine.evaluate(session, make_registry(), FeatureSnapshot(), rules,
                               AudioSample(level=0.8, speaker_detected="guest", timestamp=1.0))

    assert decision.target_camera == "guest_cam"
    assert decision.trigger_reason == TriggerReason.SPEAKER_CHANGE
    assert decision.rule_id == "speaker_change"
    # 0.4 * 0.8 + 0.4 * 0.7 + 0.2 * 0.9
    assert decision.confidence == pytest.approx(0.78)
    assert decision.confidence >= rules.get("speaker_change").min_confidence
    assert decision.transition_type == TransitionType.SMOOTH
    assert decision.rule_cooldown == 2.0


def test_silence_falls_back_to_wide_shot(engine, rules):
    decision = engine.evaluate(make_session(), make_registry(), FeatureSnapshot(), rules,
                               AudioSample(level=0.02, silence_duration=6.0, timestamp=1.0))

    assert decision.target_camera == "wide_cam"
    assert decision.trigger_reason == TriggerReason.SILENCE_FALLBACK
    assert decision.confidence == pytest.approx(0.8)


def test_speaker_already_live_does_not_fire_speaker_change(engine, rules):
    session = make_session()
    session.live_camera = "guest_cam"

    decision = engine.evaluate(session, make_registry(), FeatureSnapshot(), rules,
                               AudioSample(level=0.4, speaker_detected="guest", background_noise=0.5))

    assert decision.is_noop


def test_threshold_boundary_is_inclusive(engine):
    rule = SwitchingRule("loud", "Loud", RuleType.AUDIO_LEVEL, 1, RuleAction.to_position("wide"),
                         conditions=RuleConditions(min_audio_level=0.3), min_confidence=0.5)
    snapshot = RuleSnapshot.build(1, [rule])
    session = make_session(audio_threshold=0.1)

    at = engine.evaluate(session, make_registry(), FeatureSnapshot(), snapshot, AudioSample(level=0.3))
    below = engine.evaluate(session, make_registry(), FeatureSnapshot(), snapshot, AudioSample(level=0.2999))

    assert at.target_camera == "wide_cam"
    assert at.confidence == pytest.approx(0.6)
    assert below.is_noop


def test_first_winning_rule_by_priority(engine, rules):
    # Qualifies for both speaker_change (priority 1) and audio_level (priority 2)
    sample = AudioSample(level=0.9, speaker_detected="host", background_noise=0.05)

    decision = engine.evaluate(make_session(), make_registry(), FeatureSnapshot(), rules, sample)

    assert decision.rule_id == "speaker_change"
    assert decision.target_camera == "host_cam"


def test_sensitivity_floor_blocks_weak_confidence(engine):
    rule = SwitchingRule("loud", "Loud", RuleType.AUDIO_LEVEL, 1, RuleAction.to_position("wide"),
                         min_confidence=0.0)
    snapshot = RuleSnapshot.build(1, [rule])
    sample = AudioSample(level=0.27)  # confidence 0.54

    low = engine.evaluate(make_session(sensitivity=Sensitivity.LOW), make_registry(),
                          FeatureSnapshot(), snapshot, sample)
    high = engine.evaluate(make_session(sensitivity=Sensitivity.HIGH), make_registry(),
                           FeatureSnapshot(), snapshot, sample)

    assert low.target_camera == "wide_cam"
    assert high.is_noop


def test_engagement_targets_most_engaged_participant(engine, rules):
    features = FeatureSnapshot()
    session = make_session()
    registry = make_registry()
    engine.evaluate(session, registry, features, rules, EngagementSample("host", attention=0.2))

    decision = engine.evaluate(session, registry, features, rules,
                               EngagementSample("guest", attention=1.0, interaction=1.0,
                                                speech_activity=1.0, gesture_activity=1.0))

    assert decision.target_camera == "guest_cam"
    assert decision.trigger_reason == TriggerReason.ENGAGEMENT


def test_toggles_disable_rule_types(engine, rules):
    session = make_session(speaker_detection_enabled=False, audio_level_switching=False)

    decision = engine.evaluate(session, make_registry(), FeatureSnapshot(), rules,
                               AudioSample(level=0.9, speaker_detected="guest", background_noise=0.0))

    assert decision.is_noop


def test_tie_break_between_matching_cameras(engine, rules):
    registry = make_registry(
        CameraConfig("guest_b", "d1", position="guest", priority=1),
        CameraConfig("guest_a", "d2", position="guest", priority=1),
        CameraConfig("guest_c", "d3", position="guest", priority=0, auto_switch_enabled=False),
    )

    decision = engine.evaluate(make_session(), registry, FeatureSnapshot(), rules,
                               AudioSample(level=0.8, speaker_detected="guest"))

    assert decision.target_camera == "guest_a"


def test_camera_audio_threshold_override(engine, rules):
    registry = make_registry(
        CameraConfig("guest_cam", "d1", position="guest", audio_threshold=0.9),
        CameraConfig("wide_cam", "d2", position="wide"),
    )

    decision = engine.evaluate(make_session(), registry, FeatureSnapshot(), rules,
                               AudioSample(level=0.8, speaker_detected="guest", background_noise=0.5))

    assert decision.is_noop


def test_manual_mode_never_switches(engine, rules):
    decision = engine.evaluate(make_session(mode=SwitchingMode.MANUAL), make_registry(), FeatureSnapshot(),
                               rules, AudioSample(level=1.0, speaker_detected="guest"))

    assert decision.is_noop
    assert decision.reason == "manual_mode"


def test_no_eligible_camera_is_invalid_state_but_features_merge(engine, rules):
    registry = make_registry(CameraConfig("only", "d0", auto_switch_enabled=False))
    features = FeatureSnapshot()

    with pytest.raises(InvalidSessionState):
        engine.evaluate(make_session(), registry, features, rules, AudioSample(level=1.0))

    assert features.audio.level == 1.0


def test_stopped_session_is_invalid_state(engine, rules):
    session = make_session()
    session.status = SessionStatus.STOPPED

    with pytest.raises(InvalidSessionState):
        engine.evaluate(session, make_registry(), FeatureSnapshot(), rules, AudioSample(level=0.5))


def test_hybrid_reports_dominant_component():
    store = RuleStore()
    for rule_id in ("speaker_change", "audio_level", "engagement"):
        store.update_rule(rule_id, enabled=False)
    store.update_rule("hybrid", enabled=True)
    engine = DecisionEngine()

    decision = engine.evaluate(make_session(), make_registry(), FeatureSnapshot(), store.snapshot(),
                               AudioSample(level=0.9, speaker_detected="guest", clarity=0.9, background_noise=0.0))

    # speaker 0.4 * 0.92 = 0.368, audio 0.3 * 0.9 = 0.27, engagement 0.3 * 0.5 = 0.15
    assert decision.trigger_reason == TriggerReason.SPEAKER_CHANGE
    assert decision.rule_id == "hybrid"
    assert decision.confidence == pytest.approx(0.788)
    assert decision.target_camera == "guest_cam"


def test_weights_are_configurable(rules):
    engine = DecisionEngine(weights=ConfidenceWeights(silence_confidence=0.3))

    decision = engine.evaluate(make_session(), make_registry(), FeatureSnapshot(), rules,
                               AudioSample(level=0.0, silence_duration=10.0))

    # 0.3 is below silence_fallback's min_confidence
    assert decision.is_noop


def test_evaluation_is_deterministic(engine, rules):
    samples = [
        AudioSample(level=0.8, speaker_detected="guest", timestamp=1.0),
        EngagementSample("host", attention=0.9, interaction=0.9, timestamp=2.0),
        AudioSample(level=0.01, silence_duration=7.0, timestamp=3.0),
    ]

    def run():
        session, registry, features = make_session(), make_registry(), FeatureSnapshot()
        return [engine.evaluate(session, registry, features, rules, s) for s in samples]

    assert run() == run()
