import logging
from typing import Dict, List, Optional, Tuple

from camswitch.core.config.settings import settings
from camswitch.core.common.enums import (
    ActionKind, RuleType, SessionStatus, SwitchingMode, TriggerReason
)
from camswitch.core.common.errors import InvalidSessionState
from camswitch.features.cameras.domain.models import CameraConfig, pick_preferred
from camswitch.features.cameras.service.api import CameraRegistry
from camswitch.features.rules.domain.models import SwitchingRule, RuleSnapshot
from camswitch.features.signals.domain.models import AudioSample, FeatureSnapshot, Signal
from ..domain.models import Decision, ConfidenceWeights

logger = logging.getLogger(__name__)

# (confidence, trigger reason) of a rule whose condition holds
Match = Tuple[float, TriggerReason]


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


class DecisionEngine:
    """
    Priority-ordered rule evaluation over a session's feature snapshot.
    Pure computation: no I/O, no clock, no randomness.
    """

    def __init__(self, weights: ConfidenceWeights = ConfidenceWeights(),
                 sensitivity_floors: Optional[Dict[str, float]] = None):
        self.weights = weights
        self.floors = dict(sensitivity_floors or settings.SENSITIVITY_FLOORS)

    def evaluate(self, session, cameras: CameraRegistry, features: FeatureSnapshot,
                 rules: RuleSnapshot, signal: Signal) -> Decision:
        """
        Merges `signal` into `features` and returns the first winning rule's decision.

        Raises InvalidSessionState when the session is not active or has no
        auto-switch eligible camera.
        """
        if session.status != SessionStatus.ACTIVE:
            raise InvalidSessionState(f"Session {session.session_id} is {session.status.value}.")

        # Merge always, even when evaluation is skipped below
        features.merge(signal, self.weights.engagement)

        if not cameras.current.eligible:
            raise InvalidSessionState(f"Session {session.session_id} has no auto-switch eligible camera.")

        if session.mode == SwitchingMode.MANUAL:
            return Decision.noop("manual_mode")

        floor = self.floors[session.sensitivity.value]

        for rule in rules.enabled:
            match = self._match(rule, session, cameras, features)
            if match is None:
                continue

            confidence, trigger = match
            confidence = _clamp(confidence)
            if confidence < rule.min_confidence or confidence < floor:
                logger.debug(
                    f"Rule {rule.rule_id} matched but confidence {confidence:.3f} is below "
                    f"min {rule.min_confidence} / floor {floor}."
                )
                continue

            target = self._resolve_target(rule, cameras, features)
            if target is None:
                logger.debug(f"Rule {rule.rule_id} matched but no eligible camera fits its action.")
                continue

            return Decision(
                target_camera=target.camera_id,
                confidence=confidence,
                trigger_reason=trigger,
                rule_id=rule.rule_id,
                rule_cooldown=rule.cooldown_seconds,
                transition_type=rule.action.transition_type,
                audio_level=features.audio.level if features.audio else 0.0,
                engagement_score=features.mean_engagement or 0.0,
                reason=rule.name,
            )

        return Decision.noop("no_rule_matched")

    # --- Conditions ---

    def _match(self, rule: SwitchingRule, session, cameras: CameraRegistry,
               features: FeatureSnapshot) -> Optional[Match]:
        if rule.rule_type == RuleType.SPEAKER_CHANGE:
            return self._speaker_change(rule, session, cameras, features.audio)
        if rule.rule_type == RuleType.AUDIO_LEVEL:
            return self._audio_level(rule, session, features.audio)
        if rule.rule_type == RuleType.ENGAGEMENT:
            return self._engagement(rule, session, features)
        if rule.rule_type == RuleType.SILENCE_FALLBACK:
            return self._silence_fallback(rule, session, features.audio)
        if rule.rule_type == RuleType.HYBRID:
            return self._hybrid(rule, features)
        raise ValueError(f"Unhandled rule type: {rule.rule_type}")

    def _speaker_confidence(self, audio: AudioSample) -> float:
        w = self.weights
        return (audio.level * w.speaker_level
                + audio.clarity * w.speaker_clarity
                + (1.0 - audio.background_noise) * w.speaker_noise)

    def _speaker_change(self, rule, session, cameras: CameraRegistry,
                        audio: Optional[AudioSample]) -> Optional[Match]:
        if not session.speaker_detection_enabled or audio is None or not audio.speaker_detected:
            return None

        live = cameras.current.get(session.live_camera) if session.live_camera else None
        if live is not None and live.matches(audio.speaker_detected):
            return None  # speaker already on screen

        if audio.level < max(session.audio_threshold, rule.conditions.min_audio_level):
            return None

        return self._speaker_confidence(audio), TriggerReason.SPEAKER_CHANGE

    def _audio_level(self, rule, session, audio: Optional[AudioSample]) -> Optional[Match]:
        if not session.audio_level_switching or audio is None:
            return None

        c = rule.conditions
        if audio.level < max(session.audio_threshold, c.min_audio_level):
            return None
        if audio.background_noise > c.max_background_noise:
            return None

        return audio.level * self.weights.audio_level_gain, TriggerReason.AUDIO_LEVEL

    def _engagement(self, rule, session, features: FeatureSnapshot) -> Optional[Match]:
        if not session.engagement_switching:
            return None

        top = features.top_participants()
        if not top:
            return None

        best = top[0].score
        if best < max(session.engagement_threshold, rule.conditions.min_engagement):
            return None

        w = self.weights
        return best * w.engagement_top + features.mean_engagement * w.engagement_mean, TriggerReason.ENGAGEMENT

    def _silence_fallback(self, rule, session, audio: Optional[AudioSample]) -> Optional[Match]:
        if not session.fallback_enabled or audio is None:
            return None

        c = rule.conditions
        if audio.silence_duration < c.min_silence_duration or audio.level > c.max_audio_level:
            return None

        return self.weights.silence_confidence, TriggerReason.SILENCE_FALLBACK

    def _hybrid(self, rule, features: FeatureSnapshot) -> Optional[Match]:
        audio = features.audio
        if audio is None:
            return None

        c = rule.conditions
        engagement = features.mean_engagement
        if engagement is None:
            engagement = self.weights.neutral_engagement

        components = [
            (self._speaker_confidence(audio) * c.speaker_weight if audio.speaker_detected else 0.0,
             TriggerReason.SPEAKER_CHANGE),
            (audio.level * c.audio_weight, TriggerReason.AUDIO_LEVEL),
            (engagement * c.engagement_weight, TriggerReason.ENGAGEMENT),
        ]
        combined = sum(score for score, _ in components)
        if combined < c.min_combined_score:
            return None

        # Reported reason is the component contributing most (first wins on ties)
        dominant = max(components, key=lambda item: item[0])[1]
        return combined, dominant

    # --- Actions ---

    def _resolve_target(self, rule: SwitchingRule, cameras: CameraRegistry,
                        features: FeatureSnapshot) -> Optional[CameraConfig]:
        action = rule.action
        current = cameras.current
        candidates: List[CameraConfig] = []

        if action.kind == ActionKind.SWITCH_TO_SPEAKER:
            audio = features.audio
            if audio is not None and audio.speaker_detected:
                candidates = [
                    cam for cam in current.matching(audio.speaker_detected)
                    if cam.audio_threshold is None or audio.level >= cam.audio_threshold
                ]

        elif action.kind == ActionKind.SWITCH_TO_HIGHEST_ENGAGEMENT:
            for participant in features.top_participants():
                candidates.extend(
                    cam for cam in current.matching(participant.sample.participant_id)
                    if cam.engagement_threshold is None or participant.score >= cam.engagement_threshold
                )

        elif action.kind == ActionKind.SWITCH_TO_FIXED_CAMERA:
            camera = current.get(action.camera_id)
            if camera is not None and camera.auto_switch_enabled:
                candidates = [camera]

        elif action.kind == ActionKind.SWITCH_TO_POSITION:
            candidates = current.matching(action.position)

        return pick_preferred(candidates)
