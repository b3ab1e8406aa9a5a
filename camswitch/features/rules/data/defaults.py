from camswitch.core.common.enums import RuleType, TransitionType
from ..domain.models import SwitchingRule, RuleConditions, RuleAction

# Seed rule set used when no persisted rules exist.
# Silence fallback keeps the largest priority value so every other rule pre-empts it.
DEFAULT_RULES = (
    SwitchingRule(
        rule_id="speaker_change",
        name="Speaker Change Detection",
        rule_type=RuleType.SPEAKER_CHANGE,
        priority=1,
        min_confidence=0.6,
        cooldown_seconds=2.0,
        conditions=RuleConditions(min_audio_level=0.1),
        action=RuleAction.to_speaker(TransitionType.SMOOTH),
    ),
    SwitchingRule(
        rule_id="audio_level",
        name="Audio Level Switching",
        rule_type=RuleType.AUDIO_LEVEL,
        priority=2,
        min_confidence=0.6,
        cooldown_seconds=3.0,
        conditions=RuleConditions(min_audio_level=0.3, max_background_noise=0.2),
        action=RuleAction.to_speaker(TransitionType.FADE),
    ),
    SwitchingRule(
        rule_id="engagement",
        name="High Engagement Focus",
        rule_type=RuleType.ENGAGEMENT,
        priority=3,
        min_confidence=0.6,
        cooldown_seconds=5.0,
        conditions=RuleConditions(min_engagement=0.7),
        action=RuleAction.to_highest_engagement(TransitionType.SMOOTH),
    ),
    SwitchingRule(
        rule_id="hybrid",
        name="Hybrid Signal Fusion",
        rule_type=RuleType.HYBRID,
        priority=50,
        enabled=False,
        min_confidence=0.6,
        cooldown_seconds=3.0,
        conditions=RuleConditions(min_combined_score=0.6),
        action=RuleAction.to_speaker(TransitionType.SMART),
    ),
    SwitchingRule(
        rule_id="silence_fallback",
        name="Silence Fallback to Wide Shot",
        rule_type=RuleType.SILENCE_FALLBACK,
        priority=100,
        min_confidence=0.5,
        cooldown_seconds=0.0,
        conditions=RuleConditions(min_silence_duration=5.0, max_audio_level=0.05),
        action=RuleAction.to_position("wide", TransitionType.FADE),
    ),
)
