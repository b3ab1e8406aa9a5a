from camswitch.core.common.enums import RuleType, ActionKind
from camswitch.features.rules.data.repository import SqlRuleRepo
from camswitch.features.rules.data.sql_models import SwitchingRuleModel
from camswitch.features.rules.service.api import RuleStore


def test_empty_storage_is_seeded_with_defaults(db_session):
    # 1. Arrange & Act
    store = RuleStore(repository=SqlRuleRepo())

    # 2. Assert
    rows = db_session.query(SwitchingRuleModel).all()
    assert len(rows) == len(store.get_rules()) == 5
    assert all(r.version == 1 for r in rows)


def test_updates_are_stored_as_new_rows_and_reloaded():
    # 1. Arrange
    repo = SqlRuleRepo()
    store = RuleStore(repository=repo)

    # 2. Act
    store.update_rule("engagement", min_confidence=0.75)
    store.update_rule("engagement", enabled=False)

    # 3. Assert: a fresh store sees the latest version only
    reloaded = RuleStore(repository=SqlRuleRepo())
    rule = reloaded.snapshot().get("engagement")
    assert rule.version == 3
    assert rule.min_confidence == 0.75
    assert rule.enabled is False
    assert rule.rule_type == RuleType.ENGAGEMENT
    assert rule.action.kind == ActionKind.SWITCH_TO_HIGHEST_ENGAGEMENT


def test_every_version_is_kept(db_session):
    store = RuleStore(repository=SqlRuleRepo())

    store.update_rule("audio_level", cooldown_seconds=4.0)

    versions = [
        r.version for r in db_session.query(SwitchingRuleModel)
        .filter(SwitchingRuleModel.rule_id == "audio_level")
        .order_by(SwitchingRuleModel.version)
    ]
    assert versions == [1, 2]
