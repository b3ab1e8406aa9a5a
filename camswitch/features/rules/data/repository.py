from typing import Dict, List

from camswitch.core.database.connection import SessionLocal
from .sql_models import SwitchingRuleModel
from ..domain.interfaces import IRuleRepository
from ..domain.models import SwitchingRule, RuleConditions, RuleAction

class SqlRuleRepo(IRuleRepository):

    def load_latest(self) -> List[SwitchingRule]:
        with SessionLocal() as db:
            rows = db.query(SwitchingRuleModel).order_by(
                SwitchingRuleModel.rule_id, SwitchingRuleModel.version
            ).all()

            # Later versions overwrite earlier ones in the map
            latest: Dict[str, SwitchingRuleModel] = {}
            for row in rows:
                latest[row.rule_id] = row

            return [self._to_domain(row) for row in latest.values()]

    def save_version(self, rule: SwitchingRule) -> None:
        with SessionLocal() as db:
            try:
                db.add(SwitchingRuleModel(
                    rule_id=rule.rule_id,
                    version=rule.version,
                    rule_name=rule.name,
                    rule_type=rule.rule_type,
                    priority=rule.priority,
                    enabled=rule.enabled,
                    min_confidence=rule.min_confidence,
                    cooldown_seconds=rule.cooldown_seconds,
                    conditions=rule.conditions.to_dict(),
                    actions=rule.action.to_dict()
                ))
                db.commit()
            except Exception as e:
                db.rollback()
                raise e

    @staticmethod
    def _to_domain(row: SwitchingRuleModel) -> SwitchingRule:
        return SwitchingRule(
            rule_id=row.rule_id,
            name=row.rule_name,
            rule_type=row.rule_type,
            priority=row.priority,
            action=RuleAction.from_dict(row.actions),
            conditions=RuleConditions.from_dict(row.conditions),
            enabled=row.enabled,
            min_confidence=row.min_confidence,
            cooldown_seconds=row.cooldown_seconds,
            version=row.version
        )
