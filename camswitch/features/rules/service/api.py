import logging
from threading import Lock
from typing import Any, Dict, Iterable, Optional, Tuple

from camswitch.core.common.errors import RuleNotFound, InvalidRuleUpdate
from ..domain.interfaces import IRuleRepository
from ..domain.models import SwitchingRule, RuleSnapshot, RuleConditions, RuleAction
from ..data.defaults import DEFAULT_RULES

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {"name", "enabled", "priority", "min_confidence", "cooldown_seconds", "conditions", "action"}


class RuleStore:
    """
    Copy-on-write holder of the switching rules.

    Readers take `snapshot()` (a single attribute read) and never block.
    Writers serialize on a lock, build a new snapshot and swap it in.
    """

    def __init__(self, rules: Optional[Iterable[SwitchingRule]] = None,
                 repository: Optional[IRuleRepository] = None):
        self.repo = repository
        self._write_lock = Lock()

        if rules is None:
            rules = self._load_initial()
        self._snapshot = RuleSnapshot.build(version=1, rules=rules)

    def _load_initial(self) -> Tuple[SwitchingRule, ...]:
        if self.repo is None:
            return DEFAULT_RULES

        stored = self.repo.load_latest()
        if stored:
            logger.info(f"Loaded {len(stored)} switching rules from storage.")
            return tuple(stored)

        logger.info("No stored switching rules. Seeding defaults.")
        for rule in DEFAULT_RULES:
            self.repo.save_version(rule)
        return DEFAULT_RULES

    def snapshot(self) -> RuleSnapshot:
        return self._snapshot

    def get_rules(self) -> Tuple[SwitchingRule, ...]:
        return self._snapshot.rules

    def get_enabled_rules(self) -> Tuple[SwitchingRule, ...]:
        return self._snapshot.enabled

    def register_rule(self, rule: SwitchingRule) -> RuleSnapshot:
        """Adds a new rule. Registration order never affects evaluation order."""
        with self._write_lock:
            current = self._snapshot
            if current.get(rule.rule_id) is not None:
                raise InvalidRuleUpdate(f"Rule {rule.rule_id} already exists.")
            if self.repo:
                self.repo.save_version(rule)
            self._snapshot = RuleSnapshot.build(current.version + 1, current.rules + (rule,))
            return self._snapshot

    def update_rule(self, rule_id: str, **fields: Any) -> SwitchingRule:
        """
        Creates a new version of `rule_id` with `fields` applied.
        In-flight evaluations keep the snapshot they captured.
        """
        if not fields:
            raise InvalidRuleUpdate("No valid updates provided.")
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise InvalidRuleUpdate(f"Fields not updatable: {sorted(unknown)}")

        with self._write_lock:
            current = self._snapshot
            existing = current.get(rule_id)
            if existing is None:
                raise RuleNotFound(rule_id)

            try:
                updated = existing.next_version(**self._coerce(fields))
            except (TypeError, ValueError, KeyError) as e:
                raise InvalidRuleUpdate(f"Invalid update for rule {rule_id}: {e}") from e

            if self.repo:
                self.repo.save_version(updated)

            others = tuple(r for r in current.rules if r.rule_id != rule_id)
            self._snapshot = RuleSnapshot.build(current.version + 1, others + (updated,))
            snapshot_version = self._snapshot.version

        logger.info(f"Rule {rule_id} updated to v{updated.version} (snapshot v{snapshot_version}).")
        return updated

    @staticmethod
    def _coerce(fields: Dict[str, Any]) -> Dict[str, Any]:
        """Accepts plain dicts for the structured fields."""
        coerced = dict(fields)
        if isinstance(coerced.get("conditions"), dict):
            coerced["conditions"] = RuleConditions.from_dict(coerced["conditions"])
        if isinstance(coerced.get("action"), dict):
            coerced["action"] = RuleAction.from_dict(coerced["action"])
        if "priority" in coerced and not isinstance(coerced["priority"], int):
            raise ValueError("priority must be an integer.")
        return coerced
