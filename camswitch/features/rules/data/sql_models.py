from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, Float, Boolean, DateTime, JSON, UniqueConstraint, Enum as SQLEnum
from camswitch.core.database.base import Base
from camswitch.core.common.enums import RuleType

def utc_now():
    return datetime.now(timezone.utc)

class SwitchingRuleModel(Base):
    """
    Versioned rule rows. (rule_id, version) is unique; the highest version wins on load.
    """
    __tablename__ = "switching_rules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    rule_id = Column(String, nullable=False, index=True)
    version = Column(Integer, nullable=False)

    rule_name = Column(String, nullable=False)
    rule_type = Column(SQLEnum(RuleType), nullable=False)
    priority = Column(Integer, nullable=False)
    enabled = Column(Boolean, default=True, nullable=False)
    min_confidence = Column(Float, nullable=False)
    cooldown_seconds = Column(Float, default=0.0, nullable=False)

    conditions = Column(JSON, default=dict)
    actions = Column(JSON, default=dict)

    created_at = Column(DateTime(timezone=True), default=utc_now)

    __table_args__ = (
        UniqueConstraint('rule_id', 'version', name='uix_rule_version'),
    )
