from datetime import datetime, timezone
from sqlalchemy import Column, String, Float, Integer, Boolean, DateTime, ForeignKey, JSON, Enum as SQLEnum
from camswitch.core.database.base import Base
from camswitch.core.common.enums import SwitchType, TriggerReason, TransitionType

def utc_now():
    return datetime.now(timezone.utc)

class SwitchEventModel(Base):
    __tablename__ = "camera_switching_events"

    event_id = Column(String, primary_key=True)
    session_id = Column(String, ForeignKey("switching_sessions.session_id"), nullable=False, index=True)

    # Engine clock (epoch seconds), not row insertion time
    timestamp = Column(Float, nullable=False, index=True)

    from_camera_id = Column(String, nullable=True)
    to_camera_id = Column(String, nullable=False)
    switch_type = Column(SQLEnum(SwitchType), nullable=False)
    trigger_reason = Column(SQLEnum(TriggerReason), nullable=False)
    rule_id = Column(String, nullable=True)

    confidence_score = Column(Float, default=0.0)
    audio_level = Column(Float, default=0.0)
    engagement_score = Column(Float, default=0.0)
    transition_type = Column(SQLEnum(TransitionType), nullable=False)

    success = Column(Boolean, nullable=False)
    error_message = Column(String, nullable=True)
    switch_duration_ms = Column(Integer, default=0)
    metadata_json = Column(JSON, default=dict)

    created_at = Column(DateTime(timezone=True), default=utc_now)
