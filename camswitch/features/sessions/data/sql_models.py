from datetime import datetime, timezone
from sqlalchemy import Column, String, Float, Boolean, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from camswitch.core.database.base import Base
from camswitch.core.common.enums import SwitchingMode, SessionStatus, Sensitivity

def utc_now():
    return datetime.now(timezone.utc)

class SwitchingSessionModel(Base):
    __tablename__ = "switching_sessions"

    session_id = Column(String, primary_key=True)
    interview_id = Column(String, nullable=False, index=True)
    user_id = Column(String, nullable=True, index=True)

    mode = Column(SQLEnum(SwitchingMode), default=SwitchingMode.AUTO, nullable=False)
    status = Column(SQLEnum(SessionStatus), default=SessionStatus.ACTIVE, nullable=False)
    sensitivity = Column(SQLEnum(Sensitivity), default=Sensitivity.MEDIUM, nullable=False)

    switch_delay = Column(Float, default=1.0)
    audio_threshold = Column(Float, default=0.1)
    engagement_threshold = Column(Float, default=0.5)
    speaker_detection_enabled = Column(Boolean, default=True)
    audio_level_switching = Column(Boolean, default=True)
    engagement_switching = Column(Boolean, default=True)
    fallback_enabled = Column(Boolean, default=True)
    transition_effects = Column(Boolean, default=True)

    current_camera_id = Column(String, nullable=True)
    last_switch_time = Column(Float, nullable=True)
    started_at = Column(Float, nullable=False)
    ended_at = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    cameras = relationship("CameraConfigurationModel", back_populates="session", cascade="all, delete-orphan")
