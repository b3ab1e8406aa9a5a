from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, Float, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from camswitch.core.database.base import Base

def utc_now():
    return datetime.now(timezone.utc)

class CameraConfigurationModel(Base):
    """
    One row per camera per configuration version.
    Reconfiguring writes a full new version; readers take the highest.
    """
    __tablename__ = "camera_configurations"

    config_id = Column(String, primary_key=True)
    session_id = Column(String, ForeignKey("switching_sessions.session_id"), nullable=False, index=True)
    config_version = Column(Integer, nullable=False)

    camera_id = Column(String, nullable=False)
    device_id = Column(String, nullable=False)
    camera_name = Column(String, nullable=False)
    position = Column(String, default="general")
    priority = Column(Integer, default=5)
    auto_switch_enabled = Column(Boolean, default=True)
    audio_threshold = Column(Float, nullable=True)
    engagement_threshold = Column(Float, nullable=True)
    quality_settings = Column(JSON, default=dict)
    constraints = Column(JSON, default=dict)

    created_at = Column(DateTime(timezone=True), default=utc_now)

    session = relationship("SwitchingSessionModel", back_populates="cameras")
