from typing import List, Optional

from camswitch.core.database.connection import SessionLocal
from camswitch.features.cameras.data.sql_models import CameraConfigurationModel
from camswitch.features.cameras.domain.models import CameraSet
from camswitch.features.switching.data.sql_models import SwitchEventModel
from camswitch.features.switching.domain.models import SwitchEvent
from .sql_models import SwitchingSessionModel
from ..domain.interfaces import ISwitchingRepository
from ..domain.models import SwitchingSession, SessionOptions

OPTION_COLUMNS = (
    "mode", "sensitivity", "switch_delay", "audio_threshold", "engagement_threshold",
    "speaker_detection_enabled", "audio_level_switching", "engagement_switching",
    "fallback_enabled", "transition_effects",
)


class SqlSwitchingRepo(ISwitchingRepository):

    def save_session(self, session: SwitchingSession) -> None:
        with SessionLocal() as db:
            try:
                row = db.get(SwitchingSessionModel, session.session_id)
                if row is None:
                    row = SwitchingSessionModel(session_id=session.session_id)
                    db.add(row)

                row.interview_id = session.interview_id
                row.user_id = session.user_id
                for name in OPTION_COLUMNS:
                    setattr(row, name, getattr(session.options, name))
                row.status = session.status
                row.current_camera_id = session.live_camera
                row.last_switch_time = session.last_switch_time
                row.started_at = session.started_at
                row.ended_at = session.ended_at

                db.commit()
            except Exception as e:
                db.rollback()
                raise e

    def save_cameras(self, session_id: str, cameras: CameraSet) -> None:
        with SessionLocal() as db:
            try:
                for camera in cameras.cameras:
                    db.add(CameraConfigurationModel(
                        config_id=f"{session_id}:v{cameras.version}:{camera.camera_id}",
                        session_id=session_id,
                        config_version=cameras.version,
                        camera_id=camera.camera_id,
                        device_id=camera.device_id,
                        camera_name=camera.name,
                        position=camera.position,
                        priority=camera.priority,
                        auto_switch_enabled=camera.auto_switch_enabled,
                        audio_threshold=camera.audio_threshold,
                        engagement_threshold=camera.engagement_threshold,
                        quality_settings=camera.quality_settings,
                        constraints=camera.constraints
                    ))
                db.commit()
            except Exception as e:
                db.rollback()
                raise e

    def append_event(self, event: SwitchEvent) -> None:
        with SessionLocal() as db:
            try:
                db.add(SwitchEventModel(
                    event_id=event.event_id,
                    session_id=event.session_id,
                    timestamp=event.timestamp,
                    from_camera_id=event.previous_camera,
                    to_camera_id=event.target_camera,
                    switch_type=event.switch_type,
                    trigger_reason=event.trigger_reason,
                    rule_id=event.rule_id,
                    confidence_score=event.confidence_score,
                    audio_level=event.audio_level,
                    engagement_score=event.engagement_score,
                    transition_type=event.transition_type,
                    success=event.success,
                    error_message=event.error,
                    switch_duration_ms=event.switch_duration_ms,
                    metadata_json=event.metadata
                ))
                db.commit()
            except Exception as e:
                db.rollback()
                raise e

    def list_events(self, session_id: str) -> List[SwitchEvent]:
        with SessionLocal() as db:
            rows = db.query(SwitchEventModel).filter(
                SwitchEventModel.session_id == session_id
            ).order_by(SwitchEventModel.timestamp, SwitchEventModel.created_at).all()
            return [self._event_to_domain(row) for row in rows]

    def get_session(self, session_id: str) -> Optional[SwitchingSession]:
        with SessionLocal() as db:
            row = db.get(SwitchingSessionModel, session_id)
            if row is None:
                return None
            return SwitchingSession(
                session_id=row.session_id,
                interview_id=row.interview_id,
                options=SessionOptions(**{name: getattr(row, name) for name in OPTION_COLUMNS}),
                started_at=row.started_at,
                user_id=row.user_id,
                status=row.status,
                ended_at=row.ended_at,
                live_camera=row.current_camera_id,
                last_switch_time=row.last_switch_time
            )

    @staticmethod
    def _event_to_domain(row: SwitchEventModel) -> SwitchEvent:
        return SwitchEvent(
            event_id=row.event_id,
            session_id=row.session_id,
            timestamp=row.timestamp,
            target_camera=row.to_camera_id,
            previous_camera=row.from_camera_id,
            switch_type=row.switch_type,
            trigger_reason=row.trigger_reason,
            rule_id=row.rule_id,
            confidence_score=row.confidence_score,
            audio_level=row.audio_level,
            engagement_score=row.engagement_score,
            transition_type=row.transition_type,
            success=row.success,
            error=row.error_message,
            switch_duration_ms=row.switch_duration_ms,
            metadata=row.metadata_json or {}
        )
