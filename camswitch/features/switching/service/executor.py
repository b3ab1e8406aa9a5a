import logging
from typing import Any, Dict, Optional

from camswitch.core.config.settings import settings
from camswitch.core.common.enums import SwitchType, TriggerReason, TransitionType
from camswitch.core.common.errors import CooldownActive, SwitchTargetUnreachable
from camswitch.features.cameras.domain.models import CameraConfig
from camswitch.features.cameras.service.api import CameraRegistry
from camswitch.features.decision.domain.models import Decision
from ..domain.interfaces import ICameraSwitcher
from ..domain.models import SwitchEvent, ManualSwitchRequest, SwitchResult

logger = logging.getLogger(__name__)

TARGET_UNREACHABLE = "target_unreachable"
CAMERA_NOT_FOUND = "camera_not_found"


class SwitchExecutor:
    """
    Turns decisions into switches.

    Runs inside the owning session's evaluation context, so it is the only
    writer of `session.live_camera` and `session.last_switch_time`.
    """

    def __init__(self, switcher: ICameraSwitcher, manual_exempt_from_cooldown: Optional[bool] = None):
        self.switcher = switcher
        if manual_exempt_from_cooldown is None:
            manual_exempt_from_cooldown = settings.MANUAL_SWITCH_EXEMPT_FROM_COOLDOWN
        self.manual_exempt_from_cooldown = manual_exempt_from_cooldown

    def apply(self, session, cameras: CameraRegistry, decision: Decision, now: float) -> Optional[SwitchEvent]:
        """
        Returns None for no-ops and when the target is already live.
        Every attempted switch, successful or not, yields an event.
        """
        if decision.is_noop:
            return None
        if decision.target_camera == session.live_camera:
            return None

        details = dict(
            switch_type=SwitchType.AUTO,
            trigger_reason=decision.trigger_reason,
            rule_id=decision.rule_id,
            confidence_score=decision.confidence,
            audio_level=decision.audio_level,
            engagement_score=decision.engagement_score,
        )

        try:
            self._check_cooldown(session, now, max(session.switch_delay, decision.rule_cooldown))
        except CooldownActive as e:
            logger.debug(f"Session {session.session_id}: switch to {decision.target_camera} rejected, {e}")
            return self._event(session, now, decision.target_camera, success=False,
                               transition=decision.transition_type, error=CooldownActive.code,
                               metadata={"remaining_seconds": e.remaining_seconds}, **details)

        target = cameras.current.get(decision.target_camera)
        return self._execute(session, cameras, decision.target_camera, target, decision.transition_type, now, details)

    def apply_manual(self, session, cameras: CameraRegistry, request: ManualSwitchRequest, now: float) -> SwitchResult:
        """Bypasses rules. Any configured camera is a valid target, eligible or not."""
        if request.camera_id == session.live_camera:
            return SwitchResult(success=True, live_camera=session.live_camera)

        details = dict(
            switch_type=SwitchType.MANUAL,
            trigger_reason=TriggerReason.MANUAL,
            confidence_score=1.0,
        )

        target = cameras.current.get(request.camera_id)
        if target is None:
            logger.warning(f"Session {session.session_id}: manual switch to unknown camera {request.camera_id}.")
            event = self._event(session, now, request.camera_id, success=False,
                                transition=request.transition_type, error=CAMERA_NOT_FOUND,
                                metadata={"reason": request.reason}, **details)
            return SwitchResult(success=False, live_camera=session.live_camera, event=event, error=CAMERA_NOT_FOUND)

        if not self.manual_exempt_from_cooldown:
            try:
                self._check_cooldown(session, now, session.switch_delay)
            except CooldownActive as e:
                event = self._event(session, now, request.camera_id, success=False,
                                    transition=request.transition_type, error=CooldownActive.code,
                                    metadata={"reason": request.reason, "remaining_seconds": e.remaining_seconds},
                                    **details)
                return SwitchResult(success=False, live_camera=session.live_camera, event=event,
                                    error=CooldownActive.code)

        event = self._execute(session, cameras, request.camera_id, target, request.transition_type, now, details,
                              metadata={"reason": request.reason})
        return SwitchResult(success=event.success, live_camera=session.live_camera, event=event, error=event.error)

    # --- Internals ---

    @staticmethod
    def _check_cooldown(session, now: float, window: float) -> None:
        if session.last_switch_time is None:
            return
        elapsed = now - session.last_switch_time
        if elapsed < window:
            raise CooldownActive(window - elapsed)

    def _execute(self, session, cameras: CameraRegistry, target_id: str, target: Optional[CameraConfig],
                 transition: TransitionType, now: float, details: Dict[str, Any],
                 metadata: Optional[Dict[str, Any]] = None) -> SwitchEvent:
        """`target` is None when `target_id` is not in the current camera set."""
        if not session.transition_effects:
            transition = TransitionType.INSTANT
        metadata = dict(metadata or {})
        previous = session.live_camera

        switched_to = target
        duration = self._switch(session, target, transition) if target is not None else None
        if duration is None:
            error = TARGET_UNREACHABLE if target is not None else CAMERA_NOT_FOUND
            logger.warning(f"Session {session.session_id}: switch to {target_id} failed ({error}). Retrying once.")
            metadata["failed_target"] = target_id

            fallback = cameras.next_eligible([target_id, previous])
            if fallback is None:
                return self._unreachable(session, now, target_id, error, transition, metadata, details)
            duration = self._switch(session, fallback, transition)
            if duration is None:
                metadata["fallback_target"] = fallback.camera_id
                return self._unreachable(session, now, target_id, error, transition, metadata, details)
            switched_to = fallback

        session.live_camera = switched_to.camera_id
        session.last_switch_time = now
        logger.info(
            f"Session {session.session_id}: {previous or '-'} -> {switched_to.camera_id} "
            f"({details['trigger_reason'].value}, {transition.value})."
        )
        return self._event(session, now, switched_to.camera_id, success=True, transition=transition,
                           previous=previous, duration_ms=duration, metadata=metadata, **details)

    def _switch(self, session, camera: CameraConfig, transition: TransitionType) -> Optional[int]:
        """Transition duration in ms, or None when the switcher could not put `camera` on air."""
        try:
            return self.switcher.switch(session.session_id, camera, transition)
        except SwitchTargetUnreachable as e:
            logger.warning(f"Session {session.session_id}: {e}")
        except Exception:
            logger.exception(f"Session {session.session_id}: switcher failed on {camera.camera_id}.")
        return None

    def _unreachable(self, session, now, target_id, error, transition, metadata, details) -> SwitchEvent:
        logger.error(f"Session {session.session_id}: switch to {target_id} failed, live camera unchanged.")
        return self._event(session, now, target_id, success=False, transition=transition,
                           error=error, metadata=metadata, **details)

    @staticmethod
    def _event(session, now: float, target_camera: str, success: bool, transition: TransitionType,
               previous: Optional[str] = None, error: Optional[str] = None, duration_ms: int = 0,
               metadata: Optional[Dict[str, Any]] = None, **details) -> SwitchEvent:
        return SwitchEvent(
            event_id=session.next_event_id(),
            session_id=session.session_id,
            timestamp=now,
            target_camera=target_camera,
            previous_camera=previous if success else session.live_camera,
            success=success,
            transition_type=transition,
            error=error,
            switch_duration_ms=duration_ms,
            metadata=metadata or {},
            **details,
        )
