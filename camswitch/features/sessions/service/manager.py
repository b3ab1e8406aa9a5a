import logging
import time
import uuid
from concurrent.futures import Future
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from camswitch.core.config.settings import settings
from camswitch.core.common.errors import InvalidOptions, SessionNotFound, SessionInactive
from camswitch.core.persistence.writer import BackgroundWriter
from camswitch.features.analytics.domain.models import SessionAnalytics
from camswitch.features.cameras.domain.models import CameraConfiguration
from camswitch.features.cameras.service.api import CameraInput
from camswitch.features.decision.domain.models import ConfidenceWeights
from camswitch.features.decision.service.evaluator import DecisionEngine
from camswitch.features.rules.domain.models import SwitchingRule
from camswitch.features.rules.service.api import RuleStore
from camswitch.features.signals.domain.models import AudioSample, EngagementSample
from camswitch.features.signals.service.ingestor import SignalIngestor
from camswitch.features.switching.domain.interfaces import ICameraSwitcher
from camswitch.features.switching.domain.models import ManualSwitchRequest, SwitchResult
from camswitch.features.switching.data.switcher import SimulatedCameraSwitcher
from camswitch.features.switching.service.executor import SwitchExecutor
from ..domain.interfaces import ISwitchingRepository
from ..domain.models import (
    SessionOptions, SwitchingSession, SignalAnalysis, SessionSummary, EventFilter, EventPage
)
from .context import SessionContext

logger = logging.getLogger(__name__)

OptionsInput = Union[SessionOptions, Dict[str, Any], None]
ManualInput = Union[ManualSwitchRequest, Dict[str, Any], str]


class SwitchingEngine:
    """
    Public API of the camera-switching engine.

    Owns one SessionContext per session. Every call is routed by session_id;
    work for different sessions runs in parallel, work for one session runs
    in arrival order.
    """

    def __init__(self,
                 rule_store: Optional[RuleStore] = None,
                 switcher: Optional[ICameraSwitcher] = None,
                 repository: Optional[ISwitchingRepository] = None,
                 clock: Callable[[], float] = time.time,
                 weights: ConfidenceWeights = ConfidenceWeights(),
                 sensitivity_floors: Optional[Dict[str, float]] = None,
                 manual_exempt_from_cooldown: Optional[bool] = None):
        self.rule_store = rule_store or RuleStore()
        self.switcher = switcher or SimulatedCameraSwitcher()
        self.repo = repository
        self.clock = clock

        self.ingestor = SignalIngestor(clock)
        self.decisions = DecisionEngine(weights, sensitivity_floors)
        self.executor = SwitchExecutor(self.switcher, manual_exempt_from_cooldown)
        self.writer = BackgroundWriter() if repository is not None else None

        self._contexts: Dict[str, SessionContext] = {}
        self._lock = Lock()

    # --- Lifecycle ---

    def start_session(self, interview_id: str, options: OptionsInput = None,
                      user_id: Optional[str] = None) -> SwitchingSession:
        if not interview_id:
            raise InvalidOptions("Interview ID is required.")
        if not isinstance(options, SessionOptions):
            options = SessionOptions.from_dict(options)

        started_at = self.clock()
        session = SwitchingSession(
            session_id=f"session_{int(started_at)}_{uuid.uuid4().hex[:12]}",
            interview_id=interview_id,
            options=options,
            started_at=started_at,
            user_id=user_id,
        )
        context = SessionContext(
            session, self.rule_store, self.decisions, self.executor, self.clock,
            repository=self.repo, writer=self.writer,
        )
        with self._lock:
            self._contexts[session.session_id] = context
        context.persist_session()

        logger.info(
            f"Session {session.session_id} started for interview {interview_id} "
            f"(mode={options.mode.value}, sensitivity={options.sensitivity.value})."
        )
        return session.copy()

    def stop_session(self, session_id: str) -> SessionSummary:
        context = self._context(session_id)
        ended_at = context.stop()
        session = context.session
        return SessionSummary(
            session_id=session_id,
            interview_id=session.interview_id,
            started_at=session.started_at,
            ended_at=ended_at,
            final_camera=session.live_camera,
            analytics=context.analytics.snapshot(),
        )

    def shutdown(self) -> None:
        """Stops every active session and drains pending writes."""
        for session_id in self.active_sessions():
            try:
                self.stop_session(session_id)
            except SessionInactive:
                pass  # stopped concurrently
        if self.writer is not None:
            self.writer.close()

    # --- Configuration ---

    def configure_cameras(self, session_id: str, cameras: Sequence[CameraInput]) -> CameraConfiguration:
        return self._context(session_id).submit_configure(list(cameras or [])).result()

    def get_switching_rules(self) -> Tuple[SwitchingRule, ...]:
        return self.rule_store.get_rules()

    def update_switching_rule(self, rule_id: str, **fields: Any) -> SwitchingRule:
        return self.rule_store.update_rule(rule_id, **fields)

    # --- Signals ---

    def submit_audio(self, session_id: str, sample: Union[AudioSample, Dict[str, Any]]) -> Future:
        context = self._context(session_id)
        accepted = self.ingestor.accept_audio(context.session, sample)
        return context.submit_signal(accepted)

    def submit_engagement(self, session_id: str, sample: Union[EngagementSample, Dict[str, Any]]) -> Future:
        context = self._context(session_id)
        accepted = self.ingestor.accept_engagement(context.session, sample)
        return context.submit_signal(accepted)

    def ingest_audio(self, session_id: str, sample: Union[AudioSample, Dict[str, Any]]) -> SignalAnalysis:
        return self.submit_audio(session_id, sample).result()

    def ingest_engagement(self, session_id: str, sample: Union[EngagementSample, Dict[str, Any]]) -> SignalAnalysis:
        return self.submit_engagement(session_id, sample).result()

    # --- Manual control ---

    def submit_manual_switch(self, session_id: str, request: ManualInput) -> Future:
        context = self._context(session_id)
        if not context.session.is_active:
            raise SessionInactive(session_id)
        return context.submit_manual(self._manual_request(request))

    def execute_manual_switch(self, session_id: str, request: ManualInput) -> SwitchResult:
        return self.submit_manual_switch(session_id, request).result()

    @staticmethod
    def _manual_request(request: ManualInput) -> ManualSwitchRequest:
        if isinstance(request, ManualSwitchRequest):
            return request
        if isinstance(request, str):
            return ManualSwitchRequest(camera_id=request)
        if isinstance(request, dict):
            return ManualSwitchRequest(**request)
        raise ValueError(f"Unsupported manual switch request: {type(request).__name__}")

    # --- Queries ---

    def get_session(self, session_id: str) -> SwitchingSession:
        """Falls back to storage for sessions not held by this engine."""
        context = self._find(session_id)
        if context is not None:
            return context.session.copy()
        return self._stored_session(session_id)

    def active_sessions(self) -> List[str]:
        with self._lock:
            return sorted(sid for sid, ctx in self._contexts.items() if ctx.session.is_active)

    def get_session_analytics(self, session_id: str) -> SessionAnalytics:
        context = self._context(session_id)
        as_of = self.clock() if context.session.is_active else None
        return context.analytics.snapshot(as_of=as_of)

    def get_session_events(self, session_id: str, event_filter: Optional[EventFilter] = None) -> EventPage:
        """Newest first. Sessions not held by this engine are read from storage."""
        event_filter = event_filter or EventFilter()
        context = self._find(session_id)
        if context is not None:
            events = context.events()
        else:
            self._stored_session(session_id)
            events = self.repo.list_events(session_id)

        matching = [e for e in reversed(events) if event_filter.matches(e)]
        start = event_filter.offset
        return EventPage(
            events=tuple(matching[start:start + event_filter.limit]),
            total=len(matching),
            limit=event_filter.limit,
            offset=event_filter.offset,
        )

    def _find(self, session_id: str) -> Optional[SessionContext]:
        with self._lock:
            return self._contexts.get(session_id)

    def _context(self, session_id: str) -> SessionContext:
        context = self._find(session_id)
        if context is None:
            raise SessionNotFound(session_id)
        return context

    def _stored_session(self, session_id: str) -> SwitchingSession:
        stored = self.repo.get_session(session_id) if self.repo else None
        if stored is None:
            raise SessionNotFound(session_id)
        return stored


def build_engine(**overrides) -> SwitchingEngine:
    """
    Engine wired from settings. With persistence enabled, rules and session
    data go through the SQL repositories.
    """
    if settings.PERSISTENCE_ENABLED:
        from camswitch.core.database.init_db import init_db
        from camswitch.features.rules.data.repository import SqlRuleRepo
        from camswitch.features.sessions.data.repository import SqlSwitchingRepo

        init_db()
        overrides.setdefault("rule_store", RuleStore(repository=SqlRuleRepo()))
        overrides.setdefault("repository", SqlSwitchingRepo())

    return SwitchingEngine(**overrides)
