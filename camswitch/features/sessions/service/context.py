import logging
from concurrent.futures import Future, ThreadPoolExecutor
from threading import Lock
from typing import Callable, List, Optional, Sequence

from camswitch.core.common.enums import SessionStatus, SwitchingMode
from camswitch.core.common.errors import InvalidSessionState, SessionInactive
from camswitch.core.persistence.writer import BackgroundWriter
from camswitch.features.analytics.service.aggregator import SessionAnalyticsAggregator
from camswitch.features.cameras.domain.models import CameraConfiguration
from camswitch.features.cameras.service.api import CameraRegistry, CameraInput
from camswitch.features.decision.domain.models import Decision
from camswitch.features.decision.service.evaluator import DecisionEngine
from camswitch.features.rules.service.api import RuleStore
from camswitch.features.signals.domain.models import FeatureSnapshot, Signal
from camswitch.features.switching.domain.models import SwitchEvent, ManualSwitchRequest, SwitchResult
from camswitch.features.switching.service.executor import SwitchExecutor
from ..domain.interfaces import ISwitchingRepository
from ..domain.models import SwitchingSession, SignalAnalysis

logger = logging.getLogger(__name__)


def _chain(inner: Future, session_id: str) -> Future:
    """
    Mirrors `inner` into a new future; cancellation surfaces as SessionInactive.
    """
    outer = Future()

    def _transfer(done: Future):
        if not outer.set_running_or_notify_cancel():
            return
        if done.cancelled():
            outer.set_exception(SessionInactive(session_id))
            return
        error = done.exception()
        if error is not None:
            outer.set_exception(error)
        else:
            outer.set_result(done.result())

    inner.add_done_callback(_transfer)
    return outer


class SessionContext:
    """
    Evaluation context of one session.

    A single worker thread runs every sample, manual switch and camera
    reconfiguration of the session in arrival order, so session state has
    exactly one mutator.
    """

    def __init__(self, session: SwitchingSession, rule_store: RuleStore, decisions: DecisionEngine,
                 executor: SwitchExecutor, clock: Callable[[], float],
                 repository: Optional[ISwitchingRepository] = None,
                 writer: Optional[BackgroundWriter] = None):
        self.session = session
        self.rule_store = rule_store
        self.decisions = decisions
        self.executor = executor
        self.clock = clock
        self.repo = repository
        self.writer = writer

        self.cameras = CameraRegistry(session.session_id)
        self.features = FeatureSnapshot()
        self.analytics = SessionAnalyticsAggregator(session.session_id)

        self._events: List[SwitchEvent] = []
        self._events_lock = Lock()
        self._submit_lock = Lock()
        self._stopping = False
        self._worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"ctx-{session.session_id}")

    @property
    def session_id(self) -> str:
        return self.session.session_id

    # --- Scheduling ---

    def submit(self, fn: Callable, *args) -> Future:
        with self._submit_lock:
            if self._stopping:
                raise SessionInactive(self.session_id)
            try:
                inner = self._worker.submit(fn, *args)
            except RuntimeError as e:
                raise SessionInactive(self.session_id) from e
        return _chain(inner, self.session_id)

    def submit_signal(self, signal: Signal) -> Future:
        return self.submit(self._signal_cycle, signal)

    def submit_manual(self, request: ManualSwitchRequest) -> Future:
        return self.submit(self._manual_cycle, request)

    def submit_configure(self, cameras: Sequence[CameraInput]) -> Future:
        return self.submit(self._configure, cameras)

    # --- Cycles (worker thread only) ---

    def _signal_cycle(self, signal: Signal) -> SignalAnalysis:
        now = signal.timestamp
        rules = self.rule_store.snapshot()

        try:
            decision = self.decisions.evaluate(self.session, self.cameras, self.features, rules, signal)
        except InvalidSessionState as e:
            logger.debug(f"Session {self.session_id}: sample skipped, {e}")
            decision = Decision.noop("invalid_session_state")

        event = self.executor.apply(self.session, self.cameras, decision, now)
        if event is not None:
            self._record(event)
        elif decision.is_noop:
            logger.debug(f"Session {self.session_id}: no switch ({decision.reason}).")

        return SignalAnalysis(
            session_id=self.session_id,
            timestamp=now,
            decision=decision,
            event=event,
            live_camera=self.session.live_camera,
        )

    def _manual_cycle(self, request: ManualSwitchRequest) -> SwitchResult:
        if not self.session.is_active:
            raise SessionInactive(self.session_id)
        result = self.executor.apply_manual(self.session, self.cameras, request, self.clock())
        if result.event is not None:
            self._record(result.event)
        return result

    def _configure(self, cameras: Sequence[CameraInput]) -> CameraConfiguration:
        if not self.session.is_active:
            raise SessionInactive(self.session_id)

        # Hybrid and manual sessions may run without any auto-eligible camera
        new_set = self.cameras.configure(cameras, require_eligible=self.session.mode == SwitchingMode.AUTO)
        self._persist(self.repo.save_cameras if self.repo else None, self.session_id, new_set,
                      description=f"cameras v{new_set.version} of {self.session_id}")
        return CameraConfiguration(
            session_id=self.session_id,
            cameras=new_set.cameras,
            eligible_count=len(new_set.eligible),
        )

    def _record(self, event: SwitchEvent) -> None:
        with self._events_lock:
            self._events.append(event)
        self.analytics.record(event)

        self._persist(self.repo.append_event if self.repo else None, event,
                      description=f"event {event.event_id}")
        if event.success:
            self.persist_session()

    # --- State ---

    def events(self) -> List[SwitchEvent]:
        with self._events_lock:
            return list(self._events)

    def persist_session(self) -> None:
        self._persist(self.repo.save_session if self.repo else None, self.session.copy(),
                      description=f"session {self.session_id}")

    def _persist(self, fn: Optional[Callable], *args, description: str) -> None:
        if fn is None:
            return
        if self.writer is not None:
            self.writer.submit(fn, *args, description=description)
            return
        try:
            fn(*args)
        except Exception:
            logger.exception(f"Persistence failed: {description}")

    def stop(self) -> float:
        """
        Cancels queued work, waits for the in-flight cycle, then marks the session stopped.
        Returns the stop time.
        """
        with self._submit_lock:
            if self._stopping:
                raise SessionInactive(self.session_id)
            self._stopping = True

        self._worker.shutdown(wait=True, cancel_futures=True)

        ended_at = self.clock()
        self.session.status = SessionStatus.STOPPED
        self.session.ended_at = ended_at
        self.analytics.close(ended_at)
        self.persist_session()

        logger.info(f"Session {self.session_id} stopped (live camera: {self.session.live_camera}).")
        return ended_at
