# File: camswitch/core/persistence/writer.py

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from threading import Lock
from typing import Callable, List

logger = logging.getLogger(__name__)


class BackgroundWriter:
    """
    Runs storage writes on one dedicated thread, in submission order.
    A failed write is logged and dropped; it never reaches the ingestion path.
    """

    def __init__(self, name: str = "persistence"):
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._pending: List[Future] = []
        self._lock = Lock()
        self._closed = False

    def submit(self, fn: Callable, *args, description: str = "write") -> None:
        with self._lock:
            if self._closed:
                logger.warning(f"Writer closed, dropping {description}.")
                return
            future = self._executor.submit(self._run, fn, args, description)
            self._pending = [f for f in self._pending if not f.done()]
            self._pending.append(future)

    @staticmethod
    def _run(fn: Callable, args: tuple, description: str) -> None:
        try:
            fn(*args)
        except Exception:
            logger.exception(f"Persistence failed: {description}")

    def flush(self, timeout: float = None) -> None:
        """Blocks until every write submitted so far has finished."""
        with self._lock:
            pending = list(self._pending)
        for future in pending:
            future.result(timeout=timeout)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=True)
