"""Fire-and-forget scheduling for external side effects.

Calls to external identity and analytics services run on a background
thread pool so that their latency or failure never blocks or aborts the
data mutation that triggered them. Callers schedule only after their
transaction has committed.
"""

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from functools import lru_cache
from typing import Any, Callable, Optional

from unlingo.config import SCHEDULER_MAX_WORKERS
from unlingo.logging import get_logger

logger = get_logger(__name__)


class Scheduler:
    """Runs callables after a delay on a shared ThreadPoolExecutor.

    Failures are logged and never propagated. There is no cancellation.
    """

    def __init__(self, max_workers: int = SCHEDULER_MAX_WORKERS):
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="unlingo-scheduler"
        )
        self._pending: set[Future] = set()
        self._lock = threading.Lock()

    def run_after(
        self, delay_seconds: float, fn: Callable[..., Any], *args: Any, **kwargs: Any
    ) -> Future:
        """Schedule `fn(*args, **kwargs)` to run after `delay_seconds`."""
        future = self._executor.submit(self._run, delay_seconds, fn, args, kwargs)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._discard)
        return future

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    @staticmethod
    def _run(
        delay_seconds: float,
        fn: Callable[..., Any],
        args: tuple,
        kwargs: dict,
    ) -> Optional[Any]:
        if delay_seconds > 0:
            time.sleep(delay_seconds)
        try:
            return fn(*args, **kwargs)
        except Exception as e:
            logger.error(
                "scheduled_task_failed",
                task=getattr(fn, "__qualname__", repr(fn)),
                error=str(e),
                exc_info=True,
            )
            return None

    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


@lru_cache(maxsize=1)
def get_scheduler() -> Scheduler:
    """Process-wide scheduler instance."""
    return Scheduler()
