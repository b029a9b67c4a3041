"""Fire-and-forget background work

Click count increments and cache writes must never delay or fail a response.
They are submitted to a small thread pool; the caller gets no handle, and a
task's exception is logged and dropped.

Semantics are at-most-once and best-effort: a Lambda container may be frozen
right after the response, so a submitted task may finish during the next
invocation or never.

Example:
    >>> tasks = BackgroundTasks(max_workers=2)
    >>> tasks.submit('increment_clicks', dao.increment_clicks, 'aZ3kP0q')
    >>> tasks.join(timeout=1.0)  # tests only
    True
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait


logger = logging.getLogger(__name__)


class BackgroundTasks:
    def __init__(self, max_workers: int = 4):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='fire-and-forget')
        self._pending: set[Future] = set()
        self._lock = threading.Lock()

    def submit(self, name: str, func: Callable, *args, **kwargs) -> None:
        """Run `func(*args, **kwargs)` in the background, logging any failure."""
        future = self._executor.submit(func, *args, **kwargs)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(lambda f: self._on_done(name, f))

    def join(self, timeout: float | None = None) -> bool:
        """Wait for currently pending tasks. Returns True if all of them finished."""
        with self._lock:
            pending = set(self._pending)
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)

    def _on_done(self, name: str, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

        if future.cancelled():
            logger.warning('Background task cancelled.', extra={'task': name})
            return

        error = future.exception()
        if error is not None:
            logger.error(
                'Background task failed.',
                exc_info=(type(error), error, error.__traceback__),
                extra={'task': name, 'error': error.__class__.__name__},
            )
