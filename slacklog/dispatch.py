"""Background dispatch plumbing for asynchronous handlers.

:class:`BackgroundLoop` owns a private asyncio event loop running on a
daemon thread; coroutines are submitted to it from any thread and tracked
through ``concurrent.futures.Future`` handles. :class:`OutstandingWork`
is the lock-guarded set of those handles that ``shutdown`` drains.
"""

import asyncio
import threading
from collections.abc import Awaitable, Callable, Coroutine
from concurrent.futures import Future
from typing import Any

# Seconds to wait for the loop thread to come up or to finish.
LOOP_START_TIMEOUT = 5.0
LOOP_STOP_TIMEOUT = 3.0


class BackgroundLoop:
    """A lazily started asyncio event loop on a daemon thread.

    Every submitted coroutine runs as an independent task; there is no
    bound on how many run at once and no ordering between them. The loop
    can be stopped and is started again on the next submission.

    Submission and :meth:`stop` are serialized on one lock: a coroutine is
    either scheduled before the stop, and finished by it, or lands on a
    freshly started loop.
    """

    def __init__(self, name: str = "slacklog"):
        self._name = name
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        with self._lock:
            return self._thread is not None and self._thread.is_alive()

    def in_loop_thread(self) -> bool:
        """Whether the caller runs on the loop's own thread."""
        with self._lock:
            return self._thread is threading.current_thread()

    def submit(self, coro: Coroutine[Any, Any, Any]) -> Future:
        """Schedule ``coro`` on the loop and return its completion handle."""
        with self._lock:
            loop = self._ensure_started()
            return asyncio.run_coroutine_threadsafe(coro, loop)

    def stop(self, cleanup: Callable[[], Awaitable[None]] | None = None) -> None:
        """Finish outstanding tasks, run ``cleanup`` in the loop, then stop it.

        Called from the loop thread itself, the stop is scheduled and the
        call returns without waiting for it.
        """

        async def _async_close() -> None:
            try:
                current = asyncio.current_task()
                pending = [t for t in asyncio.all_tasks() if t is not current]
                await asyncio.gather(*pending, return_exceptions=True)
                if cleanup is not None:
                    await cleanup()
            finally:
                asyncio.get_running_loop().stop()

        with self._lock:
            loop, thread = self._loop, self._thread
            if loop is None or thread is None:
                return
            self._loop = None
            self._thread = None
            # queued behind every submission already scheduled on this loop
            loop.call_soon_threadsafe(lambda: loop.create_task(_async_close()))

        if thread is not threading.current_thread():
            thread.join(timeout=LOOP_STOP_TIMEOUT)

    def _ensure_started(self) -> asyncio.AbstractEventLoop:
        # caller holds self._lock
        if self._loop is not None and self._thread is not None and self._thread.is_alive():
            return self._loop

        loop = asyncio.new_event_loop()
        ready = threading.Event()

        def _run_loop() -> None:
            asyncio.set_event_loop(loop)
            ready.set()
            try:
                loop.run_forever()
            finally:
                loop.close()

        thread = threading.Thread(target=_run_loop, name=self._name, daemon=True)
        thread.start()
        if not ready.wait(timeout=LOOP_START_TIMEOUT):
            raise RuntimeError("Background event loop failed to start")
        self._loop = loop
        self._thread = thread
        return loop


class OutstandingWork:
    """Thread-safe set of in-flight dispatch handles.

    Handles that complete successfully remove themselves; failed ones stay
    until drained so ``shutdown`` can report them.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._futures: set[Future] = set()

    def add(self, future: Future) -> None:
        with self._lock:
            self._futures.add(future)
        # may run immediately, so it must be registered outside the lock
        future.add_done_callback(self._on_done)

    def drain(self) -> list[Future]:
        """Remove and return every tracked handle."""
        with self._lock:
            futures = list(self._futures)
            self._futures.clear()
        return futures

    def __len__(self) -> int:
        with self._lock:
            return len(self._futures)

    def _on_done(self, future: Future) -> None:
        if future.cancelled() or future.exception() is not None:
            return
        with self._lock:
            self._futures.discard(future)
