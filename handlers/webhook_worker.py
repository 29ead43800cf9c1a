import asyncio
import queue
import threading
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from logging_setup import get_logger

logger = get_logger(__name__)

_STOP = object()

MAX_RETRY_DELAY = 30.0


class WorkerUnavailable(RuntimeError):
    """The worker gave up building its dispatcher or is shutting down"""
    pass


class WebhookWorker:
    """
    Background consumer for acknowledged webhooks

    The HTTP route only enqueues; this worker runs the dispatcher on its
    own thread and event loop. Each event becomes a task, so a slow sync
    doesn't hold up unrelated deliveries.

    Building the dispatcher is retried with exponential backoff. Events
    queued meanwhile wait for it. Once the worker gives up, enqueue()
    raises WorkerUnavailable.
    """

    def __init__(
        self,
        dispatcher_factory: Callable[[], Awaitable[Any]],
        start_attempts: int = 5,
        retry_delay: float = 1.0,
    ):
        self._dispatcher_factory = dispatcher_factory
        self._start_attempts = max(1, start_attempts)
        self._retry_delay = retry_delay
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._tasks: Set[asyncio.Task] = set()
        self._stopping = threading.Event()
        self._failed = False

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stopping.clear()
        self._failed = False
        self._thread = threading.Thread(target=self.run_sync, name="webhook-worker", daemon=True)
        self._thread.start()

    def enqueue(self, event: Dict[str, Any]) -> None:
        if self._failed or self._stopping.is_set():
            raise WorkerUnavailable("Webhook worker is not accepting events")
        self._queue.put(event)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Finish queued and in-flight events, then stop the thread"""
        self._stopping.set()
        self._queue.put(_STOP)
        if self._thread is not None:
            self._thread.join(timeout)

    def run_sync(self) -> None:
        # New event loop for this thread; gunicorn workers may already have one
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            loop.run_until_complete(self.run())
        finally:
            loop.close()

    async def _build_dispatcher(self):
        loop = asyncio.get_running_loop()
        delay = self._retry_delay

        for attempt in range(1, self._start_attempts + 1):
            try:
                return await self._dispatcher_factory()
            except Exception:
                logger.exception(f"Webhook worker failed to start (attempt {attempt}/{self._start_attempts})")

            if attempt == self._start_attempts:
                break
            # wakes early when stop() is called
            if await loop.run_in_executor(None, self._stopping.wait, delay):
                break
            delay = min(delay * 2, MAX_RETRY_DELAY)

        return None

    def _drop_queued(self) -> int:
        dropped = 0
        while True:
            try:
                event = self._queue.get_nowait()
            except queue.Empty:
                return dropped
            if event is not _STOP:
                dropped += 1

    async def run(self) -> None:
        dispatcher = await self._build_dispatcher()
        if dispatcher is None:
            self._failed = True
            dropped = self._drop_queued()
            logger.error(f"Webhook worker gave up; dropped {dropped} queued events")
            return

        logger.info("Webhook worker started")
        loop = asyncio.get_running_loop()

        while True:
            event = await loop.run_in_executor(None, self._queue.get)
            if event is _STOP:
                break

            task = asyncio.create_task(self._process(dispatcher, event))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        if self._tasks:
            await asyncio.gather(*self._tasks)
        logger.info("Webhook worker stopped")

    async def _process(self, dispatcher, event: Dict[str, Any]) -> None:
        try:
            await dispatcher.handle_webhook(event)
        except Exception:
            logger.exception(
                f"Error processing webhook {event.get('webhook_type')}/{event.get('webhook_code')}"
            )
