"""Request/response boundary and background worker.

A request is a mapping with ``leftChannel``, ``rightChannel`` and
``sampleRate`` (plus optional ``options``). Each request produces exactly
one response: ``{"leftChannel", "rightChannel"}`` on success or
``{"error": "..."}`` on failure. Partial results are never returned.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import deque
from collections.abc import Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from devocal.config import ProcessingParams
from devocal.dsp import process
from devocal.errors import DevocalError, InvalidInput, ProcessingCancelled

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Error during audio processing"

Response = dict[str, Any]
ResponseCallback = Callable[[Response], None]


# ---------------------------------------------------------------------------
# Message handling
# ---------------------------------------------------------------------------


def error_response(exc: BaseException) -> Response:
    """Build a failure response from *exc*."""
    message = str(exc) or DEFAULT_ERROR_MESSAGE
    if isinstance(exc, DevocalError):
        message = f"{exc.kind}: {message}"
    return {"error": message}


def handle_message(
    message: Mapping[str, Any],
    cancel_event: threading.Event | None = None,
    parallel: bool = False,
) -> Response:
    """Process one request and return its single response.

    Never raises for processing failures; they are reported in the
    ``error`` field and the caller can submit a corrected request.
    """
    try:
        if not isinstance(message, Mapping):
            raise InvalidInput(
                f"Message must be a mapping, got {type(message).__name__}"
            )
        missing = [
            k for k in ("leftChannel", "rightChannel", "sampleRate") if k not in message
        ]
        if missing:
            raise InvalidInput(f"Message is missing field(s): {', '.join(missing)}")

        params = ProcessingParams.from_options(message.get("options"))
        left, right = process(
            message["leftChannel"],
            message["rightChannel"],
            message["sampleRate"],
            params,
            parallel=parallel,
            cancel_event=cancel_event,
        )
    except DevocalError as e:
        logger.warning("Request failed: %s", e)
        return error_response(e)
    except Exception as e:
        logger.exception("Unexpected failure while processing request")
        return error_response(e)

    return {"leftChannel": left, "rightChannel": right}


# ---------------------------------------------------------------------------
# Background worker
# ---------------------------------------------------------------------------


class TaskStatus(Enum):
    """Status of a submitted request."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class Task:
    """Internal bookkeeping for one submitted request."""

    id: str
    message: Mapping[str, Any] | None
    callback: ResponseCallback | None = None
    status: TaskStatus = TaskStatus.PENDING
    cancel_event: threading.Event = field(default_factory=threading.Event)
    future: Future | None = None


class VocalRemovalWorker:
    """Runs vocal-removal requests off the caller's thread.

    Example:
        ```python
        worker = VocalRemovalWorker()
        task_id = worker.submit(
            {"leftChannel": left, "rightChannel": right, "sampleRate": 44100},
            callback=print,
        )
        response = worker.result(task_id)
        worker.shutdown()
        ```
    """

    def __init__(
        self,
        max_workers: int = 1,
        parallel_channels: bool = False,
        max_finished_tasks: int = 32,
    ):
        """
        Args:
            max_workers: Maximum number of requests processed at once.
            parallel_channels: Process left/right on separate threads
                within each request.
            max_finished_tasks: Finished tasks kept for ``result()`` and
                ``get_status()``; older ones are forgotten.
        """
        if max_finished_tasks < 1:
            raise ValueError(
                f"max_finished_tasks must be >= 1, got {max_finished_tasks}"
            )
        self.max_workers = max_workers
        self.parallel_channels = parallel_channels
        self.max_finished_tasks = max_finished_tasks
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="devocal-"
        )
        self._tasks: dict[str, Task] = {}
        self._finished: deque[str] = deque()
        self._lock = threading.Lock()
        self._shutdown_requested = False

    def __enter__(self) -> VocalRemovalWorker:
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown(wait=True)

    def submit(
        self,
        message: Mapping[str, Any],
        callback: ResponseCallback | None = None,
    ) -> str:
        """Queue *message* for processing and return its task id.

        *callback*, if given, is called exactly once with the response.

        Raises:
            RuntimeError: If the worker is shutting down.
        """
        task = Task(id=uuid.uuid4().hex[:8], message=message, callback=callback)
        with self._lock:
            if self._shutdown_requested:
                raise RuntimeError("Worker is shutting down")
            # Registered only once the executor has accepted it
            task.future = self._executor.submit(self._execute_task, task)
            self._tasks[task.id] = task
        logger.info("Submitted task %s", task.id)
        return task.id

    def cancel(self, task_id: str) -> bool:
        """Request cancellation of *task_id*.

        A running task stops at the next frame boundary and responds with
        an error. Returns False if the task is unknown or already finished.
        """
        with self._lock:
            task = self._tasks.get(task_id)
        if task is None or task.status in (
            TaskStatus.COMPLETED,
            TaskStatus.FAILED,
            TaskStatus.CANCELLED,
        ):
            return False
        task.cancel_event.set()
        logger.info("Cancellation requested for task %s", task_id)
        return True

    def get_status(self, task_id: str) -> TaskStatus | None:
        """Return the status of *task_id*, or None if unknown."""
        with self._lock:
            task = self._tasks.get(task_id)
        return task.status if task else None

    def result(self, task_id: str, timeout: float | None = None) -> Response:
        """Block until *task_id* finishes and return its response.

        Raises:
            KeyError: If the task id is unknown or has been forgotten.
            concurrent.futures.TimeoutError: If *timeout* elapses first.
        """
        with self._lock:
            task = self._tasks[task_id]
        return task.future.result(timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting requests.

        With ``wait=False`` every unfinished task is asked to cancel; each
        still delivers its (error) response.
        """
        with self._lock:
            self._shutdown_requested = True
            if not wait:
                for task in self._tasks.values():
                    if task.status in (TaskStatus.PENDING, TaskStatus.RUNNING):
                        task.cancel_event.set()
        self._executor.shutdown(wait=wait)

    def _execute_task(self, task: Task) -> Response:
        """Run one task in the thread pool and deliver its response."""
        task.status = TaskStatus.RUNNING
        if task.cancel_event.is_set():
            response = error_response(
                ProcessingCancelled(f"Task {task.id} cancelled before start")
            )
        else:
            response = handle_message(
                task.message,
                cancel_event=task.cancel_event,
                parallel=self.parallel_channels,
            )
        task.message = None

        if "error" not in response:
            task.status = TaskStatus.COMPLETED
        elif task.cancel_event.is_set():
            task.status = TaskStatus.CANCELLED
        else:
            task.status = TaskStatus.FAILED
        logger.info("Task %s finished: %s", task.id, task.status.value)
        self._retire(task)

        if task.callback is not None:
            try:
                task.callback(response)
            except Exception:
                logger.exception("Response callback for task %s raised", task.id)
        return response

    def _retire(self, task: Task) -> None:
        """Record *task* as finished, forgetting the oldest finished tasks."""
        with self._lock:
            self._finished.append(task.id)
            while len(self._finished) > self.max_finished_tasks:
                old_id = self._finished.popleft()
                self._tasks.pop(old_id, None)
                logger.debug("Forgot finished task %s", old_id)
