"""
Thread-safe background task manager for detached side effects.

Features:
- TaskManager: run callables on a bounded pool, off the request path
- TaskStatus: point-in-time snapshot of one task
- Finished tasks are forgotten after an hour
- Shutdown either drains queued work or discards it
"""

import logging
import threading
import uuid
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)

HISTORY_TTL = timedelta(hours=1)


class TaskStatusEnum(StrEnum):
    """Task status values."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class TaskStatus:
    """Task status snapshot."""

    id: str
    name: str
    status: TaskStatusEnum
    submitted_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None
    result: Any = None
    error: str | None = None


@dataclass
class _Task:
    id: str
    name: str
    call: Callable[[], Any]
    submitted_at: datetime = field(default_factory=datetime.now)
    status: TaskStatusEnum = TaskStatusEnum.PENDING
    started_at: datetime | None = None
    completed_at: datetime | None = None
    result: Any = None
    error: str | None = None
    future: Future | None = None

    def finish(self, status: TaskStatusEnum, result: Any = None, error: str | None = None) -> None:
        self.status = status
        self.result = result
        self.error = error
        self.completed_at = datetime.now()

    def snapshot(self) -> TaskStatus:
        return TaskStatus(
            id=self.id,
            name=self.name,
            status=self.status,
            submitted_at=self.submitted_at,
            started_at=self.started_at,
            completed_at=self.completed_at,
            result=self.result,
            error=self.error,
        )


class TaskManager:
    """
    Bounded pool of worker threads with per-task status.

    At most max_workers tasks run at once; the rest wait in the executor
    queue. Owned by whoever builds it (the app lifespan, the CLI), never global.
    """

    def __init__(self, max_workers: int = 4, thread_name_prefix: str = "loadcal-task"):
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=thread_name_prefix)
        self._tasks: dict[str, _Task] = {}
        self._lock = threading.RLock()
        self._closed = False

    def submit(self, func: Callable, *args: Any, **kwargs: Any) -> str | None:
        """
        Queue func(*args, **kwargs).

        Returns:
            Task ID, or None when the manager is already shut down
        """
        name = getattr(func, "__name__", "task")
        task = _Task(id=str(uuid.uuid4()), name=name, call=lambda: func(*args, **kwargs))

        with self._lock:
            if self._closed:
                logger.warning("TaskManager is shut down, dropping %s", name)
                return None
            self._forget_finished()
            self._tasks[task.id] = task
            task.future = self._executor.submit(self._run, task)

        logger.debug("Task %s (%s) submitted", task.id, name)
        return task.id

    def _run(self, task: _Task) -> Any:
        """Worker body. Failures are recorded on the task, never raised."""
        with self._lock:
            task.status = TaskStatusEnum.RUNNING
            task.started_at = datetime.now()

        try:
            result = task.call()
        except Exception as e:
            with self._lock:
                task.finish(TaskStatusEnum.FAILED, error=str(e))
            logger.error("Task %s (%s) failed: %s", task.id, task.name, e)
            return None

        with self._lock:
            task.finish(TaskStatusEnum.COMPLETED, result=result)
        logger.debug("Task %s completed", task.id)
        return result

    def get_status(self, task_id: str) -> TaskStatus | None:
        with self._lock:
            task = self._tasks.get(task_id)
            return task.snapshot() if task else None

    def list_tasks(self) -> list[TaskStatus]:
        with self._lock:
            return [task.snapshot() for task in self._tasks.values()]

    def wait(self, task_id: str, timeout: float | None = None) -> TaskStatus | None:
        """Block until the task finishes (or timeout), then return its status."""
        with self._lock:
            task = self._tasks.get(task_id)
        if task is not None and task.future is not None and not task.future.cancelled():
            task.future.exception(timeout=timeout)
        return self.get_status(task_id)

    def cancel(self, task_id: str) -> bool:
        """Cancel a task that has not started yet."""
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None or not self._try_cancel(task):
                return False
        logger.info("Task %s cancelled", task_id)
        return True

    def _try_cancel(self, task: _Task) -> bool:
        # Must be called with lock held
        if task.status != TaskStatusEnum.PENDING or task.future is None or not task.future.cancel():
            return False
        task.finish(TaskStatusEnum.CANCELLED)
        return True

    def _forget_finished(self) -> None:
        # Must be called with lock held
        cutoff = datetime.now() - HISTORY_TTL
        for task_id in [t.id for t in self._tasks.values() if t.completed_at and t.completed_at < cutoff]:
            del self._tasks[task_id]

    def shutdown(self, wait: bool = True) -> None:
        """
        Stop accepting work.

        Args:
            wait: If True, drain queued tasks and wait for them. If False,
                discard everything still queued; running tasks finish on
                their own.
        """
        with self._lock:
            self._closed = True
            if not wait:
                discarded = sum(1 for task in self._tasks.values() if self._try_cancel(task))
                if discarded:
                    logger.warning("TaskManager discarded %d queued tasks", discarded)

        self._executor.shutdown(wait=wait, cancel_futures=not wait)
        logger.info("TaskManager executor shutdown (wait=%s)", wait)
