"""
app/services/worker_pool.py

Thread-per-task pool with a fixed number of admission tokens.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from app.logging_utils import log_event

logger = logging.getLogger(__name__)


class BoundedWorkerPool:
    """
    Spawns one thread per submitted task but lets at most ``max_concurrency``
    of them run their work at the same time.

    Spawning is not gated by the tokens; a task acquires its token inside its
    own thread and always releases it, even when the task raises.
    ``max_pending`` optionally caps spawned-but-unfinished tasks so buffered
    chunk memory stays bounded; ``submit`` blocks while that cap is reached.
    ``wait`` is the join-all barrier.
    """

    def __init__(
        self,
        *,
        max_concurrency: int,
        max_pending: int | None = None,
        name: str = "chunk-worker",
        log: logging.Logger | None = None,
    ) -> None:
        self._max_concurrency = max(1, max_concurrency)
        self._max_pending = (
            max(self._max_concurrency, max_pending) if max_pending else None
        )
        self._name = name
        self._logger = log or logger
        self._tokens = threading.BoundedSemaphore(self._max_concurrency)
        self._state = threading.Condition()
        self._pending = 0
        self._active = 0
        self._peak_active = 0
        self._spawned = 0
        self._crashed = 0

    @property
    def max_concurrency(self) -> int:
        return self._max_concurrency

    @property
    def peak_active(self) -> int:
        with self._state:
            return self._peak_active

    @property
    def spawned(self) -> int:
        with self._state:
            return self._spawned

    @property
    def crashed(self) -> int:
        with self._state:
            return self._crashed

    def submit(self, task: Callable[..., Any], *args: Any) -> None:
        with self._state:
            if self._max_pending is not None:
                self._state.wait_for(lambda: self._pending < self._max_pending)
            self._pending += 1
            self._spawned += 1
            index = self._spawned

        thread = threading.Thread(
            target=self._run,
            args=(task, args),
            name=f"{self._name}-{index}",
        )
        try:
            thread.start()
        except RuntimeError:
            self._finish()
            raise

    def wait(self, timeout: float | None = None) -> bool:
        """
        Block until every spawned task has finished. Returns False on timeout.
        """

        with self._state:
            return self._state.wait_for(lambda: self._pending == 0, timeout)

    def _run(self, task: Callable[..., Any], args: tuple[Any, ...]) -> None:
        try:
            with self._tokens:
                self._enter()
                try:
                    task(*args)
                finally:
                    self._leave()
        except Exception as exc:  # noqa: BLE001
            with self._state:
                self._crashed += 1
            log_event(
                self._logger,
                logging.ERROR,
                "chunk_task_crashed",
                error=repr(exc),
            )
        finally:
            self._finish()

    def _enter(self) -> None:
        with self._state:
            self._active += 1
            self._peak_active = max(self._peak_active, self._active)

    def _leave(self) -> None:
        with self._state:
            self._active -= 1

    def _finish(self) -> None:
        with self._state:
            self._pending -= 1
            self._state.notify_all()
