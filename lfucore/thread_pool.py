"""Shared, named pools of worker threads that run delayed jobs."""

from __future__ import annotations

import heapq
import itertools
import os
import threading
import time
from concurrent.futures import Future
from datetime import timedelta
from enum import Enum
from typing import Any, Callable, Dict, List, Tuple


class PoolName(Enum):
    """Names of the shared pools."""

    HOUSEKEEPER = "housekeeper"
    INVALIDATOR = "invalidator"

    def thread_name_template(self) -> str:
        return f"lfucore-{self.value}-{{}}"


_Job = Tuple[float, int, Callable[[], Any], Future]


class ThreadPool:
    """A fixed set of worker threads running jobs after a delay."""

    def __init__(self, name: PoolName, num_threads: int) -> None:
        if num_threads < 1:
            raise ValueError("a thread pool needs at least one thread")
        self.name = name
        self.num_threads = num_threads
        self._cond = threading.Condition()
        self._queue: List[_Job] = []
        self._seq = itertools.count()
        self._closed = False
        template = name.thread_name_template()
        self._workers = [
            threading.Thread(target=self._work, name=template.format(i), daemon=True)
            for i in range(num_threads)
        ]
        for worker in self._workers:
            worker.start()

    def execute_after(self, delay: timedelta, func: Callable[[], Any]) -> Future:
        """Run ``func`` on a worker once ``delay`` has passed; return its future."""
        seconds = delay.total_seconds()
        if seconds < 0:
            raise ValueError("delay must not be negative")
        future: Future = Future()
        with self._cond:
            if self._closed:
                raise RuntimeError("thread pool is shut down")
            due = time.monotonic() + seconds
            heapq.heappush(self._queue, (due, next(self._seq), func, future))
            self._cond.notify_all()
        return future

    def shutdown(self) -> None:
        """Stop the workers and cancel jobs that have not started."""
        with self._cond:
            if self._closed:
                return
            self._closed = True
            pending, self._queue = self._queue, []
            self._cond.notify_all()
        for _, _, _, future in pending:
            future.cancel()
        current = threading.current_thread()
        for worker in self._workers:
            if worker is not current:
                worker.join()

    def _next_job(self) -> _Job | None:
        with self._cond:
            while not self._closed:
                if not self._queue:
                    self._cond.wait()
                    continue
                remaining = self._queue[0][0] - time.monotonic()
                if remaining <= 0:
                    return heapq.heappop(self._queue)
                self._cond.wait(remaining)
            return None

    def _work(self) -> None:
        while (job := self._next_job()) is not None:
            _, _, func, future = job
            if not future.set_running_or_notify_cancel():
                continue
            try:
                result = func()
            except Exception as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)


_registry_lock = threading.Lock()
_pools: Dict[PoolName, ThreadPool] = {}
_clients: Dict[PoolName, int] = {}


class ThreadPoolRegistry:
    """Hands out one shared pool per name, counting its clients."""

    @staticmethod
    def acquire_pool(name: PoolName) -> ThreadPool:
        with _registry_lock:
            pool = _pools.get(name)
            if pool is None:
                pool = ThreadPool(name, max(os.cpu_count() or 1, 1))
                _pools[name] = pool
                _clients[name] = 0
            _clients[name] += 1
            return pool

    @staticmethod
    def release_pool(pool: ThreadPool) -> None:
        with _registry_lock:
            if _pools.get(pool.name) is not pool:
                return
            _clients[pool.name] -= 1
            if _clients[pool.name] > 0:
                return
            del _pools[pool.name]
            del _clients[pool.name]
        pool.shutdown()