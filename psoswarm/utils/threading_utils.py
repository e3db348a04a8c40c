"""Threading utilities for swarm workers and background solver runs."""

from concurrent.futures import ThreadPoolExecutor, Future
from typing import Callable, TypeVar
import threading

from ..config.constants import BACKGROUND_WORKERS

T = TypeVar('T')


class WorkerPool:
    """
    Thread pool running one long-lived task per worker.

    Particle loops never yield their thread, so a pool must be sized for
    every task it will hold at once. The shared instance behind
    run_in_background() has BACKGROUND_WORKERS threads; further background
    solvers queue until one of those finishes.
    """

    _instance: "WorkerPool | None" = None
    _lock = threading.Lock()

    def __init__(self, max_workers: int = 4, name: str = "psoswarm") -> None:
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=name)
        self._futures: list[Future] = []
        self._futures_lock = threading.Lock()

    @classmethod
    def get_instance(cls, max_workers: int = BACKGROUND_WORKERS) -> "WorkerPool":
        """Get the shared pool used for background solver runs."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = cls(max_workers, name="psoswarm-background")
            return cls._instance

    def submit(self, fn: Callable[..., T], *args, **kwargs) -> Future[T]:
        """Submit a function to run on a worker thread."""
        future = self._executor.submit(fn, *args, **kwargs)
        with self._futures_lock:
            # Finished futures hold their results; only track pending work
            self._futures = [f for f in self._futures if not f.done()]
            self._futures.append(future)
        return future

    def shutdown(self, wait: bool = True) -> None:
        """Shutdown the pool, optionally waiting for running tasks."""
        self._executor.shutdown(wait=wait)

    def cancel_all(self) -> None:
        """Cancel all tasks that have not started yet."""
        with self._futures_lock:
            for future in self._futures:
                future.cancel()
            self._futures.clear()

    @property
    def futures(self) -> list[Future]:
        with self._futures_lock:
            return list(self._futures)


def run_in_background(fn: Callable[..., T], *args, **kwargs) -> Future[T]:
    """
    Run a function in background thread.

    Args:
        fn: Function to run
        *args: Positional arguments
        **kwargs: Keyword arguments

    Returns:
        Future object for the result
    """
    pool = WorkerPool.get_instance()
    return pool.submit(fn, *args, **kwargs)
