"""
Background execution of long-running inventory operations.

Imports and exports run on a thread pool so the caller is never blocked. Each
job is measured with `measure_block` and ends in a `JobOutcome`; the optional
completion callback fires exactly once, after the job has finished, whether
it succeeded or failed. There is no progress reporting and no cancellation:
jobs run to completion.

Usage:
    from inventory_store.jobs import JobRunner

    with JobRunner() as runner:
        future = runner.submit("import", import_csv, store, "parts.csv",
                               on_complete=lambda outcome: print(outcome.success))
        outcome = future.result()
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from inventory_store.config import get_settings
from inventory_store.domain.errors import InventoryError
from inventory_store.utils.logging import get_logger
from inventory_store.utils.profiler import measure_block

log = get_logger(__name__)

T = TypeVar("T")


@dataclass
class JobOutcome(Generic[T]):
    """
    Result of one background job.

    `result` is set on success, `error` on failure; timing comes from the
    profiler.
    """

    name: str
    success: bool
    result: Optional[T] = None
    error: Optional[str] = None
    duration_seconds: float = 0.0
    peak_rss_bytes: Optional[int] = None


def run_job(name: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> JobOutcome[T]:
    """
    Run `fn` in the current thread and wrap its result in a JobOutcome.

    Inventory errors become failed outcomes; anything else propagates.
    """
    log.info(f"[JOB START] {name}", extra={"job": name})
    with measure_block(name) as stats:
        try:
            result = fn(*args, **kwargs)
            outcome: JobOutcome[T] = JobOutcome(name=name, success=True, result=result)
        except InventoryError as exc:
            log.exception(f"[JOB FAILED] {name}", extra={"job": name})
            outcome = JobOutcome(name=name, success=False, error=str(exc))

    outcome.duration_seconds = round(stats.duration_seconds, 3)
    outcome.peak_rss_bytes = stats.peak_rss_bytes
    if outcome.success:
        log.info(
            f"[JOB SUCCESS] {name}",
            extra={"job": name, "duration": outcome.duration_seconds},
        )
    return outcome


class JobRunner:
    """
    Thread pool running jobs in the background.

    Parameters
    ----------
    max_workers : int, optional
        Pool size; defaults to the `JOB_WORKERS` setting.
    """

    def __init__(self, max_workers: Optional[int] = None) -> None:
        workers = max_workers or get_settings().job_workers
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="inventory-job")

    def submit(
        self,
        name: str,
        fn: Callable[..., T],
        *args: Any,
        on_complete: Optional[Callable[[JobOutcome[T]], None]] = None,
        **kwargs: Any,
    ) -> "Future[JobOutcome[T]]":
        """
        Schedule `fn(*args, **kwargs)` and return a future for its outcome.

        `on_complete` receives the JobOutcome once the job is done. If the job
        raised something other than an InventoryError, the future carries that
        exception and the callback gets a failed outcome describing it.
        """
        future: Future[JobOutcome[T]] = self._executor.submit(run_job, name, fn, *args, **kwargs)
        if on_complete is not None:

            def _notify(done: "Future[JobOutcome[T]]") -> None:
                exc = done.exception()
                if exc is not None:
                    on_complete(JobOutcome(name=name, success=False, error=repr(exc)))
                else:
                    on_complete(done.result())

            future.add_done_callback(_notify)
        return future

    def close(self, wait: bool = True) -> None:
        """Stop accepting jobs; by default wait for running ones to finish."""
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "JobRunner":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["JobOutcome", "JobRunner", "run_job"]
