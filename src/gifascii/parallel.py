"""Ordered, fail-fast parallel map over independent frames."""

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait

logger = logging.getLogger(__name__)


def parallel_map(fn, items, workers, error_cls):
    """Apply ``fn`` to every item and return the results in input order.

    ``fn`` must not touch state shared with other items. If any call raises,
    work that has not started is cancelled and ``error_cls(index, exc)`` is
    raised for the failing item; no partial result list is returned.
    """
    items = list(items)
    if not items:
        return []
    workers = max(1, min(workers, len(items)))
    results = [None] * len(items)

    if workers == 1:
        for index, item in enumerate(items):
            try:
                results[index] = fn(item)
            except Exception as e:
                raise error_cls(index, e) from e
        return results

    executor = ThreadPoolExecutor(max_workers=workers)
    try:
        futures = {executor.submit(fn, item): index for index, item in enumerate(items)}
        done, _ = wait(futures, return_when=FIRST_EXCEPTION)
        failed = sorted(
            (futures[f], f.exception()) for f in done
            if not f.cancelled() and f.exception() is not None
        )
        if failed:
            index, exc = failed[0]
            logger.debug("Task %d failed, cancelling %d outstanding tasks", index, len(futures) - len(done))
            executor.shutdown(wait=True, cancel_futures=True)
            raise error_cls(index, exc) from exc
        for future, index in futures.items():
            results[index] = future.result()
    finally:
        executor.shutdown(wait=True, cancel_futures=True)
    return results
