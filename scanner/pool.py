"""Bounded worker pool with a fail-fast completion barrier."""

import logging
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Callable, Iterable, List, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def run_all(
    func: Callable[[T], R],
    items: Iterable[T],
    workers: int,
    name: str = "cardeps",
) -> List[R]:
    """
    Apply ``func`` to every item on a pool of at most ``workers`` threads.

    Returns only once every task has finished. If any task raises, tasks
    that have not started yet are cancelled and the exception of the first
    failed task (in submission order) is re-raised.

    Args:
        func: Work for a single item.
        items: Items to process; consumed eagerly during submission.
        workers: Maximum number of concurrently running tasks.
        name: Thread name prefix.

    Returns:
        Results in submission order.
    """
    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix=name)
    futures: List[Future] = []
    try:
        for item in items:
            futures.append(executor.submit(func, item))
        logger.debug("%s: submitted %d tasks to %d workers", name, len(futures), workers)

        _, not_done = wait(futures, return_when=FIRST_EXCEPTION)
        if not_done:
            for future in not_done:
                future.cancel()
            logger.debug("%s: cancelled %d pending tasks after a failure", name, len(not_done))

        for future in futures:
            if future.done() and not future.cancelled() and future.exception() is not None:
                raise future.exception()

        return [future.result() for future in futures]
    finally:
        executor.shutdown(wait=True, cancel_futures=True)
