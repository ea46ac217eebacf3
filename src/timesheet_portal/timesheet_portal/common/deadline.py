"""Bounded waits around I/O collaborators (file store, database)."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Callable, Optional, TypeVar

from ..core.exceptions import OperationTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")

_executor = ThreadPoolExecutor(max_workers=8, thread_name_prefix="io-call")


def call_with_timeout(fn: Callable[[], T], *, timeout: Optional[float], operation: str) -> T:
    """Run ``fn`` and wait at most ``timeout`` seconds for it.

    ``None`` waits indefinitely. On timeout the worker is left to finish in
    the background: if it commits, the commit stands and is not rolled back.
    """

    if timeout is None:
        return fn()

    future = _executor.submit(fn)
    try:
        return future.result(timeout=timeout)
    except FutureTimeout:
        logger.warning("%s exceeded %.2fs deadline", operation, timeout)
        raise OperationTimeout(f"{operation} timed out after {timeout:g}s", field=None) from None
