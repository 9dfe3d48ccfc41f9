# core/retry.py
import logging
import os
import time
from typing import Callable, TypeVar

import requests
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from .logger import get_logger

logger = get_logger(__name__)


def _read_max_attempts(raw: str) -> int:
    attempts = int(raw)
    if attempts < 1:
        raise ValueError(f"SYNC_MAX_ATTEMPTS must be at least 1, got {raw!r}")
    return attempts


SYNC_MAX_ATTEMPTS = _read_max_attempts(os.getenv("SYNC_MAX_ATTEMPTS", "3"))

# Failures to complete the call at all. An HTTP error status is an answer,
# not a transport failure, and is never retried.
TRANSPORT_ERRORS = (
    requests.ConnectionError,
    requests.Timeout,
    requests.exceptions.ChunkedEncodingError,  # connection dropped mid-body
)

T = TypeVar("T")


def call_with_retry(
    fn: Callable[[], T],
    *,
    attempts: int = SYNC_MAX_ATTEMPTS,
    delay_step: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run fn() up to `attempts` times, retrying only on TRANSPORT_ERRORS.

    The wait before retry i (i = failures so far) is delay_step * i seconds,
    so with the defaults: 1s, then 2s. Whatever fn() returns is final. The
    last transport error is re-raised as-is.
    """
    if attempts < 1:
        raise ValueError(f"attempts must be at least 1, got {attempts}")

    retrying = Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_incrementing(start=delay_step, increment=delay_step),
        retry=retry_if_exception_type(TRANSPORT_ERRORS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        sleep=sleep,
        reraise=True,
    )
    return retrying(fn)
