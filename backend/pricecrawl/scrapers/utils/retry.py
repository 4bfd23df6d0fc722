"""Retry policy for catalog page fetches."""

import logging
from typing import Optional

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pricecrawl.config import settings


logger = structlog.get_logger(__name__)


# Transport failures and non-2xx responses (via raise_for_status)
RETRYABLE_HTTP_ERRORS = (
    httpx.HTTPStatusError,
    httpx.TransportError,
)


def page_fetch_retry(attempts: Optional[int] = None) -> AsyncRetrying:
    """Build the retry controller for one page fetch.

    With the default of one attempt this fails fast: the first error is
    re-raised unchanged.

    Args:
        attempts: Override for settings.CRAWL_FETCH_ATTEMPTS

    Returns:
        Configured tenacity AsyncRetrying
    """
    return AsyncRetrying(
        stop=stop_after_attempt(attempts or settings.CRAWL_FETCH_ATTEMPTS),
        wait=wait_exponential(
            multiplier=1,
            min=settings.CRAWL_RETRY_MIN_WAIT,
            max=settings.CRAWL_RETRY_MAX_WAIT,
        ),
        retry=retry_if_exception_type(RETRYABLE_HTTP_ERRORS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
