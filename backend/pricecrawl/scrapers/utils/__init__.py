"""Scraper utilities for retry policy, request headers, and data normalization."""

from .normalizer import (
    DEFAULT_UNIT,
    UNIT_PATTERNS,
    absolute_url,
    clean_text,
    extract_unit,
    find_unit_label,
    parse_price,
)
from .retry import RETRYABLE_HTTP_ERRORS, page_fetch_retry
from .user_agents import BROWSER_HEADERS, DEFAULT_USER_AGENT, browser_headers


__all__ = [
    # Normalization
    "DEFAULT_UNIT",
    "UNIT_PATTERNS",
    "absolute_url",
    "clean_text",
    "extract_unit",
    "find_unit_label",
    "parse_price",
    # Retry
    "RETRYABLE_HTTP_ERRORS",
    "page_fetch_retry",
    # Headers
    "BROWSER_HEADERS",
    "DEFAULT_USER_AGENT",
    "browser_headers",
]
