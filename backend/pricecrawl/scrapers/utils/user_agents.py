"""Browser identification headers sent with catalog requests."""

from typing import Dict, Optional


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Common Accept headers for Korean storefront HTML
BROWSER_HEADERS: Dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7",
}


def browser_headers(referer: Optional[str] = None) -> Dict[str, str]:
    """Return a fresh copy of the browser headers, optionally with a Referer.

    Args:
        referer: Value for the Referer header

    Returns:
        Header dict safe to embed in a source config
    """
    headers = dict(BROWSER_HEADERS)
    if referer:
        headers["Referer"] = referer
    return headers
