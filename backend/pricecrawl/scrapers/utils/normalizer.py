"""Price and unit normalization utilities."""

import re
from typing import List, Optional, Pattern, Tuple


DEFAULT_UNIT = "개"

# Ordered: area before length, so "㎡" is never read as "M".
UNIT_PATTERNS: List[Tuple[Pattern, str]] = [
    (re.compile(r"㎡|제곱미터|평방미터", re.IGNORECASE), "㎡"),
    (re.compile(r"롤|Roll", re.IGNORECASE), "롤"),
    (re.compile(r"세트|set", re.IGNORECASE), "세트"),
    (re.compile(r"개|EA", re.IGNORECASE), "개"),
    (re.compile(r"M|미터|m$", re.IGNORECASE), "M"),
    (re.compile(r"박스|Box", re.IGNORECASE), "박스"),
    (re.compile(r"장"), "장"),
    (re.compile(r"통"), "통"),
    (re.compile(r"kg|킬로그램", re.IGNORECASE), "kg"),
]

# Explicit unit label on listing cards, e.g. "단위 : 1롤"
UNIT_LABEL_PATTERN = re.compile(r"단위\s*:\s*1?\s*(롤|평|㎡|세트|개|장|박스|M|EA)", re.IGNORECASE)

_NON_DIGITS = re.compile(r"[^\d]")


def parse_price(text: Optional[str]) -> int:
    """Parse a price string into an integer won amount.

    Every non-digit character is stripped, so "45,000원" -> 45000 and
    "₩ 1,234" -> 1234. Returns 0 when no digits remain.

    Args:
        text: Raw price text

    Returns:
        Integer price, or 0 if the text contains no digits
    """
    if not text:
        return 0
    cleaned = _NON_DIGITS.sub("", text)
    if not cleaned:
        return 0
    return int(cleaned, 10)


def extract_unit(text: Optional[str]) -> str:
    """Infer a measurement unit from free text such as a product name.

    Args:
        text: Text to inspect

    Returns:
        Canonical unit of the first matching pattern, or DEFAULT_UNIT
    """
    if not text:
        return DEFAULT_UNIT
    for pattern, unit in UNIT_PATTERNS:
        if pattern.search(text):
            return unit
    return DEFAULT_UNIT


def find_unit_label(text: Optional[str]) -> Optional[str]:
    """Return the unit from an explicit "단위: ..." label, if present."""
    if not text:
        return None
    match = UNIT_LABEL_PATTERN.search(text)
    if match:
        return match.group(1)
    return None


def clean_text(text: Optional[str]) -> str:
    """Collapse whitespace runs and strip."""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def absolute_url(base_url: str, href: Optional[str]) -> Optional[str]:
    """Resolve a scraped href or image src against a source base URL.

    Args:
        base_url: Source base URL without trailing slash
        href: Raw attribute value

    Returns:
        Absolute URL, or None for empty/javascript links
    """
    if not href:
        return None
    href = href.strip()
    if not href or href.startswith("javascript:"):
        return None
    if href.startswith("//"):
        return f"https:{href}"
    if href.startswith("http"):
        return href
    return f"{base_url}{'' if href.startswith('/') else '/'}{href}"
