"""Strategies shared by Cafe24-hosted storefronts (hangel, ianmall).

Cafe24 listing cards link to /product/detail.html?product_no=N&cate_no=C.
Skins differ in the name-link class (df-prl__name vs df-prl-name) and in
which span carries the visible name.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Sequence, Tuple

from pricecrawl.scrapers.extraction import (
    PRODUCT_PRICE_CLASS,
    TAGGED_PRICE,
    ExtractionContext,
    RawCandidate,
    block_windows,
    first_positions,
    first_price,
    image_src,
    parse_markup,
    unescape,
    visible_span_texts,
)
from pricecrawl.scrapers.utils.normalizer import absolute_url


PRODUCT_NO = re.compile(r"product_no=(\d+)")

_LINK_IMAGE_ALT = re.compile(
    r'href="[^"]*product_no=(\d+)[^"]*"[^>]*>\s*(?:<[^>]+>\s*){0,4}?<img[^>]*alt="([^"]+)"',
    re.IGNORECASE,
)


def detail_url(context: ExtractionContext, product_no: str) -> str:
    return f"{context.base_url}/product/detail.html?product_no={product_no}&cate_no={context.node.id}"


def _priced_candidates(
    markup: str,
    context: ExtractionContext,
    names: Dict[str, str],
    price_patterns: Sequence[Pattern],
    images: Optional[Dict[str, str]] = None,
) -> List[RawCandidate]:
    """Price each named product from the markup window following it."""
    positions = first_positions(markup, {no: (f"product_no={no}",) for no in names})
    windows = block_windows(markup, positions, after=2000)
    images = images or {}

    candidates = []
    for product_no, name in names.items():
        window = windows.get(product_no)
        if window is None:
            continue
        candidates.append(
            RawCandidate(
                name=name,
                price=first_price(window, price_patterns),
                url=detail_url(context, product_no),
                image_url=absolute_url(context.base_url, images.get(product_no)),
                context=window,
            )
        )
    return candidates


@dataclass(frozen=True)
class NameLinkStrategy:
    """Names from `a.<link_class>` product links, prices from the card.

    Args:
        link_class: CSS class of the name link
        use_last_span: Take the last visible span (skins that prepend a
            hidden "상품명" label) instead of the first
    """

    link_class: str
    use_last_span: bool = False
    price_patterns: Tuple[Pattern, ...] = (PRODUCT_PRICE_CLASS, TAGGED_PRICE)

    def __call__(self, markup: str, context: ExtractionContext) -> List[RawCandidate]:
        soup = parse_markup(markup)
        names: Dict[str, str] = {}
        for link in soup.select(f"a.{self.link_class}[href*='product_no=']"):
            match = PRODUCT_NO.search(link.get("href", ""))
            texts = visible_span_texts(link)
            if not match or not texts:
                continue
            names.setdefault(match.group(1), texts[-1] if self.use_last_span else texts[0])
        return _priced_candidates(markup, context, names, self.price_patterns)


def extract_thumbnail_alts(markup: str, context: ExtractionContext) -> List[RawCandidate]:
    """Thumbnail links: product_no href wrapping an image whose alt is the name."""
    names: Dict[str, str] = {}
    for match in _LINK_IMAGE_ALT.finditer(markup):
        name = unescape(match.group(2))
        if len(name) > 1:
            names.setdefault(match.group(1), name)
    if not names:
        return []

    images: Dict[str, str] = {}
    soup = parse_markup(markup)
    for link in soup.select("a[href*='product_no=']"):
        match = PRODUCT_NO.search(link.get("href", ""))
        src = image_src(link)
        if match and src:
            images.setdefault(match.group(1), src)

    return _priced_candidates(markup, context, names, (PRODUCT_PRICE_CLASS, TAGGED_PRICE), images)
