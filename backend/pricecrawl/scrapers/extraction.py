"""Layered fallback extraction of products from listing-page markup.

A source's pipeline is an ordered list of strategies. Each strategy makes a
different assumption about page structure and returns raw candidates; the
pipeline admits candidates (name cleanup, price floor, (name, price)
deduplication), enriches them with brand/size/unit, and stops at the first
strategy that produced at least one admitted product.
"""

import html
import re
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Pattern, Sequence, Tuple

import structlog
from bs4 import BeautifulSoup, Tag

from pricecrawl.scrapers.base import NAME_MAX_LENGTH, CrawledProduct
from pricecrawl.scrapers.taxonomy import CategoryNode
from pricecrawl.scrapers.utils.normalizer import (
    clean_text,
    extract_unit,
    find_unit_label,
    parse_price,
)


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ExtractionContext:
    """What a strategy knows about the page it is parsing."""

    source: str
    base_url: str
    node: CategoryNode
    category: str
    sub_category: Optional[str] = None
    list_url: Optional[str] = None


@dataclass
class RawCandidate:
    """Unvalidated product found by a strategy."""

    name: str
    price: int
    url: Optional[str] = None
    image_url: Optional[str] = None
    brand: Optional[str] = None
    size: Optional[str] = None
    unit: Optional[str] = None
    # Markup around this product only, used for label lookups
    context: Optional[str] = None


ExtractionStrategy = Callable[[str, ExtractionContext], List[RawCandidate]]


@dataclass(frozen=True)
class Strategy:
    """A named strategy and the price a candidate must exceed to be admitted."""

    name: str
    func: ExtractionStrategy
    price_floor: int = 0


@dataclass(frozen=True)
class EnrichmentRules:
    """Best-effort per-source rules for brand, size and unit."""

    # (needles, brand): first needle found in the name (case-insensitive) wins
    brand_vocabulary: Sequence[Tuple[Sequence[str], str]] = ()
    # Read "브랜드" / "사이즈" label values from the product's markup window
    brand_label: bool = False
    size_label: bool = False
    # Fall back to the category's parent label as the brand
    brand_from_parent: bool = False
    # Unit used when no explicit "단위:" label is present
    fixed_unit: Optional[str] = None


# -- markup helpers ---------------------------------------------------------

BRAND_LABEL_PATTERN = re.compile(
    r"브랜드</span>[\s\S]*?<span[^>]*>([A-Za-z가-힣0-9\s]+)</span>", re.IGNORECASE
)
SIZE_LABEL_PATTERN = re.compile(r"사이즈</span>[\s\S]*?<span[^>]*>([^<]+)</span>", re.IGNORECASE)
_PARENTHESIZED = re.compile(r"\s*\([^)]+\)\s*")

# Filter-panel and UI words that follow a "브랜드" label on some listing pages
INVALID_BRANDS = frozenset(["항목들", "수집", "필터링", "버튼", "모두보기", "상품", "브랜드"])

# Cafe24 hidden field labels rendered inside name links
NAME_LABELS = frozenset(["상품명", "상품명 :", "상품명:"])

# Price lookups, most specific first
SALE_LABEL_PRICE = re.compile(r"판매가[\s\S]*?>\s*(\d{1,3}(?:,\d{3})*)\s*원")
PRODUCT_PRICE_CLASS = re.compile(r"product_price[\s\S]*?<span[^>]*>\s*([0-9,]+)\s*원", re.IGNORECASE)
TAGGED_PRICE = re.compile(r">\s*([0-9,]{4,})\s*원\s*<")
ANY_PRICE = re.compile(r"(\d{1,3}(?:,\d{3})*)\s*원")


def first_price(text: Optional[str], patterns: Sequence[Pattern]) -> int:
    """Return the first positive price matched by any pattern, in order."""
    if not text:
        return 0
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            price = parse_price(match.group(1))
            if price > 0:
                return price
    return 0


def block_windows(
    markup: str,
    positions: Dict[str, int],
    after: int = 2000,
) -> Dict[str, str]:
    """Cut one bounded text window per product.

    Each window starts at the product's first position and ends after
    `after` characters or at the next product's start, whichever comes
    first, so lookups never read into a neighbouring product.

    Args:
        markup: Whole page markup
        positions: Product key -> offset of its first identifier occurrence
        after: Maximum window length

    Returns:
        Product key -> window text
    """
    ordered = sorted(positions.items(), key=lambda item: item[1])
    windows: Dict[str, str] = {}
    for index, (key, start) in enumerate(ordered):
        end = min(len(markup), start + after)
        if index + 1 < len(ordered):
            end = min(end, max(ordered[index + 1][1], start + 1))
        windows[key] = markup[start:end]
    return windows


def lead_windows(markup: str, positions: Dict[str, int], before: int = 500) -> Dict[str, str]:
    """Text up to `before` characters ahead of each product.

    A lead never reaches back past the previous product's start.
    """
    ordered = sorted(positions.items(), key=lambda item: item[1])
    windows: Dict[str, str] = {}
    previous = 0
    for key, start in ordered:
        windows[key] = markup[max(previous, start - before):start]
        previous = start
    return windows


def first_positions(markup: str, needles: Dict[str, Sequence[str]]) -> Dict[str, int]:
    """Earliest offset of any needle per key; keys with no hit are left out.

    A needle ending in a digit only matches when no further digit follows,
    so `product_no=21` does not hit `product_no=210`.
    """
    positions: Dict[str, int] = {}
    for key, candidates in needles.items():
        hits = []
        for needle in candidates:
            match = re.search(re.escape(needle) + r"(?!\d)", markup)
            if match:
                hits.append(match.start())
        if hits:
            positions[key] = min(hits)
    return positions


def visible_span_texts(element: Tag) -> List[str]:
    """Texts of spans that are not hidden labels (Cafe24 `displaynone`)."""
    texts = []
    for span in element.find_all("span"):
        if "displaynone" in (span.get("class") or []):
            continue
        if span.find("span"):
            continue
        text = clean_text(span.get_text())
        if text and text not in NAME_LABELS and len(text) > 2:
            texts.append(text)
    return texts


def image_src(element: Optional[Tag]) -> Optional[str]:
    """src (or lazy-load data-src) of the first image in an element."""
    if element is None:
        return None
    img = element if element.name == "img" else element.find("img")
    if img is None:
        return None
    return img.get("src") or img.get("data-src") or img.get("ec-data-src")


def parse_markup(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "html.parser")


def unescape(text: str) -> str:
    """Decode HTML entities in text pulled out with a regex."""
    return clean_text(html.unescape(text))


# -- pipeline ---------------------------------------------------------------

class ExtractionPipeline:
    """Ordered fallback strategies plus admission and enrichment rules."""

    def __init__(
        self,
        strategies: Sequence[Strategy],
        enrichment: Optional[EnrichmentRules] = None,
        name_limit: int = NAME_MAX_LENGTH,
    ):
        if not strategies:
            raise ValueError("pipeline needs at least one strategy")
        self.strategies = list(strategies)
        self.enrichment = enrichment or EnrichmentRules()
        self.name_limit = name_limit

    def run(self, markup: str, context: ExtractionContext) -> List[CrawledProduct]:
        """Extract a duplicate-free product list from one page.

        Args:
            markup: Page HTML
            context: Source and category the page was fetched for

        Returns:
            Admitted products of the first productive strategy, or []
        """
        if not markup:
            return []

        seen: set = set()
        for strategy in self.strategies:
            try:
                candidates = strategy.func(markup, context)
            except Exception as e:
                logger.warning(
                    "extraction_strategy_failed",
                    source=context.source,
                    strategy=strategy.name,
                    error=str(e),
                    exc_info=True,
                )
                continue
            products = []
            for candidate in candidates:
                product = self._admit(candidate, strategy, context, seen)
                if product is not None:
                    products.append(product)

            logger.debug(
                "extraction_strategy_tried",
                source=context.source,
                strategy=strategy.name,
                candidates=len(candidates),
                admitted=len(products),
            )
            if products:
                logger.info(
                    "extraction_strategy_matched",
                    source=context.source,
                    category_id=context.node.id,
                    strategy=strategy.name,
                    count=len(products),
                )
                return products

        return []

    def _admit(
        self,
        candidate: RawCandidate,
        strategy: Strategy,
        context: ExtractionContext,
        seen: set,
    ) -> Optional[CrawledProduct]:
        name = clean_text(candidate.name)[: self.name_limit].strip()
        if not name:
            return None
        if candidate.price <= 0 or candidate.price <= strategy.price_floor:
            return None

        key = (name, candidate.price)
        if key in seen:
            return None
        seen.add(key)

        candidate = self.enrich(replace(candidate, name=name), context)
        return CrawledProduct(
            name=name,
            price=candidate.price,
            unit=candidate.unit,
            size=candidate.size,
            brand=candidate.brand,
            image_url=candidate.image_url,
            original_url=candidate.url or context.list_url,
            category=context.category,
            sub_category=context.sub_category,
            source=context.source,
        )

    def enrich(self, candidate: RawCandidate, context: ExtractionContext) -> RawCandidate:
        """Fill brand, size and unit from labels, vocabulary and name."""
        rules = self.enrichment
        window = candidate.context or ""

        brand = candidate.brand
        if not brand and rules.brand_label:
            brand = _label_brand(window)
        if not brand and rules.brand_vocabulary:
            brand = _vocabulary_brand(candidate.name, rules.brand_vocabulary)
        if not brand and rules.brand_from_parent:
            brand = context.node.parent

        size = candidate.size
        if not size and rules.size_label:
            match = SIZE_LABEL_PATTERN.search(window)
            if match:
                size = _PARENTHESIZED.sub("", html.unescape(match.group(1))).strip() or None

        unit = candidate.unit or find_unit_label(window) or rules.fixed_unit or extract_unit(candidate.name)

        return replace(candidate, brand=brand, size=size, unit=unit)


def _label_brand(window: str) -> Optional[str]:
    match = BRAND_LABEL_PATTERN.search(window)
    if not match:
        return None
    brand = clean_text(match.group(1))
    if len(brand) >= 2 and brand not in INVALID_BRANDS:
        return brand
    return None


def _vocabulary_brand(name: str, vocabulary: Sequence[Tuple[Sequence[str], str]]) -> Optional[str]:
    lowered = name.lower()
    for needles, brand in vocabulary:
        if any(needle.lower() in lowered for needle in needles):
            return brand
    return None


# -- shared generic strategy ------------------------------------------------

@dataclass(frozen=True)
class LabelPriceHeuristic:
    """Last-resort strategy: readable label text followed by a won amount.

    Matches any label captured by `label_pattern` (group 1) and the price
    (group 2) that follows within the pattern's reach. Labels containing any
    of the blocked words are skipped.
    """

    label_pattern: Pattern
    min_length: int = 3
    blocked_words: Sequence[str] = field(default_factory=tuple)

    def __call__(self, markup: str, context: ExtractionContext) -> List[RawCandidate]:
        candidates = []
        for match in self.label_pattern.finditer(markup):
            name = unescape(match.group(1))
            if len(name) < self.min_length:
                continue
            if any(word in name for word in self.blocked_words):
                continue
            candidates.append(
                RawCandidate(name=name, price=parse_price(match.group(2)), url=context.list_url)
            )
        return candidates
