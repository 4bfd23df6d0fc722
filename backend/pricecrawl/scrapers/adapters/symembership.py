"""SY membership (에스와이) catalog adapter.

Kitchen hoods, cooktops and faucets grouped by brand. Listing cards are
`<li id="anchorBoxId_N">` with the price in an `ec-data-price` attribute.
Results are paginated (?page=N).
"""

import re
from typing import List, Optional, Tuple

from bs4 import Tag

from pricecrawl.scrapers.adapters.cafe24 import PRODUCT_NO, detail_url
from pricecrawl.scrapers.base import BaseSourceAdapter, SourceConfig
from pricecrawl.scrapers.extraction import (
    EnrichmentRules,
    ExtractionContext,
    ExtractionPipeline,
    RawCandidate,
    Strategy,
    first_price,
    image_src,
    parse_markup,
    unescape,
    visible_span_texts,
)
from pricecrawl.scrapers.taxonomy import CategoryNode, CategoryTaxonomy
from pricecrawl.scrapers.utils.normalizer import absolute_url, clean_text
from pricecrawl.scrapers.utils.user_agents import browser_headers


SYMEMBERSHIP_CONFIG = SourceConfig(
    name="에스와이",
    base_url="https://symembership.com",
    request_delay_ms=1000,
    headers=browser_headers(referer="https://symembership.com/"),
)

_HOOD = "/category/%EC%A3%BC%EB%B0%A9%ED%9B%84%EB%93%9C"
_COOKTOP = "/category/%EC%BF%A1%ED%83%91"

SYMEMBERSHIP_TAXONOMY = CategoryTaxonomy(
    categories=[
        # 하츠
        CategoryNode(80, "주방후드", "하츠", path=f"{_HOOD}/80"),
        CategoryNode(145, "쿡탑", "하츠", path=f"{_COOKTOP}/145"),
        CategoryNode(144, "싱크볼", "하츠", path="/category/%EC%8B%B1%ED%81%AC%EB%B3%BC/144"),
        CategoryNode(79, "주방수전", "하츠", path="/category/%EC%A3%BC%EB%B0%A9%EC%88%98%EC%A0%84/79"),
        CategoryNode(
            141, "욕실환풍기", "하츠",
            path="/category/%EC%9A%95%EC%8B%A4-%ED%99%98%ED%92%8D%EA%B8%B0/141",
        ),
        # 파세코
        CategoryNode(85, "주방후드", "파세코", path=f"{_HOOD}/85"),
        CategoryNode(86, "쿡탑", "파세코", path=f"{_COOKTOP}/86"),
        # 트라이애드
        CategoryNode(97, "주방후드", "트라이애드", path=f"{_HOOD}/97"),
        CategoryNode(98, "쿡탑", "트라이애드", path=f"{_COOKTOP}/98"),
        # 엠시스
        CategoryNode(131, "주방후드", "엠시스", path=f"{_HOOD}/131"),
        # 전 브랜드
        CategoryNode(104, "주방후드", "전체", path=f"{_HOOD}/104"),
    ],
    groups={
        "하츠": [80, 145, 144, 79, 141],
        "파세코": [85, 86],
        "트라이애드": [97, 98],
        "엠시스": [131],
        "주방후드": [80, 85, 97, 131, 104],
        "쿡탑": [145, 86, 98],
    },
    unknown_name="주방후드",
    unknown_parent="주방",
)

# Ordered: 엘리카 is a 하츠 line, checked after the house brands
BRAND_VOCABULARY: List[Tuple[Tuple[str, ...], str]] = [
    (("하츠", "hatz"), "하츠"),
    (("파세코", "paseco"), "파세코"),
    (("트라이애드",), "트라이애드"),
    (("엠시스", "msys"), "엠시스"),
    (("엘리카", "elica"), "하츠(엘리카)"),
]

PRODUCT_CATEGORY = "주방"

_SPEC_PRICES = (
    re.compile(r"판매가[^<]*</(?:strong|span)>\s*<span[^>]*>\s*([0-9,]+)\s*원", re.IGNORECASE),
    re.compile(r">\s*([0-9,]{4,})\s*원\s*</span>", re.IGNORECASE),
    re.compile(r"([0-9,]{4,})\s*원"),
)
_LINK_ALT_DATA_PRICE = re.compile(
    r'href="[^"]*product_no=(\d+)[^"]*"[^>]*>[\s\S]{0,1500}?<img[^>]*alt="([^"]+)"'
    r'[\s\S]{0,1500}?ec-data-price="(\d+)"',
    re.IGNORECASE,
)


def _block_name(block: Tag) -> Optional[str]:
    name_div = block.find(
        lambda tag: tag.name == "div" and any("name" in cls for cls in (tag.get("class") or []))
    )
    if name_div is not None:
        texts = visible_span_texts(name_div)
        if texts:
            return texts[-1]
    img = block.find("img", alt=True)
    if img is not None:
        alt = clean_text(img["alt"])
        if alt:
            return alt
    return None


def _block_price(block: Tag) -> int:
    holder = block.find(attrs={"ec-data-price": True})
    if holder is not None:
        value = (holder.get("ec-data-price") or "").strip()
        if value.isdigit() and int(value) > 0:
            return int(value)
    return first_price(str(block), _SPEC_PRICES)


def extract_anchor_boxes(markup: str, context: ExtractionContext) -> List[RawCandidate]:
    """`li#anchorBoxId_N` cards: visible name span, ec-data-price price."""
    soup = parse_markup(markup)
    candidates = []
    for block in soup.select("li[id^='anchorBoxId_']"):
        link = block.find("a", href=PRODUCT_NO)
        if link is None:
            continue
        name = _block_name(block)
        if not name:
            continue
        candidates.append(
            RawCandidate(
                name=name,
                price=_block_price(block),
                url=absolute_url(context.base_url, link["href"]),
                image_url=absolute_url(context.base_url, image_src(block)),
                context=str(block),
            )
        )
    return candidates


def extract_link_alt_prices(markup: str, context: ExtractionContext) -> List[RawCandidate]:
    """Product link, then its image alt, then the nearest ec-data-price."""
    candidates = []
    for match in _LINK_ALT_DATA_PRICE.finditer(markup):
        product_no, name, price = match.groups()
        candidates.append(
            RawCandidate(
                name=unescape(name),
                price=int(price),
                url=detail_url(context, product_no),
            )
        )
    return candidates


class SymembershipAdapter(BaseSourceAdapter):
    """에스와이 listing-page adapter with pagination."""

    source_id = "symembership"
    display_name = "에스와이"
    description = "주방후드, 쿡탑, 싱크볼, 주방수전 등 주방가전 (하츠, 파세코, 트라이애드, 엠시스)"
    config = SYMEMBERSHIP_CONFIG
    taxonomy = SYMEMBERSHIP_TAXONOMY
    pipeline = ExtractionPipeline(
        strategies=[
            Strategy("anchor_boxes", extract_anchor_boxes),
            Strategy("link_alt_prices", extract_link_alt_prices),
        ],
        enrichment=EnrichmentRules(
            brand_vocabulary=BRAND_VOCABULARY,
            brand_from_parent=True,
            fixed_unit="개",
        ),
    )
    paginated = True

    def category_url(self, node: CategoryNode, page: int = 1) -> str:
        path = node.path or f"/category/?cate_no={node.id}"
        url = f"{self.config.base_url}{path}"
        if page > 1:
            url += f"{'&' if '?' in path else '?'}page={page}"
        return url

    def display_label(self, node: CategoryNode) -> str:
        return f"{node.parent or ''} {node.name}".strip()

    def product_category(self, node: CategoryNode) -> Tuple[str, Optional[str]]:
        # Parents here are brands; every product files under 주방
        return PRODUCT_CATEGORY, node.name
