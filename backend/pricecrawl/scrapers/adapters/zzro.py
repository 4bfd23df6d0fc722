"""Zzro (자재로) catalog adapter.

Category pages are addressed by slug: /product-{slug}. Product cards are
`<a class="blocked _fade_link" href="/shop_view/?idx=N">` wrapping an h2
name and a `<p>` price.

Note: "lights-*" is lighting, "light-*" is lightweight framing material.
"""

import re
from typing import Dict, List

from pricecrawl.scrapers.base import BaseSourceAdapter, SourceConfig
from pricecrawl.scrapers.extraction import (
    ANY_PRICE,
    ExtractionContext,
    ExtractionPipeline,
    LabelPriceHeuristic,
    RawCandidate,
    Strategy,
    block_windows,
    first_price,
    image_src,
    lead_windows,
    parse_markup,
    unescape,
)
from pricecrawl.scrapers.taxonomy import CategoryNode, CategoryTaxonomy
from pricecrawl.scrapers.utils.normalizer import absolute_url, clean_text, parse_price
from pricecrawl.scrapers.utils.user_agents import browser_headers


ZZRO_CONFIG = SourceConfig(
    name="자재로",
    base_url="https://zzro.kr",
    request_delay_ms=800,
    headers=browser_headers(referer="https://zzro.kr/"),
)


def _nodes(parent: str, entries: List[tuple]) -> List[CategoryNode]:
    return [CategoryNode(slug, name, parent) for slug, name in entries]


ZZRO_TAXONOMY = CategoryTaxonomy(
    categories=(
        _nodes("목자재", [
            ("wooden-all", "목자재 전체"),
            ("wooden-scantling", "각재"),
            ("wooden-plywood", "합판"),
            ("wooden-mdf", "MDF"),
            ("wooden-molding", "몰딩"),
        ])
        + _nodes("타일", [
            ("tile-all", "타일 전체"),
            ("tile-porcelain", "포세린"),
            ("tile-ceramic", "도기질"),
        ])
        + _nodes("수전", [
            ("faucet-all", "수전 전체"),
            ("faucet-kitchen", "주방수전"),
            ("faucet-bath", "욕실수전"),
        ])
        + _nodes("도어", [
            ("door-all", "도어 전체"),
            ("door-handle", "손잡이"),
            ("door-rail", "경첩/레일"),
        ])
        + _nodes("부자재", [
            ("subsidiary-all", "부자재 전체"),
            ("subsidiary-adhesive", "접착제/본드"),
            ("subsidiary-hardware", "기타철물"),
            ("subsidiary-switch", "스위치"),
            ("subsidiary-concent", "콘센트"),
            ("subsidiary-tacker", "타카핀"),
            ("subsidiary-access", "점검구"),
            ("subsidiary-corner", "코너비드"),
            ("subsidiary-trench", "육가/유강"),
        ])
        + _nodes("조명", [
            ("lights-all", "조명 전체"),
            ("lights-recessed", "매입등"),
            ("lights-ceiling", "천정등"),
            ("lights-direct", "직부등"),
            ("lights-pendant", "펜던트등"),
        ])
        + _nodes("도기", [
            ("sanitaryware-all", "도기 전체"),
            ("sanitaryware-americanstandard", "아메리칸스탠다드"),
            ("sanitaryware-dk", "DK"),
            ("sanitaryware-lauche", "라우체"),
        ])
        + _nodes("경량자재", [
            ("light-all", "경량자재 전체"),
        ])
    ),
    groups={
        "wooden": ["wooden-all", "wooden-scantling", "wooden-plywood", "wooden-mdf", "wooden-molding"],
        "tile": ["tile-all", "tile-porcelain", "tile-ceramic"],
        "faucet": ["faucet-all", "faucet-kitchen", "faucet-bath"],
        "door": ["door-all", "door-handle", "door-rail"],
        "subsidiary": [
            "subsidiary-all", "subsidiary-adhesive", "subsidiary-hardware",
            "subsidiary-switch", "subsidiary-concent", "subsidiary-tacker",
            "subsidiary-access", "subsidiary-corner", "subsidiary-trench",
        ],
        "lights": ["lights-all", "lights-recessed", "lights-ceiling", "lights-direct", "lights-pendant"],
        "sanitaryware": [
            "sanitaryware-all", "sanitaryware-americanstandard",
            "sanitaryware-dk", "sanitaryware-lauche",
        ],
        "light": ["light-all"],
    },
    unknown_name="{id}",
)

_SHOP_VIEW_IDX = re.compile(r"/shop_view/\?idx=(\d+)")
_WINDOW_NAME = re.compile(
    r"<h2[^>]*>([^<]{2,100})</h2>|<h3[^>]*>([^<]{2,100})</h3>|class=\"[^\"]*name[^\"]*\"[^>]*>([^<]{2,100})<",
    re.IGNORECASE,
)
_TEXT_THEN_PRICE = re.compile(r">([가-힣A-Za-z0-9\s\-\(\)]{3,50})<[\s\S]{0,200}?(\d{1,3}(?:,\d{3})+)\s*원")

# Header/navigation labels that sit next to prices on every page
NAVIGATION_WORDS = ("자재로", "카테고리", "메뉴", "검색", "장바구니", "로그인", "회원가입")


def _product_url(context: ExtractionContext, idx: str) -> str:
    return f"{context.base_url}/shop_view/?idx={idx}"


def extract_fade_links(markup: str, context: ExtractionContext) -> List[RawCandidate]:
    """`a[href=/shop_view/?idx=N]` cards with an h2 name and a 원 price."""
    soup = parse_markup(markup)
    candidates = []
    for link in soup.select('a[href*="/shop_view/?idx="]'):
        idx_match = _SHOP_VIEW_IDX.search(link.get("href", ""))
        heading = link.find("h2")
        if not idx_match or heading is None:
            continue
        price_elem = link.find(lambda tag: tag.name == "p" and "원" in tag.get_text())
        if price_elem is None:
            continue
        candidates.append(
            RawCandidate(
                name=clean_text(heading.get_text()),
                price=parse_price(price_elem.get_text()),
                url=_product_url(context, idx_match.group(1)),
                image_url=absolute_url(context.base_url, image_src(link)),
                context=str(link),
            )
        )
    return candidates


def extract_idx_windows(markup: str, context: ExtractionContext) -> List[RawCandidate]:
    """Any shop_view idx, with name and price read from the markup around it.

    The name is the first heading between the idx and its price; cards that
    put the heading before the link fall back to the closest heading in the
    500 characters ahead of the idx.
    """
    positions: Dict[str, int] = {}
    for match in _SHOP_VIEW_IDX.finditer(markup):
        positions.setdefault(match.group(1), match.start())

    leads = lead_windows(markup, positions, before=500)
    candidates = []
    for idx, window in block_windows(markup, positions, after=1500).items():
        lead = leads[idx]
        price_match = ANY_PRICE.search(window)
        head = window[: price_match.start()] if price_match else window

        name_match = _WINDOW_NAME.search(head)
        if not name_match:
            lead_names = list(_WINDOW_NAME.finditer(lead))
            name_match = lead_names[-1] if lead_names else None
        if not name_match:
            continue

        price = first_price(window, [ANY_PRICE])
        if not price:
            lead_prices = ANY_PRICE.findall(lead)
            price = parse_price(lead_prices[-1]) if lead_prices else 0

        candidates.append(
            RawCandidate(
                name=unescape(next(group for group in name_match.groups() if group)),
                price=price,
                url=_product_url(context, idx),
                context=window,
            )
        )
    return candidates


class ZzroAdapter(BaseSourceAdapter):
    """자재로 listing-page adapter."""

    source_id = "zzro"
    display_name = "자재로"
    description = "목자재, 타일, 수전, 도어, 부자재, 조명, 철물 등"
    config = ZZRO_CONFIG
    taxonomy = ZZRO_TAXONOMY
    pipeline = ExtractionPipeline(
        strategies=[
            Strategy("fade_link_cards", extract_fade_links),
            Strategy("idx_windows", extract_idx_windows),
            Strategy(
                "text_price_pairs",
                LabelPriceHeuristic(_TEXT_THEN_PRICE, blocked_words=NAVIGATION_WORDS),
                price_floor=1_000,
            ),
        ],
    )

    def category_url(self, node: CategoryNode, page: int = 1) -> str:
        return f"{self.config.base_url}/product-{node.path or node.id}"
