"""Ohouse Interior (오하우스 인테리어) catalog adapter.

Cafe24 storefront. Listing pages are /product/list.html?cate_no={id}.
Product names come from the list image alt (id="eListPrdImage{no}_N") or
the df-prl__name link; prices from the "판매가" row of the same card.
"""

import re
from typing import Dict, List, Optional, Tuple

from pricecrawl.scrapers.base import BaseSourceAdapter, SourceConfig
from pricecrawl.scrapers.extraction import (
    SALE_LABEL_PRICE,
    EnrichmentRules,
    ExtractionContext,
    ExtractionPipeline,
    LabelPriceHeuristic,
    RawCandidate,
    Strategy,
    block_windows,
    first_positions,
    first_price,
    unescape,
)
from pricecrawl.scrapers.taxonomy import CategoryNode, CategoryTaxonomy
from pricecrawl.scrapers.utils.normalizer import absolute_url
from pricecrawl.scrapers.utils.user_agents import browser_headers


OHOUSE_CONFIG = SourceConfig(
    name="오하우스 인테리어",
    base_url="https://ohouseinterior.com",
    request_delay_ms=500,
    headers=browser_headers(),
)

OHOUSE_TAXONOMY = CategoryTaxonomy(
    categories=[
        CategoryNode(126, "양변기/소변기", "욕실"),
        CategoryNode(137, "세면대/하부장", "욕실"),
        CategoryNode(148, "수전/샤워기", "욕실"),
        CategoryNode(163, "욕실장/거울", "욕실"),
        CategoryNode(178, "악세사리", "욕실"),
        CategoryNode(242, "환풍기/기타", "욕실"),
        CategoryNode(109, "실크", "벽지"),
        CategoryNode(112, "합지", "벽지"),
        CategoryNode(79, "강마루", "바닥"),
        CategoryNode(84, "원목마루", "바닥"),
        CategoryNode(87, "SPC마루", "바닥"),
        CategoryNode(89, "모노륨 장판", "바닥"),
        CategoryNode(92, "데코타일", "바닥"),
        CategoryNode(69, "목자재", "목공"),
        CategoryNode(74, "단열재", "목공"),
        CategoryNode(76, "철물", "목공"),
        CategoryNode(93, "도기질", "타일"),
        CategoryNode(106, "포세린", "타일"),
        CategoryNode(244, "조명", "전기"),
        CategoryNode(246, "콘센트/스위치", "전기"),
        CategoryNode(248, "감지기/스피커", "전기"),
        CategoryNode(233, "싱크수전", "주방"),
        CategoryNode(54, "창호", "창호"),
        CategoryNode(56, "도어", "문"),
        CategoryNode(225, "중문", "문"),
        CategoryNode(210, "설비시공", "설비"),
        CategoryNode(213, "부분철거", "철거"),
        CategoryNode(59, "제작가구", "가구"),
        CategoryNode(53, "시스템에어컨", "에어컨"),
    ],
    # Site-side parent cate_no -> leaf cate_no
    groups={
        50: [126, 137, 148, 163, 178, 242],  # 욕실 제품
        108: [109, 112],  # 벽지
        52: [79, 84, 87],  # 마루
        88: [89],  # 장판
        55: [69, 74, 76],  # 목자재/철물
        91: [93, 106],  # 타일
        64: [244, 246, 248],  # 조명/전기
        62: [233],  # 주방제품
        209: [210, 213],  # 설비/철거
    },
)

_IMAGE_ALT = re.compile(r'id="eListPrdImage(\d+)[^"]*"[^>]*alt="([^"]+)"', re.IGNORECASE)
_IMAGE_SRC = re.compile(r'src="([^"]+)"', re.IGNORECASE)
_NAME_LINK = re.compile(
    r'product_no=(\d+)[^"]*"[^>]*class="df-prl__name[^"]*"[^>]*>[\s\S]*?<span[^>]*>([^<]+)</span>',
    re.IGNORECASE,
)
_LINK_ALT = re.compile(r'product_no=(\d+)[^>]*>[\s\S]{0,600}?alt="([^"]+)"', re.IGNORECASE)

_ALT_THEN_PRICE = re.compile(r'alt="([^"]{3,50})"[\s\S]{0,500}?(\d{1,3}(?:,\d{3})+)\s*원', re.IGNORECASE)


def _collect_names(markup: str) -> Dict[str, Tuple[str, Optional[str]]]:
    """product_no -> (name, image src), first pattern to name a product wins."""
    names: Dict[str, Tuple[str, Optional[str]]] = {}

    for match in _IMAGE_ALT.finditer(markup):
        product_no, name = match.group(1), unescape(match.group(2))
        if len(name) > 1 and product_no not in names:
            # src may sit before or after the id inside the same <img> tag
            tag_start = max(0, markup.rfind("<", 0, match.start()))
            tag_end = markup.find(">", match.end())
            src = _IMAGE_SRC.search(markup[tag_start: tag_end if tag_end != -1 else len(markup)])
            names[product_no] = (name, src.group(1) if src else None)

    for pattern in (_NAME_LINK, _LINK_ALT):
        for match in pattern.finditer(markup):
            product_no, name = match.group(1), unescape(match.group(2))
            if len(name) > 1 and product_no not in names:
                names[product_no] = (name, None)

    return names


def extract_card_products(markup: str, context: ExtractionContext) -> List[RawCandidate]:
    """Product cards: name by product_no, price from the card's 판매가 row."""
    names = _collect_names(markup)
    if not names:
        return []

    positions = first_positions(
        markup,
        {no: (f"product_no={no}", f"eListPrdImage{no}") for no in names},
    )
    windows = block_windows(markup, positions, after=3000)

    candidates = []
    for product_no, (name, src) in names.items():
        window = windows.get(product_no)
        if window is None:
            continue
        candidates.append(
            RawCandidate(
                name=name,
                price=first_price(window, [SALE_LABEL_PRICE]),
                url=(
                    f"{context.base_url}/product/detail.html"
                    f"?product_no={product_no}&cate_no={context.node.id}"
                ),
                image_url=absolute_url(context.base_url, src),
                context=window,
            )
        )
    return candidates


class OhouseAdapter(BaseSourceAdapter):
    """오하우스 인테리어 listing-page adapter."""

    source_id = "ohouse"
    display_name = "오하우스 인테리어"
    description = "욕실, 바닥, 타일, 전기, 문, 창호 등 인테리어 자재"
    config = OHOUSE_CONFIG
    taxonomy = OHOUSE_TAXONOMY
    pipeline = ExtractionPipeline(
        strategies=[
            Strategy("product_cards", extract_card_products),
            Strategy("alt_price_pairs", LabelPriceHeuristic(_ALT_THEN_PRICE), price_floor=10_000),
        ],
        enrichment=EnrichmentRules(brand_label=True, size_label=True),
    )

    def category_url(self, node: CategoryNode, page: int = 1) -> str:
        url = f"{self.config.base_url}/product/list.html?cate_no={node.id}"
        if page > 1:
            url += f"&page={page}"
        return url
