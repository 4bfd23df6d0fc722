"""Hangel (한글 중문) catalog adapter.

Vestibule-door specialist on Cafe24. Every product is sold as an installed
set, so the unit is fixed to 세트.
"""

from pricecrawl.scrapers.adapters.cafe24 import NameLinkStrategy, extract_thumbnail_alts
from pricecrawl.scrapers.base import BaseSourceAdapter, SourceConfig
from pricecrawl.scrapers.extraction import EnrichmentRules, ExtractionPipeline, Strategy
from pricecrawl.scrapers.taxonomy import CategoryNode, CategoryTaxonomy
from pricecrawl.scrapers.utils.user_agents import browser_headers


HANGEL_CONFIG = SourceConfig(
    name="한글 중문",
    base_url="https://hangel.co.kr",
    request_delay_ms=1000,
    headers=browser_headers(referer="https://hangel.co.kr/"),
)

HANGEL_TAXONOMY = CategoryTaxonomy(
    categories=[
        CategoryNode(84, "중문 전체", "중문"),
        CategoryNode(86, "양개중문", "중문"),
        CategoryNode(1396, "슬림 여닫이 중문", "중문"),
        CategoryNode(1205, "스윙 중문", "중문"),
        CategoryNode(1398, "연동중문", "중문"),
        CategoryNode(1291, "3연동 중문", "중문"),
        CategoryNode(1289, "4연동 중문", "중문"),
        CategoryNode(1290, "6연동 중문", "중문"),
        CategoryNode(89, "원슬라이딩 중문", "중문"),
        CategoryNode(87, "미서기 중문", "중문"),
        CategoryNode(1399, "간살중문", "중문"),
        CategoryNode(1206, "프레임리스 중문", "중문"),
        CategoryNode(691, "중문+파티션", "중문"),
    ],
    groups={
        "중문": [84, 86, 1396, 1205, 1398, 1291, 1289, 1290, 89, 87, 1399, 1206, 691],
    },
    # cate_no 84 lists the whole range
    all_categories={84: "중문"},
    unknown_name="중문",
    unknown_parent="중문",
)


class HangelAdapter(BaseSourceAdapter):
    """한글 중문 listing-page adapter."""

    source_id = "hangel"
    display_name = "한글 중문"
    description = "양개중문, 연동중문, 스윙중문, 미서기중문 등 중문 전문"
    config = HANGEL_CONFIG
    taxonomy = HANGEL_TAXONOMY
    pipeline = ExtractionPipeline(
        strategies=[
            Strategy("name_links", NameLinkStrategy("df-prl__name")),
            Strategy("thumbnail_alts", extract_thumbnail_alts),
        ],
        enrichment=EnrichmentRules(fixed_unit="세트"),
    )

    def category_url(self, node: CategoryNode, page: int = 1) -> str:
        return f"{self.config.base_url}/product/list.html?cate_no={node.id}"
