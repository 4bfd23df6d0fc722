"""Ianmall (이안몰) catalog adapter.

Kitchen sink bowls and faucets. Category pages live under a Korean path
(/category/싱크볼/993), so nodes carry an explicit URL path.
"""

from pricecrawl.scrapers.adapters.cafe24 import NameLinkStrategy, extract_thumbnail_alts
from pricecrawl.scrapers.base import BaseSourceAdapter, SourceConfig
from pricecrawl.scrapers.extraction import EnrichmentRules, ExtractionPipeline, Strategy
from pricecrawl.scrapers.taxonomy import CategoryNode, CategoryTaxonomy
from pricecrawl.scrapers.utils.user_agents import browser_headers


IANMALL_CONFIG = SourceConfig(
    name="이안몰",
    base_url="https://ian-mall.kr",
    request_delay_ms=1000,
    headers=browser_headers(referer="https://ian-mall.kr/"),
)

IANMALL_TAXONOMY = CategoryTaxonomy(
    categories=[
        CategoryNode(993, "싱크볼", "주방", path="/category/%EC%94%BD%ED%81%AC%EB%B3%BC/993"),
    ],
    groups={
        "주방": [993],
    },
    unknown_name="싱크볼",
    unknown_parent="주방",
)


class IanmallAdapter(BaseSourceAdapter):
    """이안몰 listing-page adapter."""

    source_id = "ianmall"
    display_name = "이안몰"
    description = "싱크볼, 주방수전, 주방용품 전문"
    config = IANMALL_CONFIG
    taxonomy = IANMALL_TAXONOMY
    pipeline = ExtractionPipeline(
        strategies=[
            # Name links start with a hidden "상품명" label span
            Strategy("name_links", NameLinkStrategy("df-prl-name", use_last_span=True)),
            Strategy("thumbnail_alts", extract_thumbnail_alts),
        ],
        enrichment=EnrichmentRules(fixed_unit="개"),
    )

    def category_url(self, node: CategoryNode, page: int = 1) -> str:
        path = node.path or f"/category/?cate_no={node.id}"
        return f"{self.config.base_url}{path}"
