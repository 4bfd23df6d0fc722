"""Tests for paginated sources (symembership)."""

from unittest.mock import AsyncMock

import pytest

from pricecrawl.config import settings
from pricecrawl.scrapers import base as base_module
from pricecrawl.scrapers.adapters import SymembershipAdapter
from pricecrawl.scrapers.base import extract_max_page


HOOD_URL = "https://symembership.com/category/%EC%A3%BC%EB%B0%A9%ED%9B%84%EB%93%9C/80"


def anchor_box(no, name, price):
    return (
        f'<li id="anchorBoxId_{no}"><div class="thumbnail">'
        f'<a href="/product/detail.html?product_no={no}&cate_no=80"><img src="/p/{no}.jpg" alt="{name}"></a></div>'
        f'<div class="description" ec-data-price="{price}"><div class="name">'
        f'<a href="/product/detail.html?product_no={no}&cate_no=80"><span>{name}</span></a></div></div></li>'
    )


def listing(boxes, pages=()):
    pager = "".join(f'<a href="?page={page}">{page}</a>' for page in pages)
    return f'<ul class="prdList">{"".join(boxes)}</ul><div class="paging">{pager}</div>'


# ============================================================================
# TESTS: PAGE DISCOVERY
# ============================================================================

class TestExtractMaxPage:
    """Tests for extract_max_page."""

    def test_highest_linked_page(self):
        assert extract_max_page('<a href="?page=2">2</a><a href="?page=7">7</a><a href="?page=3">') == 7

    def test_escaped_ampersand(self):
        assert extract_max_page('<a href="/list.html?cate_no=80&amp;page=4">') == 4

    def test_no_pagination_is_one_page(self):
        assert extract_max_page("<ul></ul>") == 1
        assert extract_max_page("") == 1


# ============================================================================
# TESTS: PAGINATED CRAWL
# ============================================================================

class TestPaginatedCrawl:
    """Tests for multi-page category crawls."""

    @pytest.mark.asyncio
    async def test_all_pages_fetched_and_deduplicated(self, fake_catalog, make_adapter):
        catalog = fake_catalog({
            HOOD_URL: listing(
                [anchor_box(1, "하츠 슬림 후드", 350000), anchor_box(2, "하츠 침니 후드", 540000)],
                pages=(2, 3),
            ),
            f"{HOOD_URL}?page=2": listing([anchor_box(3, "하츠 아일랜드 후드", 1290000)], pages=(1, 3)),
            # Page 3 repeats a page-1 product
            f"{HOOD_URL}?page=3": listing([anchor_box(4, "하츠 슬림 후드", 350000)], pages=(1, 2)),
        })
        adapter = make_adapter(SymembershipAdapter, catalog)

        products = await adapter.crawl_category(80)

        assert [p.name for p in products] == ["하츠 슬림 후드", "하츠 침니 후드", "하츠 아일랜드 후드"]
        assert catalog.requested == [HOOD_URL, f"{HOOD_URL}?page=2", f"{HOOD_URL}?page=3"]

    @pytest.mark.asyncio
    async def test_failed_page_is_skipped(self, fake_catalog, make_adapter):
        catalog = fake_catalog({
            HOOD_URL: listing([anchor_box(1, "하츠 슬림 후드", 350000)], pages=(2, 3)),
            f"{HOOD_URL}?page=2": 500,
            f"{HOOD_URL}?page=3": listing([anchor_box(5, "하츠 벽부형 후드", 410000)]),
        })
        adapter = make_adapter(SymembershipAdapter, catalog)

        products = await adapter.crawl_category(80)

        assert [p.name for p in products] == ["하츠 슬림 후드", "하츠 벽부형 후드"]

    @pytest.mark.asyncio
    async def test_page_count_is_capped(self, fake_catalog, make_adapter):
        catalog = fake_catalog({
            HOOD_URL: listing([anchor_box(1, "하츠 슬림 후드", 350000)], pages=(2, 3, 4)),
            f"{HOOD_URL}?page=2": listing([anchor_box(2, "하츠 침니 후드", 540000)]),
        })
        adapter = make_adapter(SymembershipAdapter, catalog)
        adapter.max_pages = 2

        products = await adapter.crawl_category(80)

        assert len(products) == 2
        assert catalog.requested == [HOOD_URL, f"{HOOD_URL}?page=2"]

    @pytest.mark.asyncio
    async def test_progress_label_includes_brand(self, fake_catalog, make_adapter):
        catalog = fake_catalog({HOOD_URL: listing([anchor_box(1, "슬림 후드", 350000)])})
        adapter = make_adapter(SymembershipAdapter, catalog)

        events = [event async for event in adapter.crawl_all([80])]

        assert events[0].category == "하츠 주방후드"
        product = events[1].product
        assert product.brand == "하츠"
        assert product.category == "주방"
        assert product.sub_category == "주방후드"

    @pytest.mark.asyncio
    async def test_delay_before_each_extra_page(self, fake_catalog, monkeypatch):
        catalog = fake_catalog({
            HOOD_URL: listing([anchor_box(1, "하츠 슬림 후드", 350000)], pages=(2, 3)),
            f"{HOOD_URL}?page=2": listing([anchor_box(2, "하츠 침니 후드", 540000)]),
            f"{HOOD_URL}?page=3": listing([anchor_box(3, "하츠 아일랜드 후드", 1290000)]),
        })
        fetched_before_sleep = []
        sleep = AsyncMock(side_effect=lambda seconds: fetched_before_sleep.append(len(catalog.requested)))
        monkeypatch.setattr(base_module.asyncio, "sleep", sleep)
        monkeypatch.setattr(settings, "CRAWL_DELAY_MULTIPLIER", 1.0)
        adapter = SymembershipAdapter(http_client=catalog.client())

        events = [event async for event in adapter.crawl_all([80])]

        assert sum(1 for e in events if e.type == "product") == 3
        # Before page 2, before page 3, then after the category
        assert fetched_before_sleep == [1, 2, 3]
        assert all(call.args == (1.0,) for call in sleep.await_args_list)
