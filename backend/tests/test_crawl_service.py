"""Tests for the crawl entry point and NDJSON framing."""

import json

import pytest

from pricecrawl.scrapers.adapters import OhouseAdapter, ZzroAdapter
from pricecrawl.scrapers.base import CrawledProduct, CrawlProgress
from pricecrawl.scrapers.crawl_service import encode_event, stream_crawl
from pricecrawl.scrapers.factory import SourceRegistry


TILE_PAGE = (
    '<a class="blocked _fade_link" href="/shop_view/?idx=11"><h2>도기질 타일 300x600</h2><p>9,800원</p></a>'
    '<a class="blocked _fade_link" href="/shop_view/?idx=12"><h2>도기질 타일 250x400</h2><p>7,200원</p></a>'
)


@pytest.fixture
def zzro_registry(fake_catalog, make_adapter):
    catalog = fake_catalog({"https://zzro.kr/product-tile-ceramic": TILE_PAGE})
    registry = SourceRegistry()
    registry.register(make_adapter(ZzroAdapter, catalog))
    return registry


async def drain(stream):
    return [event async for event in stream]


class TestStreamCrawl:
    """Tests for stream_crawl request validation and relaying."""

    @pytest.mark.asyncio
    async def test_relays_adapter_events(self, zzro_registry):
        events = await drain(stream_crawl("zzro", ["tile-ceramic"], registry=zzro_registry))

        assert [e.type for e in events] == ["progress", "product", "product", "complete"]
        assert events[0].category == "도기질"
        assert events[1].product.price == 9800
        assert events[1].product.source == "zzro"

    @pytest.mark.asyncio
    async def test_unknown_source(self, zzro_registry):
        events = await drain(stream_crawl("nonexistent", ["tile"], registry=zzro_registry))

        assert [e.type for e in events] == ["error", "complete"]
        assert "nonexistent" in events[0].message

    @pytest.mark.asyncio
    @pytest.mark.parametrize("category_ids", [[], None])
    async def test_no_categories(self, zzro_registry, category_ids):
        events = await drain(stream_crawl("zzro", category_ids, registry=zzro_registry))

        assert [e.type for e in events] == ["error", "complete"]

    @pytest.mark.asyncio
    async def test_numeric_strings_are_normalized(self, fake_catalog, make_adapter):
        catalog = fake_catalog({})
        registry = SourceRegistry()
        registry.register(make_adapter(OhouseAdapter, catalog))

        events = await drain(stream_crawl("ohouse", ["91"], registry=registry))

        assert [e.category for e in events if e.type == "progress"] == ["도기질", "포세린"]
        assert catalog.requested == [
            "https://ohouseinterior.com/product/list.html?cate_no=93",
            "https://ohouseinterior.com/product/list.html?cate_no=106",
        ]


class TestEncodeEvent:
    """Tests for NDJSON event lines."""

    def test_product_line(self):
        product = CrawledProduct(
            name="강마루 12mm",
            price=45000,
            category="바닥",
            sub_category="강마루",
            source="ohouse",
            unit="평",
            original_url="https://ohouseinterior.com/product/detail.html?product_no=1",
        )
        line = encode_event(CrawlProgress.for_product(product))

        assert line.endswith("\n")
        assert "강마루" in line
        data = json.loads(line)
        assert data == {
            "type": "product",
            "product": {
                "name": "강마루 12mm",
                "price": 45000,
                "unit": "평",
                "originalUrl": "https://ohouseinterior.com/product/detail.html?product_no=1",
                "category": "바닥",
                "subCategory": "강마루",
                "source": "ohouse",
            },
        }

    def test_progress_and_complete_lines(self):
        assert json.loads(encode_event(CrawlProgress.for_progress(33, "포세린"))) == {
            "type": "progress",
            "progress": 33,
            "category": "포세린",
        }
        assert json.loads(encode_event(CrawlProgress.for_complete())) == {"type": "complete", "progress": 100}


class TestCrawledProduct:
    """Tests for CrawledProduct validation."""

    def test_price_must_be_positive(self):
        with pytest.raises(ValueError, match="price"):
            CrawledProduct(name="무료", price=0, category="바닥", source="ohouse")

    def test_name_length_limit(self):
        with pytest.raises(ValueError, match="100"):
            CrawledProduct(name="가" * 101, price=1000, category="바닥", source="ohouse")

    def test_dedup_key(self):
        product = CrawledProduct(name="합판", price=23000, category="목자재", source="zzro")
        assert product.dedup_key == ("zzro", "합판", 23000)
        assert product.unit == "개"
