"""Tests for the source registry."""

import pytest

from pricecrawl.scrapers.adapters import OhouseAdapter, ZzroAdapter
from pricecrawl.scrapers.factory import SourceRegistry, build_registry, get_source_registry


class TestSourceRegistry:
    """Tests for SourceRegistry lookups and metadata."""

    def test_all_sources_registered(self):
        registry = get_source_registry()
        assert registry.get_source_ids() == ["ohouse", "zzro", "hangel", "ianmall", "symembership"]

    def test_get_adapter(self):
        registry = get_source_registry()

        assert isinstance(registry.get_adapter("ohouse"), OhouseAdapter)
        assert registry.get_adapter("ohouse") is registry.get_adapter("ohouse")
        assert registry.get_adapter("nonexistent") is None
        assert registry.has_source("zzro")
        assert not registry.has_source("nonexistent")

    def test_list_sources_is_network_free_metadata(self):
        sources = {info.id: info for info in get_source_registry().list_sources()}

        ohouse = sources["ohouse"]
        assert ohouse.name == "오하우스 인테리어"
        assert ohouse.url == "https://ohouseinterior.com"
        assert ohouse.categories[79].name == "강마루"
        assert ohouse.parent_categories[91] == [93, 106]
        assert sources["ianmall"].categories[993].path.endswith("/993")

    def test_source_info_to_dict(self):
        data = get_source_registry().get_source_info("hangel").to_dict()

        assert data["id"] == "hangel"
        assert data["categories"]["86"] == {"name": "양개중문", "parent": "중문"}
        assert data["parentCategories"]["중문"][0] == 84

    def test_unknown_source_info(self):
        assert get_source_registry().get_source_info("nonexistent") is None

    def test_duplicate_registration_rejected(self):
        registry = SourceRegistry()
        registry.register(ZzroAdapter())

        with pytest.raises(ValueError, match="already registered"):
            registry.register(ZzroAdapter())

    def test_only_adapters_accepted(self):
        with pytest.raises(ValueError):
            SourceRegistry().register(object())

    def test_build_registry_passes_client(self):
        sentinel = object()
        registry = build_registry(http_client=sentinel)

        assert registry.get_adapter("zzro").http_client is sentinel
