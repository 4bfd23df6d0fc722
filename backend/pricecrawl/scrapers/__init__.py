"""Catalog crawling for interior-material vendor sites.

This package provides:
- Base adapter class and the crawl event stream
- Category taxonomies and layered extraction pipelines
- Utility modules for retry policy, request headers, and data normalization
- Registry of the available sources
"""

from .base import (
    BaseSourceAdapter,
    CrawledProduct,
    CrawlProgress,
    SourceConfig,
)
from .taxonomy import CategoryNode, CategoryTaxonomy
from .factory import SourceInfo, SourceRegistry, get_source_registry, source_registry
from .crawl_service import encode_event, stream_crawl

__all__ = [
    # Base classes
    "BaseSourceAdapter",
    # Data structures
    "CrawledProduct",
    "CrawlProgress",
    "SourceConfig",
    "CategoryNode",
    "CategoryTaxonomy",
    # Registry
    "SourceInfo",
    "SourceRegistry",
    "get_source_registry",
    "source_registry",
    # Crawling
    "encode_event",
    "stream_crawl",
]
