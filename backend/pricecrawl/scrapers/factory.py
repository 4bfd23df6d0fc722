"""Registry of crawl sources and their adapter instances."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Type

import structlog

from pricecrawl.scrapers.adapters import (
    HangelAdapter,
    IanmallAdapter,
    OhouseAdapter,
    SymembershipAdapter,
    ZzroAdapter,
)
from pricecrawl.scrapers.base import BaseSourceAdapter
from pricecrawl.scrapers.taxonomy import CategoryId, CategoryNode


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SourceInfo:
    """Presentation metadata for one source, for building a selection UI."""

    id: str
    name: str
    url: str
    description: str
    categories: Dict[CategoryId, CategoryNode]
    parent_categories: Dict[CategoryId, List[CategoryId]]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "description": self.description,
            "categories": {
                str(category_id): {
                    key: value
                    for key, value in (("name", node.name), ("parent", node.parent), ("url", node.path))
                    if value is not None
                }
                for category_id, node in self.categories.items()
            },
            "parentCategories": {
                str(label): list(ids) for label, ids in self.parent_categories.items()
            },
        }


class SourceRegistry:
    """Fixed catalog of source adapters keyed by source id.

    Holds exactly one adapter instance per source. Lookup only: crawling is
    driven through the adapter's crawl_all().
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._adapters: Dict[str, BaseSourceAdapter] = {}

    def register(self, adapter: BaseSourceAdapter) -> None:
        """Register an adapter instance under its source_id.

        Args:
            adapter: Configured adapter (must inherit from BaseSourceAdapter)
        """
        if not isinstance(adapter, BaseSourceAdapter):
            raise ValueError(f"Adapter must inherit from BaseSourceAdapter: {adapter!r}")
        if not adapter.source_id:
            raise ValueError(f"Adapter has no source_id: {type(adapter).__name__}")
        if adapter.source_id in self._adapters:
            raise ValueError(f"Source already registered: {adapter.source_id}")

        self._adapters[adapter.source_id] = adapter
        logger.debug("source_registered", source=adapter.source_id, adapter_class=type(adapter).__name__)

    def get_adapter(self, source_id: str) -> Optional[BaseSourceAdapter]:
        """Return the adapter for a source, or None if not registered."""
        adapter = self._adapters.get(source_id)
        if adapter is None:
            logger.warning("source_not_found", source=source_id)
        return adapter

    def has_source(self, source_id: str) -> bool:
        return source_id in self._adapters

    def get_source_ids(self) -> List[str]:
        return list(self._adapters)

    def get_source_info(self, source_id: str) -> Optional[SourceInfo]:
        adapter = self._adapters.get(source_id)
        if adapter is None:
            return None
        return SourceInfo(
            id=adapter.source_id,
            name=adapter.display_name,
            url=adapter.config.base_url,
            description=adapter.description,
            categories=adapter.get_categories(),
            parent_categories=adapter.get_parent_categories(),
        )

    def list_sources(self) -> List[SourceInfo]:
        """Metadata for every registered source, in registration order."""
        return [self.get_source_info(source_id) for source_id in self._adapters]


ADAPTER_CLASSES: List[Type[BaseSourceAdapter]] = [
    OhouseAdapter,
    ZzroAdapter,
    HangelAdapter,
    IanmallAdapter,
    SymembershipAdapter,
]


def build_registry(**adapter_kwargs) -> SourceRegistry:
    """Create a registry holding one instance of every known adapter.

    Args:
        adapter_kwargs: Passed to every adapter constructor (e.g. http_client)

    Returns:
        Populated SourceRegistry
    """
    registry = SourceRegistry()
    for adapter_class in ADAPTER_CLASSES:
        registry.register(adapter_class(**adapter_kwargs))
    logger.debug("all_sources_registered", sources=registry.get_source_ids())
    return registry


# Global registry instance
source_registry = build_registry()


def get_source_registry() -> SourceRegistry:
    """Get the global source registry.

    Returns:
        SourceRegistry instance
    """
    return source_registry
