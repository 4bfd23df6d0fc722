"""Crawl entry point for callers that hold a source id and raw category ids.

Validates the request against the registry, then relays the adapter's
event stream. Invalid requests still produce a well-formed stream: one
error event followed by complete.
"""

import json
from typing import AsyncIterator, Iterable, List, Optional

import structlog

from pricecrawl.core.exceptions import SourceNotFoundError
from pricecrawl.scrapers.base import CrawlProgress
from pricecrawl.scrapers.factory import SourceRegistry, get_source_registry
from pricecrawl.scrapers.taxonomy import CategoryId


logger = structlog.get_logger(__name__)


async def stream_crawl(
    source_id: str,
    category_ids: Optional[Iterable[CategoryId]],
    registry: Optional[SourceRegistry] = None,
) -> AsyncIterator[CrawlProgress]:
    """Crawl categories of one source, yielding events as they happen.

    Args:
        source_id: Registered source id (e.g. "ohouse")
        category_ids: Requested ids; may be group labels or numeric strings
        registry: Registry to resolve the source in (defaults to the global one)

    Yields:
        CrawlProgress events, always ending with complete
    """
    registry = registry or get_source_registry()
    adapter = registry.get_adapter(source_id)
    if adapter is None:
        error = SourceNotFoundError(source_id)
        logger.warning("crawl_rejected", source=source_id, reason=error.message)
        yield CrawlProgress.for_error(error.message)
        yield CrawlProgress.for_complete()
        return

    requested: List[CategoryId] = list(category_ids or [])
    if not requested:
        logger.warning("crawl_rejected", source=source_id, reason="no categories")
        yield CrawlProgress.for_error("카테고리를 선택해주세요")
        yield CrawlProgress.for_complete()
        return

    normalized = [adapter.taxonomy.normalize_id(category_id) for category_id in requested]
    logger.info("crawl_requested", source=source_id, categories=normalized)

    async for event in adapter.crawl_all(normalized):
        yield event


def encode_event(event: CrawlProgress) -> str:
    """Render one event as an NDJSON line (non-ASCII preserved)."""
    return json.dumps(event.to_dict(), ensure_ascii=False) + "\n"
