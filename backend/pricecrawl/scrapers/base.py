"""Base source adapter interface and shared crawl data structures.

Every vendor adapter inherits from BaseSourceAdapter, supplies its
SourceConfig, CategoryTaxonomy and ExtractionPipeline, and implements
category_url(). Fetching, pagination, rate limiting and the event stream
are implemented once here.
"""

import asyncio
import math
import re
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, AsyncIterator, Dict, Iterable, List, Optional, Tuple

import httpx
import structlog

from pricecrawl.config import settings
from pricecrawl.core.exceptions import FetchError
from pricecrawl.scrapers.taxonomy import CategoryId, CategoryNode, CategoryTaxonomy
from pricecrawl.scrapers.utils.retry import page_fetch_retry
from pricecrawl.scrapers.utils.user_agents import DEFAULT_USER_AGENT

if TYPE_CHECKING:
    from pricecrawl.scrapers.extraction import ExtractionPipeline


NAME_MAX_LENGTH = 100

EVENT_TYPES = ("progress", "product", "complete", "error")


@dataclass(frozen=True)
class CrawledProduct:
    """Normalized catalog listing extracted from one category page."""

    name: str
    price: int  # KRW, always > 0
    category: str
    source: str
    unit: str = "개"
    size: Optional[str] = None
    brand: Optional[str] = None
    image_url: Optional[str] = None
    original_url: Optional[str] = None
    sub_category: Optional[str] = None

    def __post_init__(self):
        """Validate data after initialization."""
        if not self.name:
            raise ValueError("name is required")
        if len(self.name) > NAME_MAX_LENGTH:
            raise ValueError(f"name must be at most {NAME_MAX_LENGTH} characters")
        if not isinstance(self.price, int) or self.price <= 0:
            raise ValueError("price must be a positive integer")
        if not self.category:
            raise ValueError("category is required")
        if not self.source:
            raise ValueError("source is required")

    @property
    def dedup_key(self) -> Tuple[str, str, int]:
        """Upsert key for downstream storage: (source, name, price)."""
        return (self.source, self.name, self.price)

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation (camelCase keys, absent fields omitted)."""
        data = {
            "name": self.name,
            "price": self.price,
            "unit": self.unit,
            "size": self.size,
            "imageUrl": self.image_url,
            "originalUrl": self.original_url,
            "brand": self.brand,
            "category": self.category,
            "subCategory": self.sub_category,
            "source": self.source,
        }
        return {key: value for key, value in data.items() if value is not None}


@dataclass(frozen=True)
class SourceConfig:
    """Network configuration for one vendor site."""

    name: str
    base_url: str
    request_delay_ms: int
    user_agent: str = DEFAULT_USER_AGENT
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.base_url.startswith("http"):
            raise ValueError(f"base_url must be absolute: {self.base_url}")
        if self.request_delay_ms < 0:
            raise ValueError("request_delay_ms must not be negative")


@dataclass(frozen=True)
class CrawlProgress:
    """One event in a crawl stream.

    Shapes:
        progress: progress (0-100) and category label
        product:  one CrawledProduct
        complete: terminal, progress == 100
        error:    message, non-terminal
    """

    type: str
    progress: Optional[int] = None
    category: Optional[str] = None
    product: Optional[CrawledProduct] = None
    message: Optional[str] = None

    def __post_init__(self):
        """Validate the event shape."""
        if self.type not in EVENT_TYPES:
            raise ValueError(f"Invalid event type: {self.type}")
        if self.type == "progress":
            if self.progress is None or not 0 <= self.progress <= 100:
                raise ValueError("progress event needs a percentage between 0 and 100")
        elif self.type == "product" and self.product is None:
            raise ValueError("product event needs a product")
        elif self.type == "complete" and self.progress != 100:
            raise ValueError("complete event must carry progress 100")
        elif self.type == "error" and not self.message:
            raise ValueError("error event needs a message")

    @classmethod
    def for_progress(cls, percent: int, category: str) -> "CrawlProgress":
        return cls(type="progress", progress=percent, category=category)

    @classmethod
    def for_product(cls, product: CrawledProduct) -> "CrawlProgress":
        return cls(type="product", product=product)

    @classmethod
    def for_complete(cls) -> "CrawlProgress":
        return cls(type="complete", progress=100)

    @classmethod
    def for_error(cls, message: str) -> "CrawlProgress":
        return cls(type="error", message=message)

    @property
    def is_terminal(self) -> bool:
        return self.type == "complete"

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation, absent fields omitted."""
        data: Dict[str, Any] = {"type": self.type}
        if self.progress is not None:
            data["progress"] = self.progress
        if self.category is not None:
            data["category"] = self.category
        if self.product is not None:
            data["product"] = self.product.to_dict()
        if self.message is not None:
            data["message"] = self.message
        return data


_PAGE_PARAM = re.compile(r"[?&](?:amp;)?page=(\d+)")


def extract_max_page(markup: str) -> int:
    """Highest page number linked from a listing page's pagination, min 1."""
    max_page = 1
    for match in _PAGE_PARAM.finditer(markup or ""):
        max_page = max(max_page, int(match.group(1)))
    return max_page


def completion_percent(completed: int, total: int) -> int:
    """Round completed/total to a whole percentage, halves rounding up."""
    if total <= 0:
        return 100
    return int(math.floor(completed / total * 100 + 0.5))


def dedupe_products(products: Iterable[CrawledProduct]) -> List[CrawledProduct]:
    """Drop repeated (name, price) pairs, keeping the first occurrence."""
    seen = set()
    unique = []
    for product in products:
        key = (product.name, product.price)
        if key in seen:
            continue
        seen.add(key)
        unique.append(product)
    return unique


class BaseSourceAdapter(ABC):
    """Abstract base class for all vendor catalog adapters.

    Subclasses set source_id, display_name, description, config, taxonomy
    and pipeline, and implement category_url(). One adapter instance never
    fetches two pages at once: crawl_all() walks categories sequentially and
    sleeps the configured delay after each category and before each extra
    result page.
    """

    source_id: str = ""  # Must be overridden in subclass (e.g., "ohouse")
    display_name: str = ""  # Must be overridden in subclass (e.g., "오하우스 인테리어")
    description: str = ""
    config: SourceConfig
    taxonomy: CategoryTaxonomy
    pipeline: "ExtractionPipeline"

    # Sources with server-side pagination fetch pages 2..N of each category
    paginated: bool = False
    max_pages: int = 50

    def __init__(
        self,
        config: Optional[SourceConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the adapter.

        Args:
            config: Override for the class-level SourceConfig
            http_client: Shared client to use instead of a per-crawl client
        """
        if config is not None:
            self.config = config
        self.http_client = http_client
        self.logger = structlog.get_logger(adapter=self.source_id)

    # -- taxonomy -----------------------------------------------------------

    def get_categories(self) -> Dict[CategoryId, CategoryNode]:
        return self.taxonomy.get_categories()

    def get_parent_categories(self) -> Dict[CategoryId, List[CategoryId]]:
        return self.taxonomy.get_parent_categories()

    def expand_categories(self, category_ids: Iterable[CategoryId]) -> List[CategoryId]:
        return self.taxonomy.expand_categories(category_ids)

    def get_node(self, category_id: CategoryId) -> CategoryNode:
        return self.taxonomy.get_node(category_id)

    def display_label(self, node: CategoryNode) -> str:
        """Label shown in progress events for a category."""
        return node.name

    def product_category(self, node: CategoryNode) -> Tuple[str, Optional[str]]:
        """(category, sub_category) stamped on products from this node."""
        return node.category, node.sub_category

    # -- network ------------------------------------------------------------

    @abstractmethod
    def category_url(self, node: CategoryNode, page: int = 1) -> str:
        """Absolute URL of a category listing page.

        Args:
            node: Category being crawled
            page: 1-based result page (only > 1 for paginated sources)
        """

    def request_headers(self) -> Dict[str, str]:
        headers = {"User-Agent": self.config.user_agent}
        headers.update(self.config.headers)
        return headers

    @property
    def request_delay(self) -> float:
        """Inter-request delay in seconds."""
        return self.config.request_delay_ms / 1000.0 * settings.CRAWL_DELAY_MULTIPLIER

    async def _sleep_between_requests(self) -> None:
        if self.request_delay > 0:
            await asyncio.sleep(self.request_delay)

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self.http_client is not None:
            yield self.http_client
            return
        async with httpx.AsyncClient(
            timeout=settings.CRAWL_HTTP_TIMEOUT,
            follow_redirects=True,
        ) as client:
            yield client

    async def fetch_page(self, client: httpx.AsyncClient, url: str) -> str:
        """Fetch one listing page.

        Args:
            client: HTTP client
            url: Absolute page URL

        Returns:
            Response body as text

        Raises:
            FetchError: On non-2xx status or transport failure after retries
        """
        self.logger.info("fetching_page", url=url)
        try:
            async for attempt in page_fetch_retry():
                with attempt:
                    response = await client.get(url, headers=self.request_headers())
                    response.raise_for_status()
        except httpx.HTTPError as e:
            raise FetchError(self.source_id, url, str(e)) from e
        return response.text

    # -- extraction ---------------------------------------------------------

    def extract_products(self, markup: str, node: CategoryNode) -> List[CrawledProduct]:
        """Run this source's extraction pipeline over one page."""
        from pricecrawl.scrapers.extraction import ExtractionContext

        category, sub_category = self.product_category(node)
        context = ExtractionContext(
            source=self.source_id,
            base_url=self.config.base_url,
            node=node,
            category=category,
            sub_category=sub_category,
            list_url=self.category_url(node),
        )
        products = self.pipeline.run(markup, context)
        self.logger.info(
            "products_extracted",
            category_id=node.id,
            html_length=len(markup),
            count=len(products),
        )
        return products

    async def crawl_category(self, category_id: CategoryId) -> List[CrawledProduct]:
        """Fetch and extract every product listed under one category.

        Fetch failures are logged and yield an empty list; they never raise.

        Args:
            category_id: Concrete category id

        Returns:
            Duplicate-free list of CrawledProduct
        """
        node = self.get_node(category_id)
        url = self.category_url(node)

        async with self._client() as client:
            try:
                markup = await self.fetch_page(client, url)
            except FetchError as e:
                self.logger.error("category_fetch_failed", category_id=node.id, url=url, error=str(e))
                return []

            products = self.extract_products(markup, node)
            if not self.paginated:
                return products

            max_page = extract_max_page(markup)
            if max_page > self.max_pages:
                self.logger.warning("page_count_capped", category_id=node.id, found=max_page, cap=self.max_pages)
                max_page = self.max_pages
            self.logger.info("category_pages_found", category_id=node.id, pages=max_page)

            for page in range(2, max_page + 1):
                await self._sleep_between_requests()
                page_url = self.category_url(node, page)
                try:
                    markup = await self.fetch_page(client, page_url)
                except FetchError as e:
                    self.logger.error("page_fetch_failed", category_id=node.id, page=page, error=str(e))
                    continue
                products.extend(self.extract_products(markup, node))

        return dedupe_products(products)

    # -- orchestration ------------------------------------------------------

    async def crawl_all(self, category_ids: Iterable[CategoryId]) -> AsyncIterator[CrawlProgress]:
        """Crawl the requested categories, yielding events as they happen.

        Requested ids are expanded through the taxonomy and visited in order.
        Each category emits one progress event, then its products. A failure
        inside one category becomes an error event and the crawl moves on.
        The final event is always a single complete event.

        Args:
            category_ids: Requested ids, possibly group-level

        Yields:
            CrawlProgress events
        """
        expanded_ids = self.expand_categories(category_ids)
        total = len(expanded_ids)
        completed = 0
        product_count = 0

        self.logger.info("crawl_started", categories=expanded_ids, total=total)

        for category_id in expanded_ids:
            node = self.get_node(category_id)
            label = self.display_label(node)

            yield CrawlProgress.for_progress(completion_percent(completed, total), label)

            try:
                products = await self.crawl_category(category_id)
                for product in products:
                    product_count += 1
                    yield CrawlProgress.for_product(product)
            except Exception as e:
                self.logger.error(
                    "category_crawl_failed",
                    category_id=category_id,
                    error=str(e),
                    exc_info=True,
                )
                yield CrawlProgress.for_error(f"{label} 크롤링 실패: {e}")

            await self._sleep_between_requests()
            completed += 1

        self.logger.info("crawl_complete", categories=total, products=product_count)
        yield CrawlProgress.for_complete()
