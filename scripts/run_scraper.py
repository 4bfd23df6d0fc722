"""Manual crawl runner for testing and debugging source adapters.

Runs one source over a set of categories and prints the event stream as it
arrives: progress lines and product summaries, or raw NDJSON events.

Usage:
    python scripts/run_scraper.py --list
    python scripts/run_scraper.py --source ohouse --category 79
    python scripts/run_scraper.py --source ohouse --category 91 --limit 5
    python scripts/run_scraper.py --source zzro --category tile --ndjson
"""

import argparse
import asyncio
import os
import sys

# Add backend to path so the runner works without an install
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from pricecrawl.log_config import configure_logging
from pricecrawl.scrapers.crawl_service import encode_event, stream_crawl
from pricecrawl.scrapers.factory import get_source_registry


def list_sources() -> None:
    """Print every source with its categories and groups."""
    registry = get_source_registry()
    for info in registry.list_sources():
        print(f"\n{'='*70}")
        print(f"  {info.id}  ({info.name})  {info.url}")
        print(f"  {info.description}")
        print(f"{'='*70}")
        for category_id, node in info.categories.items():
            parent = f"{node.parent} > " if node.parent else ""
            print(f"    {category_id!s:<32} {parent}{node.name}")
        if info.parent_categories:
            print("  Groups:")
            for label, ids in info.parent_categories.items():
                print(f"    {label!s:<32} {', '.join(str(i) for i in ids)}")
    print()


async def run_crawl(source_id: str, categories: list, limit: int = 10, ndjson: bool = False):
    """Run a crawl and display the events.

    Args:
        source_id: Source id (e.g. "ohouse", "zzro")
        categories: Requested category ids or group labels
        limit: Maximum number of products to print (NDJSON mode prints all)
        ndjson: Print raw NDJSON event lines instead of a summary
    """
    registry = get_source_registry()
    if not registry.has_source(source_id):
        print(f"\n❌ Error: Unknown source '{source_id}'")
        print("\n📋 Available sources:")
        for slug in registry.get_source_ids():
            print(f"   - {slug}")
        return

    if not ndjson:
        print(f"\n{'='*70}")
        print(f"  Crawling {source_id.upper()}")
        print(f"  🏷️  Categories: {', '.join(categories)}")
        print(f"  📊 Display Limit: {limit}")
        print(f"{'='*70}\n")

    products = []
    errors = []
    async for event in stream_crawl(source_id, categories):
        if ndjson:
            sys.stdout.write(encode_event(event))
            sys.stdout.flush()
            continue

        if event.type == "progress":
            print(f"⏳ [{event.progress:3d}%] {event.category}")
        elif event.type == "product":
            products.append(event.product)
            if len(products) <= limit:
                product = event.product
                print(f"    [{len(products)}] {product.name}")
                print(f"        💰 {product.price:,}원 / {product.unit}")
                if product.brand:
                    print(f"        🏢 Brand: {product.brand}")
                if product.size:
                    print(f"        📐 Size: {product.size}")
                if product.original_url:
                    print(f"        🔗 {product.original_url[:80]}")
        elif event.type == "error":
            errors.append(event.message)
            print(f"❌ {event.message}")

    if ndjson:
        return

    print(f"\n{'='*70}")
    print("  Summary")
    print(f"{'='*70}")
    print(f"  Total Products: {len(products)}")
    print(f"  Displayed: {min(limit, len(products))}")
    print(f"  Errors: {len(errors)}")

    by_category = {}
    for product in products:
        key = product.sub_category or product.category
        by_category[key] = by_category.get(key, 0) + 1
    if by_category:
        print("  By Category:")
        for name, count in by_category.items():
            print(f"    - {name}: {count}")
    print(f"{'='*70}\n")


def main():
    """Parse arguments and run the crawl."""
    parser = argparse.ArgumentParser(
        description="Run a catalog source adapter for testing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_scraper.py --list
  python scripts/run_scraper.py --source ohouse --category 79 --category 84
  python scripts/run_scraper.py --source hangel --category 중문 --limit 5
  python scripts/run_scraper.py --source zzro --category tile --ndjson
        """,
    )

    parser.add_argument(
        "--list",
        action="store_true",
        help="List sources and their categories, then exit",
    )

    parser.add_argument(
        "--source",
        help="Source id (e.g., 'ohouse', 'zzro', 'hangel', 'ianmall', 'symembership')",
    )

    parser.add_argument(
        "--category",
        action="append",
        default=[],
        help="Category id or group label; repeat for several",
    )

    parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Maximum number of products to display (default: 10)",
    )

    parser.add_argument(
        "--ndjson",
        action="store_true",
        help="Print raw NDJSON events instead of a summary",
    )

    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: LOG_LEVEL setting)",
    )

    args = parser.parse_args()

    if args.list:
        list_sources()
        return

    if not args.source:
        parser.error("--source is required unless --list is given")

    configure_logging(level=args.log_level)
    asyncio.run(run_crawl(args.source, args.category, args.limit, args.ndjson))


if __name__ == "__main__":
    main()
