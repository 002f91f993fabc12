"""CLI tool to test a single site crawl."""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


async def run_crawl(site_id: str, save: bool = False):
    from policy_monitor.crawlers.profiles import load_site_profiles
    from policy_monitor.crawlers.registry import CrawlerRegistry
    from policy_monitor.scheduler.pipeline import ingest_policies
    from policy_monitor.services.policy_store import get_policy_store

    profiles = load_site_profiles(enabled_only=False)
    site = next((p for p in profiles if p.id == site_id), None)

    if site is None:
        print(f"Site not found: {site_id}")
        print(f"Available sites: {[p.id for p in profiles]}")
        return

    print(f"\n=== Crawling: {site.name} ===")
    print(f"Type: {site.type}")
    print(f"URL: {site.url}")
    print()

    crawler = CrawlerRegistry.create_crawler(site)
    result = await crawler.run()

    print("\n=== Results ===")
    print(f"Status: {result.status.value}")
    print(f"Items found: {len(result.items)}")
    print(f"Source URL: {result.source_url}")
    print(f"Duration: {result.duration_seconds:.1f}s")

    if result.error_message:
        print(f"Error: {result.error_message}")

    if save and result.items:
        added = ingest_policies(get_policy_store(), result.items)
        print(f"Stored {added} new policies")

    if result.items:
        print(f"\n--- First {min(5, len(result.items))} items ---")
        for item in result.items[:5]:
            print(f"  [{item.deadline}] {item.title}")
            print(f"    URL: {item.sourceUrl}")
            print(f"    Description: {item.description[:100]}...")
            print()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Test crawl a single site")
    parser.add_argument("--site", "-s", required=True, help="Site ID to crawl")
    parser.add_argument("--save", action="store_true", help="Ingest new records into the store")
    args = parser.parse_args()
    asyncio.run(run_crawl(args.site, save=args.save))
