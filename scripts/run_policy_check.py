"""Run one policy check (scrape, ingest, analyze, notify) outside the server."""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


async def run_check(force: bool, analyze_only: bool) -> None:
    from policy_monitor.scheduler.pipeline import analyze_pending_policies, execute_policy_check

    if analyze_only:
        result = await analyze_pending_policies()
        print(json.dumps(result, indent=2))
        return

    pipeline = await execute_policy_check(force=force)
    print(json.dumps(pipeline.to_dict(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run a policy check")
    parser.add_argument("--force", action="store_true", help="Scrape even when the store is populated")
    parser.add_argument("--analyze-only", action="store_true", help="Skip scraping, analyze pending policies")
    args = parser.parse_args()
    asyncio.run(run_check(force=args.force, analyze_only=args.analyze_only))
