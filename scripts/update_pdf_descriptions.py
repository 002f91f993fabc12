"""Re-ask the description oracle for PDF policies still carrying the fallback text."""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

FALLBACK_MARKER = "could not be processed for text extraction"


async def run_update(limit: int | None = None, delay: float = 2.0) -> int:
    from policy_monitor.crawlers.utils.pdf_resolver import MIN_DESCRIPTION_LENGTH
    from policy_monitor.services.analysis.llm import describe_document
    from policy_monitor.services.llm_service import LLMError
    from policy_monitor.services.policy_store import get_policy_store

    store = get_policy_store()
    targets = [
        p for p in store.load()
        if p.type == "pdf" and FALLBACK_MARKER in p.description
    ]
    if limit is not None:
        targets = targets[:limit]
    print(f"Found {len(targets)} PDF policies with fallback descriptions")

    updated = 0
    for i, policy in enumerate(targets):
        if i > 0:
            await asyncio.sleep(delay)
        print(f"[{i + 1}/{len(targets)}] {policy.title[:60]}")
        try:
            description = (await describe_document(policy.sourceUrl)).strip()
        except LLMError as e:
            print(f"    skipped ({e.kind}): {e}")
            continue
        if len(description) <= MIN_DESCRIPTION_LENGTH:
            print(f"    skipped: description too short ({len(description)} chars)")
            continue
        store.update_description(policy.id, description)
        updated += 1
        print(f"    updated ({len(description)} chars)")

    print(f"\n=== Updated {updated}/{len(targets)} descriptions ===")
    return updated


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Refresh fallback PDF descriptions")
    parser.add_argument("--limit", type=int, default=None, help="Process at most N policies")
    parser.add_argument("--delay", type=float, default=2.0, help="Seconds between oracle calls")
    args = parser.parse_args()
    asyncio.run(run_update(limit=args.limit, delay=args.delay))
