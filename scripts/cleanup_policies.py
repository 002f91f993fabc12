"""Repair stored policies whose description or extracted text is garbled binary."""
import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def run_cleanup(dry_run: bool = False) -> int:
    from policy_monitor.services.policy_store import get_policy_store
    from policy_monitor.services.text_sanitizer import clean_policies

    store = get_policy_store()
    records = store.load()
    print(f"Loaded {len(records)} policies from {store.path}")

    cleaned_records, cleaned = clean_policies(records)
    if cleaned and not dry_run:
        store.save(cleaned_records)

    print(f"\n=== Cleanup {'(dry run) ' if dry_run else ''}complete ===")
    print(f"Cleaned: {cleaned}")
    print(f"Total:   {len(cleaned_records)}")
    return cleaned


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Clean garbled policy descriptions")
    parser.add_argument("--dry-run", action="store_true", help="Report only, do not write the store")
    args = parser.parse_args()
    run_cleanup(dry_run=args.dry_run)
