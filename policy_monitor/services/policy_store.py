"""Flat-file JSON storage for policy records.

The whole collection lives in one file (``data/policies.json``) and every
mutation is a read-modify-write of the entire list, serialized by a
process-wide lock and committed with an atomic temp-file replace.
"""
from __future__ import annotations

import json
import logging
import threading
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from policy_monitor.config import settings
from policy_monitor.crawlers.utils.date_parser import days_until
from policy_monitor.schemas.policy import PolicyAnalysis, PolicyRecord, PolicyStats

logger = logging.getLogger(__name__)

URGENT_WITHIN_DAYS = 7

# Fields that never change once a record is stored
_WRITE_ONCE_FIELDS = ("discoveredAt", "type")

_lock = threading.RLock()


class PolicyStore:
    def __init__(self, path: Path | None = None):
        self.path = Path(path or settings.POLICIES_FILE)

    # -- raw I/O --------------------------------------------------------

    def _read_raw(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error("Error loading policies from %s: %s", self.path, e)
            return []
        if not isinstance(data, list):
            logger.error("Unexpected policies file layout in %s", self.path)
            return []
        return data

    def _write(self, records: list[PolicyRecord], unparsed: list[dict[str, Any]] | None = None) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [r.to_json() for r in records] + list(unparsed or [])
        tmp = self.path.with_suffix(".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        tmp.replace(self.path)
        logger.debug("Saved %d policies to %s", len(payload), self.path)

    def _load_split(self) -> tuple[list[PolicyRecord], list[dict[str, Any]]]:
        """Parse the file into valid records plus raw entries that failed validation.

        Raw entries are written back unchanged so a mutation never erases them.
        """
        records: list[PolicyRecord] = []
        unparsed: list[dict[str, Any]] = []
        for item in self._read_raw():
            try:
                records.append(PolicyRecord.model_validate(item))
            except ValidationError as e:
                item_id = item.get("id") if isinstance(item, dict) else None
                logger.warning("Skipping invalid stored policy %s: %s", item_id, e.error_count())
                unparsed.append(item)
        return records, unparsed

    # -- public API -----------------------------------------------------

    def load(self) -> list[PolicyRecord]:
        with _lock:
            records, _ = self._load_split()
        return records

    def save(self, records: list[PolicyRecord]) -> None:
        with _lock:
            _, unparsed = self._load_split()
            self._write(records, unparsed)

    def get(self, policy_id: str) -> PolicyRecord | None:
        return next((r for r in self.load() if r.id == policy_id), None)

    def add_or_update(self, record: PolicyRecord) -> PolicyRecord:
        """Insert *record*, or shallow-merge it over the stored record with the same id."""
        with _lock:
            records, unparsed = self._load_split()
            for i, existing in enumerate(records):
                if existing.id != record.id:
                    continue
                merged = existing.model_dump() | record.model_dump(exclude_none=True)
                for name in _WRITE_ONCE_FIELDS:
                    merged[name] = getattr(existing, name)
                records[i] = PolicyRecord.model_validate(merged)
                logger.info("Updated existing policy: %s", record.title[:50])
                self._write(records, unparsed)
                return records[i]

            records.append(record)
            logger.info("Added new policy: %s", record.title[:50])
            self._write(records, unparsed)
            return record

    def _update(self, policy_id: str, mutate) -> PolicyRecord | None:
        with _lock:
            records, unparsed = self._load_split()
            for record in records:
                if record.id == policy_id:
                    mutate(record)
                    self._write(records, unparsed)
                    return record
        logger.warning("Policy not found: %s", policy_id)
        return None

    def update_analysis(self, policy_id: str, analysis: PolicyAnalysis) -> PolicyRecord | None:
        def mutate(record: PolicyRecord) -> None:
            record.aiAnalysis = analysis
            record.lastAnalyzed = datetime.now(timezone.utc).isoformat()

        return self._update(policy_id, mutate)

    def update_draft(self, policy_id: str, tone: str, text: str) -> PolicyRecord | None:
        def mutate(record: PolicyRecord) -> None:
            analysis = record.aiAnalysis or PolicyAnalysis()
            analysis.drafts[tone] = text
            analysis.draftsGenerated = len(analysis.drafts)
            record.aiAnalysis = analysis

        return self._update(policy_id, mutate)

    def update_description(self, policy_id: str, text: str) -> PolicyRecord | None:
        def mutate(record: PolicyRecord) -> None:
            record.description = text
            record.extractedText = text

        return self._update(policy_id, mutate)

    def clear(self) -> None:
        with _lock:
            self._write([])
        logger.info("Cleared all policies from storage")

    def stats(self, today: date | None = None) -> PolicyStats:
        records = self.load()
        analyzed = [r for r in records if r.is_analyzed]
        urgent = 0
        for r in records:
            left = days_until(r.deadline, today=today)
            if left is not None and left <= URGENT_WITHIN_DAYS:
                urgent += 1
        return PolicyStats(
            total=len(records),
            analyzed=len(analyzed),
            pending=len(records) - len(analyzed),
            relevant=sum(1 for r in analyzed if r.aiAnalysis.isAnimalWelfare),
            urgent=urgent,
        )


_store: PolicyStore | None = None


def get_policy_store() -> PolicyStore:
    global _store
    if _store is None:
        _store = PolicyStore()
    return _store
