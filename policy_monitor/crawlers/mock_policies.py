"""Placeholder records used when a site yields nothing.

These keep the dashboard and the analysis pipeline populated while a site is
unreachable or its markup has changed. They are stored with ``type="mock"``.
"""
from __future__ import annotations

import random
from datetime import date, datetime, timedelta, timezone

from policy_monitor.crawlers.utils.dedup import slugify
from policy_monitor.crawlers.utils.heuristics import match_keywords
from policy_monitor.schemas.policy import PolicyRecord

MOCK_TEMPLATES: list[dict[str, str]] = [
    {
        "title": "Draft Guidelines for Animal Welfare in Research Institutions",
        "description": (
            "Comprehensive guidelines for ensuring animal welfare in scientific research and testing "
            "facilities. The guidelines cover housing standards, veterinary care, ethical review "
            "processes, and alternatives to animal testing."
        ),
    },
    {
        "title": "Amendment to Wildlife Protection Act - Enhanced Conservation Measures",
        "description": (
            "Proposed amendments to strengthen wildlife protection laws and conservation measures. "
            "Includes provisions for habitat protection, anti-poaching measures, and community-based "
            "conservation programs."
        ),
    },
    {
        "title": "National Policy on Livestock Transportation and Welfare Standards",
        "description": (
            "New comprehensive policy for the humane transportation of livestock across state boundaries. "
            "Covers vehicle specifications, journey duration limits, rest stops, and veterinary oversight."
        ),
    },
    {
        "title": "Draft Rules for Prevention of Cruelty to Animals (Amendment)",
        "description": (
            "Proposed amendments to strengthen animal cruelty prevention laws with enhanced penalties, "
            "better enforcement mechanisms, and expanded scope of protection."
        ),
    },
    {
        "title": "Guidelines for Ethical Treatment of Animals in Entertainment Industry",
        "description": (
            "New guidelines for the use of animals in films, circuses, and other entertainment venues. "
            "Focuses on animal welfare, training methods, and housing standards."
        ),
    },
]

MIN_DAYS_AHEAD = 10
MAX_DAYS_AHEAD = 70
URGENT_PROBABILITY = 0.3


def generate_mock_policies(
    ministry: str,
    *,
    today: date | None = None,
    rng: random.Random | None = None,
) -> list[PolicyRecord]:
    today = today or date.today()
    rng = rng or random.Random()
    now = datetime.now(timezone.utc)
    stamp = int(now.timestamp() * 1000)

    records: list[PolicyRecord] = []
    for index, template in enumerate(MOCK_TEMPLATES):
        deadline = today + timedelta(days=rng.randint(MIN_DAYS_AHEAD, MAX_DAYS_AHEAD - 1))
        keywords = match_keywords(f"{template['title']} {template['description']}")
        records.append(PolicyRecord(
            id=f"{slugify(ministry)}-mock-{stamp}-{index}",
            title=template["title"],
            description=template["description"],
            ministry=ministry,
            deadline=deadline.isoformat(),
            sourceUrl=f"https://example.gov.in/consultation-{index}",
            discoveredAt=now.isoformat(),
            status="urgent" if rng.random() < URGENT_PROBABILITY else "active",
            type="mock",
            isAnimalWelfareRelated=bool(keywords),
            relevantKeywords=keywords,
        ))
    return records
