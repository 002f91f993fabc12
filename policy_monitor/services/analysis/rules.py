"""Rule-based animal-welfare relevance scoring.

Used whenever the relevance oracle is unavailable, errors out or returns
something unusable. Three keyword tiers, matched as substrings of the
lowercased title + description.
"""
from __future__ import annotations

import logging

from policy_monitor.schemas.policy import PolicyAnalysis, PolicyRecord

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Keyword tables
# ---------------------------------------------------------------------------

# Tier A: explicit welfare language; any hit marks the policy as relevant
KEYWORDS_HIGH: list[str] = [
    "animal welfare",
    "animal rights",
    "animal cruelty",
    "animal protection",
    "wildlife protection",
]

# Tier B: animals in care or use
KEYWORDS_MEDIUM: list[str] = [
    "livestock",
    "veterinary",
    "zoo",
    "circus",
    "pet",
    "companion animal",
    "farm animal",
]

# Tier C: adjacent topics; only count while the score is still low
KEYWORDS_LOW: list[str] = [
    "animal",
    "wildlife",
    "conservation",
    "biodiversity",
    "environment",
    "agriculture",
]

WEIGHT_HIGH = 25
WEIGHT_MEDIUM = 15
WEIGHT_LOW = 10
LOW_TIER_CAP = 30
RELEVANCE_THRESHOLD = 30


def urgency_for_score(score: int) -> str:
    if score > 70:
        return "high"
    if score > 40:
        return "medium"
    return "low"


def fallback_analysis(record: PolicyRecord, reason: str = "API not configured") -> PolicyAnalysis:
    """Keyword-tier analysis; *reason* is kept in the narrative and key points."""
    text = f"{record.title} {record.description}".lower()
    score = 0
    aspects: list[str] = []

    for kw in KEYWORDS_HIGH:
        if kw in text:
            score += WEIGHT_HIGH
            aspects.append(f'Contains "{kw}" - high relevance')

    for kw in KEYWORDS_MEDIUM:
        if kw in text:
            score += WEIGHT_MEDIUM
            aspects.append(f'Contains "{kw}" - medium relevance')

    for kw in KEYWORDS_LOW:
        if kw in text and score < LOW_TIER_CAP:
            score += WEIGHT_LOW
            aspects.append(f'Contains "{kw}" - low relevance')

    score = max(0, min(100, score))
    is_welfare = score > RELEVANCE_THRESHOLD
    verdict = (
        "Appears to be animal welfare related."
        if is_welfare
        else "Does not appear to be directly animal welfare related."
    )

    logger.info("Fallback analysis for %s: %d%% relevance (%s)", record.id, score, reason)
    return PolicyAnalysis(
        isAnimalWelfare=is_welfare,
        relevanceScore=score,
        publicSubmissionsOpen=True,
        keyPoints=[
            "Keyword-based analysis performed",
            f"Relevance score: {score}%",
            reason,
        ],
        animalWelfareAspects=aspects or ["No specific animal welfare aspects detected"],
        urgencyLevel=urgency_for_score(score),
        analysis=f"Fallback analysis: {reason}. Keyword-based relevance score: {score}%. {verdict}",
    )
