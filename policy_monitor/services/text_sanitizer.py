"""Detection and rule-based repair of garbled descriptions.

Earlier PDF extraction leaked mis-decoded binary into ``description`` and
``extractedText``. Repair rebuilds a description from the record's URL,
title and deadline only; no LLM call.

Text counts as garbled when it holds a corruption marker (U+00FF, U+00EB or
U+FFFD), or when more than 5% of its characters are C0 controls or above
0x7F. Tab, LF and CR are ordinary whitespace and are not counted as
controls.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

from policy_monitor.crawlers.utils.heuristics import document_label
from policy_monitor.schemas.policy import PolicyRecord

logger = logging.getLogger(__name__)

GARBLED_RATIO = 0.05
CORRUPTION_MARKERS = ("\u00ff", "\u00eb", "\ufffd")  # ÿ, ë, replacement char
_ALLOWED_CONTROL = {"\t", "\n", "\r"}


def _is_flagged(ch: str) -> bool:
    code = ord(ch)
    if code < 0x20:
        return ch not in _ALLOWED_CONTROL
    return code > 0x7F


def is_garbled(text: str | None, *, threshold: float = GARBLED_RATIO) -> bool:
    if not text:
        return False
    if any(marker in text for marker in CORRUPTION_MARKERS):
        return True
    flagged = sum(1 for ch in text if _is_flagged(ch))
    return flagged / len(text) > threshold


# ---------------------------------------------------------------------------
# Curated descriptions for documents whose titles are known to come through
# garbled. A stopgap until the LLM description path covers them.
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CuratedTopic:
    all_of: tuple[str, ...] = ()
    any_of: tuple[str, ...] = ()
    description: str = ""

    def matches(self, title_lower: str) -> bool:
        if self.all_of and not all(_contains(title_lower, p) for p in self.all_of):
            return False
        if self.any_of and not any(_contains(title_lower, p) for p in self.any_of):
            return False
        return bool(self.all_of or self.any_of)


def _contains(text: str, phrase: str) -> bool:
    return re.search(rf"\b{re.escape(phrase)}\b", text) is not None


CURATED_TOPICS: list[CuratedTopic] = [
    CuratedTopic(
        all_of=("animal husbandry", "animal welfare awareness month"),
        description=(
            'Animal Welfare Board of India circular regarding the observance of "Animal Husbandry and '
            'Animal Welfare Awareness Month". This initiative focuses on promoting awareness about animal '
            "welfare practices, livestock care standards, and humane treatment of animals. The document "
            "likely outlines activities, guidelines, and objectives for the awareness month campaign."
        ),
    ),
    CuratedTopic(
        all_of=("find your mp",),
        description=(
            "PRS India tool for locating and connecting with Members of Parliament (MPs) and Members of "
            "Legislative Assemblies (MLAs). This service provides information about parliamentary "
            "representatives, their constituencies, contact details, and legislative activities."
        ),
    ),
    CuratedTopic(
        all_of=("2024 elections",),
        description=(
            "PRS India information portal about the 2024 elections for Members of Parliament and Members "
            "of Legislative Assemblies. This resource provides details about electoral processes, "
            "candidate information, constituency data, and election-related legislative updates."
        ),
    ),
    CuratedTopic(
        any_of=("sanitary import permits", "sips"),
        description=(
            "Aquaculture Certification Scheme India notification regarding revision of user charges for "
            "processing applications for Sanitary Import Permits (SIPs). This policy affects the import of "
            "aquatic animals and related products, ensuring health standards and preventing disease "
            "transmission."
        ),
    ),
    CuratedTopic(
        all_of=("accommodation charges", "quarantine"),
        description=(
            "Aquaculture Certification Scheme India administrative approval for collection of processing "
            "fees for import/export applications and enhancement of accommodation charges for animals at "
            "Animal Quarantine & Certification Services stations."
        ),
    ),
    CuratedTopic(
        all_of=("consultant", "aqcs"),
        description=(
            "Aquaculture Certification Scheme India circular regarding extension of application deadline "
            "for hiring a consultant on contract basis in AQCS (Southern Region), Chennai."
        ),
    ),
]

_DOC_TYPE_SUFFIXES = [
    ("circular", " - Circular"),
    ("notification", " - Notification"),
    ("policy", " - Policy document"),
]

# (trigger words, suffix); first bucket with a hit wins
_TOPIC_SUFFIXES: list[tuple[tuple[str, ...], str]] = [
    (("animal", "welfare", "livestock"), " related to animal welfare"),
    (("election", "mp", "parliament"), " related to parliamentary processes"),
    (("import", "export", "permit"), " related to import/export regulations"),
]

REFER_SUFFIX = " Please refer to the original document for complete details."


def _has_trigger(title_lower: str, trigger: str) -> bool:
    # "mp" would otherwise match inside "import", "compliance", ...
    if trigger == "mp":
        return _contains(title_lower, trigger)
    return trigger in title_lower


def _topic_suffix(title_lower: str) -> str:
    for triggers, suffix in _TOPIC_SUFFIXES:
        if any(_has_trigger(title_lower, t) for t in triggers):
            return suffix
    return ""


def regenerate_description(record: PolicyRecord) -> str:
    title_lower = record.title.lower()

    curated = next((t for t in CURATED_TOPICS if t.matches(title_lower)), None)
    if curated is not None:
        description = curated.description
    else:
        description = document_label(record.sourceUrl)
        for trigger, suffix in _DOC_TYPE_SUFFIXES:
            if trigger in title_lower:
                description += suffix
                break
        description += _topic_suffix(title_lower)
        description += "."

    if record.deadline:
        description += f" The consultation deadline is {record.deadline}."
    return description + REFER_SUFFIX


def clean_policies(records: Iterable[PolicyRecord]) -> tuple[list[PolicyRecord], int]:
    """Repair garbled description / extractedText in place; returns (records, cleaned_count)."""
    cleaned = 0
    result: list[PolicyRecord] = []
    for record in records:
        touched = False
        if is_garbled(record.description):
            logger.info("Cleaning garbled description for %s: %s", record.id, record.title[:50])
            record.description = regenerate_description(record)
            touched = True
        if record.extractedText and is_garbled(record.extractedText):
            logger.info("Cleaning garbled extractedText for %s", record.id)
            record.extractedText = regenerate_description(record)
            touched = True
        cleaned += touched
        result.append(record)
    return result, cleaned
