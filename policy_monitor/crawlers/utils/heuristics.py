"""Cheap URL/text heuristics used before any oracle scoring."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Agency:
    domain: str
    name: str
    document_label: str


# Known publishing domains; order matters only for overlapping substrings
AGENCIES: list[Agency] = [
    Agency("awbi.gov.in", "Animal Welfare Board of India", "Animal Welfare Board of India document"),
    Agency("aqcsindia.gov.in", "Aquaculture Certification Scheme India",
           "Aquaculture Certification Scheme India document"),
    Agency("moef.gov.in", "Ministry of Environment", "Ministry of Environment document"),
    Agency("prsindia.org", "PRS India", "PRS India legislative document"),
]

UNKNOWN_MINISTRY = "Unknown Ministry"
GENERIC_DOCUMENT_LABEL = "Government document"

# Pre-filter keywords; matched as substrings of a URL or lowercased text
ANIMAL_WELFARE_KEYWORDS = ["animal", "welfare", "livestock", "veterinary", "wildlife", "aquaculture"]


def find_agency(url: str | None) -> Agency | None:
    url_lower = (url or "").lower()
    for agency in AGENCIES:
        if agency.domain in url_lower:
            return agency
    return None


def infer_ministry(url: str | None) -> str:
    agency = find_agency(url)
    return agency.name if agency else UNKNOWN_MINISTRY


def document_label(url: str | None) -> str:
    agency = find_agency(url)
    return agency.document_label if agency else GENERIC_DOCUMENT_LABEL


def match_keywords(text: str | None, keywords: list[str] | None = None) -> list[str]:
    """Keywords found in *text* (case-insensitive), in keyword-list order."""
    lower = (text or "").lower()
    return [kw for kw in (keywords or ANIMAL_WELFARE_KEYWORDS) if kw in lower]
