"""Selector-profile driven extraction of policy records from listing pages.

Structured extraction walks the profile's container selectors in order and
pulls title / description / deadline with ordered per-field fallbacks.
Generic keyword extraction runs only when structured extraction yields
nothing for the whole page.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from bs4 import BeautifulSoup, Tag

from policy_monitor.crawlers.profiles import SiteProfile
from policy_monitor.crawlers.utils.date_parser import default_deadline, parse_deadline
from policy_monitor.crawlers.utils.dedup import slugify
from policy_monitor.crawlers.utils.heuristics import match_keywords
from policy_monitor.crawlers.utils.text_extract import (
    SELECTOR_ERRORS,
    element_text,
    first_substantial_line,
    truncate_text,
)
from policy_monitor.schemas.policy import PolicyRecord

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 10
MAX_TITLE_LENGTH = 500
MIN_DESCRIPTION_LENGTH = 20
MAX_RECORDS_PER_PAGE = 10

# Generic extraction bounds
GENERIC_SELECTOR = "p, div, article, section"
GENERIC_MIN_TEXT = 50
GENERIC_MAX_TEXT = 1000
GENERIC_MIN_KEYWORD_HITS = 2
GENERIC_MAX_RECORDS = 5

GENERIC_POLICY_KEYWORDS = [
    "consultation", "policy", "draft", "amendment", "regulation",
    "guidelines", "framework", "act", "bill", "notification",
    "animal", "welfare", "wildlife", "environment", "agriculture",
    "livestock", "veterinary", "conservation", "biodiversity",
]


def select_first_matching(root: Tag, selectors: list[str]) -> tuple[str, list[Tag]] | None:
    """Return the first selector with at least one match under *root*, and its matches."""
    for selector in selectors:
        try:
            matches = root.select(selector)
        except SELECTOR_ERRORS as e:
            logger.warning("Invalid selector %r: %s", selector, e)
            continue
        if matches:
            return selector, matches
    return None


def _first_text(el: Tag, selectors: list[str], min_length: int) -> str | None:
    """First selector hit (first element per selector) whose trimmed text exceeds *min_length*."""
    for selector in selectors:
        try:
            found = el.select_one(selector)
        except SELECTOR_ERRORS:
            continue
        if found is None:
            continue
        text = found.get_text(" ", strip=True)
        if len(text) > min_length:
            return text
    return None


def _first_deadline(el: Tag, selectors: list[str], today: date) -> str | None:
    for selector in selectors:
        try:
            found = el.select_one(selector)
        except SELECTOR_ERRORS:
            continue
        if found is None:
            continue
        deadline = parse_deadline(found.get_text(" ", strip=True), today=today)
        if deadline:
            return deadline
    return None


def _annotate_keywords(record: PolicyRecord) -> PolicyRecord:
    keywords = match_keywords(f"{record.title} {record.description}")
    record.isAnimalWelfareRelated = bool(keywords)
    record.relevantKeywords = keywords
    return record


def extract_policy_from_element(
    el: Tag,
    site: SiteProfile,
    source_url: str,
    index: int,
    *,
    today: date | None = None,
    now: datetime | None = None,
) -> PolicyRecord | None:
    """Build a candidate record from one container element (not yet validated)."""
    today = today or date.today()
    now = now or datetime.now(timezone.utc)
    selectors = site.selectors

    title = _first_text(el, selectors.title, MIN_TITLE_LENGTH)
    description = _first_text(el, selectors.description, MIN_DESCRIPTION_LENGTH)
    deadline = _first_deadline(el, selectors.deadline, today)

    text = element_text(el)
    if not title:
        title = first_substantial_line(text, MIN_TITLE_LENGTH)
    if not description:
        description = truncate_text(text, 300)
    if not deadline:
        deadline = default_deadline(today=today)

    if not title or not description:
        return None

    record = PolicyRecord(
        id=f"{slugify(site.name)}-{int(now.timestamp() * 1000)}-{index}",
        title=title,
        description=description,
        ministry=site.name,
        deadline=deadline,
        sourceUrl=source_url,
        discoveredAt=now.isoformat(),
        status="active",
        type="html",
    )
    return _annotate_keywords(record)


def is_valid_policy(record: PolicyRecord, *, today: date | None = None) -> bool:
    today = today or date.today()
    try:
        deadline = date.fromisoformat(record.deadline)
    except ValueError:
        return False
    return (
        MIN_TITLE_LENGTH < len(record.title) < MAX_TITLE_LENGTH
        and len(record.description) > MIN_DESCRIPTION_LENGTH
        and deadline > today
    )


def extract_policies_from_page(
    soup: BeautifulSoup,
    site: SiteProfile,
    source_url: str,
    *,
    today: date | None = None,
) -> list[PolicyRecord]:
    """Extract validated records from a listing page.

    Container selectors are tried in profile order. The first selector whose
    containers produce at least one valid record wins; results from different
    selectors are never merged. Falls back to generic keyword extraction when
    no selector produces anything.
    """
    today = today or date.today()
    now = datetime.now(timezone.utc)

    remaining = list(site.selectors.container)
    while remaining:
        hit = select_first_matching(soup, remaining)
        if hit is None:
            break
        selector, containers = hit
        remaining = remaining[remaining.index(selector) + 1:]
        logger.info("Found %d potential containers with selector: %s", len(containers), selector)

        policies: list[PolicyRecord] = []
        for index, el in enumerate(containers):
            try:
                record = extract_policy_from_element(el, site, source_url, index, today=today, now=now)
            except ValueError as e:
                logger.warning("Error extracting policy from element %d: %s", index, e)
                continue
            if record is not None and is_valid_policy(record, today=today):
                policies.append(record)

        if policies:
            return policies[:MAX_RECORDS_PER_PAGE]

    logger.info("No policies found with specific selectors on %s, trying generic extraction", source_url)
    return generic_policy_extraction(soup, site, source_url, today=today)


def generic_policy_extraction(
    soup: BeautifulSoup,
    site: SiteProfile,
    source_url: str,
    *,
    today: date | None = None,
    keywords: list[str] | None = None,
) -> list[PolicyRecord]:
    """Keyword-density fallback over paragraph-like blocks."""
    today = today or date.today()
    now = datetime.now(timezone.utc)
    keywords = keywords or GENERIC_POLICY_KEYWORDS
    policies: list[PolicyRecord] = []

    candidates: list[tuple[int, Tag, str]] = []
    for index, el in enumerate(soup.select(GENERIC_SELECTOR)):
        text = element_text(el)
        if not (GENERIC_MIN_TEXT < len(text) < GENERIC_MAX_TEXT):
            continue
        lower = text.lower()
        hits = [kw for kw in keywords if kw in lower]
        if len(hits) < GENERIC_MIN_KEYWORD_HITS:
            continue
        candidates.append((index, el, text))

    # Wrapper blocks repeat their children's text; keep the innermost match
    matched = {id(el) for _, el, _ in candidates}
    seen_texts: set[str] = set()
    for index, el, text in candidates:
        if any(id(child) in matched for child in el.find_all(True)):
            continue
        if text in seen_texts:
            continue
        seen_texts.add(text)

        record = PolicyRecord(
            id=f"{slugify(site.name)}-generic-{int(now.timestamp() * 1000)}-{index}",
            title=first_substantial_line(text, MIN_TITLE_LENGTH) or "Policy Consultation",
            description=truncate_text(text, 300),
            ministry=site.name,
            deadline=default_deadline(today=today),
            sourceUrl=source_url,
            discoveredAt=now.isoformat(),
            status="active",
            type="html",
        )
        policies.append(_annotate_keywords(record))
        if len(policies) >= GENERIC_MAX_RECORDS:
            break

    logger.info("Generic extraction found %d candidates on %s", len(policies), source_url)
    return policies
