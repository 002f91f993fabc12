"""Turn a bare PDF URL into a policy record.

PDF bodies are not parsed. Title, ministry and the animal-welfare pre-filter
come from the URL alone; the description comes from the description oracle
when it answers with something usable.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from datetime import date, datetime, timezone
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

from policy_monitor.crawlers.utils.date_parser import default_deadline
from policy_monitor.crawlers.utils.dedup import compute_url_hash
from policy_monitor.crawlers.utils.heuristics import infer_ministry, match_keywords
from policy_monitor.schemas.policy import PolicyRecord
from policy_monitor.services.llm_service import LLMError

logger = logging.getLogger(__name__)

GENERIC_PDF_TITLE = "Government Circular/Notification"
MIN_PDF_TITLE_LENGTH = 10
MIN_DESCRIPTION_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 1000
PENDING_EXTRACTED_TEXT = "PDF content extraction pending. Please refer to original document."

DescribeFn = Callable[[str], Awaitable[str]]


def title_from_url(pdf_url: str) -> str:
    """'.../animal_welfare-month.pdf' -> 'Animal Welfare Month'."""
    filename = PurePosixPath(unquote(urlparse(pdf_url).path)).name
    stem = re.sub(r"\.pdf$", "", filename, flags=re.IGNORECASE)
    title = re.sub(r"[-_]+", " ", stem)
    title = re.sub(r"\b\w", lambda m: m.group(0).upper(), title).strip()
    if len(title) < MIN_PDF_TITLE_LENGTH:
        return GENERIC_PDF_TITLE
    return title


def fallback_pdf_description(ministry: str) -> str:
    return (
        f"Government document from {ministry}. The PDF could not be processed for "
        "text extraction; it may contain images or scanned content. "
        "Please refer to the original PDF for complete details."
    )


def create_policy_from_url(
    pdf_url: str,
    source_page_url: str | None,
    *,
    today: date | None = None,
) -> PolicyRecord:
    ministry = infer_ministry(pdf_url)
    keywords = match_keywords(pdf_url)
    return PolicyRecord(
        id=f"pdf-{compute_url_hash(pdf_url)[:16]}",
        title=title_from_url(pdf_url),
        description=fallback_pdf_description(ministry),
        ministry=ministry,
        deadline=default_deadline(today=today),
        sourceUrl=pdf_url,
        sourcePageUrl=source_page_url,
        discoveredAt=datetime.now(timezone.utc).isoformat(),
        status="active",
        type="pdf",
        pages=1,
        extractedText=PENDING_EXTRACTED_TEXT,
        isAnimalWelfareRelated=bool(keywords),
        relevantKeywords=keywords,
    )


async def resolve_pdf_policy(
    pdf_url: str,
    source_page_url: str | None,
    *,
    describe: DescribeFn | None = None,
    today: date | None = None,
) -> PolicyRecord | None:
    """Build a record for *pdf_url*, enriched by the description oracle.

    Oracle failures keep the URL-derived fallback description. Returns None
    only when the URL itself cannot be turned into a record.
    """
    try:
        record = create_policy_from_url(pdf_url, source_page_url, today=today)
    except Exception:
        logger.exception("Failed to build policy from PDF URL %s", pdf_url)
        return None

    if describe is None:
        from policy_monitor.services.analysis.llm import describe_document
        describe = describe_document

    try:
        description = (await describe(pdf_url) or "").strip()
    except LLMError as e:
        logger.warning("Description oracle failed for %s, keeping fallback: %s", pdf_url, e)
        return record
    except Exception as e:
        logger.error("Unexpected description failure for %s, keeping fallback: %s", pdf_url, e)
        return record

    if len(description) < MIN_DESCRIPTION_LENGTH:
        logger.warning("Description oracle returned %d chars for %s, keeping fallback",
                       len(description), pdf_url)
        return record

    description = description[:MAX_DESCRIPTION_LENGTH]
    record.description = description
    record.extractedText = description
    return record
