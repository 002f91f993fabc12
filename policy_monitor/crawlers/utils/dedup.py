from __future__ import annotations

import hashlib
import logging
import re
from collections.abc import Iterable
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from policy_monitor.schemas.policy import PolicyRecord

logger = logging.getLogger(__name__)

# Tracking parameters to strip from URLs
_TRACKING_PARAMS = {
    "utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content",
    "fbclid", "gclid",
}


def normalize_url(url: str) -> str:
    """Normalize a URL for hashing: lowercase host, strip tracking params, trailing slash."""
    parsed = urlparse(url.strip())
    scheme = parsed.scheme.lower()
    netloc = parsed.netloc.lower()
    query_params = parse_qs(parsed.query, keep_blank_values=False)
    filtered = {k: v for k, v in query_params.items() if k.lower() not in _TRACKING_PARAMS}
    query = urlencode(filtered, doseq=True)
    path = parsed.path.rstrip("/") or "/"
    return urlunparse((scheme, netloc, path, parsed.params, query, ""))


def compute_url_hash(url: str) -> str:
    """Compute SHA-256 hash of a normalized URL."""
    normalized = normalize_url(url)
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def slugify(name: str) -> str:
    """Site display name to id prefix: 'Animal Welfare Board' -> 'animal-welfare-board'."""
    return re.sub(r"\s+", "-", name.strip().lower())


# ---------------------------------------------------------------------------
# Ingestion identity: the same real-world document scraped twice must not
# produce two records, even when its URL or id differ between passes.
# ---------------------------------------------------------------------------


def identity_key(record: PolicyRecord) -> tuple[str, str]:
    return (record.title, record.ministry)


def filter_known(
    candidates: Iterable[PolicyRecord],
    existing: Iterable[PolicyRecord],
) -> list[PolicyRecord]:
    """Drop candidates whose (title, ministry) is already stored or repeated in the batch."""
    known = {identity_key(r) for r in existing}
    fresh: list[PolicyRecord] = []
    for record in candidates:
        key = identity_key(record)
        if key in known:
            logger.debug("Already known: %s (%s)", record.title[:50], record.ministry)
            continue
        known.add(key)
        fresh.append(record)
    return fresh
