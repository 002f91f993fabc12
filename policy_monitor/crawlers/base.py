from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum

from bs4 import BeautifulSoup

from policy_monitor.crawlers.profiles import SiteProfile
from policy_monitor.crawlers.utils.http_client import FetchError, candidate_urls, fetch_page
from policy_monitor.schemas.policy import PolicyRecord

logger = logging.getLogger(__name__)

FetchFn = Callable[[str], Awaitable[str]]


class CrawlStatus(str, Enum):
    SUCCESS = "success"
    NO_NEW_CONTENT = "no_new_content"
    FAILED = "failed"


@dataclass
class CrawlResult:
    """Result of a single crawl execution for one site."""

    site_id: str
    status: CrawlStatus = CrawlStatus.SUCCESS
    items: list[PolicyRecord] = field(default_factory=list)
    source_url: str | None = None
    error_message: str | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None
    duration_seconds: float = 0.0


class BaseSiteCrawler(ABC):
    """Abstract base for government site crawlers.

    URL variants (configured path, the subclass's conventional paths, then the
    site root) are fetched strictly in order; the first variant whose page
    parses into at least one record wins.
    """

    FALLBACK_PATHS: list[str] = []

    def __init__(
        self,
        site: SiteProfile,
        *,
        fetch: FetchFn | None = None,
        today: date | None = None,
    ) -> None:
        self.site = site
        self.site_id = site.id
        self._fetch = fetch or fetch_page
        self.today = today
        self.source_url: str | None = None

    def urls(self) -> list[str]:
        return candidate_urls(self.site.url, self.site.consultation_path, self.FALLBACK_PATHS)

    async def run(self) -> CrawlResult:
        """Orchestrate: timing, error handling, logging."""
        result = CrawlResult(site_id=self.site_id)
        result.started_at = datetime.now(timezone.utc)
        try:
            items = await self.fetch_and_parse()
            result.items = items
            result.source_url = self.source_url
            result.status = CrawlStatus.SUCCESS if items else CrawlStatus.NO_NEW_CONTENT
        except Exception as e:
            logger.exception("Crawl failed for site %s", self.site_id)
            result.status = CrawlStatus.FAILED
            result.error_message = str(e)
        finally:
            result.finished_at = datetime.now(timezone.utc)
            result.duration_seconds = (result.finished_at - result.started_at).total_seconds()
        return result

    async def fetch_and_parse(self) -> list[PolicyRecord]:
        """Try each URL variant in order.

        Raises the last FetchError when no variant could be fetched at all.
        """
        last_error: FetchError | None = None
        fetched_any = False

        for url in self.urls():
            logger.info("Trying URL: %s", url)
            try:
                html = await self._fetch(url)
            except FetchError as e:
                logger.warning("Failed to fetch %s (%s): %s", url, e.kind, e)
                last_error = e
                continue

            fetched_any = True
            soup = BeautifulSoup(html, "lxml")
            records = await self.parse_page(soup, url)
            if records:
                logger.info("Extracted %d policies from %s", len(records), url)
                self.source_url = url
                return records

        if not fetched_any and last_error is not None:
            raise last_error
        return []

    @abstractmethod
    async def parse_page(self, soup: BeautifulSoup, url: str) -> list[PolicyRecord]:
        """Subclasses implement: turn one fetched listing page into records."""
        ...
