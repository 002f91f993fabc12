from __future__ import annotations

import asyncio
import logging
from datetime import date

from bs4 import BeautifulSoup

from policy_monitor.config import settings
from policy_monitor.crawlers.base import BaseSiteCrawler, FetchFn
from policy_monitor.crawlers.profiles import SiteProfile
from policy_monitor.crawlers.utils.pdf_extractor import collect_pdf_links
from policy_monitor.crawlers.utils.pdf_resolver import DescribeFn, resolve_pdf_policy
from policy_monitor.crawlers.utils.selector_parser import MIN_TITLE_LENGTH
from policy_monitor.schemas.policy import PolicyRecord

logger = logging.getLogger(__name__)


class PdfCircularCrawler(BaseSiteCrawler):
    """
    Template crawler for circular / notification listings that link to PDFs.

    Profile fields used (see sources/*.yaml):
      - url, consultation_path
      - selectors.container / title / pdf_link / date

    At most ``MAX_PDFS_PER_PAGE`` links are resolved per page, with
    ``PDF_REQUEST_DELAY`` seconds between them.
    """

    FALLBACK_PATHS = ["/circulars/", "/notifications/", "/documents/"]

    def __init__(
        self,
        site: SiteProfile,
        *,
        fetch: FetchFn | None = None,
        today: date | None = None,
        describe: DescribeFn | None = None,
        max_pdfs: int | None = None,
        delay: float | None = None,
    ) -> None:
        super().__init__(site, fetch=fetch, today=today)
        self.describe = describe
        self.max_pdfs = max_pdfs if max_pdfs is not None else settings.MAX_PDFS_PER_PAGE
        self.delay = delay if delay is not None else settings.PDF_REQUEST_DELAY

    async def parse_page(self, soup: BeautifulSoup, url: str) -> list[PolicyRecord]:
        links = collect_pdf_links(soup, self.site, url)
        policies: list[PolicyRecord] = []

        for i, link in enumerate(links[: self.max_pdfs]):
            if i > 0 and self.delay > 0:
                await asyncio.sleep(self.delay)

            logger.info("Processing PDF: %s", link.title[:50])
            record = await resolve_pdf_policy(
                link.url, link.source_page_url, describe=self.describe, today=self.today,
            )
            if record is None:
                continue

            # The listing's link text beats a title guessed from the filename
            if len(link.title) > MIN_TITLE_LENGTH:
                record.title = link.title[:200]
            record.ministry = self.site.name
            policies.append(record)

        return policies
