from __future__ import annotations

import logging

from bs4 import BeautifulSoup

from policy_monitor.crawlers.base import BaseSiteCrawler
from policy_monitor.crawlers.utils.selector_parser import extract_policies_from_page
from policy_monitor.schemas.policy import PolicyRecord

logger = logging.getLogger(__name__)


class HtmlConsultationCrawler(BaseSiteCrawler):
    """
    Template crawler for consultation listings rendered as HTML items.

    Profile fields used (see sources/*.yaml):
      - url, consultation_path
      - selectors.container / title / description / deadline
    """

    FALLBACK_PATHS = ["/consultations/", "/public-consultations/", "/notifications/", "/policies/"]

    async def parse_page(self, soup: BeautifulSoup, url: str) -> list[PolicyRecord]:
        return extract_policies_from_page(soup, self.site, url, today=self.today)
