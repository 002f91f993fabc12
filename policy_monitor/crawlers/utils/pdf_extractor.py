"""PDF link discovery on circular / notification listing pages."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from policy_monitor.crawlers.profiles import SiteProfile
from policy_monitor.crawlers.utils.selector_parser import MIN_TITLE_LENGTH
from policy_monitor.crawlers.utils.text_extract import SELECTOR_ERRORS, element_text, first_substantial_line

logger = logging.getLogger(__name__)

FALLBACK_TITLE = "Government Document"


@dataclass
class PdfLink:
    url: str
    title: str
    date: str | None
    source_page_url: str


def _is_pdf_href(href: str | None) -> bool:
    return bool(href) and ".pdf" in href.lower()


def _container_title(container: Tag, link: Tag, site: SiteProfile) -> str:
    """Link text, then the container's title selectors, then its first text line."""
    title = link.get_text(" ", strip=True)
    if len(title) >= MIN_TITLE_LENGTH:
        return title
    for selector in site.selectors.title:
        try:
            found = container.select_one(selector)
        except SELECTOR_ERRORS:
            continue
        if found is not None:
            title = found.get_text(" ", strip=True)
            break
    if len(title) >= MIN_TITLE_LENGTH:
        return title
    return first_substantial_line(element_text(container), 0) or title


def _container_date(container: Tag, site: SiteProfile) -> str | None:
    for selector in site.selectors.date:
        try:
            found = container.select_one(selector)
        except SELECTOR_ERRORS:
            continue
        if found is not None:
            text = found.get_text(" ", strip=True)
            if text:
                return text
    return None


def collect_pdf_links(
    soup: BeautifulSoup,
    site: SiteProfile,
    page_url: str,
) -> list[PdfLink]:
    """Collect PDF links from a listing page.

    Containers are tried in profile order; the first container selector that
    yields any PDF link wins. When none does, every PDF anchor on the page is
    collected, highest link weight first.
    """
    links: list[PdfLink] = []
    seen: set[str] = set()

    for container_selector in site.selectors.container:
        try:
            containers = soup.select(container_selector)
        except SELECTOR_ERRORS as e:
            logger.warning("Invalid container selector %r: %s", container_selector, e)
            continue

        for container in containers:
            for pdf_selector in site.selectors.pdf_link:
                try:
                    anchors = container.select(pdf_selector)
                except SELECTOR_ERRORS:
                    continue
                for anchor in anchors:
                    href = anchor.get("href")
                    if not _is_pdf_href(href):
                        continue
                    url = urljoin(page_url, href.strip())
                    if url in seen:
                        continue
                    seen.add(url)
                    links.append(PdfLink(
                        url=url,
                        title=_container_title(container, anchor, site) or FALLBACK_TITLE,
                        date=_container_date(container, site),
                        source_page_url=page_url,
                    ))

        if links:
            break

    if not links:
        for weight, anchor in _weighted_pdf_anchors(soup):
            url = urljoin(page_url, anchor["href"].strip())
            if url in seen:
                continue
            seen.add(url)
            title = anchor.get_text(" ", strip=True)
            if not title:
                row = anchor.find_parent(["tr", "li"]) or anchor.parent
                title = first_substantial_line(element_text(row), 0) if row else None
            links.append(PdfLink(
                url=url,
                title=title or FALLBACK_TITLE,
                date=None,
                source_page_url=page_url,
            ))

    logger.info("Found %d PDF links on %s", len(links), page_url)
    return links


def _weighted_pdf_anchors(soup: BeautifulSoup) -> list[tuple[int, Tag]]:
    """All PDF anchors ordered by link weight (stable for equal weights).

    Weight calculation:
    - Link text contains "pdf"/"download"/"circular"/... → +10
    - Link in an attachments/download/file container → +8
    - Link in article/main → +3
    - Any PDF link → base 2
    """
    candidates: list[tuple[int, int, Tag]] = []
    for position, link in enumerate(soup.find_all("a", href=True)):
        if not _is_pdf_href(link.get("href")):
            continue

        weight = 2
        link_text = link.get_text(strip=True).lower()
        if any(kw in link_text for kw in ("pdf", "download", "attachment", "circular", "notification")):
            weight += 10

        for parent in link.parents:
            parent_class = " ".join(parent.get("class", [])).lower()
            parent_id = (parent.get("id") or "").lower()
            if any(c in parent_class or c in parent_id for c in ("attachment", "download", "file", "circular")):
                weight += 8
                break

        if any(parent.name in ("article", "main") for parent in link.parents):
            weight += 3

        candidates.append((weight, position, link))

    candidates.sort(key=lambda c: (-c[0], c[1]))
    return [(weight, link) for weight, _, link in candidates]
