"""Tests for PDF link discovery."""
from bs4 import BeautifulSoup

from policy_monitor.crawlers.utils.pdf_extractor import FALLBACK_TITLE, collect_pdf_links

PAGE_URL = "https://awbi.gov.in/circulars/"


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def test_container_links_resolved_against_page(make_site):
    site = make_site(type="pdf", selectors={"container": [".circular-item"]})
    soup = _soup("""
        <div class="circular-item">
            <a href="/uploads/animal_welfare_month.pdf">Observance of Animal Welfare Awareness Month</a>
            <span class="date">12/01/2026</span>
        </div>
        <div class="circular-item">
            <a href="docs/feeding.pdf">Feeding of community dogs advisory</a>
        </div>
    """)

    links = collect_pdf_links(soup, site, PAGE_URL)

    assert [l.url for l in links] == [
        "https://awbi.gov.in/uploads/animal_welfare_month.pdf",
        "https://awbi.gov.in/circulars/docs/feeding.pdf",
    ]
    assert links[0].title == "Observance of Animal Welfare Awareness Month"
    assert links[0].date == "12/01/2026"
    assert links[0].source_page_url == PAGE_URL


def test_duplicate_links_collected_once(make_site):
    site = make_site(type="pdf", selectors={"container": ["tr"]})
    soup = _soup("""
        <table>
          <tr><td>Revision of user charges for SIPs</td><td><a href="/n/1.pdf">Download</a></td></tr>
          <tr><td>Same notice, mirror link</td><td><a href="https://awbi.gov.in/n/1.pdf">PDF</a></td></tr>
        </table>
    """)

    links = collect_pdf_links(soup, site, PAGE_URL)

    assert len(links) == 1
    # Short link text falls back to the row's title cell
    assert links[0].title == "Revision of user charges for SIPs"


def test_first_container_selector_with_links_wins(make_site):
    site = make_site(type="pdf", selectors={"container": [".empty", ".notice", "li"]})
    soup = _soup("""
        <div class="empty"><a href="/page.html">Not a PDF link at all</a></div>
        <ul>
          <li class="notice"><a href="/a.pdf">Notice on animal birth control rules</a></li>
          <li><a href="/b.pdf">Other list entry with a document</a></li>
        </ul>
    """)

    links = collect_pdf_links(soup, site, PAGE_URL)

    assert [l.url for l in links] == ["https://awbi.gov.in/a.pdf"]


def test_weighted_fallback_when_no_container_matches(make_site):
    site = make_site(type="pdf", selectors={"container": [".missing"]})
    soup = _soup("""
        <div><a href="/plain.pdf"></a></div>
        <div class="attachments"><a href="/annex.pdf">Download circular</a></div>
    """)

    links = collect_pdf_links(soup, site, PAGE_URL)

    assert [l.url for l in links] == ["https://awbi.gov.in/annex.pdf", "https://awbi.gov.in/plain.pdf"]
    assert links[0].title == "Download circular"
    assert links[1].title == FALLBACK_TITLE


def test_no_pdf_links(make_site):
    site = make_site(type="pdf")
    assert collect_pdf_links(_soup("<p>Nothing here</p>"), site, PAGE_URL) == []
