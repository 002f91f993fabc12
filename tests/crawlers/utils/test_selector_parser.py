"""Tests for selector-profile extraction."""
from datetime import date

from bs4 import BeautifulSoup

from policy_monitor.crawlers.utils.selector_parser import (
    MAX_RECORDS_PER_PAGE,
    extract_policies_from_page,
    extract_policy_from_element,
    generic_policy_extraction,
    is_valid_policy,
    select_first_matching,
)

TODAY = date(2026, 1, 1)
PAGE_URL = "https://awbi.gov.in/consultations/"


def _item(n: int, cls: str = "item", deadline: str = "15/03/2026") -> str:
    return f"""
    <div class="{cls}">
        <h3>Draft Animal Welfare Rules {n} for Public Comment</h3>
        <p class="description">Public consultation on proposed rules for the care of community animals, number {n}.</p>
        <span class="deadline">Last date: {deadline}</span>
    </div>
    """


def _soup(body: str) -> BeautifulSoup:
    return BeautifulSoup(f"<html><body>{body}</body></html>", "lxml")


def test_three_items_yield_three_records(make_site):
    site = make_site()
    soup = _soup("".join(_item(n) for n in range(3)))

    policies = extract_policies_from_page(soup, site, PAGE_URL, today=TODAY)

    assert len(policies) == 3
    assert all(p.deadline == "2026-03-15" for p in policies)
    assert all(p.ministry == "Animal Welfare Board of India" for p in policies)
    assert all(p.sourceUrl == PAGE_URL for p in policies)
    assert all(p.type == "html" and p.status == "active" for p in policies)
    assert len({p.id for p in policies}) == 3
    assert policies[0].id.startswith("animal-welfare-board-of-india-")
    assert policies[0].title == "Draft Animal Welfare Rules 0 for Public Comment"
    assert policies[0].isAnimalWelfareRelated is True
    assert "animal" in policies[0].relevantKeywords


def test_later_selector_used_when_earlier_ones_yield_nothing_valid(make_site):
    site = make_site(selectors={"container": [".bad", ".missing", ".good"]})
    soup = _soup(
        '<div class="bad"><h3>Short</h3></div>'
        + _item(1, cls="good")
        + _item(2, cls="good")
    )

    policies = extract_policies_from_page(soup, site, PAGE_URL, today=TODAY)

    assert [p.title for p in policies] == [
        "Draft Animal Welfare Rules 1 for Public Comment",
        "Draft Animal Welfare Rules 2 for Public Comment",
    ]


def test_first_productive_selector_wins_without_merging(make_site):
    site = make_site(selectors={"container": [".first", ".second"]})
    soup = _soup(_item(1, cls="first") + _item(2, cls="second") + _item(3, cls="second"))

    policies = extract_policies_from_page(soup, site, PAGE_URL, today=TODAY)

    assert len(policies) == 1
    assert policies[0].title.startswith("Draft Animal Welfare Rules 1")


def test_records_capped_per_page(make_site):
    site = make_site()
    soup = _soup("".join(_item(n) for n in range(MAX_RECORDS_PER_PAGE + 3)))

    assert len(extract_policies_from_page(soup, site, PAGE_URL, today=TODAY)) == MAX_RECORDS_PER_PAGE


def test_missing_deadline_defaults_to_thirty_days(make_site):
    site = make_site()
    soup = _soup(_item(1, deadline="to be announced"))

    policies = extract_policies_from_page(soup, site, PAGE_URL, today=TODAY)

    assert policies[0].deadline == "2026-01-31"


def test_past_deadline_falls_through_to_next_deadline_selector(make_site):
    site = make_site(selectors={"deadline": [".published", ".deadline"]})
    soup = _soup(
        '<div class="item"><h3>Draft Livestock Transport Rules 2026</h3>'
        '<p>Consultation on humane transport of livestock across states.</p>'
        '<span class="published">10/12/2025</span>'
        '<span class="deadline">20/02/2026</span></div>'
    )

    policies = extract_policies_from_page(soup, site, PAGE_URL, today=TODAY)

    assert policies[0].deadline == "2026-02-20"


def test_title_and_description_fallback_to_element_text(make_site):
    site = make_site(selectors={"container": [".row"], "title": [".none"], "description": [".none"]})
    soup = _soup(
        '<div class="row"><span>Notice on Veterinary Council Regulations</span>'
        "<span>Comments invited on the draft regulations for veterinary practice.</span></div>"
    )

    record = extract_policy_from_element(soup.select_one(".row"), site, PAGE_URL, 0, today=TODAY)

    assert record.title == "Notice on Veterinary Council Regulations"
    assert record.description.startswith("Notice on Veterinary Council Regulations")


def test_is_valid_policy_bounds(make_record):
    assert is_valid_policy(make_record(), today=TODAY)
    assert not is_valid_policy(make_record(title="Too short"), today=TODAY)
    assert not is_valid_policy(make_record(description="tiny"), today=TODAY)
    assert not is_valid_policy(make_record(deadline="2025-12-01"), today=TODAY)
    assert not is_valid_policy(make_record(deadline="soon"), today=TODAY)


def test_generic_extraction_when_no_selector_matches(make_site):
    site = make_site()
    text = (
        "This consultation on animal welfare and livestock guidelines invites comments "
        "from citizens and stakeholders before the closing date."
    )
    soup = BeautifulSoup(f"<html><body><p>{text}</p></body></html>", "lxml")

    policies = extract_policies_from_page(soup, site, PAGE_URL, today=TODAY)

    assert len(policies) == 1
    assert policies[0].id.startswith("animal-welfare-board-of-india-generic-")
    assert policies[0].description == text
    assert policies[0].deadline == "2026-01-31"


def test_generic_extraction_ignores_wrapper_blocks(make_site):
    site = make_site()
    text = (
        "This consultation on animal welfare and livestock guidelines invites comments "
        "from citizens and stakeholders before the closing date."
    )
    soup = BeautifulSoup(
        f"<html><body><section><div id='content'><p>{text}</p></div></section></body></html>", "lxml",
    )

    policies = extract_policies_from_page(soup, site, PAGE_URL, today=TODAY)

    assert len(policies) == 1
    assert policies[0].description == text


def test_generic_extraction_keeps_sibling_paragraphs(make_site):
    site = make_site()
    first = "Draft guidelines on animal welfare in dairy farms are open for public comment this month."
    second = "Notification on livestock transport rules and veterinary checks at state borders for review."
    soup = BeautifulSoup(f"<html><body><div><p>{first}</p><p>{second}</p></div></body></html>", "lxml")

    policies = generic_policy_extraction(soup, site, PAGE_URL, today=TODAY)

    assert [p.description for p in policies] == [first, second]


def test_generic_extraction_needs_two_keywords(make_site):
    site = make_site()
    soup = BeautifulSoup(
        "<html><body><p>" + "The office will remain closed on account of the holiday. " * 2 + "</p></body></html>",
        "lxml",
    )

    assert generic_policy_extraction(soup, site, PAGE_URL, today=TODAY) == []


def test_select_first_matching_skips_invalid_selectors():
    soup = _soup('<div class="item">x</div>')

    selector, matches = select_first_matching(soup, ["::bogus(", ".missing", ".item"])

    assert selector == ".item"
    assert len(matches) == 1
