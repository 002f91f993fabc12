import sys
from datetime import date
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from policy_monitor.crawlers.profiles import SelectorProfile, SiteProfile  # noqa: E402
from policy_monitor.schemas.policy import PolicyRecord  # noqa: E402
from policy_monitor.services.policy_store import PolicyStore  # noqa: E402

TODAY = date(2026, 1, 1)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def store(tmp_path) -> PolicyStore:
    return PolicyStore(tmp_path / "policies.json")


@pytest.fixture
def make_record():
    """Factory for valid PolicyRecord instances with overridable fields."""

    def _make(**overrides) -> PolicyRecord:
        data = {
            "id": "moef-1",
            "title": "Draft Rules for Prevention of Cruelty to Animals",
            "description": "Proposed amendments to strengthen animal cruelty prevention laws.",
            "ministry": "Ministry of Environment",
            "deadline": "2026-03-15",
            "sourceUrl": "https://moef.gov.in/consultation/1",
            "discoveredAt": "2026-01-01T09:00:00+00:00",
        }
        data.update(overrides)
        return PolicyRecord(**data)

    return _make


@pytest.fixture
def make_site():
    def _make(**overrides) -> SiteProfile:
        selectors = overrides.pop("selectors", None)
        data = {
            "id": "awbi",
            "name": "Animal Welfare Board of India",
            "url": "https://awbi.gov.in",
            "type": "html",
        }
        data.update(overrides)
        site = SiteProfile(**data)
        if selectors is not None:
            site.selectors = SelectorProfile.from_dict(selectors)
        return site

    return _make
