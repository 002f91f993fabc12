"""Tests for turning PDF URLs into policy records."""
from datetime import date
from functools import partial
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from policy_monitor.config import settings
from policy_monitor.crawlers.utils.pdf_resolver import (
    GENERIC_PDF_TITLE,
    create_policy_from_url,
    resolve_pdf_policy,
    title_from_url,
)
from policy_monitor.services.analysis.llm import describe_document
from policy_monitor.services.llm_service import LLMError, call_llm

TODAY = date(2026, 1, 1)
PDF_URL = "https://awbi.gov.in/circulars/animal_welfare_month.pdf"


def test_title_from_url():
    assert title_from_url(PDF_URL) == "Animal Welfare Month"
    assert title_from_url("https://x.gov.in/a%20b-c.pdf") == GENERIC_PDF_TITLE


def test_create_policy_from_url():
    record = create_policy_from_url(PDF_URL, "https://awbi.gov.in/circulars/", today=TODAY)

    assert record.id.startswith("pdf-") and len(record.id) == 20
    assert record.ministry == "Animal Welfare Board of India"
    assert record.type == "pdf"
    assert record.deadline == "2026-01-31"
    assert record.sourcePageUrl == "https://awbi.gov.in/circulars/"
    assert record.relevantKeywords == ["animal", "welfare"]
    assert record.isAnimalWelfareRelated is True


def test_same_url_gives_same_id():
    a = create_policy_from_url(PDF_URL, None, today=TODAY)
    b = create_policy_from_url(PDF_URL + "?utm_source=mail", None, today=TODAY)
    assert a.id == b.id


@pytest.mark.asyncio
async def test_oracle_unavailable_keeps_fallback_description():
    describe = AsyncMock(side_effect=LLMError("not configured", kind="not_configured"))

    record = await resolve_pdf_policy(PDF_URL, None, describe=describe, today=TODAY)

    assert record is not None
    assert record.ministry == "Animal Welfare Board of India"
    assert record.type == "pdf"
    assert "could not be processed" in record.description
    describe.assert_awaited_once_with(PDF_URL)


@pytest.mark.asyncio
async def test_short_oracle_answer_keeps_fallback():
    record = await resolve_pdf_policy(PDF_URL, None, describe=AsyncMock(return_value="A circular."), today=TODAY)

    assert "could not be processed" in record.description


@pytest.mark.asyncio
async def test_oracle_description_is_used_and_capped():
    long_text = "Circular on observing animal welfare awareness month across all states. " * 30

    record = await resolve_pdf_policy(PDF_URL, None, describe=AsyncMock(return_value=long_text), today=TODAY)

    assert len(record.description) == 1000
    assert record.description == long_text.strip()[:1000]
    assert record.extractedText == record.description


@pytest.mark.asyncio
async def test_malformed_oracle_envelope_keeps_fallback(monkeypatch):
    monkeypatch.setattr(settings, "OPENROUTER_API_KEY", "test-key")
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"choices": [{"message": None}]}))

    with patch("policy_monitor.services.analysis.llm.call_llm", new=partial(call_llm, transport=transport)):
        record = await resolve_pdf_policy(PDF_URL, None, describe=describe_document, today=TODAY)

    assert record is not None
    assert "could not be processed" in record.description


@pytest.mark.asyncio
async def test_unexpected_describe_error_keeps_fallback():
    describe = AsyncMock(side_effect=AttributeError("'NoneType' object has no attribute 'get'"))

    record = await resolve_pdf_policy(PDF_URL, None, describe=describe, today=TODAY)

    assert record is not None
    assert record.type == "pdf"
    assert "could not be processed" in record.description
