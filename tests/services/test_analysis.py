"""Tests for relevance scoring: keyword fallback, LLM parsing and classification."""
from functools import partial
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from policy_monitor.config import settings
from policy_monitor.services.analysis.llm import classify_policy, describe_document, parse_llm_response
from policy_monitor.services.analysis.rules import fallback_analysis, urgency_for_score
from policy_monitor.services.llm_service import LLMError, call_llm_json


def test_fallback_high_and_medium_tiers(make_record):
    record = make_record(
        title="Draft animal welfare rules",
        description="Standards for livestock markets and veterinary inspection.",
    )

    analysis = fallback_analysis(record)

    assert analysis.relevanceScore == 25 + 15 + 15
    assert analysis.isAnimalWelfare is True
    assert analysis.urgencyLevel == "medium"
    assert analysis.keyPoints == [
        "Keyword-based analysis performed",
        "Relevance score: 55%",
        "API not configured",
    ]
    assert analysis.analysis.startswith("Fallback analysis: API not configured.")


def test_fallback_low_tier_is_capped(make_record):
    record = make_record(
        title="Biodiversity and conservation plan",
        description="Wildlife corridors, environment and agriculture zoning near animal habitats.",
    )

    analysis = fallback_analysis(record, reason="LLM error (http): boom")

    assert analysis.relevanceScore == 30
    assert analysis.isAnimalWelfare is False
    assert analysis.keyPoints[2] == "LLM error (http): boom"


def test_fallback_without_keywords(make_record):
    analysis = fallback_analysis(make_record(title="Revision of passport fees", description="New fee table for passports."))

    assert analysis.relevanceScore == 0
    assert analysis.isAnimalWelfare is False
    assert analysis.urgencyLevel == "low"
    assert analysis.animalWelfareAspects == ["No specific animal welfare aspects detected"]


def test_fallback_score_never_exceeds_100(make_record):
    text = "animal welfare animal rights animal cruelty animal protection wildlife protection "
    text += "livestock veterinary zoo circus pet companion animal farm animal"
    analysis = fallback_analysis(make_record(title="Everything", description=text))

    assert analysis.relevanceScore == 100
    assert analysis.urgencyLevel == "high"


@pytest.mark.parametrize("score,level", [(0, "low"), (40, "low"), (41, "medium"), (70, "medium"), (71, "high")])
def test_urgency_for_score(score, level):
    assert urgency_for_score(score) == level


def test_parse_llm_response_normalizes():
    analysis = parse_llm_response({
        "isAnimalWelfare": True,
        "relevanceScore": "150",
        "urgencyLevel": "critical",
        "keyPoints": ["a", "b", "c", "d", "e", "f", "g"],
        "animalWelfareAspects": "not a list",
    })

    assert analysis.relevanceScore == 100
    assert analysis.urgencyLevel == "medium"
    assert analysis.keyPoints == ["a", "b", "c", "d", "e"]
    assert analysis.animalWelfareAspects == []
    assert analysis.publicSubmissionsOpen is True


@pytest.mark.parametrize("value,expected", [(-5, 0), ("abc", 0), (None, 0), (72.9, 72)])
def test_parse_llm_response_clamps_score(value, expected):
    assert parse_llm_response({"relevanceScore": value}).relevanceScore == expected


def test_parse_llm_response_defaults():
    analysis = parse_llm_response({"publicSubmissionsOpen": False})

    assert analysis.publicSubmissionsOpen is False
    assert analysis.keyPoints == ["Analysis completed"]
    assert analysis.isAnimalWelfare is False


@pytest.mark.asyncio
async def test_classify_without_key_uses_fallback(monkeypatch, make_record):
    monkeypatch.setattr(settings, "OPENROUTER_API_KEY", "")

    analysis = await classify_policy(make_record())

    assert analysis.keyPoints[0] == "Keyword-based analysis performed"
    assert "API not configured" in analysis.analysis


@pytest.mark.asyncio
async def test_classify_uses_llm_result(make_record):
    llm = AsyncMock(return_value={"isAnimalWelfare": True, "relevanceScore": 88, "urgencyLevel": "high",
                                  "keyPoints": ["Bans circus animals"], "analysis": "Highly relevant."})
    with patch("policy_monitor.services.analysis.llm.call_llm_json", new=llm):
        analysis = await classify_policy(make_record())

    assert analysis.relevanceScore == 88
    assert analysis.keyPoints == ["Bans circus animals"]
    assert "Title: Draft Rules for Prevention of Cruelty to Animals" in llm.await_args.kwargs["prompt"]


@pytest.mark.asyncio
@pytest.mark.parametrize("side_effect", [
    LLMError("HTTP 500", kind="http"),
    LLMError("bad json", kind="malformed"),
])
async def test_classify_llm_errors_fall_back(make_record, side_effect):
    with patch("policy_monitor.services.analysis.llm.call_llm_json", new=AsyncMock(side_effect=side_effect)):
        analysis = await classify_policy(make_record())

    assert f"LLM error ({side_effect.kind})" in analysis.analysis


@pytest.mark.asyncio
async def test_classify_non_object_response_falls_back(make_record):
    with patch("policy_monitor.services.analysis.llm.call_llm_json", new=AsyncMock(return_value=[1, 2])):
        analysis = await classify_policy(make_record())

    assert "LLM error (malformed)" in analysis.analysis


@pytest.mark.asyncio
async def test_describe_document_rejects_short_answers():
    with patch("policy_monitor.services.analysis.llm.call_llm", new=AsyncMock(return_value="  PDF.  ")):
        with pytest.raises(LLMError) as exc_info:
            await describe_document("https://awbi.gov.in/a.pdf")

    assert exc_info.value.kind == "malformed"


@pytest.mark.asyncio
async def test_classify_malformed_envelope_falls_back(monkeypatch, make_record):
    monkeypatch.setattr(settings, "OPENROUTER_API_KEY", "test-key")
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"choices": [{"message": None}]}))

    with patch("policy_monitor.services.analysis.llm.call_llm_json",
               new=partial(call_llm_json, transport=transport)):
        analysis = await classify_policy(make_record())

    assert "LLM error (malformed)" in analysis.analysis
    assert analysis.keyPoints[0] == "Keyword-based analysis performed"


@pytest.mark.asyncio
async def test_classify_unparseable_fields_fall_back(make_record):
    raw = {"isAnimalWelfare": True, "relevanceScore": 80, "urgencyLevel": ["high"]}
    with patch("policy_monitor.services.analysis.llm.call_llm_json", new=AsyncMock(return_value=raw)):
        analysis = await classify_policy(make_record())

    assert "LLM error (malformed)" in analysis.analysis
