"""LLM relevance classification and PDF description: prompts and response parsing."""
from __future__ import annotations

import logging
from typing import Any

from policy_monitor.schemas.policy import PolicyAnalysis, PolicyRecord
from policy_monitor.services.analysis.rules import fallback_analysis
from policy_monitor.services.llm_service import LLMError, call_llm, call_llm_json

logger = logging.getLogger(__name__)

MAX_LIST_ITEMS = 5
VALID_URGENCY = {"low", "medium", "high"}
MIN_DESCRIPTION_LENGTH = 20

SYSTEM_PROMPT = """\
You analyze Indian government policy consultations for animal welfare relevance.

Respond only with valid JSON in exactly this structure:
{
  "isAnimalWelfare": boolean,
  "relevanceScore": number (0-100),
  "publicSubmissionsOpen": boolean,
  "keyPoints": ["point1", "point2", "point3"],
  "animalWelfareAspects": ["aspect1", "aspect2"],
  "urgencyLevel": "low|medium|high",
  "analysis": "Brief analysis of why this is or isn't relevant to animal welfare"
}

Consider these animal welfare topics:
- Farm animal welfare and livestock conditions
- Wildlife protection and conservation
- Animal testing and research ethics
- Pet and companion animal welfare
- Animal transportation and slaughter
- Veterinary care and animal health
- Animal rights and legal protections
- Zoos, circuses, and entertainment animals
- Animal cruelty prevention
- Biodiversity and habitat protection

Rate relevance from 0-100 where:
- 0-30: Not related to animal welfare
- 31-60: Indirectly related or minor animal welfare implications
- 61-80: Directly related to animal welfare
- 81-100: Primarily focused on animal welfare"""

DESCRIBE_PROMPT = """\
Analyze this PDF URL and provide a brief description of what the document is about:

PDF URL: {url}

Please provide a concise description (100-200 words) that explains:
1. What type of document this is (circular, notification, policy, etc.)
2. The main topic or subject matter
3. Any key points or important information
4. Whether it's related to animal welfare, government policy, or other relevant topics

If you cannot access the PDF content directly, provide a description based on the URL and any available context.

Respond with just the description, no additional formatting."""


def build_user_prompt(record: PolicyRecord) -> str:
    return (
        f"Title: {record.title}\n"
        f"Description: {record.description}\n"
        f"Ministry: {record.ministry or 'Unknown'}"
    )


def _clamp_score(value: Any) -> int:
    try:
        score = int(float(value))
    except (TypeError, ValueError):
        return 0
    return max(0, min(100, score))


def _str_list(value: Any, default: list[str]) -> list[str]:
    if not isinstance(value, list):
        return default
    return [str(v) for v in value if v][:MAX_LIST_ITEMS]


def parse_llm_response(raw: dict[str, Any]) -> PolicyAnalysis:
    """Validate and normalize LLM output into a PolicyAnalysis."""
    urgency = raw.get("urgencyLevel", "medium")
    if urgency not in VALID_URGENCY:
        urgency = "medium"

    return PolicyAnalysis(
        isAnimalWelfare=bool(raw.get("isAnimalWelfare", False)),
        relevanceScore=_clamp_score(raw.get("relevanceScore")),
        publicSubmissionsOpen=raw.get("publicSubmissionsOpen") is not False,
        keyPoints=_str_list(raw.get("keyPoints"), ["Analysis completed"]),
        animalWelfareAspects=_str_list(raw.get("animalWelfareAspects"), []),
        urgencyLevel=urgency,
        analysis=str(raw.get("analysis") or "Policy analyzed for animal welfare relevance"),
    )


async def classify_policy(record: PolicyRecord) -> PolicyAnalysis:
    """Score *record* via the LLM; never raises, falls back to keyword rules."""
    try:
        raw = await call_llm_json(
            prompt=build_user_prompt(record),
            system_prompt=SYSTEM_PROMPT,
            temperature=0.1,
            max_tokens=1500,
        )
        if not isinstance(raw, dict):
            raise LLMError(f"Expected dict from LLM, got {type(raw).__name__}", kind="malformed")
    except LLMError as e:
        if e.kind == "not_configured":
            logger.warning("LLM not configured, using fallback analysis for %s", record.id)
            return fallback_analysis(record, "API not configured")
        logger.warning("LLM analysis failed for %s (%s): %s", record.id, e.kind, e)
        return fallback_analysis(record, f"LLM error ({e.kind}): {e}")

    try:
        analysis = parse_llm_response(raw)
    except Exception as e:
        logger.error("Unusable LLM analysis for %s: %s", record.id, e)
        return fallback_analysis(record, f"LLM error (malformed): {e}")

    logger.info(
        "LLM analysis for %s: %d%% relevance, animal welfare: %s",
        record.id, analysis.relevanceScore, analysis.isAnimalWelfare,
    )
    return analysis


async def describe_document(url: str) -> str:
    """Ask the LLM for a short description of the document at *url*.

    Raises LLMError on failure or when the answer is empty or too short.
    """
    text = (await call_llm(DESCRIBE_PROMPT.format(url=url), temperature=0.3, max_tokens=600)).strip()
    if len(text) <= MIN_DESCRIPTION_LENGTH:
        raise LLMError(f"Description too short ({len(text)} chars) for {url}", kind="malformed")
    logger.info("Generated description for %s: %d characters", url, len(text))
    return text
