from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from policy_monitor.crawlers.utils.date_parser import default_deadline
from policy_monitor.crawlers.utils.heuristics import UNKNOWN_MINISTRY
from policy_monitor.schemas.policy import (
    AnalyzeRequest,
    DraftRequest,
    DraftResponse,
    PolicyAnalysis,
    PolicyInput,
    PolicyRecord,
    PolicyStats,
)
from policy_monitor.services.analysis.llm import classify_policy
from policy_monitor.services.drafts.service import get_draft_service
from policy_monitor.services.notification import EmailNotifier, NotificationError, get_email_notifier
from policy_monitor.services.policy_store import PolicyStore, get_policy_store

logger = logging.getLogger(__name__)

router = APIRouter()

_EDITABLE_FIELDS = ("title", "description", "ministry", "deadline")


def _as_record(body: PolicyInput, store: PolicyStore) -> PolicyRecord:
    """Stored record overlaid with the payload, or a transient record for ad-hoc text."""
    overrides = {k: v for k, v in body.model_dump(include=set(_EDITABLE_FIELDS)).items() if v}
    stored = store.get(body.id) if body.id else None
    if stored is not None:
        return stored.model_copy(update=overrides)
    if not (body.title or body.description):
        raise HTTPException(400, "Policy title or description required")
    return PolicyRecord(
        id=body.id or "adhoc",
        title=body.title or body.description[:80],
        description=body.description or body.title,
        ministry=body.ministry or UNKNOWN_MINISTRY,
        deadline=body.deadline or default_deadline(),
        sourceUrl=str(getattr(body, "sourceUrl", "") or ""),
        discoveredAt=datetime.now(timezone.utc).isoformat(),
    )


@router.get(
    "",
    response_model=list[PolicyRecord],
    response_model_exclude_none=True,
    summary="List policies",
    description="All stored policies in insertion order.",
)
async def list_policies(store: PolicyStore = Depends(get_policy_store)):
    return store.load()


@router.get(
    "/stats",
    response_model=PolicyStats,
    summary="Policy statistics",
    description="Totals for stored, analyzed, pending, relevant and urgent (deadline within 7 days) policies.",
)
async def policy_stats(store: PolicyStore = Depends(get_policy_store)):
    return store.stats()


@router.post(
    "/analyze",
    response_model=PolicyAnalysis,
    summary="Analyze a policy",
    description="Score a policy for animal-welfare relevance. Stored policies get the analysis attached.",
)
async def analyze_policy(body: AnalyzeRequest, store: PolicyStore = Depends(get_policy_store)):
    record = _as_record(body.policy, store)
    analysis = await classify_policy(record)
    if body.policy.id and store.get(body.policy.id) is not None:
        store.update_analysis(body.policy.id, analysis)
    return analysis


@router.post(
    "/generate-draft",
    response_model=DraftResponse,
    summary="Generate a draft response",
    description=(
        "Generate a consultation response in the requested tone (legal, emotional, dataBacked, "
        "financial, business, livelihood). Requests are queued and spaced out."
    ),
)
async def generate_draft(body: DraftRequest, store: PolicyStore = Depends(get_policy_store)):
    record = _as_record(body.policy, store)
    tone, text = await get_draft_service().generate_draft(record, body.tone)

    if body.policy.id:
        stored = store.get(body.policy.id)
        if stored is not None and stored.is_analyzed:
            store.update_draft(stored.id, tone, text)
    return DraftResponse(tone=tone, draft=text)


@router.post(
    "/test-email",
    summary="Send a test email",
    description="Send a short message through the configured SMTP account to confirm alerts can be delivered.",
)
async def send_test_email(notifier: EmailNotifier = Depends(get_email_notifier)):
    try:
        await notifier.send_test_async()
    except NotificationError as e:
        logger.error("Test email failed: %s", e)
        raise HTTPException(500, "Failed to send test email") from e
    return {"message": "Test email sent successfully"}


@router.delete(
    "/clear",
    summary="Clear all policies",
    description="Irreversibly remove every stored policy.",
)
async def clear_policies(store: PolicyStore = Depends(get_policy_store)):
    store.clear()
    return {"message": "All policies cleared successfully"}


@router.get(
    "/{policy_id}",
    response_model=PolicyRecord,
    response_model_exclude_none=True,
    summary="Policy detail",
)
async def get_policy(policy_id: str, store: PolicyStore = Depends(get_policy_store)):
    policy = store.get(policy_id)
    if policy is None:
        raise HTTPException(404, "Policy not found")
    return policy
