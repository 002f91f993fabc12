from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from policy_monitor.scheduler.pipeline import analyze_pending_policies, execute_policy_check
from policy_monitor.services.policy_store import PolicyStore, get_policy_store

router = APIRouter()


@router.post(
    "/scrape",
    summary="Run a policy check now",
    description="Force a scrape of every enabled site, ingest new policies, then analyze pending ones.",
)
async def scrape(store: PolicyStore = Depends(get_policy_store)):
    result = await execute_policy_check(force=True, store=store)
    scrape_stage = result.stage("scrape")
    summary = scrape_stage.summary if scrape_stage else {}
    return {
        "message": "Scraping completed" if result.status == "success" else "Scraping completed with errors",
        "policiesFound": summary.get("added", 0),
        "totalPolicies": len(store.load()),
        "pipeline": result.to_dict(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.post(
    "/analyze-pending",
    summary="Analyze pending policies",
    description="Analyze up to ANALYSIS_BATCH_LIMIT policies that have no analysis yet.",
)
async def analyze_pending(store: PolicyStore = Depends(get_policy_store)):
    result = await analyze_pending_policies(store)
    return {
        "message": "Analysis completed",
        **result,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
