from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from policy_monitor.config import settings
from policy_monitor.services.policy_store import PolicyStore, get_policy_store

router = APIRouter()


@router.get(
    "",
    summary="System health check",
    description="Scheduler state, configured services, store statistics and the last policy check.",
)
async def health_check(store: PolicyStore = Depends(get_policy_store)):
    from policy_monitor.scheduler.manager import get_scheduler_manager
    from policy_monitor.scheduler.pipeline import get_last_pipeline_result

    scheduler = get_scheduler_manager()
    last = get_last_pipeline_result()

    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "scheduler": "running" if scheduler else "not_started",
        "jobs": scheduler.job_summary() if scheduler else [],
        "services": {
            "llm": "configured" if settings.OPENROUTER_API_KEY else "not_configured",
            "email": "configured" if settings.EMAIL_USER else "not_configured",
        },
        "stats": store.stats().model_dump(),
        "last_policy_check": last.to_dict() if last else None,
    }
