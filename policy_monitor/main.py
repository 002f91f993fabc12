import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from scalar_fastapi import get_scalar_api_reference

from policy_monitor.api.v1.router import v1_router
from policy_monitor.config import settings
from policy_monitor.scheduler.manager import SchedulerManager
from policy_monitor.services.drafts.scheduler import RequestScheduler
from policy_monitor.services.drafts.service import DraftService, set_draft_service

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

TAG_METADATA = [
    {
        "name": "policies",
        "description": "Stored policies: list, detail, statistics, on-demand analysis and "
        "draft responses in six tones.",
    },
    {
        "name": "pipeline",
        "description": "Manual runs of the policy check (scrape, ingest, analyze, notify).",
    },
    {
        "name": "health",
        "description": "Scheduler state, configured services and store statistics.",
    },
]


def _validate_startup() -> dict[str, str]:
    """Check configuration at startup. Returns issues dict."""
    issues: dict[str, str] = {}

    settings.POLICIES_FILE.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Startup check: data directory OK (%s)", settings.POLICIES_FILE.parent)

    if not settings.OPENROUTER_API_KEY:
        issues["llm"] = "OPENROUTER_API_KEY not set"
        logger.warning("Startup check: no LLM key, keyword fallback analysis and template drafts only")
    if not (settings.EMAIL_USER and settings.EMAIL_PASS):
        issues["email"] = "EMAIL_USER / EMAIL_PASS not set"
        logger.warning("Startup check: email not configured, alerts will be skipped")

    return issues


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage startup and shutdown of scheduler and other resources."""
    logger.info("=" * 60)
    logger.info("  Animal Welfare Policy Monitor starting")
    logger.info("=" * 60)

    startup_issues = _validate_startup()

    # One draft queue per process
    set_draft_service(DraftService(RequestScheduler(settings.DRAFT_REQUEST_INTERVAL)))

    scheduler: SchedulerManager | None = SchedulerManager()
    try:
        await scheduler.start()
    except Exception as e:
        logger.error("Scheduler failed to start: %s", e)
        scheduler = None

    if startup_issues:
        logger.warning("Startup completed with issues: %s", list(startup_issues))
    else:
        logger.info("Application startup complete, all checks passed")

    yield

    if scheduler:
        try:
            await scheduler.stop()
        except Exception as e:
            logger.error("Scheduler failed to stop cleanly: %s", e)

    logger.info("Application shutdown complete")


app = FastAPI(
    title="Animal Welfare Policy Monitor API",
    summary="Tracks Indian government consultations relevant to animal welfare",
    description=(
        "## Overview\n\n"
        "Scrapes ministry and regulator sites for open consultations and circulars, "
        "scores each document for animal-welfare relevance, drafts public-comment "
        "responses and emails alerts for highly relevant policies.\n\n"
        "## Stack\n\n"
        "FastAPI + APScheduler + httpx + BeautifulSoup4 + OpenRouter"
    ),
    version="0.1.0",
    openapi_tags=TAG_METADATA,
    lifespan=lifespan,
    docs_url="/swagger",
    redoc_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router)


@app.get("/", tags=["default"], summary="API entry", include_in_schema=False)
async def root():
    return {
        "message": "Animal Welfare Policy Monitor API",
        "version": "0.1.0",
        "docs": "/docs",
        "swagger": "/swagger",
        "openapi": "/openapi.json",
    }


@app.get("/docs", include_in_schema=False)
async def scalar_html():
    return get_scalar_api_reference(
        openapi_url=app.openapi_url,
        title=app.title,
    )
