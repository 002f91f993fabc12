"""Policy check pipeline: scrape → ingest → analyze → drafts → notify.

Registered as APScheduler jobs (daily check, periodic analysis) and exposed
through the API for manual runs. Each stage runs sequentially with its own
error isolation; a failing site, policy or email never aborts the batch.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from policy_monitor.config import settings
from policy_monitor.crawlers.mock_policies import generate_mock_policies
from policy_monitor.crawlers.profiles import SiteProfile, load_site_profiles
from policy_monitor.crawlers.registry import CrawlerRegistry
from policy_monitor.crawlers.utils.dedup import filter_known
from policy_monitor.schemas.policy import PolicyAnalysis, PolicyRecord
from policy_monitor.services.policy_store import PolicyStore, get_policy_store

logger = logging.getLogger(__name__)

ClassifyFn = Callable[[PolicyRecord], Awaitable[PolicyAnalysis]]


# ---------------------------------------------------------------------------
# Result data classes
# ---------------------------------------------------------------------------

@dataclass
class StageResult:
    """Result of a single pipeline stage."""

    name: str
    status: str = "pending"  # pending | running | success | failed | skipped
    started_at: datetime | None = None
    finished_at: datetime | None = None
    duration_seconds: float = 0.0
    summary: dict[str, Any] = field(default_factory=dict)
    error: str | None = None


@dataclass
class PipelineResult:
    """Result of a full policy check."""

    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None
    stages: list[StageResult] = field(default_factory=list)

    @property
    def status(self) -> str:
        statuses = {s.status for s in self.stages}
        if "failed" in statuses:
            return "partial_failure"
        if statuses <= {"success", "skipped"}:
            return "success"
        return "unknown"

    @property
    def duration_seconds(self) -> float:
        if self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return 0.0

    def stage(self, name: str) -> StageResult | None:
        return next((s for s in self.stages if s.name == name), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "started_at": self.started_at.isoformat(),
            "finished_at": (
                self.finished_at.isoformat() if self.finished_at else None
            ),
            "duration_seconds": round(self.duration_seconds, 1),
            "stages": [
                {
                    "name": s.name,
                    "status": s.status,
                    "duration_seconds": round(s.duration_seconds, 1),
                    "summary": s.summary,
                    "error": s.error,
                }
                for s in self.stages
            ],
        }


# Module-level reference for last pipeline result (queryable via health API)
_last_pipeline_result: PipelineResult | None = None


def get_last_pipeline_result() -> PipelineResult | None:
    """Get the result of the most recent policy check."""
    return _last_pipeline_result


# ---------------------------------------------------------------------------
# Stage runner
# ---------------------------------------------------------------------------

async def _run_stage(name: str, func, **kwargs) -> StageResult:
    """Run a pipeline stage with timing and error isolation."""
    stage = StageResult(name=name, status="running")
    stage.started_at = datetime.now(timezone.utc)
    logger.info("Pipeline stage [%s] starting", name)
    try:
        summary = await func(**kwargs)
        stage.status = "success"
        stage.summary = summary or {}
        logger.info("Pipeline stage [%s] completed: %s", name, stage.summary)
    except Exception as e:
        stage.status = "failed"
        stage.error = str(e)
        logger.exception("Pipeline stage [%s] failed: %s", name, e)
    finally:
        stage.finished_at = datetime.now(timezone.utc)
        stage.duration_seconds = (
            stage.finished_at - stage.started_at
        ).total_seconds()
    return stage


def _skipped_stage(name: str, reason: str) -> StageResult:
    """Create a skipped stage result."""
    now = datetime.now(timezone.utc)
    return StageResult(
        name=name,
        status="skipped",
        started_at=now,
        finished_at=now,
        summary={"skipped": True, "reason": reason},
    )


# ---------------------------------------------------------------------------
# Scraping and ingestion
# ---------------------------------------------------------------------------

async def scrape_government_sites(
    profiles: list[SiteProfile] | None = None,
    **crawler_kwargs: Any,
) -> list[PolicyRecord]:
    """Crawl every site in order; a site that yields nothing contributes mock records."""
    if profiles is None:
        profiles = load_site_profiles()

    all_policies: list[PolicyRecord] = []
    for site in profiles:
        logger.info("Scraping %s...", site.name)
        try:
            crawler = CrawlerRegistry.create_crawler(site, **crawler_kwargs)
            result = await crawler.run()
            items = result.items
            if result.error_message:
                logger.warning("Site %s failed: %s", site.name, result.error_message)
        except Exception:
            logger.exception("Error scraping %s", site.name)
            items = []

        if items:
            logger.info("Found %d policies from %s", len(items), site.name)
            all_policies.extend(items)
        else:
            mocks = generate_mock_policies(site.name)
            logger.info("No policies found from %s, added %d mock policies", site.name, len(mocks))
            all_policies.extend(mocks)

    logger.info("Total policies collected: %d", len(all_policies))
    return all_policies


def ingest_policies(store: PolicyStore, records: list[PolicyRecord]) -> int:
    """Store records whose (title, ministry) is not yet known; returns the number added."""
    fresh = filter_known(records, store.load())
    for record in fresh:
        store.add_or_update(record)
    logger.info("Added %d new policies (%d already known)", len(fresh), len(records) - len(fresh))
    return len(fresh)


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

async def analyze_pending_policies(
    store: PolicyStore | None = None,
    *,
    classify: ClassifyFn | None = None,
    draft_service=None,
    notifier=None,
    limit: int | None = None,
    delay: float | None = None,
) -> dict[str, int]:
    """Analyze up to *limit* unanalyzed policies.

    Relevant policies (animal welfare and score above DRAFT_RELEVANCE_THRESHOLD)
    get drafts in the notification tones; those above EMAIL_RELEVANCE_THRESHOLD
    also trigger an email alert.
    """
    from policy_monitor.services.analysis.llm import classify_policy
    from policy_monitor.services.drafts.service import get_draft_service
    from policy_monitor.services.notification import (
        EmailNotifier,
        NotificationError,
        build_notification_bundle,
    )

    store = store or get_policy_store()
    classify = classify or classify_policy
    draft_service = draft_service or get_draft_service()
    notifier = notifier or EmailNotifier()
    limit = limit if limit is not None else settings.ANALYSIS_BATCH_LIMIT
    delay = delay if delay is not None else settings.ANALYSIS_REQUEST_DELAY

    pending = [p for p in store.load() if not p.is_analyzed]
    logger.info("Found %d policies pending analysis", len(pending))

    analyzed = relevant = emailed = 0
    for i, policy in enumerate(pending[:limit]):
        if i > 0 and delay > 0:
            await asyncio.sleep(delay)
        try:
            logger.info("Analyzing: %s", policy.title[:50])
            analysis = await classify(policy)
            store.update_analysis(policy.id, analysis)
            analyzed += 1

            if not (analysis.isAnimalWelfare
                    and analysis.relevanceScore > settings.DRAFT_RELEVANCE_THRESHOLD):
                logger.info("Policy not relevant (%d%% relevance)", analysis.relevanceScore)
                continue

            relevant += 1
            logger.info("Relevant policy found (%d%% relevance)", analysis.relevanceScore)
            drafts = await draft_service.generate_all_drafts(policy)
            for tone, text in drafts.items():
                store.update_draft(policy.id, tone, text)

            if analysis.relevanceScore > settings.EMAIL_RELEVANCE_THRESHOLD:
                bundle = build_notification_bundle(policy, analysis, drafts)
                try:
                    await notifier.send_async(bundle)
                    emailed += 1
                except NotificationError as e:
                    logger.warning("Email failed for %s: %s", policy.id, e)
        except Exception:
            logger.exception("Error analyzing policy %r", policy.title[:50])

    return {"analyzed": analyzed, "relevant": relevant, "emailed": emailed}


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

async def _stage_scrape(store: PolicyStore, profiles: list[SiteProfile] | None) -> dict[str, Any]:
    records = await scrape_government_sites(profiles)
    added = ingest_policies(store, records)
    return {"scraped": len(records), "added": added}


async def _stage_analyze(store: PolicyStore, **kwargs: Any) -> dict[str, Any]:
    return await analyze_pending_policies(store, **kwargs)


async def execute_policy_check(
    force: bool = False,
    *,
    store: PolicyStore | None = None,
    profiles: list[SiteProfile] | None = None,
    **analyze_kwargs: Any,
) -> PipelineResult:
    """Scrape (when forced or the store is nearly empty), then analyze pending policies."""
    global _last_pipeline_result

    store = store or get_policy_store()
    pipeline = PipelineResult()

    logger.info("=" * 70)
    logger.info("  POLICY CHECK STARTING (force=%s)", force)
    logger.info("=" * 70)

    stored = len(store.load())
    if force or stored < settings.SCRAPE_MIN_STORED:
        pipeline.stages.append(
            await _run_stage("scrape", _stage_scrape, store=store, profiles=profiles),
        )
    else:
        pipeline.stages.append(
            _skipped_stage("scrape", f"{stored} policies already stored"),
        )

    pipeline.stages.append(
        await _run_stage("analyze", _stage_analyze, store=store, **analyze_kwargs),
    )

    pipeline.finished_at = datetime.now(timezone.utc)
    _last_pipeline_result = pipeline

    logger.info("=" * 70)
    logger.info(
        "  POLICY CHECK COMPLETE: %s (%.0fs)",
        pipeline.status, pipeline.duration_seconds,
    )
    for stage in pipeline.stages:
        if stage.status == "skipped":
            icon = "SKIP"
        elif stage.status == "success":
            icon = "OK"
        else:
            icon = "FAIL"
        logger.info(
            "    [%4s] %s (%.0fs)%s",
            icon, stage.name, stage.duration_seconds,
            f" ERROR: {stage.error}" if stage.error else "",
        )
    logger.info("=" * 70)

    return pipeline
