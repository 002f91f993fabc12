"""Draft response generation: LLM through the request scheduler, templates on failure."""
from __future__ import annotations

import logging

from policy_monitor.config import settings
from policy_monitor.schemas.policy import PolicyRecord
from policy_monitor.services.drafts.scheduler import RequestScheduler
from policy_monitor.services.drafts.tones import (
    NOTIFICATION_TONES,
    build_draft_prompt,
    normalize_tone,
    template_draft,
)
from policy_monitor.services.llm_service import LLMError, call_llm

logger = logging.getLogger(__name__)


class DraftService:
    def __init__(self, scheduler: RequestScheduler):
        self.scheduler = scheduler

    async def _generate_direct(self, policy: PolicyRecord, tone: str) -> str:
        try:
            text = await call_llm(build_draft_prompt(policy, tone), temperature=0.7, max_tokens=1500)
        except LLMError as e:
            if e.kind == "not_configured":
                logger.warning("LLM not configured, using %s template response", tone)
            else:
                logger.warning("Error generating %s draft for %s (%s): %s", tone, policy.id, e.kind, e)
            return template_draft(policy, tone)
        return text.strip()

    async def generate_draft(self, policy: PolicyRecord, tone: str | None) -> tuple[str, str]:
        """Return ``(normalized_tone, text)``; never raises on LLM failure."""
        normalized = normalize_tone(tone)
        logger.info("Requested draft tone: %r | Normalized: %s", tone, normalized)
        text = await self.scheduler.submit(self._generate_direct, policy, normalized)
        return normalized, text

    async def generate_all_drafts(
        self,
        policy: PolicyRecord,
        tones: tuple[str, ...] = NOTIFICATION_TONES,
    ) -> dict[str, str]:
        drafts: dict[str, str] = {}
        for tone in tones:
            normalized, text = await self.generate_draft(policy, tone)
            drafts[normalized] = text
        return drafts


_service: DraftService | None = None


def get_draft_service() -> DraftService:
    """Process-wide DraftService, built on first use with the configured interval."""
    global _service
    if _service is None:
        _service = DraftService(RequestScheduler(settings.DRAFT_REQUEST_INTERVAL))
    return _service


def set_draft_service(service: DraftService | None) -> None:
    global _service
    _service = service
