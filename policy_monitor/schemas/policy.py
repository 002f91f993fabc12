"""Pydantic schemas for policy records and their analyses.

Field names follow the stored JSON (camelCase). Older entries in
``policies.json`` may lack optional fields, and unknown fields are kept as-is.
"""
from __future__ import annotations

import math
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

PolicyStatus = Literal["active", "urgent", "completed"]
PolicyType = Literal["html", "pdf", "mock"]
UrgencyLevel = Literal["low", "medium", "high"]


def _coerce_score(value: Any) -> Any:
    # Older entries stored fractional or out-of-range scores
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return value
    if isinstance(value, float):
        if math.isnan(value):
            return 0
        value = round(min(100.0, max(0.0, value)))
    if isinstance(value, int):
        return min(100, max(0, value))
    return value


RelevanceScore = Annotated[int, BeforeValidator(_coerce_score)]


class PolicyAnalysis(BaseModel):
    """Relevance analysis attached to a policy after scoring."""

    model_config = ConfigDict(extra="allow")

    isAnimalWelfare: bool = Field(default=False, description="Whether the policy concerns animal welfare")
    relevanceScore: RelevanceScore = Field(default=0, ge=0, le=100, description="Relevance score (0-100)")
    publicSubmissionsOpen: bool = Field(default=True, description="Whether public submissions are still open")
    keyPoints: list[str] = Field(default_factory=list)
    animalWelfareAspects: list[str] = Field(default_factory=list)
    urgencyLevel: UrgencyLevel = "medium"
    analysis: str = Field(default="", description="Narrative; fallback reason included when the oracle failed")
    drafts: dict[str, str] = Field(default_factory=dict, description="Draft texts keyed by tone")
    draftsGenerated: int = 0


class PolicyRecord(BaseModel):
    """A normalized government document believed relevant to animal welfare policy."""

    model_config = ConfigDict(extra="allow")

    id: str
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    ministry: str
    deadline: str = Field(description="YYYY-MM-DD", examples=["2026-03-15"])
    sourceUrl: str
    sourcePageUrl: str | None = None
    discoveredAt: str
    status: PolicyStatus = "active"
    type: PolicyType = "html"
    extractedText: str | None = None
    pages: int | None = None
    isAnimalWelfareRelated: bool | None = None
    relevantKeywords: list[str] = Field(default_factory=list)
    aiAnalysis: PolicyAnalysis | None = None
    lastAnalyzed: str | None = None

    @property
    def is_analyzed(self) -> bool:
        return self.aiAnalysis is not None

    def to_json(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


# ---------------------------------------------------------------------------
# API request / response bodies
# ---------------------------------------------------------------------------


class PolicyInput(BaseModel):
    """Loose policy payload accepted by the analyze / draft endpoints."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    title: str = ""
    description: str = ""
    ministry: str | None = None
    deadline: str | None = None


class AnalyzeRequest(BaseModel):
    policy: PolicyInput


class DraftRequest(BaseModel):
    policy: PolicyInput
    tone: str = Field(min_length=1, examples=["legal", "emotional", "dataBacked"])


class DraftResponse(BaseModel):
    tone: str
    draft: str


class PolicyStats(BaseModel):
    total: int = Field(examples=[42])
    analyzed: int = Field(examples=[30])
    pending: int = Field(examples=[12])
    relevant: int = Field(examples=[8])
    urgent: int = Field(examples=[3])
