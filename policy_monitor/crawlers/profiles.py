"""Site selector profiles: site -> field -> ordered selector list.

Profiles are declared in ``sources/*.yaml``. Each selector list is a priority
order; extraction takes the first acceptable hit and never scores across
selectors.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from policy_monitor.config import settings

logger = logging.getLogger(__name__)

DEFAULT_CONTAINER = [".consultation-item", ".policy-item", ".item", ".post", "article", "tr", ".row"]
DEFAULT_TITLE = [".title", "h2", "h3", "h4", "a"]
DEFAULT_DESCRIPTION = [".description", ".summary", ".excerpt", "p"]
DEFAULT_DEADLINE = [".deadline", ".last-date", ".date", "time"]
DEFAULT_PDF_LINK = ['a[href$=".pdf"]', 'a[href*=".pdf"]', ".pdf-link", ".download-link"]
DEFAULT_DATE = [".date", ".published", "td"]


@dataclass
class SelectorProfile:
    container: list[str] = field(default_factory=lambda: list(DEFAULT_CONTAINER))
    title: list[str] = field(default_factory=lambda: list(DEFAULT_TITLE))
    description: list[str] = field(default_factory=lambda: list(DEFAULT_DESCRIPTION))
    deadline: list[str] = field(default_factory=lambda: list(DEFAULT_DEADLINE))
    pdf_link: list[str] = field(default_factory=lambda: list(DEFAULT_PDF_LINK))
    date: list[str] = field(default_factory=lambda: list(DEFAULT_DATE))

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SelectorProfile:
        data = data or {}
        profile = cls()
        for name in ("container", "title", "description", "deadline", "pdf_link", "date"):
            value = data.get(name)
            if value is None:
                continue
            if isinstance(value, str):
                value = [value]
            setattr(profile, name, [str(v) for v in value])
        return profile


@dataclass
class SiteProfile:
    id: str
    name: str
    url: str
    type: str = "html"  # html | pdf
    consultation_path: str | None = None
    is_enabled: bool = True
    selectors: SelectorProfile = field(default_factory=SelectorProfile)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SiteProfile:
        return cls(
            id=data["id"],
            name=data["name"],
            url=data["url"].rstrip("/"),
            type=data.get("type", "html"),
            consultation_path=data.get("consultation_path"),
            is_enabled=data.get("is_enabled", True),
            selectors=SelectorProfile.from_dict(data.get("selectors")),
        )


def load_site_profiles(sources_dir: Path | None = None, *, enabled_only: bool = True) -> list[SiteProfile]:
    """Load all site profiles from YAML files in *sources_dir*."""
    sources_dir = sources_dir or settings.SOURCES_DIR
    profiles: list[SiteProfile] = []
    if not sources_dir.exists():
        logger.warning("Sources directory not found: %s", sources_dir)
        return profiles

    for yaml_file in sorted(sources_dir.glob("*.yaml")):
        with open(yaml_file, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if data is None:
            continue
        for raw in data.get("sites", []):
            try:
                profile = SiteProfile.from_dict(raw)
            except KeyError as e:
                logger.warning("Skipping site in %s without %s", yaml_file.name, e)
                continue
            if enabled_only and not profile.is_enabled:
                continue
            profiles.append(profile)

    logger.info("Loaded %d site profiles from %s", len(profiles), sources_dir)
    return profiles
