from __future__ import annotations

import importlib
import logging
from typing import Any

from policy_monitor.crawlers.base import BaseSiteCrawler
from policy_monitor.crawlers.profiles import SiteProfile

logger = logging.getLogger(__name__)

# Site type -> crawler template (loaded lazily)
_TEMPLATE_MAP: dict[str, str] = {
    "html": "policy_monitor.crawlers.templates.html_crawler.HtmlConsultationCrawler",
    "pdf": "policy_monitor.crawlers.templates.pdf_crawler.PdfCircularCrawler",
}


def _import_class(dotted_path: str) -> type[BaseSiteCrawler]:
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)


class CrawlerRegistry:
    """Resolves site profiles to instantiated crawler objects."""

    @staticmethod
    def create_crawler(site: SiteProfile, **kwargs: Any) -> BaseSiteCrawler:
        dotted_path = _TEMPLATE_MAP.get(site.type)
        if dotted_path is None:
            raise ValueError(f"Unknown site type for {site.id}: {site.type}")
        cls = _import_class(dotted_path)
        if site.type != "pdf":
            kwargs.pop("describe", None)
        return cls(site, **kwargs)

    @staticmethod
    def available_types() -> list[str]:
        return sorted(_TEMPLATE_MAP)
