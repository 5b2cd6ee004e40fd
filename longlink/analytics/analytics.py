"""
In-memory click analytics for longlink.

Responsibilities:
    - Track click events per slug (user agent, referer, ip, country)
    - Track validity of clicks (slug existed or not)
    - Provide per-slug summaries

Attributes:
    click_logs (Dict[str, List[ClickEvent]]): Maps slug -> click events, oldest first
"""

from typing import Dict, List

from ..models import ClickEvent
from .base import BaseAnalytics


class Analytics(BaseAnalytics):
    def __init__(self):
        self.click_logs: Dict[str, List[ClickEvent]] = {}

    def log_click(self, slug: str, event: ClickEvent) -> None:
        self.click_logs.setdefault(slug, []).append(event)

    def get_clicks(self, slug: str, only_valid: bool = False) -> List[ClickEvent]:
        """
        Get all click events for a slug.

        Args:
            slug (str): Slug to query.
            only_valid (bool): If True, return only clicks where valid=True.

        Returns:
            List[ClickEvent]: Events, empty if none exist.
        """
        logs = self.click_logs.get(slug, [])
        if only_valid:
            logs = [event for event in logs if event.valid]
        return list(logs)

    def summary(self, only_valid: bool = False) -> Dict[str, Dict]:
        """
        Summary of click events for all slugs.

        Returns:
            Dict[str, Dict]: slug -> {
                "total_clicks": int,
                "valid_clicks": int,
                "last_click": datetime or None,
                "referers": {referer: count},
            }

        Slugs with no valid clicks are skipped when only_valid=True.
        """
        summary_data: Dict[str, Dict] = {}
        for slug, logs in self.click_logs.items():
            filtered = [event for event in logs if event.valid] if only_valid else logs
            if only_valid and not filtered:
                continue

            referers: Dict[str, int] = {}
            for event in filtered:
                key = event.referer or "direct"
                referers[key] = referers.get(key, 0) + 1

            summary_data[slug] = {
                "total_clicks": len(filtered),
                "valid_clicks": sum(1 for event in logs if event.valid),
                "last_click": filtered[-1].timestamp if filtered else None,
                "referers": referers,
            }
        return summary_data
