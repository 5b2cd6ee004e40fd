"""
Abstract Base Class for Analytics Backends.

Responsibilities:
    - Define required methods for any click analytics implementation
    - Support easy substitution (in-memory, DB/event stream, external metrics)
"""

from abc import ABC, abstractmethod
from typing import List

from ..models import ClickEvent

__all__ = ["BaseAnalytics"]


class BaseAnalytics(ABC):
    """Abstract base for pluggable analytics backends."""

    @abstractmethod
    def log_click(self, slug: str, event: ClickEvent) -> None:  # pragma: no cover
        """
        Record a click event for a slug.

        Args:
            slug (str): The slug that was followed.
            event (ClickEvent): Click details, including the `valid` flag.
        """
        raise NotImplementedError

    @abstractmethod
    def get_clicks(self, slug: str, only_valid: bool = False) -> List[ClickEvent]:  # pragma: no cover
        raise NotImplementedError

    @abstractmethod
    def summary(self, only_valid: bool = False) -> dict:  # pragma: no cover
        """
        Provide analytics summary.

        Args:
            only_valid (bool): If True, include only valid clicks.

        Returns:
            dict: Aggregated analytics data keyed by slug.
        """
        raise NotImplementedError
