"""
Storage module for longlink (in-memory implementation).

Responsibilities:
    - Save slug records and their destinations
    - Track click counts and click history (through Analytics)
    - Answer existence checks, optionally scoped to an entity type
    - Serve entity rows for the Resolver from seedable in-memory tables

Design:
    - Reference implementation of the BaseStorage contract, kept simple so
      unit and integration tests stay fast and deterministic.
    - A slug belongs to one entity. Re-saving the same entity under its slug
      is an idempotent upsert; saving a different entity under a taken slug
      is rejected.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from ..analytics.analytics import Analytics
from ..analytics.base import BaseAnalytics
from ..models import AnalyticsRecord, ClickEvent, EntityRecord
from .base import BaseStorage

DEFAULT_ENTITY_TYPE = "default"


class Storage(BaseStorage):
    def __init__(self, analytics: Optional[BaseAnalytics] = None):
        """
        Internal schema:
            self.records = {slug: EntityRecord}
            self.tables  = {table_name: [row_dict, ...]}  # entity tables for resolution
        """
        self.records: Dict[str, EntityRecord] = {}
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.analytics = analytics or Analytics()

    async def initialize(self) -> None:
        return None

    async def save(self, slug: str, record: EntityRecord) -> bool:
        """
        Save or upsert a slug record.

        Rules:
            - Empty slug or destination is rejected.
            - A slug already bound to a different (entity_type, entity_id) is rejected.
            - Re-saving the same entity keeps its click count and created_at.
        """
        if not slug or not record.url_base:
            return False

        existing = self.records.get(slug)
        if existing and (existing.entity_type, existing.entity_id) != (record.entity_type, record.entity_id):
            return False

        update: Dict[str, Any] = {"slug": slug, "updated_at": datetime.now(timezone.utc)}
        if existing:
            update["click_count"] = existing.click_count
            update["created_at"] = existing.created_at
        self.records[slug] = record.model_copy(update=update)
        return True

    async def resolve(self, slug: str) -> Optional[EntityRecord]:
        return self.records.get(slug)

    async def exists(self, slug: str, entity_type: Optional[str] = None) -> bool:
        record = self.records.get(slug)
        if record is None:
            return False
        if entity_type in (None, DEFAULT_ENTITY_TYPE):
            return True
        return record.entity_type == entity_type

    async def increment_clicks(self, slug: str, **click: Any) -> bool:
        record = self.records.get(slug)
        if record is None:
            self.analytics.log_click(slug, ClickEvent(valid=False, **click))
            return False

        event = ClickEvent(**click)
        self.analytics.log_click(slug, event)
        self.records[slug] = record.model_copy(
            update={"click_count": record.click_count + 1, "updated_at": event.timestamp}
        )
        return True

    async def get_analytics(self, slug: str) -> Optional[AnalyticsRecord]:
        record = self.records.get(slug)
        if record is None:
            return None

        history = self.analytics.get_clicks(slug, only_valid=True)
        history.reverse()  # newest first
        return AnalyticsRecord(
            slug=slug,
            total_clicks=record.click_count,
            created_at=record.created_at,
            updated_at=record.updated_at,
            last_click_at=history[0].timestamp if history else None,
            click_history=history[:100],
        )

    async def close(self) -> None:
        return None

    # ---- Entity tables (resolution) ---------------------------------------

    def add_rows(self, table: str, rows: Iterable[Dict[str, Any]]) -> None:
        """Seed an in-memory entity table."""
        self.tables.setdefault(table, []).extend(dict(row) for row in rows)

    async def find_entity_id(self, lookup_table: str, entity_type: str, slug: str) -> Optional[str]:
        # The in-memory store has a single lookup table: its own records.
        record = self.records.get(slug)
        if record is None or record.entity_type != entity_type:
            return None
        return record.entity_id

    async def fetch_entity(self, table: str, column: str, value: Any) -> Optional[Dict[str, Any]]:
        for row in self.tables.get(table, []):
            if str(row.get(column)) == str(value):
                return dict(row)
        return None
