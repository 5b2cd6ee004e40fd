"""
Pydantic models shared across longlink.

Options:
    GenerationOptions is the single canonical options object. Legacy and
    camelCase spellings (publicId, endpointId, idLength, ...) are accepted on
    input and normalised to one field each, so nothing downstream has to know
    about the aliases.

Results:
    GenerationResult / ResolutionResult / AnalyticsResult are immutable and
    always returned, never raised: callers branch on `success`.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .errors import ErrorKind


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GenerationMode(str, Enum):
    RANDOM = "random"
    ENTITY = "entity"
    PATTERN = "pattern"


class StorageStrategy(str, Enum):
    """Where the slug lives in the backing store."""

    LOOKUP_TABLE = "lookup_table"
    INLINE = "inline"


class GenerationOptions(BaseModel):
    """Per-call knobs for slug generation."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id_length: int = Field(6, ge=1, validation_alias=AliasChoices("id_length", "idLength"))
    domain: Optional[str] = None
    enable_shortening: bool = Field(
        True, validation_alias=AliasChoices("enable_shortening", "enableShortening")
    )
    include_entity_in_path: bool = Field(
        False, validation_alias=AliasChoices("include_entity_in_path", "includeEntityInPath")
    )
    url_pattern: Optional[str] = Field(
        None, validation_alias=AliasChoices("url_pattern", "urlPattern")
    )
    public_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("public_id", "publicId", "endpoint_id", "endpointId"),
    )
    include_in_slug: bool = Field(
        True, validation_alias=AliasChoices("include_in_slug", "includeInSlug")
    )

    @property
    def mode(self) -> GenerationMode:
        if self.url_pattern is not None:
            return GenerationMode.PATTERN
        if not self.enable_shortening:
            return GenerationMode.ENTITY
        return GenerationMode.RANDOM


class GenerationRequest(BaseModel):
    """Everything one generation call needs, built once per call."""

    model_config = ConfigDict(frozen=True)

    entity_type: str
    entity_id: str
    options: GenerationOptions = Field(default_factory=GenerationOptions)

    @property
    def mode(self) -> GenerationMode:
        return self.options.mode


class GenerationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    slug: str = ""
    url: str = ""
    public_id: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    url_base: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, **fields: Any) -> "GenerationResult":
        return cls(success=False, error=message, error_kind=kind, **fields)


class EntityConfig(BaseModel):
    """Where a given entity type lives in the backing store."""

    table_name: str
    primary_key: str = "id"
    url_prefix: Optional[str] = None


class StorageConfig(BaseModel):
    strategy: StorageStrategy = StorageStrategy.LOOKUP_TABLE
    lookup_table: str = "endpoints"
    slug_column: str = "url_slug"
    id_length: int = Field(6, ge=1)


class EntityRecord(BaseModel):
    """A persisted slug -> destination mapping."""

    slug: str
    url_base: str
    entity_type: str
    entity_id: str
    public_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    click_count: int = 0
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class ResolutionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    entity: Optional[Dict[str, Any]] = None
    entity_id: Optional[str] = None
    entity_type: Optional[str] = None
    slug: Optional[str] = None
    url_base: Optional[str] = None
    click_count: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, **fields: Any) -> "ResolutionResult":
        return cls(success=False, error=message, error_kind=kind, **fields)


class ClickEvent(BaseModel):
    timestamp: datetime = Field(default_factory=_utcnow)
    user_agent: Optional[str] = None
    referer: Optional[str] = None
    ip: Optional[str] = None
    country: Optional[str] = None
    valid: bool = True


class AnalyticsRecord(BaseModel):
    slug: str
    total_clicks: int
    created_at: datetime
    updated_at: datetime
    last_click_at: Optional[datetime] = None
    click_history: List[ClickEvent] = Field(default_factory=list)


class AnalyticsResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    data: Optional[AnalyticsRecord] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
