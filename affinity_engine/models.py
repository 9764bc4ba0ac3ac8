"""Pydantic request/response schemas for the API."""

from datetime import datetime
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from affinity_engine.tag_catalog import AffinityTag
from affinity_engine.tag_matcher import MatchResult


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AffinityTagSchema(CamelModel):
    id: Union[int, str]
    name: str
    category: str
    external_ref: Optional[str] = Field(None, alias="externalRef")

    @classmethod
    def from_tag(cls, tag: AffinityTag) -> "AffinityTagSchema":
        return cls(id=tag.id, name=tag.name, category=tag.category, external_ref=tag.external_ref)


class MatchInterestsRequest(CamelModel):
    """Interest lists as extracted upstream. Malformed lists count as empty."""
    professional_interests: Any = Field(None, alias="professionalInterests")
    personal_interests: Any = Field(None, alias="personalInterests")
    philanthropic_priorities: Any = Field(None, alias="philanthropicPriorities")
    transcript: Optional[str] = None


class MatchByCategoryRequest(CamelModel):
    interests: Any = None
    category: str


class MatchResultSchema(CamelModel):
    tag: AffinityTagSchema
    score: float
    matched_interest: str = Field(..., alias="matchedInterest")

    @classmethod
    def from_result(cls, result: MatchResult) -> "MatchResultSchema":
        return cls(
            tag=AffinityTagSchema.from_tag(result.tag),
            score=result.score,
            matched_interest=result.matched_interest,
        )


class RefreshResponse(CamelModel):
    success: bool
    total: int
    last_refresh: Optional[datetime] = Field(None, alias="lastRefresh")
    message: str


class SchedulerStatus(CamelModel):
    is_scheduled: bool = Field(..., alias="isScheduled")
    interval: Optional[str] = None
    last_run: Optional[datetime] = Field(None, alias="lastRun")
    next_run: Optional[datetime] = Field(None, alias="nextRun")
    last_error: Optional[str] = Field(None, alias="lastError")


class CatalogInfoResponse(CamelModel):
    total: int
    last_refresh: Optional[datetime] = Field(None, alias="lastRefresh")
    auto_refresh: bool = Field(..., alias="autoRefresh")
    refresh_interval: str = Field(..., alias="refreshInterval")
    matching_threshold: int = Field(..., alias="matchingThreshold")
    scheduler_status: SchedulerStatus = Field(..., alias="schedulerStatus")


class SettingsUpdateRequest(CamelModel):
    auto_refresh: Optional[bool] = Field(None, alias="autoRefresh")
    refresh_interval: Optional[Literal["hourly", "daily", "weekly"]] = Field(None, alias="refreshInterval")
    matching_threshold: Optional[float] = Field(None, alias="matchingThreshold")  # 0-100


class HealthResponse(CamelModel):
    status: str
    catalog_loaded: bool = Field(..., alias="catalogLoaded")
    tag_count: int = Field(..., alias="tagCount")
    matching_threshold: float = Field(..., alias="matchingThreshold")
