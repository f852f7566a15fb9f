"""Records written by the learning loop."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

from resume_search.models.base import clamp_unit
from resume_search.models.query import QueryFeatures, QueryType


class Interaction(StrEnum):
    """How a user interacted with a result."""

    CLICK = "click"
    DOWNLOAD = "download"
    VIEW = "view"
    SKIP = "skip"
    BOOKMARK = "bookmark"
    SHARE = "share"


class KnowledgeBaseEntry(BaseModel):
    """A previously answered query, served back by the semantic cache."""

    id: int | None = None
    question: str
    embedding: list[float]
    answer: str
    references: list[str] = Field(default_factory=list)
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    query_features: QueryFeatures = Field(default_factory=QueryFeatures)
    usage_count: int = 0
    created_at: datetime | None = None
    last_used: datetime | None = None

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return clamp_unit(value)


class QueryPattern(BaseModel):
    """Aggregated history of how an original query was rewritten and how it fared."""

    original_query: str
    rewritten_query: str
    query_type: QueryType = QueryType.GENERAL
    total_uses: int = 0
    success_count: int = 0
    success_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    extracted_features: QueryFeatures = Field(default_factory=QueryFeatures)
    last_used: datetime | None = None
    created_at: datetime | None = None


class FeedbackEntry(BaseModel):
    """A single user rating of a result. Feedback is an event log."""

    id: int | None = None
    user_id: str
    query: str
    result_id: str
    rating: int = Field(ge=1, le=5)
    interaction: Interaction = Interaction.VIEW
    timestamp: datetime | None = None


class QueryLogEntry(BaseModel):
    """Audit record of a successful, non-cached search."""

    id: int | None = None
    query: str
    rewritten_query: str
    results: list[str] = Field(default_factory=list)
    user_id: str
    confidence: float = 0.5
    result_count: int = 0
    query_features: QueryFeatures = Field(default_factory=QueryFeatures)
    total_found: int = 0
    after_filtering: int = 0
    duration_ms: float | None = None
    timestamp: datetime | None = None
