"""Request and response models for the search surfaces."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from resume_search.models.base import CamelModel
from resume_search.models.candidate import CandidateMetadata
from resume_search.models.learning import Interaction
from resume_search.models.query import QueryAnalysis


class SearchStats(CamelModel):
    """Per-request counts through the filtering stages. Never persisted."""

    total_found: int = 0
    after_filtering: int = 0
    final_results: int = 0
    confidence: float = 0.0


class Reference(CamelModel):
    """A presentable search result."""

    name: str
    content: str = ""
    score: float
    original_score: float
    metadata: dict[str, Any] = Field(default_factory=dict)


class SearchResponse(CamelModel):
    """The single response every pipeline path terminates in."""

    answer: str
    references: list[Reference] = Field(default_factory=list)
    cached: bool = False
    query_analysis: QueryAnalysis
    search_stats: SearchStats = Field(default_factory=SearchStats)
    suggestions: list[str] = Field(default_factory=list)


class DocumentRecord(BaseModel):
    """A stored document, used to rebuild references on a cache hit."""

    id: str
    name: str
    content: str = ""
    metadata: CandidateMetadata = Field(default_factory=CandidateMetadata)


class FeedbackRequest(CamelModel):
    """Explicit rating of a result for a query."""

    query: str = Field(min_length=1)
    result_id: str = Field(min_length=1)
    rating: int = Field(ge=1, le=5)
    interaction: Interaction | None = None

    @field_validator("query", "result_id")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class SearchRequest(CamelModel):
    """Body of a search call, optionally carrying feedback on a previous search.

    Feedback is kept as a raw mapping; a malformed one is logged and skipped
    by the orchestrator rather than failing the search.
    """

    query: str = Field(min_length=1)
    feedback: dict[str, Any] | None = None
