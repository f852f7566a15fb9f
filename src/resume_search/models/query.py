"""Query analysis models."""

from enum import StrEnum

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from resume_search.models.base import CamelModel, clamp_unit


class QueryType(StrEnum):
    """Classification of a search query."""

    NAME_SEARCH = "name_search"
    SKILL_BASED = "skill_based"
    EXPERIENCE_BASED = "experience_based"
    LOCATION_BASED = "location_based"
    ROLE_BASED = "role_based"
    GENERAL = "general"


class QueryFeatures(CamelModel):
    """Structured features extracted from raw query text."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    has_name: bool = False
    skills: tuple[str, ...] = ()
    roles: tuple[str, ...] = ()
    has_experience: bool = False
    word_count: int = 0
    query_type: QueryType = QueryType.GENERAL

    @property
    def filter_terms(self) -> tuple[str, ...]:
        """Skill and role terms used for keyword-overlap filtering."""
        return self.skills + self.roles


class QueryAnalysis(CamelModel):
    """Per-request analysis consumed by every downstream stage."""

    features: QueryFeatures
    rewritten_query: str
    confidence: float = Field(ge=0.0, le=1.0)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return clamp_unit(value)
