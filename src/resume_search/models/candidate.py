"""Retrieval candidates and their reranked form."""

import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CandidateMetadata(BaseModel):
    """Document attributes attached to an index match.

    Named fields are the ones the pipeline reads; anything else the index
    returns is kept in ``model_extra`` and survives serialization.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str | None = None
    name: str | None = None
    filename: str | None = None
    skills: list[str] = Field(default_factory=list)
    role: str | None = None
    experience: str | None = None
    text: str | None = None
    content: str | None = None
    page_number: int | None = None
    chunk: int | None = None
    processed_at: datetime | None = None
    created_at: datetime | None = None

    @field_validator("skills", mode="before")
    @classmethod
    def _split_skills(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [s.strip() for s in value.split(",") if s.strip()]
        return value

    @field_validator("experience", mode="before")
    @classmethod
    def _join_experience(cls, value: Any) -> Any:
        if isinstance(value, list):
            return "; ".join(str(v) for v in value)
        return value

    @property
    def display_name(self) -> str:
        """Name shown to users."""
        return self.name or self.filename or "Unknown"

    @property
    def snippet(self) -> str:
        """Text content of the match."""
        return self.text or self.content or ""

    @property
    def timestamp(self) -> datetime | None:
        """When the document was processed, falling back to creation time."""
        return self.processed_at or self.created_at

    def serialized(self) -> str:
        """Lower-cased JSON of all metadata, used for keyword matching."""
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        return json.dumps(data, ensure_ascii=False, sort_keys=True).lower()


class SearchCandidate(BaseModel):
    """A single index match. Ephemeral, per request."""

    id: str
    raw_score: float
    metadata: CandidateMetadata = Field(default_factory=CandidateMetadata)

    @property
    def identifiers(self) -> set[str]:
        """Values a feedback ``result_id`` may refer to."""
        ids = {self.id}
        if self.metadata.id:
            ids.add(self.metadata.id)
        if self.metadata.name:
            ids.add(self.metadata.name)
        return ids

    @property
    def reference_id(self) -> str:
        """Identifier persisted in the knowledge base for this result."""
        return self.metadata.name or self.metadata.id or self.id


class RankedResult(SearchCandidate):
    """A candidate with its reranking signals."""

    feedback_score: float = 0.0
    query_score: float = 0.0
    recency_score: float = 0.0
    final_score: float
