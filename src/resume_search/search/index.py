"""Nearest-neighbour index over resume documents, backed by sqlite-vec."""

import asyncio
import logging
import struct
from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from resume_search.config import get_index_timeout
from resume_search.db.backend import Database
from resume_search.errors import IndexUnavailable
from resume_search.models.candidate import CandidateMetadata, SearchCandidate
from resume_search.models.search import DocumentRecord
from resume_search.store.documents import DocumentStore

logger = logging.getLogger(__name__)


@runtime_checkable
class VectorIndex(Protocol):
    """Top-K similarity search returning matches with metadata attached."""

    async def query(
        self,
        vector: Sequence[float],
        top_k: int,
        filter: Mapping[str, Any] | None = None,
    ) -> list[SearchCandidate]:
        """Return up to top_k matches, best first. Raises IndexUnavailable."""
        ...


class SqliteVectorIndex:
    """vec0 cosine index joined with the documents table."""

    def __init__(
        self,
        db: Database,
        documents: DocumentStore,
        *,
        timeout: float | None = None,
    ):
        """Initialize with a database connection and the document store."""
        self.db = db
        self.documents = documents
        self.timeout = timeout if timeout is not None else get_index_timeout()

    async def upsert(self, record: DocumentRecord, embedding: Sequence[float]) -> None:
        """Store a document and its vector. Used for seeding the index."""
        if not self.db.has_vector_support:
            raise IndexUnavailable("sqlite-vec is not loaded")
        await self.documents.upsert(record)
        blob = _serialize_f32(embedding)
        try:
            # vec0 doesn't support ON CONFLICT
            await self.db.execute("DELETE FROM document_vec WHERE doc_id = ?", (record.id,))
            await self.db.execute(
                "INSERT INTO document_vec (doc_id, embedding) VALUES (?, ?)",
                (record.id, blob),
            )
            await self.db.commit()
        except Exception as exc:
            raise IndexUnavailable(f"Could not index document {record.id}: {exc}") from exc

    async def query(
        self,
        vector: Sequence[float],
        top_k: int,
        filter: Mapping[str, Any] | None = None,
    ) -> list[SearchCandidate]:
        """Cosine KNN. Scores are ``1 - distance``; equality filters apply after KNN."""
        if not self.db.has_vector_support:
            raise IndexUnavailable("sqlite-vec is not loaded")
        try:
            return await asyncio.wait_for(self._query(vector, top_k, filter), self.timeout)
        except TimeoutError as exc:
            raise IndexUnavailable(f"Index query timed out after {self.timeout}s") from exc
        except IndexUnavailable:
            raise
        except Exception as exc:
            raise IndexUnavailable(f"Index query failed: {exc}") from exc

    async def _query(
        self,
        vector: Sequence[float],
        top_k: int,
        filter: Mapping[str, Any] | None,
    ) -> list[SearchCandidate]:
        cursor = await self.db.execute(
            """SELECT doc_id, distance
            FROM document_vec
            WHERE embedding MATCH ?
            ORDER BY distance
            LIMIT ?""",
            (_serialize_f32(vector), top_k),
        )
        rows = await cursor.fetchall()
        hits = [(row[0], row[1]) for row in rows]
        records = await self.documents.get_many([doc_id for doc_id, _ in hits])

        matches: list[SearchCandidate] = []
        for doc_id, distance in hits:
            record = records.get(doc_id)
            if record is None:
                logger.debug("Vector %s has no document row, skipping", doc_id)
                continue
            metadata = _candidate_metadata(record)
            if filter and not _matches_filter(metadata, filter):
                continue
            matches.append(
                SearchCandidate(id=doc_id, raw_score=1.0 - distance, metadata=metadata)
            )
        logger.debug("Index returned %d of %d requested matches", len(matches), top_k)
        return matches


def _candidate_metadata(record: DocumentRecord) -> CandidateMetadata:
    meta = record.metadata
    return meta.model_copy(
        update={
            "id": meta.id or record.id,
            "name": meta.name or record.name,
            "text": meta.text or record.content or None,
        }
    )


def _matches_filter(metadata: CandidateMetadata, filter: Mapping[str, Any]) -> bool:
    fields = metadata.model_dump(mode="json")
    aliased = metadata.model_dump(mode="json", by_alias=True)
    for key, expected in filter.items():
        value = fields.get(key, aliased.get(key))
        if isinstance(value, list):
            if expected not in value:
                return False
        elif value != expected:
            return False
    return True


def _serialize_f32(vec: Sequence[float]) -> bytes:
    """Serialize a list of floats to a compact binary format for sqlite-vec."""
    return struct.pack(f"{len(vec)}f", *vec)
