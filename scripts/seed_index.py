"""Load resume documents from a JSON file into the local vector index.

Usage: python scripts/seed_index.py resumes.json

The file holds a list of objects with ``id``, ``name``, ``content`` and any
metadata fields (``skills``, ``role``, ``experience``, ``processedAt``...).
Documents are embedded in batches with the configured Ollama model.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

from resume_search.config import get_db_path, get_embedding_dim
from resume_search.db.connection import create_connection
from resume_search.errors import SearchError
from resume_search.models.candidate import CandidateMetadata
from resume_search.models.search import DocumentRecord
from resume_search.search.embeddings import EmbeddingClient
from resume_search.search.index import SqliteVectorIndex
from resume_search.store.documents import DocumentStore

BATCH_SIZE = 16


def load_records(path: Path) -> list[DocumentRecord]:
    """Parse the seed file into document records."""
    raw = json.loads(path.read_text())
    records = []
    for item in raw:
        meta = {k: v for k, v in item.items() if k not in ("content",)}
        records.append(
            DocumentRecord(
                id=str(item["id"]),
                name=item.get("name") or str(item["id"]),
                content=item.get("content", ""),
                metadata=CandidateMetadata.model_validate(meta),
            )
        )
    return records


async def seed(path: Path) -> int:
    """Embed and index every record in the file. Returns the number indexed."""
    records = load_records(path)
    db = await create_connection(get_db_path(), embedding_dim=get_embedding_dim())
    embedder = EmbeddingClient()
    index = SqliteVectorIndex(db, DocumentStore(db))
    indexed = 0
    try:
        for start in range(0, len(records), BATCH_SIZE):
            batch = records[start : start + BATCH_SIZE]
            texts = [f"{r.name}\n{r.content}" for r in batch]
            vectors = await embedder.embed(texts)
            for record, vector in zip(batch, vectors, strict=True):
                await index.upsert(record, vector)
                indexed += 1
            print(f"Indexed {indexed}/{len(records)}")
    finally:
        await embedder.close()
        await db.close()
    return indexed


def main() -> None:
    """Seed the index from the file given on the command line."""
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(2)
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)
    try:
        asyncio.run(seed(Path(sys.argv[1])))
    except SearchError as e:
        print(f"  Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
