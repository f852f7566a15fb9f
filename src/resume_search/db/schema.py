"""DDL for the learning stores, the document table and the vector index."""

from resume_search.db.backend import Database

SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS knowledge_base (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    question TEXT NOT NULL,
    embedding TEXT NOT NULL,
    embedding_dim INTEGER NOT NULL,
    answer TEXT NOT NULL,
    refs TEXT NOT NULL DEFAULT '[]',
    confidence REAL NOT NULL DEFAULT 0.5,
    query_features TEXT NOT NULL DEFAULT '{}',
    usage_count INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    last_used TEXT
);
CREATE INDEX IF NOT EXISTS idx_kb_dim ON knowledge_base(embedding_dim);
CREATE INDEX IF NOT EXISTS idx_kb_usage ON knowledge_base(usage_count DESC);

CREATE TABLE IF NOT EXISTS query_patterns (
    original_query TEXT PRIMARY KEY,
    rewritten_query TEXT NOT NULL,
    query_type TEXT NOT NULL DEFAULT 'general',
    total_uses INTEGER NOT NULL DEFAULT 0,
    success_count INTEGER NOT NULL DEFAULT 0,
    success_rate REAL NOT NULL DEFAULT 0,
    extracted_features TEXT NOT NULL DEFAULT '{}',
    last_used TEXT NOT NULL,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_patterns_rate ON query_patterns(success_rate DESC);

CREATE TABLE IF NOT EXISTS search_feedback (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    query TEXT NOT NULL,
    result_id TEXT NOT NULL,
    rating INTEGER NOT NULL CHECK (rating BETWEEN 1 AND 5),
    interaction TEXT NOT NULL,
    timestamp TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_feedback_user ON search_feedback(user_id, timestamp DESC);
CREATE INDEX IF NOT EXISTS idx_feedback_result ON search_feedback(result_id);

CREATE TABLE IF NOT EXISTS query_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    query TEXT NOT NULL,
    rewritten_query TEXT NOT NULL,
    results TEXT NOT NULL DEFAULT '[]',
    user_id TEXT NOT NULL,
    confidence REAL NOT NULL DEFAULT 0.5,
    result_count INTEGER NOT NULL DEFAULT 0,
    query_features TEXT NOT NULL DEFAULT '{}',
    total_found INTEGER NOT NULL DEFAULT 0,
    after_filtering INTEGER NOT NULL DEFAULT 0,
    duration_ms REAL,
    timestamp TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_log_user ON query_log(user_id, timestamp DESC);

CREATE TABLE IF NOT EXISTS documents (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    content TEXT NOT NULL DEFAULT '',
    metadata TEXT NOT NULL DEFAULT '{}',
    processed_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_documents_name ON documents(name);
"""


def _vec_table_sql(dim: int) -> str:
    return f"""
CREATE VIRTUAL TABLE IF NOT EXISTS document_vec USING vec0(
    doc_id TEXT PRIMARY KEY,
    embedding FLOAT[{dim}] distance_metric=cosine
);
"""


async def apply_schema(db: Database) -> None:
    """Create all regular tables."""
    await db.executescript(SCHEMA_SQL)

    cursor = await db.execute("SELECT version FROM schema_version")
    row = await cursor.fetchone()
    if row is None:
        await db.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))

    await db.commit()


async def apply_vec_schema(db: Database, dim: int = 1024) -> None:
    """Create the vec0 table. Requires the sqlite-vec extension."""
    await db.executescript(_vec_table_sql(dim))
    await db.commit()
