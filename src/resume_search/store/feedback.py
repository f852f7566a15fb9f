"""Feedback event log."""

from resume_search.db.backend import Database
from resume_search.db.queries import now_iso, row_to_feedback
from resume_search.models.learning import FeedbackEntry


class FeedbackStore:
    """Append-only feedback records. Identical submissions are separate events."""

    def __init__(self, db: Database):
        """Initialize with a database connection."""
        self.db = db

    async def add(self, entry: FeedbackEntry) -> int:
        """Append a feedback record and return its id."""
        cursor = await self.db.execute(
            """INSERT INTO search_feedback
            (user_id, query, result_id, rating, interaction, timestamp)
            VALUES (?, ?, ?, ?, ?, ?)""",
            (
                entry.user_id,
                entry.query,
                entry.result_id,
                entry.rating,
                entry.interaction.value,
                entry.timestamp.isoformat() if entry.timestamp else now_iso(),
            ),
        )
        await self.db.commit()
        return cursor.lastrowid or 0

    async def recent_for_user(self, user_id: str, limit: int = 50) -> list[FeedbackEntry]:
        """The user's most recent feedback records, newest first."""
        cursor = await self.db.execute(
            """SELECT * FROM search_feedback
            WHERE user_id = ?
            ORDER BY timestamp DESC, id DESC
            LIMIT ?""",
            (user_id, limit),
        )
        rows = await cursor.fetchall()
        return [row_to_feedback(row) for row in rows]
