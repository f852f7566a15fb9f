"""search_maintain MCP tool for store maintenance."""

import logging
import os
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.server.context import Context
from pydantic import Field

from resume_search.db.backend import Database
from resume_search.db.queries import get_db_stats
from resume_search.runtime import SearchRuntime
from resume_search.store.knowledge_base import KnowledgeBaseStore
from resume_search.store.patterns import QueryPatternStore

logger = logging.getLogger(__name__)

_ACTIONS = {"stats", "prune_cache", "vacuum"}


def register_search_maintain(mcp: FastMCP) -> None:
    """Register the search_maintain tool with the MCP server."""

    @mcp.tool()
    async def search_maintain(
        action: Annotated[
            str, Field(description="Maintenance action: stats, prune_cache, vacuum")
        ],
        days_unused: Annotated[
            int,
            Field(description="For prune_cache: min age in days of never-served entries", ge=1),
        ] = 90,
        confirm: Annotated[
            bool,
            Field(description="Required True for prune_cache"),
        ] = False,
        ctx: Context | None = None,
    ) -> str:
        """Administrative maintenance for the search stores.

        Requires RS_MANAGER=TRUE environment variable.

        Actions:
        - stats: Record counts per store, cache usage, top rewrite patterns
        - prune_cache: Delete cached answers never served and older than N days
          (requires confirm=True)
        - vacuum: Optimize database (PRAGMA optimize + VACUUM)
        """
        if ctx is None:
            raise RuntimeError("Context not injected")

        if action not in _ACTIONS:
            return f"Unknown action '{action}'. Use: {', '.join(sorted(_ACTIONS))}"

        runtime: SearchRuntime = ctx.lifespan_context["runtime"]
        if action == "stats":
            return await action_stats(runtime.db, runtime.patterns)
        elif action == "prune_cache":
            return await action_prune_cache(runtime.knowledge_base, days_unused, confirm)
        return await action_vacuum(runtime.db)


async def action_stats(db: Database, patterns: QueryPatternStore) -> str:
    """Store overview with counts and the best rewrite patterns."""
    stats = await get_db_stats(db)

    lines = ["Search Store Statistics\n"]
    lines.append(f"Documents: {stats['documents']}")
    lines.append(
        f"Knowledge base: {stats['knowledge_base']} entries,"
        f" {stats['cache_serves']} cache serves, {stats['cache_never_served']} never served"
    )
    lines.append(f"Query patterns: {stats['query_patterns']}")
    feedback_line = f"Feedback: {stats['search_feedback']} records"
    if stats["avg_rating"] is not None:
        feedback_line += f" (avg rating {stats['avg_rating']})"
    lines.append(feedback_line)
    lines.append(f"Query log: {stats['query_log']} searches")

    top = await patterns.top_successful(5)
    if top:
        lines.append("\nTop rewrite patterns:")
        for p in top:
            lines.append(
                f'  "{p.original_query}" -> "{p.rewritten_query}"'
                f" ({p.success_rate:.0%} of {p.total_uses})"
            )
    return "\n".join(lines)


async def action_prune_cache(store: KnowledgeBaseStore, days_unused: int, confirm: bool) -> str:
    """Delete knowledge-base entries that were never served."""
    if not confirm:
        return "Error: prune_cache requires confirm=True. This permanently deletes data."
    removed = await store.prune_unused(days_unused)
    if not removed:
        return f"No unused cache entries older than {days_unused} days to prune."
    logger.info("Pruned %d unused cache entries", removed)
    return f"Pruned {removed} unused cache entries (older than {days_unused} days)."


async def action_vacuum(db: Database) -> str:
    """Optimize database with PRAGMA optimize and VACUUM."""
    await db.execute("PRAGMA optimize")

    # VACUUM can't run inside a transaction, so use executescript which auto-commits
    await db.executescript("VACUUM;")

    size_info = ""
    cursor = await db.execute("PRAGMA database_list")
    db_row = await cursor.fetchone()
    if db_row and db_row[2]:
        try:
            size = os.path.getsize(db_row[2])
            if size < 1024 * 1024:
                size_info = f" Database size: {size / 1024:.1f} KB"
            else:
                size_info = f" Database size: {size / (1024 * 1024):.1f} MB"
        except OSError:
            logger.debug("Could not stat database file %s", db_row[2])

    return f"Vacuum complete.{size_info}"
