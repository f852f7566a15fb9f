"""FastMCP server with lifespan management and tool registration."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP

from resume_search.config import is_manager_mode
from resume_search.runtime import configure_logging, create_runtime
from resume_search.tools.feedback import register_resume_feedback
from resume_search.tools.health import register_search_health
from resume_search.tools.maintain import register_search_maintain
from resume_search.tools.search import register_resume_search


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Open the search runtime for the lifetime of the server."""
    configure_logging()
    logger = logging.getLogger(__name__)

    runtime = await create_runtime()
    try:
        yield {"runtime": runtime}
    finally:
        await runtime.close()
        logger.info("Search server stopped")


_INSTRUCTIONS = """\
Adaptive semantic search over a resume corpus.

- resume_search: Find candidates for a free-text query ("senior React developer \
with 5 years experience", "Jane Doe", "python"). Returns a short answer, ranked \
references with scores, filtering stats and, when nothing matched, four \
alternative queries to try.
- resume_feedback: Rate a returned result (1-5). Ratings personalise future \
ranking for the same user_id and teach the search which rewrites work.
- search_health: Check whether the generation provider is reachable.

Repeated or near-identical queries are answered from the semantic cache.
"""


def create_server() -> FastMCP:
    """Create and configure the MCP server with all tools."""
    mcp = FastMCP(
        "resume-search",
        instructions=_INSTRUCTIONS,
        lifespan=lifespan,
    )

    register_resume_search(mcp)
    register_resume_feedback(mcp)
    register_search_health(mcp)

    if is_manager_mode():
        register_search_maintain(mcp)

    return mcp
