"""resume_search MCP tool."""

import logging
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.server.context import Context
from pydantic import Field

from resume_search.errors import InvalidRequest
from resume_search.runtime import SearchRuntime
from resume_search.tools.formatters import format_search_response

logger = logging.getLogger(__name__)


def register_resume_search(mcp: FastMCP) -> None:
    """Register the resume_search tool with the MCP server."""

    @mcp.tool()
    async def resume_search(
        query: Annotated[str, Field(description="What to look for, e.g. 'senior React developer'")],
        user_id: Annotated[
            str, Field(description="Caller identity used for personalised reranking")
        ] = "anonymous",
        ctx: Context | None = None,
    ) -> str:
        """Search the resume corpus with adaptive semantic search.

        The query is analysed and rewritten, answered from the semantic cache
        when a close-enough question was seen before, otherwise matched against
        the vector index and reranked using similarity, past feedback, query
        match and recency. Returns an answer, ranked references, filtering
        stats and, when nothing matched, four alternative queries.
        """
        if ctx is None:
            raise RuntimeError("Context not injected")
        runtime: SearchRuntime = ctx.lifespan_context["runtime"]
        try:
            response = await runtime.orchestrator.search(query, user_id)
        except InvalidRequest as e:
            return f"Error: {e}"
        return format_search_response(response)
