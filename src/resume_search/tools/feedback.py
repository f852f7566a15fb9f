"""resume_feedback MCP tool."""

from typing import Annotated

from fastmcp import FastMCP
from fastmcp.server.context import Context
from pydantic import Field

from resume_search.errors import InvalidRequest
from resume_search.models.learning import Interaction
from resume_search.runtime import SearchRuntime


def register_resume_feedback(mcp: FastMCP) -> None:
    """Register the resume_feedback tool with the MCP server."""

    @mcp.tool()
    async def resume_feedback(
        query: Annotated[str, Field(description="The query the result was returned for")],
        result_id: Annotated[str, Field(description="Document id or candidate name")],
        rating: Annotated[int, Field(description="Rating from 1 (poor) to 5 (excellent)")],
        interaction: Annotated[
            Interaction | None, Field(description="How the result was used (default: view)")
        ] = None,
        user_id: Annotated[str, Field(description="Caller identity")] = "anonymous",
        ctx: Context | None = None,
    ) -> str:
        """Rate a search result. Ratings feed future reranking for this user."""
        if ctx is None:
            raise RuntimeError("Context not injected")
        runtime: SearchRuntime = ctx.lifespan_context["runtime"]
        try:
            entry = runtime.orchestrator.record_feedback(
                user_id, query, result_id, rating, interaction
            )
        except InvalidRequest as e:
            return f"Error: {e}"
        return f"Recorded {entry.interaction} rating {entry.rating}/5 for {entry.result_id}"
