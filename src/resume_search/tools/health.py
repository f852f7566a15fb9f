"""search_health MCP tool."""

from fastmcp import FastMCP
from fastmcp.server.context import Context

from resume_search.runtime import SearchRuntime
from resume_search.tools.formatters import format_health


def register_search_health(mcp: FastMCP) -> None:
    """Register the search_health tool with the MCP server."""

    @mcp.tool()
    async def search_health(ctx: Context | None = None) -> str:
        """Report generation provider availability and learning queue state."""
        if ctx is None:
            raise RuntimeError("Context not injected")
        runtime: SearchRuntime = ctx.lifespan_context["runtime"]
        return format_health(await runtime.orchestrator.health())
