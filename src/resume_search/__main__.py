"""Entry point for the resume-search MCP server."""

from resume_search.server import create_server


def main() -> None:
    """Run the resume-search MCP server."""
    server = create_server()
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
