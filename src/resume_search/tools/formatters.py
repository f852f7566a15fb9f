"""Compact text formatters for MCP tool responses."""

from collections.abc import Sequence
from typing import Any

from resume_search.models.search import Reference, SearchResponse, SearchStats


def format_reference(position: int, ref: Reference) -> str:
    """Format: 3. Jane Doe (0.82, raw 0.77) | React, Node | Senior Engineer."""
    parts = [f"{position}. {ref.name} ({ref.score:.2f}, raw {ref.original_score:.2f})"]
    skills = ref.metadata.get("skills") or []
    if skills:
        parts.append(", ".join(str(s) for s in skills[:6]))
    role = ref.metadata.get("role")
    if role:
        parts.append(str(role))
    return " | ".join(parts)


def format_stats(stats: SearchStats) -> str:
    """Format: found 20 -> 12 above floor -> 5 returned (confidence 80%)."""
    return (
        f"found {stats.total_found} -> {stats.after_filtering} above floor"
        f" -> {stats.final_results} returned (confidence {stats.confidence:.0%})"
    )


def format_suggestions(suggestions: Sequence[str]) -> str:
    """Bulleted suggestion list."""
    return "\n".join(f"- {s}" for s in suggestions)


def format_search_response(response: SearchResponse) -> str:
    """Answer, references, stats and suggestions as plain text."""
    analysis = response.query_analysis
    header = f"[{analysis.features.query_type}] {analysis.rewritten_query}"
    if response.cached:
        header += "  (cached)"

    lines = [header, "", response.answer]
    if response.references:
        lines.append("")
        lines.extend(format_reference(i, r) for i, r in enumerate(response.references, 1))
    lines.append("")
    lines.append(format_stats(response.search_stats))
    if response.suggestions:
        lines.append("")
        lines.append("Suggestions:")
        lines.append(format_suggestions(response.suggestions))
    return "\n".join(lines)


def format_health(health: dict[str, Any]) -> str:
    """One line per component."""
    gen = health["generation"]
    queue = health["learningQueue"]
    state = "available" if gen["available"] else "unavailable"
    return "\n".join(
        [
            f"Status: {health['status']} ({health['timestamp']})",
            f"Generation: {gen['provider']} {gen['model']} at {gen['baseUrl']}, {state}",
            f"Learning queue: {'running' if queue['running'] else 'stopped'},"
            f" {queue['pending']} pending, {queue['failed']} failed, {queue['dropped']} dropped",
        ]
    )
