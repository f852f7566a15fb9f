"""Rule-based feature extraction and query-type classification."""

import re

from resume_search.models.query import QueryFeatures, QueryType

SKILLS: tuple[str, ...] = (
    "javascript",
    "react",
    "node",
    "python",
    "java",
    "angular",
    "vue",
    "typescript",
    "sql",
    "mongodb",
    "aws",
    "docker",
    "kubernetes",
    "machine learning",
    "ai",
    "data science",
    "devops",
    "frontend",
    "backend",
    "html",
    "css",
    "express",
    "django",
    "flask",
    "spring",
    "laravel",
    "git",
    "jenkins",
    "redis",
    "elasticsearch",
    "graphql",
    "rest api",
)

ROLES: tuple[str, ...] = (
    "developer",
    "engineer",
    "architect",
    "manager",
    "lead",
    "senior",
    "junior",
    "intern",
    "consultant",
    "analyst",
    "designer",
    "devops",
    "fullstack",
    "full-stack",
    "backend",
    "frontend",
    "software engineer",
    "data scientist",
    "ml engineer",
    "product manager",
    "tech lead",
)

_CAPITALIZED_RE = re.compile(r"\b[A-Z][a-z]+\b")
_EXPERIENCE_RE = re.compile(r"\d+\s*years?")
_SKILL_PHRASE_RE = re.compile(r"\b(with|having|skilled in)\b")
_EXPERIENCE_PHRASE_RE = re.compile(r"\b(years|experience)\b")
_LOCATION_PHRASE_RE = re.compile(r"\b(location|based in)\b")

MAX_NAME_WORDS = 3


def word_count(query: str) -> int:
    """Whitespace-separated token count."""
    return len(query.split())


def extract_skills(query: str) -> tuple[str, ...]:
    """Vocabulary skills appearing anywhere in the query, case-insensitive."""
    lowered = query.lower()
    return tuple(s for s in SKILLS if s in lowered)


def extract_roles(query: str) -> tuple[str, ...]:
    """Vocabulary roles appearing anywhere in the query, case-insensitive."""
    lowered = query.lower()
    return tuple(r for r in ROLES if r in lowered)


def has_experience(query: str) -> bool:
    """True for phrases like '5 years' or '3year'."""
    return _EXPERIENCE_RE.search(query) is not None


def looks_like_name(query: str) -> bool:
    """True if any word is capitalized, e.g. 'Jane' or 'React'."""
    return _CAPITALIZED_RE.search(query) is not None


def classify(query: str) -> QueryType:
    """Classify by fixed precedence: name, skill phrasing, experience, location, general.

    Only short capitalized queries count as name searches.
    """
    lowered = query.lower()
    if looks_like_name(query) and word_count(query) <= MAX_NAME_WORDS:
        return QueryType.NAME_SEARCH
    if _SKILL_PHRASE_RE.search(lowered):
        return QueryType.SKILL_BASED
    if _EXPERIENCE_PHRASE_RE.search(lowered):
        return QueryType.EXPERIENCE_BASED
    if _LOCATION_PHRASE_RE.search(lowered):
        return QueryType.LOCATION_BASED
    return QueryType.GENERAL


def extract_features(query: str) -> QueryFeatures:
    """Derive the full feature set from raw query text."""
    return QueryFeatures(
        has_name=looks_like_name(query),
        skills=extract_skills(query),
        roles=extract_roles(query),
        has_experience=has_experience(query),
        word_count=word_count(query),
        query_type=classify(query),
    )
