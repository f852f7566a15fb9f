"""Query confidence heuristic.

A hand-tuned linear score over the extracted features, not a learned model.
Anything that maps QueryFeatures to [0, 1] can replace it.
"""

from resume_search.models.query import QueryFeatures

BASE = 0.3
NAME_BONUS = 0.2
PER_SKILL = 0.1
MAX_SKILLS = 3
PER_ROLE = 0.1
MAX_ROLES = 2
EXPERIENCE_BONUS = 0.1
LENGTH_BONUS = 0.1


def score_confidence(features: QueryFeatures) -> float:
    """Confidence in [0, 1] that the query is specific enough to rank well."""
    score = BASE
    if features.has_name:
        score += NAME_BONUS
    score += PER_SKILL * min(len(features.skills), MAX_SKILLS)
    score += PER_ROLE * min(len(features.roles), MAX_ROLES)
    if features.has_experience:
        score += EXPERIENCE_BONUS
    if features.word_count > 2:
        score += LENGTH_BONUS
    return min(score, 1.0)
