"""Cosine similarity, the primitive behind every threshold decision."""

import math
from collections.abc import Sequence


def cosine_similarity(a: Sequence[float] | None, b: Sequence[float] | None) -> float:
    """Return the cosine similarity of two vectors in [-1, 1].

    Returns 0.0 when either vector is missing or empty, when the lengths
    differ, or when either magnitude is zero. Never raises.
    """
    if not a or not b or len(a) != len(b):
        return 0.0

    dot = math.fsum(x * y for x, y in zip(a, b, strict=True))
    mag_a = math.sqrt(math.fsum(x * x for x in a))
    mag_b = math.sqrt(math.fsum(y * y for y in b))
    if mag_a == 0.0 or mag_b == 0.0:
        return 0.0

    # Rounding can push |cos| a hair past 1 for parallel vectors
    return max(-1.0, min(1.0, dot / (mag_a * mag_b)))


def comparable(a: Sequence[float] | None, b: Sequence[float] | None) -> bool:
    """True if both vectors are present and of equal length."""
    return bool(a) and bool(b) and len(a) == len(b)  # type: ignore[arg-type]
