"""Min-Max normalization of cohort metrics onto a 0-10 scale.

Everything here works on lists by position. Participants with the same raw
value keep separate slots, so results can be zipped back onto the cohort order.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence

logger = logging.getLogger(__name__)

TARGET_MIN = 0.0
TARGET_MAX = 10.0
EPSILON = 1e-9


@dataclass(frozen=True)
class ScoreStats:
    min: float
    max: float
    average: float
    count: int

    def __str__(self) -> str:
        return "ScoreStats(min=%.2f, max=%.2f, avg=%.2f, count=%d)" % (
            self.min, self.max, self.average, self.count
        )


def normalize_value(value: float, lo: float, hi: float) -> float:
    """Scale one value from [lo, hi] to [0, 10], clamped."""
    if abs(hi - lo) < EPSILON:
        return TARGET_MAX
    normalized = ((value - lo) / (hi - lo)) * (TARGET_MAX - TARGET_MIN) + TARGET_MIN
    # clamp floating point overshoot
    return max(TARGET_MIN, min(TARGET_MAX, normalized))


def normalize_scores(scores: Sequence[float]) -> List[float]:
    """Normalize raw scores to 0-10, same length and order as the input.

    - empty input -> []
    - a single score -> [10.0]
    - all scores equal -> every slot 10.0
    """
    if not scores:
        logger.debug("Empty score list provided for normalization")
        return []

    if len(scores) == 1:
        logger.debug("Single score normalization: %s -> %s", scores[0], TARGET_MAX)
        return [TARGET_MAX]

    lo = min(scores)
    hi = max(scores)
    logger.debug("Score normalization: min=%s, max=%s, count=%d", lo, hi, len(scores))

    if abs(hi - lo) < EPSILON:
        logger.debug("All %d scores equal (%s), assigning %s", len(scores), lo, TARGET_MAX)
        return [TARGET_MAX for _ in scores]

    return [normalize_value(score, lo, hi) for score in scores]


def calculate_stats(scores: Sequence[float]) -> ScoreStats:
    if not scores:
        return ScoreStats(0.0, 0.0, 0.0, 0)
    return ScoreStats(min(scores), max(scores), sum(scores) / len(scores), len(scores))
