"""
Elo rating engine implementation.

Pairwise update based on expected versus actual outcome, scaled by K.
"""

from typing_extensions import override

from ..config import EngineConfig
from ..interfaces import RatingEngine
from ..logging_config import get_logger

logger = get_logger("elo_engine")

_MAX_EXPONENT = 300.0


def expected_score(rating_a: float, rating_b: float) -> float:
    """Probability that A beats B under the Elo model."""
    # 10 ** 300 is still a finite float; larger gaps would overflow
    exponent = max(-_MAX_EXPONENT, min(_MAX_EXPONENT, (rating_b - rating_a) / 400.0))
    return 1.0 / (1.0 + 10.0 ** exponent)


class EloRatingEngine(RatingEngine):
    """
    Elo rating engine.

    Pure and total: ratings must be finite (caller precondition). Results
    are clamped to the configured floor so repeated losses cannot run away
    below it.
    """

    def __init__(self, k_factor: float = 32.0, floor: float = 0.0):
        """
        Initialize Elo engine.

        Args:
            k_factor: Maximum rating change per match
            floor: Lowest rating a score can be updated to
        """
        self.k_factor = k_factor
        self.floor = floor

    @classmethod
    def from_config(cls, config: EngineConfig) -> "EloRatingEngine":
        return cls(k_factor=config.k_factor, floor=config.score_floor)

    @override
    def rate(self, rating_a: float, rating_b: float, outcome: float) -> tuple[float, float]:
        """Return (new_a, new_b) for a match where A scored ``outcome``."""
        expected_a = expected_score(rating_a, rating_b)
        new_a = rating_a + self.k_factor * (outcome - expected_a)
        new_b = rating_b + self.k_factor * ((1.0 - outcome) - (1.0 - expected_a))
        new_a = max(self.floor, new_a)
        new_b = max(self.floor, new_b)
        logger.debug(
            f"Elo update: a {rating_a:.2f}->{new_a:.2f}, b {rating_b:.2f}->{new_b:.2f} "
            f"(expected_a={expected_a:.3f}, outcome={outcome})"
        )
        return new_a, new_b
