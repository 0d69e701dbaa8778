"""
Rating engine implementations.

Provides implementations of the RatingEngine interface for updating item
scores from match outcomes.

Available implementations:
- EloRatingEngine: classic Elo update with configurable K and score floor
"""

from .elo import EloRatingEngine, expected_score

__all__ = ["EloRatingEngine", "expected_score"]
