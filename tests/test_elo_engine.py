"""
Tests for EloRatingEngine implementation.
"""

import math

import pytest

from list_tournament.config import EngineConfig
from list_tournament.ratings import EloRatingEngine, expected_score


class TestEloRatingEngine:
    """Test EloRatingEngine behavior through public interface."""

    def test_equal_ratings_move_by_half_k(self) -> None:
        """With Ra = Rb and K=32 the winner gains 16 and the loser drops 16."""
        engine = EloRatingEngine(k_factor=32)

        new_a, new_b = engine.rate(1200.0, 1200.0, 1.0)

        assert new_a == pytest.approx(1216.0)
        assert new_b == pytest.approx(1184.0)

    def test_outcome_zero_is_mirror_image(self) -> None:
        """B winning moves ratings the other way."""
        engine = EloRatingEngine()

        new_a, new_b = engine.rate(1200.0, 1200.0, 0.0)

        assert new_a == pytest.approx(1184.0)
        assert new_b == pytest.approx(1216.0)

    def test_update_is_zero_sum_above_floor(self) -> None:
        """Points gained by one side are lost by the other."""
        engine = EloRatingEngine()

        new_a, new_b = engine.rate(1650.0, 1420.0, 0.0)

        assert new_a + new_b == pytest.approx(1650.0 + 1420.0)
        assert new_a < 1650.0
        assert new_b > 1420.0

    def test_favorite_gains_less(self) -> None:
        """An expected win earns fewer points than an upset."""
        engine = EloRatingEngine()

        favorite_gain = engine.rate(1600.0, 1200.0, 1.0)[0] - 1600.0
        underdog_gain = engine.rate(1200.0, 1600.0, 1.0)[0] - 1200.0

        assert favorite_gain == pytest.approx(32 * (1 - expected_score(1600.0, 1200.0)))
        assert favorite_gain < underdog_gain

    def test_expected_score(self) -> None:
        """400 points of difference means 10:1 odds."""
        assert expected_score(1500.0, 1500.0) == pytest.approx(0.5)
        assert expected_score(1600.0, 1200.0) == pytest.approx(10 / 11)

    def test_scores_clamped_to_floor(self) -> None:
        """Ratings never drop below the configured floor."""
        engine = EloRatingEngine(k_factor=32, floor=0.0)

        new_a, new_b = engine.rate(10.0, 10.0, 0.0)

        assert new_a == 0.0
        assert new_b == pytest.approx(26.0)

    def test_from_config(self) -> None:
        """K and floor are read from EngineConfig."""
        engine = EloRatingEngine.from_config(EngineConfig(k_factor=16.0, score_floor=100.0))

        assert engine.k_factor == 16.0
        assert engine.floor == 100.0
        assert engine.rate(1000.0, 1000.0, 1.0)[0] == pytest.approx(1008.0)

    def test_config_validation(self) -> None:
        """Invalid configuration is rejected."""
        with pytest.raises(ValueError):
            EngineConfig(k_factor=0)
        with pytest.raises(ValueError):
            EngineConfig(half_life=-1)
        with pytest.raises(ValueError):
            EngineConfig(score_floor=2000.0)

    def test_huge_gap_does_not_overflow(self) -> None:
        """A 200000-point gap still rates: the favorite barely moves, the underdog's win counts fully."""
        engine = EloRatingEngine()

        upset_a, upset_b = engine.rate(1500.0, 200000.0, 1.0)
        expected_a, expected_b = engine.rate(200000.0, 1500.0, 1.0)

        assert upset_a == pytest.approx(1532.0)
        assert upset_b == pytest.approx(199968.0)
        assert expected_a == pytest.approx(200000.0)
        assert expected_b == pytest.approx(1500.0)
        assert expected_score(1500.0, 200000.0) == pytest.approx(0.0)
        assert expected_score(200000.0, 1500.0) == pytest.approx(1.0)

    @pytest.mark.parametrize(
        ("rating_a", "rating_b", "k_factor"),
        [
            (0.0, 1e6, 32.0),
            (1e6, 0.0, 32.0),
            (-1e300, 1e300, 32.0),
            (1e308, -1e308, 32.0),
            (0.0, 0.0, 1e6),
            (5.0, 1e9, 1e6),
        ],
    )
    @pytest.mark.parametrize("outcome", [0.0, 1.0])
    def test_extreme_gaps_are_finite(self, rating_a: float, rating_b: float, k_factor: float, outcome: float) -> None:
        """Any finite pair of ratings yields finite ratings at or above the floor."""
        engine = EloRatingEngine(k_factor=k_factor, floor=0.0)

        new_a, new_b = engine.rate(rating_a, rating_b, outcome)

        assert math.isfinite(new_a) and math.isfinite(new_b)
        assert new_a >= 0.0 and new_b >= 0.0
        assert 0.0 <= expected_score(rating_a, rating_b) <= 1.0
