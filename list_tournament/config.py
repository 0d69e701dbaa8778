"""
Engine configuration.
"""

import math
from dataclasses import dataclass

from .exceptions import ConfigurationError
from .models import DEFAULT_SCORE

DAY_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for rating updates and history weighting."""

    k_factor: float = 32.0  # Elo K constant
    score_floor: float = 0.0  # ratings never drop below this
    default_score: float = DEFAULT_SCORE  # score given to newly imported items
    half_life: float = 7 * DAY_SECONDS  # decay half-life for chart series, in seconds

    def __post_init__(self):
        """Validate configuration."""
        if not math.isfinite(self.k_factor) or self.k_factor <= 0:
            raise ConfigurationError(f"k_factor must be positive, got {self.k_factor}")
        if not math.isfinite(self.score_floor):
            raise ConfigurationError(f"score_floor must be finite, got {self.score_floor}")
        if not math.isfinite(self.default_score) or self.default_score < self.score_floor:
            raise ConfigurationError(
                f"default_score must be finite and >= score_floor, got {self.default_score}"
            )
        if not math.isfinite(self.half_life) or self.half_life <= 0:
            raise ConfigurationError(f"half_life must be positive, got {self.half_life}")
