"""
History aggregator.

Records score snapshots per item and produces time-weighted series for
charting. Points may arrive out of order; they are sorted on read so the
series depends only on the stored points and the half-life.
"""

import math
import threading
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from loguru import Logger

from ..interfaces import HistoryState
from ..logging_config import get_logger
from ..models import HistoryPoint


def decayed_average(timestamps: Sequence[float], scores: Sequence[float], half_life: float) -> np.ndarray:
    """
    Exponentially decayed running average over time-ordered samples.

    Value i is sum_j w_ij * s_j / sum_j w_ij over j <= i, with
    w_ij = 0.5 ** ((t_i - t_j) / half_life). Computed left-to-right with
    the recurrence num_i = num_{i-1} * d_i + s_i (same for the weights),
    where d_i is the decay across the gap t_i - t_{i-1}.
    """
    if not math.isfinite(half_life) or half_life <= 0:
        raise ValueError(f"half_life must be positive and finite, got {half_life}")
    times = np.asarray(timestamps, dtype=float)
    values = np.asarray(scores, dtype=float)
    if times.size == 0:
        return np.empty(0)

    gaps = np.diff(times, prepend=times[0])
    decay = np.power(0.5, gaps / half_life)

    result = np.empty_like(values)
    numerator = 0.0
    denominator = 0.0
    for i in range(values.size):
        numerator = numerator * decay[i] + values[i]
        denominator = denominator * decay[i] + 1.0
        result[i] = numerator / denominator
    return result


class HistoryAggregator:
    """
    Append-only store of HistoryPoints with decayed series per item.

    Owned by the caller; the engine only appends the points it emits.
    Thread-safe for concurrent record/series calls.
    """

    def __init__(self, points: Iterable[HistoryPoint] = ()):
        self._points: dict[str, list[HistoryPoint]] = {}
        self._lock: threading.Lock = threading.Lock()
        self.logger: "Logger" = get_logger("history_aggregator")
        self.extend(points)

    def record(self, item_id: str, score: float, timestamp: float) -> HistoryPoint:
        """Append a score snapshot for an item."""
        point = HistoryPoint(item_id=item_id, score=score, timestamp=timestamp)
        with self._lock:
            self._points.setdefault(item_id, []).append(point)
        self.logger.debug(f"Recorded {item_id}: {score:.2f} at {timestamp}")
        return point

    def extend(self, points: Iterable[HistoryPoint]) -> None:
        """Append already-built points, e.g. those emitted by a match result."""
        with self._lock:
            for point in points:
                self._points.setdefault(point.item_id, []).append(point)

    def item_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._points)

    def points(self, item_id: str) -> list[HistoryPoint]:
        """Points of an item sorted by timestamp (insertion order among equal timestamps)."""
        with self._lock:
            stored = list(self._points.get(item_id, []))
        return sorted(stored, key=lambda p: p.timestamp)

    def latest(self, item_id: str) -> HistoryPoint | None:
        ordered = self.points(item_id)
        return ordered[-1] if ordered else None

    def series(self, item_id: str, half_life: float) -> list[tuple[float, float]]:
        """
        Time-weighted score series of an item.

        Args:
            item_id: Item to chart
            half_life: Seconds after which a sample's weight halves

        Returns:
            (timestamp, weighted_score) pairs in time order
        """
        ordered = self.points(item_id)
        weighted = decayed_average(
            [p.timestamp for p in ordered], [p.score for p in ordered], half_life
        )
        return [(p.timestamp, float(w)) for p, w in zip(ordered, weighted)]

    def series_many(self, item_ids: Iterable[str], half_life: float) -> dict[str, list[tuple[float, float]]]:
        """Series for several items, keyed by item id."""
        return {item_id: self.series(item_id, half_life) for item_id in item_ids}

    def snapshot(self) -> HistoryState:
        """Export all points as serializable state."""
        with self._lock:
            all_points = [p for points in self._points.values() for p in points]
        return {
            "points": [
                {"item_id": p.item_id, "timestamp": p.timestamp, "score": p.score}
                for p in all_points
            ]
        }

    def load_snapshot(self, state: HistoryState) -> None:
        """Replace all points with those of a snapshot."""
        points: dict[str, list[HistoryPoint]] = {}
        for p in state["points"]:
            point = HistoryPoint(item_id=p["item_id"], score=p["score"], timestamp=p["timestamp"])
            points.setdefault(point.item_id, []).append(point)
        with self._lock:
            self._points = points
        self.logger.info(f"Loaded {len(state['points'])} history points")
