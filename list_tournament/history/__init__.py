"""
Score history recording and time-weighted series.
"""

from .aggregator import HistoryAggregator, decayed_average

__all__ = ["HistoryAggregator", "decayed_average"]
