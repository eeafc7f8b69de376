"""Distribution statistics for score sets."""

from .calculator import StatisticsCalculator
from .models import HISTOGRAM_BUCKETS, GradeStatistics

__all__ = [
    "HISTOGRAM_BUCKETS",
    "GradeStatistics",
    "StatisticsCalculator",
]
