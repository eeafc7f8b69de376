"""Statistical calculations over score sets."""

import math
import statistics
from collections.abc import Sequence

from .models import HISTOGRAM_BUCKETS, GradeStatistics


class StatisticsCalculator:
    """Distribution statistics for scores on the 0-100 scale.

    Spread is the population standard deviation: a class's scores are the
    whole population being curved, not a sample of it.
    """

    @staticmethod
    def calculate_mean(values: Sequence[float]) -> float:
        """Arithmetic mean; raises ValueError for an empty sequence."""
        if not values:
            raise ValueError("Cannot average an empty score set")
        return statistics.fmean(values)

    @staticmethod
    def calculate_std(values: Sequence[float], ddof: int = 0) -> float:
        """Standard deviation with ``ddof`` delta degrees of freedom.

        Returns 0.0 when there are no more than ``ddof`` values.
        """
        n = len(values)
        if n <= ddof:
            return 0.0
        return math.sqrt(statistics.pvariance(values) * n / (n - ddof))

    @staticmethod
    def calculate_median(values: Sequence[float]) -> float:
        """Middle value, or the mean of the middle pair."""
        return statistics.median(values)

    @staticmethod
    def calculate_histogram(values: Sequence[float]) -> tuple[int, ...]:
        """Count scores per decile.

        Bucket i holds [10i, 10i+10); the last bucket also holds 100 and
        anything above it. Negative scores land in the first bucket.
        """
        buckets = [0] * HISTOGRAM_BUCKETS
        for value in values:
            index = min(max(int(value // 10), 0), HISTOGRAM_BUCKETS - 1)
            buckets[index] += 1
        return tuple(buckets)

    def compute(self, values: Sequence[float]) -> GradeStatistics:
        """Compute every statistic at once; all zeros for no scores."""
        if not values:
            return GradeStatistics(count=0)

        return GradeStatistics(
            count=len(values),
            mean=self.calculate_mean(values),
            median=self.calculate_median(values),
            min=min(values),
            max=max(values),
            std_dev=self.calculate_std(values),
            histogram=self.calculate_histogram(values),
        )
