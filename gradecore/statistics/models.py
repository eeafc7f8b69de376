"""Data models for score distribution statistics."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

HISTOGRAM_BUCKETS = 10


class GradeStatistics(BaseModel):
    """Read-only summary of a score distribution.

    An empty score set yields count 0 with every other figure 0; callers check
    ``is_empty`` before displaying.
    """

    model_config = ConfigDict(frozen=True)

    count: int = Field(..., description="Number of scores", ge=0)
    mean: float = Field(0.0, description="Arithmetic mean")
    median: float = Field(0.0, description="Median value")
    min: float = Field(0.0, description="Minimum value")
    max: float = Field(0.0, description="Maximum value")
    std_dev: float = Field(0.0, description="Population standard deviation", ge=0.0)
    histogram: tuple[int, ...] = Field(
        default=(0,) * HISTOGRAM_BUCKETS,
        description="Counts per decile: [0,10), [10,20), ..., [90,100]",
    )

    @property
    def is_empty(self) -> bool:
        """Whether the statistics were computed from no scores."""
        return self.count == 0

    @staticmethod
    def bucket_label(index: int) -> str:
        """Display label of a histogram bucket, e.g. "90-100"."""
        low = index * 10
        high = 100 if index == HISTOGRAM_BUCKETS - 1 else low + 9
        return f"{low}-{high}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for reporting."""
        return {
            "count": self.count,
            "mean": round(self.mean, 4),
            "median": round(self.median, 4),
            "min": round(self.min, 4),
            "max": round(self.max, 4),
            "std_dev": round(self.std_dev, 4),
            "histogram": {
                self.bucket_label(i): n for i, n in enumerate(self.histogram)
            },
        }
