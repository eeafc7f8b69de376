"""Unit tests for statistics models."""

import pytest
from pydantic import ValidationError

from gradecore.statistics.models import HISTOGRAM_BUCKETS, GradeStatistics


class TestGradeStatistics:
    """Tests for GradeStatistics model."""

    def test_defaults(self) -> None:
        """Test only count is required."""
        stats = GradeStatistics(count=0)
        assert stats.is_empty
        assert stats.histogram == (0,) * HISTOGRAM_BUCKETS

    def test_not_empty(self) -> None:
        """Test is_empty is False once scores were counted."""
        assert not GradeStatistics(count=1, mean=50.0).is_empty

    def test_frozen(self) -> None:
        """Test statistics are immutable."""
        stats = GradeStatistics(count=1)
        with pytest.raises(ValidationError):
            stats.mean = 5.0  # type: ignore[misc]

    def test_negative_count_rejected(self) -> None:
        """Test count must be non-negative."""
        with pytest.raises(ValidationError):
            GradeStatistics(count=-1)


class TestBucketLabel:
    """Tests for histogram bucket labels."""

    @pytest.mark.parametrize(
        ("index", "label"),
        [(0, "0-9"), (5, "50-59"), (8, "80-89"), (9, "90-100")],
    )
    def test_labels(self, index: int, label: str) -> None:
        """Test bucket label for index."""
        assert GradeStatistics.bucket_label(index) == label


class TestToDict:
    """Tests for GradeStatistics.to_dict."""

    def test_to_dict(self) -> None:
        """Test dictionary form rounds values and labels buckets."""
        stats = GradeStatistics(
            count=2,
            mean=72.123456,
            median=72.123456,
            min=70.0,
            max=74.246912,
            std_dev=2.123456,
            histogram=(0, 0, 0, 0, 0, 0, 0, 2, 0, 0),
        )
        data = stats.to_dict()

        assert data["count"] == 2
        assert data["mean"] == 72.1235
        assert data["std_dev"] == 2.1235
        assert data["histogram"]["70-79"] == 2
        assert data["histogram"]["90-100"] == 0
        assert len(data["histogram"]) == HISTOGRAM_BUCKETS
