"""gradecore - weighted grade aggregation and grade curving engine."""

__version__ = "0.1.0"
