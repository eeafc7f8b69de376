"""Command line interface for gradecore."""

from .main import cli, main

__all__ = ["cli", "main"]
