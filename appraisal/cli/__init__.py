"""Command-line tools for the appraisal session engine."""

__all__ = ["simulate"]
