"""Coverage summary reporting."""

from diffguard.coverage.summary import CoverageReporter

__all__ = ["CoverageReporter"]
