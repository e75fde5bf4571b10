"""diffguard — annotate pull requests with findings on the lines they change."""

__version__ = "0.1.0"
