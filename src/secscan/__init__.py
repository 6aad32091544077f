"""secscan — pattern-based security scanner for source trees."""

__version__ = "0.1.0"
