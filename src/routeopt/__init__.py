"""Traffic-aware delivery route optimizer."""

__version__ = "0.1.0"
