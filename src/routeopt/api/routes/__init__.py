"""Route group exports."""

from . import health, traffic, tsp

__all__ = ["health", "traffic", "tsp"]
