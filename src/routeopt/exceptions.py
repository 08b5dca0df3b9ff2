"""Errors raised by the optimization pipeline."""

from __future__ import annotations


class SegmentProviderError(Exception):
    """The routing provider could not produce a usable segment for a stop pair."""


class TrafficProviderError(Exception):
    """The live traffic provider could not be queried."""


class RoutingUnavailableError(ConnectionError):
    """No stop pair could be routed; the routing integration is unreachable."""
